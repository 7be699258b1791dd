"""Runtime settings read from environment variables."""

import os
from typing import Literal, Optional
from pydantic import BaseModel, Field

from src.utils.errors import ConfigurationError


StateFieldType = Literal["status", "select"]
TagFieldType = Literal["multi_select", "select"]


class PropertyNames(BaseModel):
    """Notion property names for each logical task field."""
    name: str = "Name"
    state: str = "State"
    cat: str = "Cat"
    sub_cat: str = "SubCat"
    date: str = "Date"
    cat_tag: str = "CatTag"
    summary: str = "概要"


class PropertyTypes(BaseModel):
    """Notion property types used when writing and filtering.

    Reading accepts either shape regardless of these values.
    """
    state: StateFieldType = "status"
    cat: TagFieldType = "multi_select"
    sub_cat: TagFieldType = "multi_select"
    cat_tag: TagFieldType = "multi_select"


class TaskDefaults(BaseModel):
    """Placeholder strings and workflow labels."""
    untitled: str = Field("No Title", description="Shown when a record has no title")
    new_task_name: str = Field("新規タスク", description="Title used when creating without a name")
    initial_state: str = "INBOX"
    initial_cat: str = "Work"
    initial_sub_cat: str = "Task"
    done_state: str = "Done"
    canceled_state: str = "Canceled"


class Settings(BaseModel):
    """Gleis backend settings."""
    notion_api_key: Optional[str] = None
    notion_database_id: Optional[str] = None
    basic_auth_user: Optional[str] = None
    basic_auth_password: Optional[str] = None
    properties: PropertyNames = Field(default_factory=PropertyNames)
    property_types: PropertyTypes = Field(default_factory=PropertyTypes)
    defaults: TaskDefaults = Field(default_factory=TaskDefaults)
    page_size: int = Field(default=100, ge=1, le=100)
    poll_interval_seconds: float = Field(default=60, gt=0)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        env = os.environ

        def _get(key: str) -> Optional[str]:
            value = env.get(key, "").strip()
            return value or None

        def _pick(model: type[BaseModel], mapping: dict[str, str]) -> BaseModel:
            values = {field: _get(key) for field, key in mapping.items()}
            return model(**{k: v for k, v in values.items() if v is not None})

        properties = _pick(PropertyNames, {
            "name": "NOTION_PROP_NAME",
            "state": "NOTION_PROP_STATE",
            "cat": "NOTION_PROP_CAT",
            "sub_cat": "NOTION_PROP_SUBCAT",
            "date": "NOTION_PROP_DATE",
            "cat_tag": "NOTION_PROP_CATTAG",
            "summary": "NOTION_PROP_SUMMARY",
        })
        property_types = _pick(PropertyTypes, {
            "state": "NOTION_STATE_TYPE",
            "cat": "NOTION_CAT_TYPE",
            "sub_cat": "NOTION_SUBCAT_TYPE",
            "cat_tag": "NOTION_CATTAG_TYPE",
        })
        defaults = _pick(TaskDefaults, {
            "untitled": "TASK_DEFAULT_TITLE",
            "new_task_name": "TASK_NEW_TITLE",
            "initial_state": "TASK_DEFAULT_STATE",
            "initial_cat": "TASK_DEFAULT_CAT",
            "initial_sub_cat": "TASK_DEFAULT_SUBCAT",
            "done_state": "TASK_DONE_STATE",
            "canceled_state": "TASK_CANCELED_STATE",
        })

        overrides = {}
        if _get("TASK_POLL_INTERVAL_SECONDS"):
            overrides["poll_interval_seconds"] = _get("TASK_POLL_INTERVAL_SECONDS")

        return cls(
            notion_api_key=_get("NOTION_API_KEY"),
            notion_database_id=_get("NOTION_DATABASE_ID"),
            basic_auth_user=_get("BASIC_AUTH_USER"),
            basic_auth_password=_get("BASIC_AUTH_PASSWORD"),
            properties=properties,
            property_types=property_types,
            defaults=defaults,
            **overrides,
        )

    def require_database_id(self) -> str:
        """Return the database ID or raise ConfigurationError."""
        if not self.notion_database_id:
            raise ConfigurationError("NOTION_DATABASE_ID is missing in environment variables.")
        return self.notion_database_id


def get_settings() -> Settings:
    """Read settings fresh from the environment.

    Not cached: serverless handlers and tests both change the environment
    between invocations.
    """
    return Settings.from_env()
