"""Task model - canonical view of a Notion task record."""

import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field


def theme_for(cats: list[str]) -> str:
    """Display colour for a category list. Work wins over Life."""
    if "Work" in cats:
        return "blue"
    if "Life" in cats:
        return "green"
    return "gray"


class Task(BaseModel):
    """Task as served to the dashboard views."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Notion page ID")
    name: str = Field(..., description="Display title")
    date: Optional[str] = Field(None, description="ISO date, may carry a time component")
    state: str = Field(default="Unknown", description="Workflow label (INBOX, Waiting, Done, ...)")
    cats: list[str] = Field(default_factory=list, description="Normalized category list")
    sub_cats: list[str] = Field(default_factory=list, alias="subCats")
    cat_tag: list[str] = Field(default_factory=list, alias="catTag")
    summary: str = ""
    url: str = ""

    @computed_field
    @property
    def cat(self) -> str:
        """Primary category."""
        return self.cats[0] if self.cats else ""

    @computed_field
    @property
    def theme(self) -> str:
        return theme_for(self.cats)

    @property
    def day(self) -> Optional[datetime.date]:
        """Calendar day of ``date``, ignoring any time component."""
        if not self.date:
            return None
        try:
            return datetime.date.fromisoformat(self.date[:10])
        except ValueError:
            return None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)
