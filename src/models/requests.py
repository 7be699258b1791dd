"""Request body models for the task mutation endpoints."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskCreateRequest(BaseModel):
    """Body of POST /api/tasks/create."""
    name: Optional[str] = None
    date: Optional[str] = Field(None, description="YYYY-MM-DD")


class TaskIdRequest(BaseModel):
    """Body of POST /api/tasks/complete and /api/tasks/delete."""
    id: str = Field(..., min_length=1)

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Task ID is required")
        return value


class TaskUpdateRequest(TaskIdRequest):
    """Body of POST /api/tasks/update.

    ``date`` is tracked through ``model_fields_set``: absent means unchanged,
    null/""/"null" means clear.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    date: Optional[str] = None
    status: Optional[str] = None

    @property
    def date_provided(self) -> bool:
        return "date" in self.model_fields_set

    @property
    def cleared_date(self) -> bool:
        return self.date_provided and self.date in (None, "", "null")
