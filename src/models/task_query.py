"""TaskQuery model - what a view asks the task list for."""

from typing import Literal, Optional
from pydantic import BaseModel, Field

from src.models.date_window import DateWindow


class TaskQuery(BaseModel):
    """A view's query intent.

    ``range`` mode returns non-canceled tasks dated inside the window.
    ``fiscal_year`` mode also returns every still-active task regardless of date.
    """
    window: DateWindow
    mode: Literal["range", "fiscal_year"] = "range"
    cat_tag: Optional[str] = Field(None, description="CatTag value to match, e.g. PRJ")
    cat: Optional[str] = Field(None, description="Category value to match, e.g. Work")
