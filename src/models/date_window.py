"""DateWindow model."""

from datetime import date
from pydantic import BaseModel, model_validator


class DateWindow(BaseModel):
    """Inclusive calendar window."""
    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "DateWindow":
        if self.end < self.start:
            raise ValueError(f"window end {self.end} is before start {self.start}")
        return self

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end
