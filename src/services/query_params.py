"""Build a TaskQuery from the dashboard's query string."""

from datetime import date
from typing import Optional

from src.models.task_query import TaskQuery
from src.services import date_window
from src.utils.errors import TaskInputError


def parse_task_query(params: dict[str, str], now: Optional[date] = None) -> TaskQuery:
    """
    Map ``fiscalYear``, ``month``, ``date``, ``catTag`` and ``cat`` to a TaskQuery.

    Precedence when several are given: fiscalYear, then month, then date.
    With none of them the rolling default window is used.
    """
    cat_tag = (params.get("catTag") or "").strip() or None
    cat = (params.get("cat") or "").strip() or None

    fiscal_year = (params.get("fiscalYear") or "").strip()
    if fiscal_year:
        try:
            window = date_window.fiscal_year(int(fiscal_year))
        except (ValueError, OverflowError):
            raise TaskInputError(f"Invalid fiscalYear '{fiscal_year}'")
        return TaskQuery(window=window, mode="fiscal_year", cat_tag=cat_tag, cat=cat)

    month = (params.get("month") or "").strip()
    day = (params.get("date") or "").strip()
    try:
        if month:
            window = date_window.month(month)
        elif day:
            window = date_window.day(day)
        else:
            window = date_window.month(None, now=now)
    except ValueError as e:
        raise TaskInputError(str(e))

    return TaskQuery(window=window, cat_tag=cat_tag, cat=cat)
