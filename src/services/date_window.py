"""Date windows for the dashboard views.

All windows are inclusive and weeks start on Monday. Every function takes an
optional ``now`` so callers (and tests) can pin the clock; it defaults to the
local current date.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Union

from src.models.date_window import DateWindow

FISCAL_YEAR_START_MONTH = 4

DateLike = Union[date, datetime]


def _as_date(now: Optional[DateLike]) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def end_of_week(day: date) -> date:
    """Sunday of the week containing ``day``."""
    return start_of_week(day) + timedelta(days=6)


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def previous_month(day: date) -> date:
    """Same day one month earlier, clamped to the end of the shorter month."""
    year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def parse_year_month(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""
    try:
        year_str, month_str = value.strip().split("-")
        return date(int(year_str), int(month_str), 1)
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM")


def today(now: Optional[DateLike] = None) -> DateWindow:
    """Window covering only the current date."""
    current = _as_date(now)
    return DateWindow(start=current, end=current)


def day(value: Union[str, date]) -> DateWindow:
    """Window covering a single explicit date (``YYYY-MM-DD`` or date)."""
    if isinstance(value, str):
        value = date.fromisoformat(value.strip()[:10])
    return DateWindow(start=value, end=value)


def current_week(now: Optional[DateLike] = None) -> DateWindow:
    """Monday through Sunday of the week containing ``now``."""
    current = _as_date(now)
    start = start_of_week(current)
    return DateWindow(start=start, end=start + timedelta(days=6))


def month(year_month: Optional[Union[str, date]] = None, now: Optional[DateLike] = None) -> DateWindow:
    """Calendar month window, or the rolling "recent + upcoming" default.

    With ``year_month`` the window is the first to the last day of that month.
    Without it the window is [start of previous month, end of the week that
    contains now + 7 days]. The default is not a calendar month; the upcoming
    board relies on that shape.
    """
    if year_month is not None:
        first = parse_year_month(year_month) if isinstance(year_month, str) else start_of_month(year_month)
        return DateWindow(start=first, end=end_of_month(first))

    current = _as_date(now)
    return DateWindow(
        start=start_of_month(previous_month(current)),
        end=end_of_week(current + timedelta(days=7)),
    )


def get_fiscal_year(value: Optional[DateLike] = None) -> int:
    """Fiscal year (April to March) containing ``value``, named by its starting year."""
    current = _as_date(value)
    if current.month >= FISCAL_YEAR_START_MONTH:
        return current.year
    return current.year - 1


def fiscal_year(fy: Optional[int] = None, now: Optional[DateLike] = None) -> DateWindow:
    """``fy``-04-01 through (``fy``+1)-03-31. Defaults to the current fiscal year."""
    if fy is None:
        fy = get_fiscal_year(now)
    return DateWindow(
        start=date(fy, FISCAL_YEAR_START_MONTH, 1),
        end=date(fy + 1, FISCAL_YEAR_START_MONTH, 1) - timedelta(days=1),
    )
