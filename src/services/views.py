"""Board projections for the weekly, focus, monthly, and project views."""

from datetime import date, timedelta
from typing import Literal, Optional

from src.models.task import Task
from src.services import date_window
from src.utils.settings import Settings, get_settings

CategoryFilter = Literal["All", "Work"]
ViewName = Literal["weekly", "focus", "monthly", "projects"]

VIEW_NAMES = ("weekly", "focus", "monthly", "projects")


def filter_by_category(tasks: list[Task], category_filter: CategoryFilter = "All") -> list[Task]:
    if category_filter == "All":
        return list(tasks)
    return [task for task in tasks if task.cat == category_filter]


def is_done(task: Task, settings: Settings) -> bool:
    return task.state == settings.defaults.done_state


def is_active(task: Task, settings: Settings) -> bool:
    return task.state not in (settings.defaults.done_state, settings.defaults.canceled_state)


def tasks_on(tasks: list[Task], day: date) -> list[Task]:
    """Tasks whose date (time component ignored) is ``day``."""
    return [task for task in tasks if task.day == day]


def weekly_board(tasks: list[Task], now: Optional[date] = None,
                 category_filter: CategoryFilter = "All",
                 settings: Optional[Settings] = None) -> dict:
    """Seven day columns plus an inbox of undated and overdue tasks. Done tasks are hidden."""
    settings = settings or get_settings()
    week = date_window.current_week(now)
    open_tasks = filter_by_category(
        [task for task in tasks if not is_done(task, settings)], category_filter
    )

    days = []
    for offset in range(7):
        day = week.start + timedelta(days=offset)
        days.append({"date": day.isoformat(), "tasks": tasks_on(open_tasks, day)})

    inbox = [task for task in open_tasks if task.day is None or task.day < week.start]

    return {
        "view": "weekly",
        "week": week.model_dump(mode="json"),
        "days": days,
        "inbox": inbox,
    }


def focus_board(tasks: list[Task], now: Optional[date] = None,
                category_filter: CategoryFilter = "All",
                settings: Optional[Settings] = None) -> dict:
    """Today's open tasks with progress counters."""
    settings = settings or get_settings()
    today = date_window.today(now).start
    todays = filter_by_category(tasks_on(tasks, today), category_filter)

    done_count = sum(1 for task in todays if is_done(task, settings))
    remaining = [task for task in todays if not is_done(task, settings)]
    total = done_count + len(remaining)

    year_start = date(today.year, 1, 1)
    days_in_year = (date(today.year + 1, 1, 1) - year_start).days
    passed_days = (today - year_start).days + 1

    return {
        "view": "focus",
        "date": today.isoformat(),
        "tasks": remaining,
        "done_count": done_count,
        "remaining_count": len(remaining),
        "progress_rate": round(done_count / total * 100) if total else 0,
        "year_progress": round(passed_days / days_in_year * 100, 1),
        "week_number": today.isocalendar()[1],
    }


def monthly_summary(tasks: list[Task], year_month: Optional[str] = None,
                    now: Optional[date] = None,
                    settings: Optional[Settings] = None) -> dict:
    """Done counts for a calendar month, in total, per category, and per day."""
    settings = settings or get_settings()
    first = date_window.parse_year_month(year_month) if year_month else date_window.start_of_month(
        date_window.today(now).start
    )
    window = date_window.month(first)
    done = [task for task in tasks if is_done(task, settings)]

    daily = []
    day = window.start
    while day <= window.end:
        daily.append({"date": day.isoformat(), "label": str(day.day), "count": len(tasks_on(done, day))})
        day += timedelta(days=1)

    return {
        "view": "monthly",
        "month": first.strftime("%Y-%m"),
        "done": done,
        "done_count": len(done),
        "work_done": sum(1 for task in done if task.cat == "Work"),
        "life_done": sum(1 for task in done if task.cat == "Life"),
        "daily": daily,
        "max_daily_count": max([entry["count"] for entry in daily] + [1]),
    }


def project_board(tasks: list[Task], fiscal_year: Optional[int] = None,
                  settings: Optional[Settings] = None) -> dict:
    """Active and done project tasks for a fiscal year."""
    settings = settings or get_settings()
    window = date_window.fiscal_year(fiscal_year)
    return {
        "view": "projects",
        "fiscal_year": window.start.year,
        "window": window.model_dump(mode="json"),
        "active": [task for task in tasks if is_active(task, settings)],
        "done": [task for task in tasks if is_done(task, settings)],
    }
