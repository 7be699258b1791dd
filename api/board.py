"""GET /api/board - a dashboard view rendered from its task query."""

from datetime import date
from typing import Optional

from src.models.task_query import TaskQuery
from src.services import date_window, views
from src.services.query_params import parse_task_query
from src.services.task_store import TaskStore
from src.utils.errors import TaskInputError
from src.utils.http import JSONRequestHandler, run_async

PROJECT_TAG = "PRJ"


def default_params(view: str, params: dict[str, str], now: Optional[date] = None) -> dict[str, str]:
    """Fill in the query each view issues when the caller gives none."""
    params = dict(params)
    if view == "focus" and not params.get("date"):
        params["date"] = date_window.today(now).start.isoformat()
    elif view == "monthly" and not params.get("month"):
        params["month"] = date_window.today(now).start.strftime("%Y-%m")
    elif view == "projects":
        if not params.get("fiscalYear"):
            params["fiscalYear"] = str(date_window.get_fiscal_year(now))
        params.setdefault("catTag", PROJECT_TAG)
    return params


def render(view: str, query: TaskQuery, store: TaskStore, category_filter: str) -> dict:
    if view == "weekly":
        return views.weekly_board(store.tasks, category_filter=category_filter, settings=store.settings)
    if view == "focus":
        return views.focus_board(store.tasks, now=query.window.start, category_filter=category_filter,
                                 settings=store.settings)
    if view == "monthly":
        return views.monthly_summary(store.tasks, year_month=query.window.start.strftime("%Y-%m"),
                                     settings=store.settings)
    return views.project_board(store.tasks, fiscal_year=query.window.start.year, settings=store.settings)


class handler(JSONRequestHandler):
    """Vercel serverless function handler for dashboard boards."""

    def do_GET(self):
        """Query params: view (weekly|focus|monthly|projects), filter (All|Work), plus task query params."""
        def action():
            params = self.query_params()
            view = params.pop("view", "weekly")
            if view not in views.VIEW_NAMES:
                raise TaskInputError(f"Unknown view '{view}'")
            category_filter = params.pop("filter", "All")
            if category_filter not in ("All", "Work"):
                raise TaskInputError(f"Unknown filter '{category_filter}'")

            query = parse_task_query(default_params(view, params))
            store = TaskStore(query)
            if not run_async(store.refresh()):
                raise store.last_error
            return 200, render(view, query, store, category_filter)

        self.dispatch(action)
