"""GET /api/tasks - tasks for a view's date window."""

from src.services.notion_db import query_tasks
from src.services.query_params import parse_task_query
from src.utils.http import JSONRequestHandler, run_async
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


class handler(JSONRequestHandler):
    """Vercel serverless function handler for task queries."""

    def do_GET(self):
        """Query params: month, fiscalYear, date, catTag, cat."""
        def action():
            query = parse_task_query(self.query_params())
            tasks = run_async(query_tasks(query))
            logger.info(
                "Tasks served",
                mode=query.mode,
                window_start=query.window.start.isoformat(),
                window_end=query.window.end.isoformat(),
                task_count=len(tasks),
            )
            return 200, tasks

        self.dispatch(action)
