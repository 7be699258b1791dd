"""POST /api/tasks/complete - mark a task Done."""

from src.models.requests import TaskIdRequest
from src.services.notion_db import complete_task
from src.utils.http import JSONRequestHandler, run_async


class handler(JSONRequestHandler):
    """Vercel serverless function handler for task completion."""

    def do_POST(self):
        def action():
            request = TaskIdRequest.model_validate(self.read_json())
            run_async(complete_task(request.id))
            return 200, {"message": "Task completed successfully"}

        self.dispatch(action)
