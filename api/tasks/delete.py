"""POST /api/tasks/delete - archive a task."""

from src.models.requests import TaskIdRequest
from src.services.notion_db import delete_task
from src.utils.http import JSONRequestHandler, run_async


class handler(JSONRequestHandler):
    """Vercel serverless function handler for task deletion."""

    def do_POST(self):
        def action():
            request = TaskIdRequest.model_validate(self.read_json())
            run_async(delete_task(request.id))
            return 200, {"message": "Task deleted successfully"}

        self.dispatch(action)
