"""POST /api/tasks/create - create a task in the inbox."""

from src.models.requests import TaskCreateRequest
from src.services.notion_db import create_task
from src.utils.http import JSONRequestHandler, run_async


class handler(JSONRequestHandler):
    """Vercel serverless function handler for task creation."""

    def do_POST(self):
        def action():
            request = TaskCreateRequest.model_validate(self.read_json())
            page_id = run_async(create_task(request.name, request.date))
            return 200, {"id": page_id}

        self.dispatch(action)
