"""POST /api/tasks/update - change a task's name, date, or status."""

from src.models.requests import TaskUpdateRequest
from src.services.notion_db import UNCHANGED, update_task
from src.utils.http import JSONRequestHandler, run_async


class handler(JSONRequestHandler):
    """Vercel serverless function handler for task updates."""

    def do_POST(self):
        def action():
            request = TaskUpdateRequest.model_validate(self.read_json())
            if request.cleared_date:
                date = None
            elif request.date_provided:
                date = request.date
            else:
                date = UNCHANGED
            run_async(update_task(request.id, name=request.name, date=date, status=request.status))
            return 200, {"message": "Task updated successfully"}

        self.dispatch(action)
