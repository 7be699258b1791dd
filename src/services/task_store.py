"""TaskStore - in-memory task list for one mounted view."""

import asyncio
from typing import Any, Optional

from src.models.task import Task
from src.models.task_query import TaskQuery
from src.services.notion_db import (
    UNCHANGED,
    complete_task,
    create_task,
    delete_task,
    query_tasks,
    update_task,
)
from src.utils.errors import GleisError
from src.utils.logging import get_structured_logger, truncate_for_log
from src.utils.settings import Settings, get_settings

logger = get_structured_logger(__name__)

NEW_TASK_ID = "new"


class TaskStore:
    """Holds the task list for one view and serializes its mutations.

    At most one mutation is in flight per store (``processing_id``); a second
    request while one is pending is dropped. After create/update/delete the
    list is re-fetched in full. Completion is the exception: the task is
    removed locally as soon as Notion accepts the change.

    Separate stores share nothing, so two views can briefly disagree until
    their next poll.
    """

    def __init__(self, query: TaskQuery, settings: Optional[Settings] = None):
        self.query = query
        self.settings = settings or get_settings()
        self.tasks: list[Task] = []
        self.processing_id: Optional[str] = None
        self.loaded = False
        self.last_error: Optional[GleisError] = None
        self._closed = False
        self._poller: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self.processing_id is not None

    def get(self, task_id: str) -> Optional[Task]:
        return next((task for task in self.tasks if task.id == task_id), None)

    async def refresh(self) -> bool:
        """Re-run the view's query and replace the task list.

        On failure the previous list is kept. A response that lands after
        close() is discarded.
        """
        try:
            tasks = await query_tasks(self.query, self.settings)
        except GleisError as e:
            logger.error("Task refresh failed", error=str(e), detail=e.detail)
            self.last_error = e
            return False

        if self._closed:
            logger.debug("Discarding task refresh after close", task_count=len(tasks))
            return False

        self.tasks = tasks
        self.loaded = True
        self.last_error = None
        return True

    def _acquire(self, task_id: str, action: str) -> bool:
        if self.processing_id is not None:
            logger.info(
                "Mutation dropped, another is in flight",
                action=action,
                task_id=task_id,
                processing_id=self.processing_id,
            )
            return False
        self.processing_id = task_id
        return True

    async def create(self, name: Optional[str] = None, date: Optional[str] = None) -> bool:
        """Create a task, then re-fetch."""
        if not self._acquire(NEW_TASK_ID, "create"):
            return False
        try:
            await create_task(name, date, self.settings)
            await self.refresh()
            return True
        except GleisError as e:
            logger.error("Task create failed", error=str(e), task_name=truncate_for_log(name))
            return False
        finally:
            self.processing_id = None

    async def update(self, task_id: str, name: Optional[str] = None, date: Any = UNCHANGED,
                     status: Optional[str] = None) -> bool:
        """Send only the given fields, then re-fetch. ``date=None`` clears the date.

        Returns False without re-fetching when there is nothing to send.
        """
        if not self._acquire(task_id, "update"):
            return False
        try:
            if not await update_task(task_id, name=name, date=date, status=status, settings=self.settings):
                return False
            await self.refresh()
            return True
        except GleisError as e:
            logger.error("Task update failed", task_id=task_id, error=str(e))
            return False
        finally:
            self.processing_id = None

    async def complete(self, task_id: str) -> bool:
        """Mark a task Done and drop it from the local list right away.

        Completing a task that is not in the list is a no-op.
        """
        if self.get(task_id) is None:
            logger.debug("Complete ignored, task not in view", task_id=task_id)
            return False
        if not self._acquire(task_id, "complete"):
            return False
        try:
            await complete_task(task_id, self.settings)
        except GleisError as e:
            logger.error("Task complete failed", task_id=task_id, error=str(e))
            return False
        finally:
            self.processing_id = None

        self.tasks = [task for task in self.tasks if task.id != task_id]
        return True

    async def delete(self, task_id: str) -> bool:
        """Archive a task, then re-fetch."""
        if not self._acquire(task_id, "delete"):
            return False
        try:
            await delete_task(task_id)
            await self.refresh()
            return True
        except GleisError as e:
            logger.error("Task delete failed", task_id=task_id, error=str(e))
            return False
        finally:
            self.processing_id = None

    async def poll(self, interval: Optional[float] = None) -> None:
        """Refresh every ``interval`` seconds until close()."""
        interval = interval or self.settings.poll_interval_seconds
        while not self._closed:
            await self.refresh()
            await asyncio.sleep(interval)

    def start_polling(self, interval: Optional[float] = None) -> asyncio.Task:
        if self._poller is None or self._poller.done():
            self._poller = asyncio.create_task(self.poll(interval))
        return self._poller

    def close(self) -> None:
        """Stop polling. In-flight fetches finish but their results are dropped."""
        self._closed = True
        if self._poller is not None:
            self._poller.cancel()
            self._poller = None
