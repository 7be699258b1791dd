"""Notion client wrapper and task database operations."""

from typing import Any, Optional
from notion_client import AsyncClient, APIResponseError
from notion_client.helpers import async_iterate_paginated_api

from src.models.task import Task
from src.models.task_query import TaskQuery
from src.services.filter_builder import build_filter, build_sorts
from src.services.record_mapper import map_records
from src.utils.errors import ConfigurationError, GleisError, NotionError, TaskInputError
from src.utils.logging import get_structured_logger, log_timing, truncate_for_log
from src.utils.settings import Settings, get_settings

logger = get_structured_logger(__name__)

# Global client instance (singleton pattern)
_client: Optional[AsyncClient] = None

# Passed as ``date`` to update_task to leave the date untouched.
UNCHANGED: Any = object()


def get_notion_client() -> AsyncClient:
    """Get or create the Notion client singleton."""
    global _client

    if _client is None:
        api_key = get_settings().notion_api_key
        if not api_key:
            raise ConfigurationError("NOTION_API_KEY must be set")

        _client = AsyncClient(auth=api_key)
        logger.info("Notion client initialized")

    return _client


def reset_notion_client() -> None:
    """Drop the cached client so the next call re-reads credentials."""
    global _client
    _client = None


async def close_notion_client() -> None:
    """Close the cached client's connection pool, which is bound to the running loop."""
    global _client
    if _client is not None:
        client, _client = _client, None
        await client.aclose()


class NotionClient:
    """Async context manager around the Notion client.

    Upstream failures raised inside the block are converted to NotionError;
    GleisError subclasses pass through untouched.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.client: Optional[AsyncClient] = None

    async def __aenter__(self) -> AsyncClient:
        self.client = get_notion_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or issubclass(exc_type, GleisError):
            return False

        if isinstance(exc_val, APIResponseError):
            logger.error(
                "Notion API error",
                operation=self.operation,
                status=exc_val.status,
                code=str(exc_val.code),
                error=truncate_for_log(str(exc_val)),
            )
            raise NotionError(f"Notion Error: {exc_val}", detail=str(exc_val.code)) from exc_val

        if isinstance(exc_val, Exception):
            logger.error(
                "Notion request failed",
                operation=self.operation,
                error=truncate_for_log(str(exc_val)),
                type=exc_type.__name__,
            )
            raise NotionError(f"Failed to {self.operation}: {exc_val}") from exc_val

        return False


# Property payload builders
def title_property(text: str) -> dict:
    return {"title": [{"text": {"content": text}}]}


def state_property(name: str, settings: Settings) -> dict:
    return {settings.property_types.state: {"name": name}}


def tag_property(values: list[str], field_type: str) -> dict:
    if field_type == "select":
        return {"select": {"name": values[0]} if values else None}
    return {"multi_select": [{"name": value} for value in values]}


def date_property(value: Optional[str]) -> dict:
    if not value:
        return {"date": None}
    return {"date": {"start": value}}


def _require_id(task_id: Optional[str]) -> str:
    if not task_id or not str(task_id).strip():
        raise TaskInputError("Task ID is required")
    return str(task_id).strip()


async def query_records(filter: dict, sorts: list[dict], settings: Optional[Settings] = None) -> list[dict]:
    """Run a database query and accumulate every page of results."""
    settings = settings or get_settings()
    database_id = settings.require_database_id()

    async with NotionClient("query tasks") as client:
        with log_timing("notion.databases.query", logger=logger):
            records = [record async for record in async_iterate_paginated_api(
                client.databases.query,
                database_id=database_id,
                filter=filter,
                sorts=sorts,
                page_size=settings.page_size,
            )]

    logger.info("Fetched task records", record_count=len(records))
    return records


async def query_tasks(query: TaskQuery, settings: Optional[Settings] = None) -> list[Task]:
    """Fetch and normalize every task matching ``query``."""
    settings = settings or get_settings()
    records = await query_records(
        build_filter(query, settings),
        build_sorts(settings),
        settings,
    )
    return map_records(records, settings)


async def create_task(name: Optional[str] = None, date: Optional[str] = None,
                      settings: Optional[Settings] = None) -> str:
    """Create a task with the default state and categories. Returns the page ID."""
    settings = settings or get_settings()
    database_id = settings.require_database_id()
    names, types, defaults = settings.properties, settings.property_types, settings.defaults

    properties = {
        names.name: title_property(name or defaults.new_task_name),
        names.state: state_property(defaults.initial_state, settings),
        names.cat: tag_property([defaults.initial_cat], types.cat),
        names.sub_cat: tag_property([defaults.initial_sub_cat], types.sub_cat),
    }
    if date:
        properties[names.date] = date_property(date)

    async with NotionClient("create task") as client:
        with log_timing("notion.pages.create", logger=logger):
            response = await client.pages.create(
                parent={"database_id": database_id},
                properties=properties,
            )

    page_id = response.get("id") if isinstance(response, dict) else None
    if not page_id:
        raise NotionError("Failed to create task: no ID returned")

    logger.info("Task created", task_id=page_id, task_name=truncate_for_log(name), has_date=bool(date))
    return page_id


async def update_task(task_id: str, name: Optional[str] = None, date: Any = UNCHANGED,
                      status: Optional[str] = None, settings: Optional[Settings] = None) -> bool:
    """Update only the given fields.

    ``date=None`` (or "" / "null") clears the date; leaving it as UNCHANGED
    does not touch it. Returns False when there was nothing to send.
    """
    task_id = _require_id(task_id)
    settings = settings or get_settings()
    names = settings.properties

    properties: dict[str, dict] = {}
    if name is not None:
        properties[names.name] = title_property(name)
    if status:
        properties[names.state] = state_property(status, settings)
    if date is not UNCHANGED:
        properties[names.date] = date_property(None if date == "null" else date)

    if not properties:
        logger.info("Task update skipped, no fields given", task_id=task_id)
        return False

    async with NotionClient("update task") as client:
        with log_timing("notion.pages.update", logger=logger, task_id=task_id):
            await client.pages.update(page_id=task_id, properties=properties)

    logger.info("Task updated", task_id=task_id, fields=sorted(properties))
    return True


async def complete_task(task_id: str, settings: Optional[Settings] = None) -> None:
    """Set the task's state to Done."""
    task_id = _require_id(task_id)
    settings = settings or get_settings()

    async with NotionClient("complete task") as client:
        with log_timing("notion.pages.update", logger=logger, task_id=task_id):
            await client.pages.update(
                page_id=task_id,
                properties={
                    settings.properties.state: state_property(settings.defaults.done_state, settings),
                },
            )

    logger.info("Task completed", task_id=task_id)


async def delete_task(task_id: str) -> None:
    """Archive the task's page (Notion has no hard delete)."""
    task_id = _require_id(task_id)

    async with NotionClient("delete task") as client:
        with log_timing("notion.pages.update", logger=logger, task_id=task_id):
            await client.pages.update(page_id=task_id, archived=True)

    logger.info("Task archived", task_id=task_id)
