"""Tests for the TaskStore view-model."""

import asyncio
import pytest
from datetime import date
from unittest.mock import AsyncMock, patch

from src.models.task import Task
from src.models.task_query import TaskQuery
from src.services import date_window
from src.services.notion_db import UNCHANGED
from src.services.task_store import TaskStore
from src.utils.errors import NotionError


def make_task(task_id: str, name: str = "Task", **kwargs) -> Task:
    return Task(id=task_id, name=name, **kwargs)


@pytest.fixture
def week_query():
    return TaskQuery(window=date_window.current_week(date(2024, 6, 12)))


@pytest.fixture
def store(week_query, settings):
    return TaskStore(week_query, settings)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_replaces_tasks(store):
    store.tasks = [make_task("stale")]
    fresh = [make_task("a"), make_task("b")]

    with patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=fresh):
        assert await store.refresh() is True

    assert [t.id for t in store.tasks] == ["a", "b"]
    assert store.loaded is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_failure_keeps_tasks(store):
    store.tasks = [make_task("a")]

    with patch("src.services.task_store.query_tasks", new_callable=AsyncMock,
               side_effect=NotionError("boom")):
        assert await store.refresh() is False

    assert [t.id for t in store.tasks] == ["a"]
    assert isinstance(store.last_error, NotionError)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_after_close_is_discarded(store):
    async def late_query(*args, **kwargs):
        store.close()
        return [make_task("late")]

    with patch("src.services.task_store.query_tasks", side_effect=late_query):
        assert await store.refresh() is False

    assert store.tasks == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_refetches(store, settings):
    created = make_task("page-new", "Buy milk")

    with patch("src.services.task_store.create_task", new_callable=AsyncMock, return_value="page-new") as create, \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=[created]) as query:
        assert await store.create("Buy milk", None) is True

    create.assert_awaited_once_with("Buy milk", None, settings)
    query.assert_awaited_once()
    assert store.tasks == [created]
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_passes_only_given_fields(store, settings):
    with patch("src.services.task_store.update_task", new_callable=AsyncMock, return_value=True) as update, \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=[]):
        assert await store.update("page-1", status="Waiting") is True

    update.assert_awaited_once_with("page-1", name=None, date=UNCHANGED, status="Waiting", settings=settings)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_can_clear_date(store, settings):
    with patch("src.services.task_store.update_task", new_callable=AsyncMock, return_value=True) as update, \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=[]):
        await store.update("page-1", date=None)

    assert update.await_args.kwargs["date"] is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_with_nothing_to_send_skips_refetch(store):
    store.tasks = [make_task("a")]

    with patch("src.services.task_store.update_task", new_callable=AsyncMock, return_value=False), \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock) as query:
        assert await store.update("a") is False

    query.assert_not_awaited()
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_removes_task_without_refetch(store, settings):
    store.tasks = [make_task("a"), make_task("b"), make_task("c")]

    with patch("src.services.task_store.complete_task", new_callable=AsyncMock) as complete, \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock) as query:
        assert await store.complete("b") is True

    complete.assert_awaited_once_with("b", settings)
    query.assert_not_awaited()
    assert [t.id for t in store.tasks] == ["a", "c"]
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_twice_is_harmless(store):
    store.tasks = [make_task("a"), make_task("b")]

    with patch("src.services.task_store.complete_task", new_callable=AsyncMock) as complete:
        assert await store.complete("a") is True
        assert await store.complete("a") is False

    complete.assert_awaited_once()
    assert [t.id for t in store.tasks] == ["b"]
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_failure_keeps_task(store):
    store.tasks = [make_task("a")]

    with patch("src.services.task_store.complete_task", new_callable=AsyncMock,
               side_effect=NotionError("Failed to complete task on Notion")):
        assert await store.complete("a") is False

    assert [t.id for t in store.tasks] == ["a"]
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_mutation_leaves_tasks(store):
    store.tasks = [make_task("a")]

    with patch("src.services.task_store.update_task", new_callable=AsyncMock,
               side_effect=NotionError("boom")), \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock) as query:
        assert await store.update("a", name="x") is False

    query.assert_not_awaited()
    assert [t.name for t in store.tasks] == ["Task"]
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_second_mutation_dropped_while_in_flight(store):
    """Only one mutation runs at a time; others are dropped, not queued."""
    store.tasks = [make_task("a"), make_task("b")]
    release = asyncio.Event()
    seen = []

    async def slow_update(task_id, **kwargs):
        seen.append(task_id)
        await release.wait()
        return True

    with patch("src.services.task_store.update_task", side_effect=slow_update), \
         patch("src.services.task_store.complete_task", new_callable=AsyncMock) as complete, \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=[]):
        first = asyncio.create_task(store.update("a", name="x"))
        await asyncio.sleep(0)
        assert store.processing_id == "a"

        assert await store.complete("b") is False
        assert await store.create("other") is False

        release.set()
        assert await first is True

    assert seen == ["a"]
    complete.assert_not_awaited()
    assert store.processing_id is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_delete_refetches(store):
    store.tasks = [make_task("a")]

    with patch("src.services.task_store.delete_task", new_callable=AsyncMock) as delete, \
         patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=[]):
        assert await store.delete("a") is True

    delete.assert_awaited_once_with("a")
    assert store.tasks == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_polling_refreshes_until_closed(store):
    calls = []

    async def counting_query(*args, **kwargs):
        calls.append(1)
        if len(calls) == 3:
            store.close()
        return [make_task(str(len(calls)))]

    with patch("src.services.task_store.query_tasks", side_effect=counting_query):
        await asyncio.wait_for(store.poll(interval=0.001), timeout=1)

    assert len(calls) == 3
    assert [t.id for t in store.tasks] == ["2"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_polling_is_cancelled_by_close(store):
    with patch("src.services.task_store.query_tasks", new_callable=AsyncMock, return_value=[]):
        poller = store.start_polling(interval=60)
        await asyncio.sleep(0)
        store.close()
        with pytest.raises(asyncio.CancelledError):
            await poller
