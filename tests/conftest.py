"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("NOTION_API_KEY", "secret_test_key")
os.environ.setdefault("NOTION_DATABASE_ID", "db-test-123")
os.environ.setdefault("LOG_FORMAT", "text")

from src.services.notion_db import reset_notion_client
from src.utils.settings import Settings


@pytest.fixture(autouse=True)
def _reset_notion_singleton():
    """Each test starts without a cached Notion client."""
    reset_notion_client()
    yield
    reset_notion_client()


@pytest.fixture(autouse=True)
def _no_basic_auth(monkeypatch):
    """Basic auth is off unless a test configures it."""
    monkeypatch.delenv("BASIC_AUTH_USER", raising=False)
    monkeypatch.delenv("BASIC_AUTH_PASSWORD", raising=False)


@pytest.fixture
def settings():
    """Default settings bound to the test database."""
    return Settings(notion_api_key="secret_test_key", notion_database_id="db-test-123")


@pytest.fixture
def select_settings():
    """Settings for a database whose State and tag fields are plain selects."""
    return Settings(
        notion_api_key="secret_test_key",
        notion_database_id="db-test-123",
        property_types={"state": "select", "cat": "select", "sub_cat": "select", "cat_tag": "select"},
    )


@pytest.fixture
def mock_notion_client():
    """Mock async Notion client returned by get_notion_client."""
    client = MagicMock()
    client.databases.query = AsyncMock(return_value={"results": [], "has_more": False, "next_cursor": None})
    client.pages.create = AsyncMock(return_value={"id": "page-new"})
    client.pages.update = AsyncMock(return_value={"object": "page"})
    with patch("src.services.notion_db.get_notion_client", return_value=client):
        yield client


@pytest.fixture
def basic_auth_env(monkeypatch):
    """Configure Basic auth credentials."""
    monkeypatch.setenv("BASIC_AUTH_USER", "gleis")
    monkeypatch.setenv("BASIC_AUTH_PASSWORD", "s3cret-pass")
    return ("gleis", "s3cret-pass")


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time on a Wednesday."""
    with freeze_time("2024-06-12 12:00:00") as frozen_time:
        yield frozen_time
