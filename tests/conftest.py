"""Shared test fixtures.

Sets the environment ``Settings`` needs before anything under ``app`` is
imported, and provides chainable Supabase mocks, a caller, a ``JobService``
wired to recording sinks, and a FastAPI ``TestClient``.
"""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-test-key")
os.environ.setdefault("SUPABASE_WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("SLACK_WEBHOOK_URL", "https://hooks.slack.test/services/T000/B000/XXX")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token")
os.environ.setdefault("TELEGRAM_CHANNEL_ID", "@test_channel")
os.environ.setdefault("SITE_URL", "https://jobs.example.test")
os.environ.setdefault("ATTRIBUTION_SOURCE", "LisboaUX")
os.environ.setdefault("POSTHOG_API_KEY", "")
os.environ.setdefault("REVALIDATE_URL", "")


def chainable_table_mock(data: Any = None) -> MagicMock:
    """Return a mock that supports fluent PostgREST chaining.

    ``execute()`` returns an object whose ``.data`` is *data*; override
    ``execute.side_effect`` for sequences of results.
    """
    m = MagicMock()
    for method in (
        "select", "insert", "update", "eq", "ilike", "limit", "order",
    ):
        getattr(m, method).return_value = m
    m.execute.return_value = MagicMock(data=data)
    return m


def fake_db(**tables: MagicMock) -> MagicMock:
    """A Supabase client whose ``table(name)`` returns the given mocks."""
    db = MagicMock()
    db.table.side_effect = lambda name: tables[name]
    return db


class RecordingSink:
    """Analytics sink that keeps every captured event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def capture(self, distinct_id: str, event: str, properties: dict[str, Any] | None = None) -> None:
        self.events.append((distinct_id, event, properties or {}))

    def close(self) -> None:
        return None


class RecordingRevalidator:
    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def revalidate(self, paths: Any) -> None:
        self.calls.append(list(paths))

    def close(self) -> None:
        return None


@pytest.fixture()
def caller() -> Any:
    from app.core.auth import Caller

    return Caller(user_id="11111111-1111-1111-1111-111111111111", access_token="jwt-token")


@pytest.fixture()
def admin_profile_row() -> dict[str, Any]:
    return {"user_role": "admin", "email": "admin@example.test", "full_name": "Ada Admin"}


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def revalidator() -> RecordingRevalidator:
    return RecordingRevalidator()


@pytest.fixture()
def mock_award() -> Generator[MagicMock, None, None]:
    """Patch the points ledger as seen by the job service."""
    with patch("app.services.points.award_points", return_value=1100) as mocked:
        yield mocked


@pytest.fixture()
def mock_supabase_module() -> Generator[MagicMock, None, None]:
    """Patch the Supabase client at module level in the health router."""
    mock_client = MagicMock()
    mock_client.table.return_value = chainable_table_mock(data=[{"id": 1}])

    with patch("app.routers.health.get_supabase", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def mock_supabase_disconnected() -> Generator[MagicMock, None, None]:
    """Patch ``get_supabase`` to simulate a disconnected database."""
    with patch(
        "app.routers.health.get_supabase",
        side_effect=Exception("Connection refused"),
    ):
        yield MagicMock()


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient."""
    from app.main import app

    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
