"""Unit tests for the public read paths and JSON-LD generation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock, patch

from app.models.job import Job
from app.services.listings import (
    get_leaderboard,
    list_jobs,
    location_counts,
    resolve_short_code,
)
from app.services.seo import generate_job_posting_schema

from tests.conftest import chainable_table_mock

ROW: dict[str, Any] = {
    "id": 3,
    "title": "Service Designer",
    "company": "Acme",
    "location": "Lisbon, Portugal",
    "url": "https://careers.acme.test/jobs/3",
    "submitted_on": "2026-10-12T14:00:00+00:00",
    "is_active": True,
    "short_code": None,
}


def _client(table: MagicMock) -> MagicMock:
    client = MagicMock()
    client.table.return_value = table
    return client


class TestListJobs:

    def test_active_only_newest_first(self) -> None:
        table = chainable_table_mock(data=[ROW])
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            jobs = list_jobs()

        table.eq.assert_called_once_with("is_active", True)
        table.order.assert_called_once_with("submitted_on", desc=True)
        assert jobs[0].link == "https://careers.acme.test/jobs/3?utm_source=LisboaUX"

    def test_filters_escape_wildcards(self) -> None:
        table = chainable_table_mock(data=[])
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            list_jobs(company="100%_UX", location=" Lisbon ")

        table.ilike.assert_any_call("company", "100\\%\\_UX")
        table.ilike.assert_any_call("location", "%Lisbon%")

    def test_include_inactive_skips_active_filter(self) -> None:
        table = chainable_table_mock(data=[{**ROW, "is_active": False}])
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            jobs = list_jobs(include_inactive=True)

        table.eq.assert_not_called()
        assert jobs[0].is_active is False

    def test_backend_error_yields_empty_list(self) -> None:
        table = chainable_table_mock()
        table.execute.side_effect = RuntimeError("down")
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            assert list_jobs() == []


class TestLocationCounts:

    def test_sorted_by_count_then_name(self) -> None:
        rows = [
            {"location": "Remote"},
            {"location": "Lisbon"},
            {"location": "Porto"},
            {"location": "Lisbon"},
            {"location": None},
        ]
        table = chainable_table_mock(data=rows)
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            counts = location_counts()

        assert [(c.name, c.count) for c in counts] == [
            ("Lisbon", 2), ("Porto", 1), ("Remote", 1), ("Unknown", 1),
        ]


class TestResolveShortCode:

    def test_known_code(self) -> None:
        table = chainable_table_mock(data=[{"url": "https://example.com/job"}])
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            assert resolve_short_code("abc") == "https://example.com/job"
        table.eq.assert_called_once_with("short_code", "abc")

    def test_unknown_code(self) -> None:
        table = chainable_table_mock(data=[])
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            assert resolve_short_code("zzz") is None

    def test_lookup_error_is_unknown(self) -> None:
        table = chainable_table_mock()
        table.execute.side_effect = RuntimeError("down")
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            assert resolve_short_code("abc") is None


class TestLeaderboard:

    def test_ranked_by_points(self) -> None:
        rows = [{"id": "44444444-4444-4444-4444-444444444444", "full_name": "Cat", "points": 1200}]
        table = chainable_table_mock(data=rows)
        with patch("app.services.listings.get_supabase", return_value=_client(table)):
            entries = get_leaderboard(limit=5)

        table.order.assert_called_once_with("points", desc=True)
        table.limit.assert_called_once_with(5)
        assert entries[0].points == 1200


class TestStructuredData:

    def test_website_then_active_postings(self) -> None:
        active = Job.model_validate(ROW)
        inactive = Job.model_validate({**ROW, "id": 4, "is_active": False})

        schema = generate_job_posting_schema([active, inactive])

        assert len(schema) == 2
        website, posting = schema
        assert website["url"] == "https://jobs.example.test"
        assert posting["hiringOrganization"]["name"] == "Acme"
        assert posting["jobLocation"]["address"]["addressLocality"] == "Lisbon, Portugal"
        assert posting["datePosted"] == datetime(2026, 10, 12, tzinfo=timezone.utc).date().isoformat()
