"""Public read paths: job listings, location counts, short links, leaderboard.

All reads go through the anon client; row-level security decides what is
visible.  Listing helpers log and return empty results when the backend is
unavailable so a listing page degrades to "no jobs" instead of erroring.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from app.core.urls import job_link
from app.db.supabase import get_supabase
from app.models.job import Job, LocationCount, PublicJob
from app.models.profile import LeaderboardEntry

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    """Escape PostgREST ``ilike`` wildcards in user-supplied filters."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def to_public(job: Job) -> PublicJob:
    return PublicJob(**job.model_dump(), link=job_link(job.url, job.short_code))


def list_jobs(
    company: str | None = None,
    location: str | None = None,
    include_inactive: bool = False,
) -> list[PublicJob]:
    """Return jobs newest first, optionally filtered.

    *company* matches case-insensitively and exactly; *location* matches
    any location containing the given text (so "Lisbon" also finds
    "Lisbon, Portugal").
    """
    client = get_supabase()
    query = client.table("jobs").select("*")
    if not include_inactive:
        query = query.eq("is_active", True)
    if company:
        query = query.ilike("company", _escape_like(company.strip()))
    if location:
        query = query.ilike("location", f"%{_escape_like(location.strip())}%")

    try:
        result = query.order("submitted_on", desc=True).execute()
    except Exception as exc:
        logger.error(
            "list_jobs_failed",
            extra={"company": company, "location": location, "error_message": str(exc)},
        )
        return []

    return [to_public(Job.model_validate(row)) for row in result.data or []]


def location_counts() -> list[LocationCount]:
    """Active jobs grouped by location, most common first."""
    client = get_supabase()
    try:
        result = (
            client.table("jobs")
            .select("location")
            .eq("is_active", True)
            .execute()
        )
    except Exception as exc:
        logger.error("location_counts_failed", extra={"error_message": str(exc)})
        return []

    counts: Counter[str] = Counter(
        (row.get("location") or "Unknown") for row in result.data or []
    )
    return [
        LocationCount(name=name, count=count)
        for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def resolve_short_code(code: str) -> str | None:
    """Return the stored URL for *code*, or ``None`` if unknown or unreachable."""
    if not code:
        return None
    client = get_supabase()
    try:
        result = (
            client.table("jobs")
            .select("url")
            .eq("short_code", code)
            .limit(1)
            .execute()
        )
    except Exception as exc:
        logger.warning(
            "short_code_lookup_failed",
            extra={"short_code": code, "error_message": str(exc)},
        )
        return None

    rows: list[dict[str, Any]] = result.data or []
    if not rows or not rows[0].get("url"):
        return None
    return rows[0]["url"]


def get_leaderboard(limit: int = 50) -> list[LeaderboardEntry]:
    """Profiles ranked by points, highest first."""
    client = get_supabase()
    result = (
        client.table("profiles")
        .select("id, full_name, username, points")
        .order("points", desc=True)
        .limit(limit)
        .execute()
    )
    return [LeaderboardEntry.model_validate(row) for row in result.data or []]
