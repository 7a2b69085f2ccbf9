"""Caller identity and the job-management authorization rule."""

from __future__ import annotations

from dataclasses import dataclass

from app.models.enums import UserRole

JOB_MANAGER_ROLES: frozenset[UserRole] = frozenset({UserRole.owner, UserRole.admin})


@dataclass(slots=True, frozen=True)
class Caller:
    """An authenticated session: who is calling and the bearer token they used.

    The token is forwarded to the data store so row-level security applies
    to the caller's own reads and writes.
    """

    user_id: str
    access_token: str | None = None
    email: str | None = None


def can_manage_jobs(role: UserRole | str | None) -> bool:
    """Single source of truth for who may create or mutate jobs."""
    if role is None:
        return False
    try:
        return UserRole(role) in JOB_MANAGER_ROLES
    except ValueError:
        return False
