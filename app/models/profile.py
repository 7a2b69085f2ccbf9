"""Pydantic models for the ``profiles`` table."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.models.enums import UserRole


class Profile(BaseModel):
    """Profile fields the job mutation path needs for authorization and analytics."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: UUID | None = None
    email: str | None = None
    full_name: str | None = None
    username: str | None = None
    user_role: UserRole = UserRole.user
    points: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LeaderboardEntry(BaseModel):
    """One row of the points leaderboard."""
    id: UUID
    full_name: str | None = None
    username: str | None = None
    points: int = 0


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
