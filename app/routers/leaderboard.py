"""Points leaderboard, visible to admins and owners."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import require_job_manager
from app.models.profile import LeaderboardResponse, Profile
from app.services.listings import get_leaderboard

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=LeaderboardResponse)
def leaderboard(
    limit: int = Query(default=50, ge=1, le=500),
    _profile: Profile = Depends(require_job_manager),
) -> LeaderboardResponse:
    try:
        entries = get_leaderboard(limit=limit)
    except Exception as exc:
        logger.error("leaderboard_failed", extra={"error_message": str(exc)})
        raise HTTPException(status_code=503, detail="Leaderboard unavailable") from exc
    return LeaderboardResponse(entries=entries)
