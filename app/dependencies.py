"""FastAPI dependencies: caller resolution and service wiring.

``get_caller`` deliberately returns ``None`` for a missing or invalid
session instead of raising, so the job service's own authenticate step
produces the ``Unauthenticated`` error in its documented order.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, Request

from app.core.auth import Caller
from app.core.exceptions import Unauthenticated
from app.db.supabase import get_supabase
from app.models.profile import Profile
from app.services.analytics import NullSink
from app.services.jobs import JobService, client_for_caller, load_manager_profile
from app.services.revalidation import NullRevalidator

logger = logging.getLogger(__name__)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", maxsplit=1)[1].strip()
    return token or None


def get_caller(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Caller | None:
    """Resolve the session behind an ``Authorization: Bearer <jwt>`` header."""
    token = _bearer_token(authorization)
    if token is None:
        return None

    try:
        response = get_supabase().auth.get_user(token)
    except Exception as exc:
        logger.warning("session_lookup_failed", extra={"error_message": str(exc)})
        return None

    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        return None
    return Caller(user_id=str(user.id), access_token=token, email=getattr(user, "email", None))


def get_job_service(request: Request) -> JobService:
    """Build the job service from the sinks created at startup."""
    state = request.app.state
    return JobService(
        analytics=getattr(state, "analytics", None) or NullSink(),
        revalidator=getattr(state, "revalidator", None) or NullRevalidator(),
    )


def require_job_manager(caller: Caller | None = Depends(get_caller)) -> Profile:
    """Gate admin-only read endpoints with the same rule as job mutations."""
    if caller is None:
        raise Unauthenticated()
    with client_for_caller(caller) as db:
        return load_manager_profile(db, caller)
