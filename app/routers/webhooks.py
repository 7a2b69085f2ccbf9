"""Database webhook receiver.

POST /api/webhooks/new-job is called by the database when a row is inserted
into ``jobs``.  The request must carry ``x-webhook-secret``; the job is then
announced on Slack and Telegram.  A 200 means the event was accepted, not
that every channel delivered.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Header, Request
from starlette.responses import JSONResponse

from app.core.config import settings
from app.models.enums import WebhookEventType
from app.models.job import WebhookPayload
from app.models.notification import WebhookResponse
from app.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter()


def secret_matches(provided: str | None) -> bool:
    """Constant-time comparison against the configured secret; unset never matches."""
    expected = settings.SUPABASE_WEBHOOK_SECRET
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


@router.post("/new-job", response_model=WebhookResponse)
async def new_job_webhook(
    request: Request,
    x_webhook_secret: str | None = Header(default=None, alias="x-webhook-secret"),
) -> Any:
    if not secret_matches(x_webhook_secret):
        logger.warning(
            "webhook_rejected_bad_secret",
            extra={"client": request.client.host if request.client else None},
        )
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        payload = WebhookPayload.model_validate(await request.json())
    except ValueError as exc:
        # Covers both JSON decoding and pydantic validation failures.
        logger.warning("webhook_bad_payload", extra={"error_message": str(exc)[:500]})
        return JSONResponse(status_code=400, content={"error": "Bad request"})

    if payload.type != WebhookEventType.insert.value:
        logger.info("webhook_event_ignored", extra={"event_type": payload.type})
        return WebhookResponse(message="Event ignored")

    if payload.record is None:
        logger.warning("webhook_insert_without_record")
        return JSONResponse(status_code=400, content={"error": "Bad request"})

    try:
        result = await notify(payload.record)
    except Exception:
        logger.exception("webhook_failed", extra={"job_id": payload.record.id})
        return JSONResponse(status_code=500, content={"error": "Internal error"})

    return WebhookResponse(
        message="Notification processed",
        channels=result.channel_results,
    )
