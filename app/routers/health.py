"""Health check endpoint.

Returns service status with a real Supabase round trip and reports which
outbound integrations are configured.
"""

import logging
from typing import Any

from fastapi import APIRouter
from starlette.responses import JSONResponse

from app.core.config import settings
from app.db.supabase import get_supabase

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check() -> Any:
    """Return 200 when the database answers, 503 otherwise."""
    db_status = "disconnected"

    try:
        client = get_supabase()
        result = client.table("jobs").select("id").limit(1).execute()
        if result is not None:
            db_status = "connected"
    except Exception:
        logger.warning("Health check: Supabase connection failed", exc_info=True)

    payload: dict[str, Any] = {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "integrations": {
            "slack": bool(settings.SLACK_WEBHOOK_URL),
            "telegram": bool(settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_CHANNEL_ID),
            "analytics": bool(settings.POSTHOG_API_KEY),
            "points": bool(settings.SUPABASE_SERVICE_ROLE_KEY),
        },
    }

    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload)

    return payload
