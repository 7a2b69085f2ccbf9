"""FastAPI application entry point.

Configures CORS, structured logging, the error envelope, lifespan wiring of
the analytics sink and page revalidator, and router registration.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import AppException
from app.core.logging import setup_logging
from app.routers import health, jobs, leaderboard, links, webhooks
from app.services.analytics import build_analytics_sink
from app.services.revalidation import build_revalidator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: build outbound sinks on startup, close them on exit."""
    setup_logging()
    application.state.analytics = build_analytics_sink(settings)
    application.state.revalidator = build_revalidator(settings)
    logger.info("Application starting up")
    yield
    application.state.analytics.close()
    application.state.revalidator.close()
    logger.info("Application shutting down")


app = FastAPI(
    title="Community Job Board API",
    description="Job listings with Slack/Telegram announcements and contributor points",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render typed application errors as a single user-visible outcome."""
    logger.warning(
        "request_failed",
        extra={"path": request.url.path, "error_code": exc.error_code},
    )
    content: dict = {
        "success": False,
        "errors": [{"msg": exc.message, "code": exc.error_code}],
    }
    if exc.details and "fields" in exc.details:
        content["fields"] = exc.details["fields"]
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies/params in the same envelope."""
    fields: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[-1]) if loc else "unknown"
        if field not in fields:
            fields.append(field)
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "errors": [{"msg": "Invalid request", "code": "VALIDATION_ERROR"}],
            "fields": fields,
        },
    )


# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(links.router, tags=["Links"])
app.include_router(jobs.router, prefix="/api/v1/jobs", tags=["Jobs"])
app.include_router(leaderboard.router, prefix="/api/v1/leaderboard", tags=["Leaderboard"])
app.include_router(webhooks.router, prefix="/api/webhooks", tags=["Webhooks"])
