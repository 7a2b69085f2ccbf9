"""Structured logging configuration.

Log calls across the app use an event name as the message and pass context
through ``extra={...}``.  ``EventFormatter`` renders those extra fields as
``key=value`` pairs after the message so they survive plain-text log sinks.
"""

import logging
import sys
from typing import Any

from app.core.config import settings

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class EventFormatter(logging.Formatter):
    """Formatter that appends ``extra`` context as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = _extract_context(record)
        if not context:
            return base
        pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
        return f"{base} | {pairs}"


def _extract_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger for the application.

    Sets the level from *level* (or ``settings.LOG_LEVEL``) and installs a
    single ``StreamHandler`` writing to *stdout*.  Repeated calls replace the
    handler rather than stacking duplicates.
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    formatter = EventFormatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Outbound calls to Slack/Telegram/PostHog go through httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
