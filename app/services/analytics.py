"""Server-side product analytics sink.

The job mutation path reports what happened (``job_added``,
``job_updated``) to PostHog.  The sink is built once at startup from
settings and injected; when no API key is configured a ``NullSink`` takes
its place so callers never check for configuration themselves.

Sinks may raise on delivery failure.  The caller decides whether that
matters; for job mutations it never does.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    """Fire-and-forget destination for ``(user, event, properties)``."""

    def capture(
        self,
        distinct_id: str,
        event: str,
        properties: dict[str, Any] | None = None,
    ) -> None: ...

    def close(self) -> None: ...


class NullSink:
    """Sink used when analytics is not configured; drops every event."""

    def capture(
        self,
        distinct_id: str,
        event: str,
        properties: dict[str, Any] | None = None,
    ) -> None:
        logger.debug("analytics_event_dropped", extra={"event_name": event})

    def close(self) -> None:
        return None


class PostHogSink:
    """Send events to the PostHog ``/capture/`` endpoint, one request per event."""

    def __init__(
        self,
        api_key: str,
        host: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = f"{host.rstrip('/')}/capture/"
        self._client = client or httpx.Client(timeout=timeout)

    def capture(
        self,
        distinct_id: str,
        event: str,
        properties: dict[str, Any] | None = None,
    ) -> None:
        payload = {
            "api_key": self._api_key,
            "event": event,
            "distinct_id": distinct_id,
            "properties": {**(properties or {}), "$source": "server"},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        response = self._client.post(self._endpoint, json=payload)
        response.raise_for_status()
        logger.debug(
            "analytics_event_sent",
            extra={"event_name": event, "distinct_id": distinct_id},
        )

    def close(self) -> None:
        self._client.close()


def build_analytics_sink(settings: Settings) -> AnalyticsSink:
    """Return a PostHog sink if an API key is configured, else a ``NullSink``."""
    if not settings.POSTHOG_API_KEY:
        logger.warning("PostHog API key not set; server-side tracking disabled")
        return NullSink()
    return PostHogSink(settings.POSTHOG_API_KEY, settings.POSTHOG_HOST)
