"""Stale-page invalidation for pages that render job listings.

Rendering happens in the front end, which exposes a revalidation hook.  After
a job mutation we POST the affected paths to that hook.  With no hook
configured, ``NullRevalidator`` is used and nothing is sent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


class Revalidator(Protocol):
    def revalidate(self, paths: Iterable[str]) -> None: ...

    def close(self) -> None: ...


class NullRevalidator:
    def revalidate(self, paths: Iterable[str]) -> None:
        logger.debug("revalidation_skipped", extra={"paths": list(paths)})

    def close(self) -> None:
        return None


class HttpRevalidator:
    """POST ``{"paths": [...]}`` to the front end's revalidation endpoint."""

    def __init__(
        self,
        url: str,
        token: str = "",
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.Client(timeout=timeout)

    def revalidate(self, paths: Iterable[str]) -> None:
        path_list = list(paths)
        response = self._client.post(
            self._url,
            json={"paths": path_list},
            headers=self._headers,
        )
        response.raise_for_status()
        logger.info("pages_revalidated", extra={"paths": path_list})

    def close(self) -> None:
        self._client.close()


def build_revalidator(settings: Settings) -> Revalidator:
    if not settings.REVALIDATE_URL:
        return NullRevalidator()
    return HttpRevalidator(settings.REVALIDATE_URL, settings.REVALIDATE_TOKEN)
