"""URL canonicalization for job links.

``clean`` is the storage gate: it strictly rejects anything that is not an
absolute URL and strips known tracking parameters.  The remaining helpers are
display conveniences and fall back to returning their input untouched when
the URL cannot be parsed.

Query parameters are handled as raw ``name=value`` segments so that
parameters we keep are reproduced byte for byte, in their original order.
"""

from __future__ import annotations

import logging
from urllib.parse import SplitResult, quote, unquote_plus, urlsplit, urlunsplit

from app.core.config import settings
from app.core.constants import (
    ATTRIBUTION_PARAM,
    TRACKING_PARAM_NAMES,
    TRACKING_PARAM_PREFIXES,
)
from app.core.exceptions import InvalidUrlError

logger = logging.getLogger(__name__)


def is_tracking_param(name: str) -> bool:
    """Return True if *name* is a known tracking parameter (case-sensitive)."""
    return name.startswith(TRACKING_PARAM_PREFIXES) or name in TRACKING_PARAM_NAMES


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _parse_absolute(raw_url: str) -> SplitResult:
    """Split *raw_url*, requiring a scheme and a host."""
    if not isinstance(raw_url, str):
        raise InvalidUrlError(str(raw_url))
    candidate = raw_url.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        raise InvalidUrlError(raw_url)
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates the port component.
        parts.port
    except ValueError as exc:
        raise InvalidUrlError(raw_url) from exc
    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise InvalidUrlError(raw_url)
    return parts


def _segments(query: str) -> list[str]:
    return [segment for segment in query.split("&") if segment]


def _segment_name(segment: str) -> str:
    return unquote_plus(segment.split("=", 1)[0])


def _with_query(parts: SplitResult, segments: list[str]) -> str:
    return urlunsplit(parts._replace(query="&".join(segments)))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def is_valid_url(raw_url: str) -> bool:
    """Strict intake check used before a job URL is accepted."""
    try:
        _parse_absolute(raw_url)
    except InvalidUrlError:
        return False
    return True


def clean(raw_url: str) -> str:
    """Return *raw_url* with every tracking parameter removed.

    Raises ``InvalidUrlError`` when *raw_url* is not an absolute URL; callers
    at submission time must reject the input rather than store it as-is.
    """
    parts = _parse_absolute(raw_url)
    kept = [s for s in _segments(parts.query) if not is_tracking_param(_segment_name(s))]
    return _with_query(parts, kept)


def canonical_or_original(url: str) -> str:
    """``clean`` for display paths: unparseable input comes back unchanged."""
    try:
        return clean(url)
    except InvalidUrlError:
        logger.debug("canonical_unparseable", extra={"url": url})
        return url


def has_residual_params(url: str) -> bool:
    """True if *url* still carries any query parameter after parsing."""
    try:
        parts = _parse_absolute(url)
    except InvalidUrlError:
        return False
    return bool(_segments(parts.query))


def strip_all_params(url: str) -> str:
    """Drop the whole query string (manual override for residual params)."""
    try:
        parts = _parse_absolute(url)
    except InvalidUrlError:
        logger.debug("strip_all_params_unparseable", extra={"url": url})
        return url
    return _with_query(parts, [])


def with_attribution(url: str, source: str | None = None) -> str:
    """Set the attribution parameter on *url*, replacing any existing value.

    The first existing occurrence is overwritten in place and any further
    occurrences are dropped, so the result carries exactly one value.
    """
    try:
        parts = _parse_absolute(url)
    except InvalidUrlError:
        logger.debug("with_attribution_unparseable", extra={"url": url})
        return url

    value = source if source is not None else settings.ATTRIBUTION_SOURCE
    attribution = f"{ATTRIBUTION_PARAM}={quote(value, safe='')}"

    segments: list[str] = []
    placed = False
    for segment in _segments(parts.query):
        if _segment_name(segment) == ATTRIBUTION_PARAM:
            if not placed:
                segments.append(attribution)
                placed = True
            continue
        segments.append(segment)
    if not placed:
        segments.append(attribution)

    return _with_query(parts, segments)


def short_link(code: str) -> str:
    """Public redirect link for a job short-code."""
    return f"{settings.SITE_URL.rstrip('/')}/j/{quote(code, safe='')}"


def job_link(url: str, short_code: str | None = None) -> str:
    """Link shown to readers: the short link if there is one, else the attributed URL."""
    if short_code:
        return short_link(short_code)
    return with_attribution(url)
