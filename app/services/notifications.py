"""New-job fan-out to Slack and Telegram.

``notify`` announces one job on both channels in order (Slack, then
Telegram).  Each channel is its own failure domain: a missing setting, a
network error, a timeout or an error response is logged and recorded in
that channel's ``ChannelResult``, and the other channel is still attempted.
``notify`` itself never raises.  Nothing is retried.
"""

from __future__ import annotations

import html
import logging
from typing import Any

import httpx

from app.core.config import settings
from app.core.urls import canonical_or_original, short_link, with_attribution
from app.models.enums import NotificationChannel
from app.models.job import JobSnapshot
from app.models.notification import ChannelResult, NotificationResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Message formatting
# ---------------------------------------------------------------------------

def escape_html(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` for Telegram's HTML parse mode."""
    return html.escape(text, quote=False)


def board_home_link(medium: str) -> str:
    """Board home page carrying attribution for the given channel."""
    return with_attribution(f"{settings.SITE_URL.rstrip('/')}/?utm_medium={medium}")


def build_slack_message(job: JobSnapshot) -> dict[str, Any]:
    """Block Kit message with the job summary and two link buttons."""
    summary = f"*{job.title}*\n{job.company} · {job.location}"
    return {
        "text": f"New job posted: {job.title} at {job.company}",
        "blocks": [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": ":cake: New job posted!",
                    "emoji": True,
                },
            },
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": summary},
            },
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "More Jobs"},
                        "url": board_home_link("Slack"),
                    },
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "View Job"},
                        "url": with_attribution(canonical_or_original(job.url)),
                    },
                ],
            },
        ],
    }


def telegram_link(job: JobSnapshot) -> str:
    if job.short_code:
        return short_link(job.short_code)
    return canonical_or_original(job.url)


def build_telegram_message(job: JobSnapshot) -> str:
    return (
        f"<b>{escape_html(job.title)}</b>\n"
        f"{escape_html(job.company)}\n"
        f"📍{escape_html(job.location)}\n"
        f"{telegram_link(job)}"
    )


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------

def _failed(channel: NotificationChannel, job: JobSnapshot, error: str) -> ChannelResult:
    logger.error(
        f"{channel.value}_notification_failed",
        extra={"job_id": job.id, "error_message": error},
    )
    return ChannelResult(channel=channel, ok=False, error=error)


async def send_slack(job: JobSnapshot, client: httpx.AsyncClient) -> ChannelResult:
    """POST the Block Kit message to the incoming webhook; non-2xx is a failure."""
    channel = NotificationChannel.slack
    if not settings.SLACK_WEBHOOK_URL:
        return _failed(channel, job, "SLACK_WEBHOOK_URL is not configured")

    try:
        response = await client.post(
            settings.SLACK_WEBHOOK_URL,
            json=build_slack_message(job),
        )
    except httpx.HTTPError as exc:
        return _failed(channel, job, f"Slack request failed: {exc}")

    if not response.is_success:
        return _failed(
            channel,
            job,
            f"Slack API error {response.status_code}: {response.text[:200]}",
        )

    logger.info("slack_notification_sent", extra={"job_id": job.id})
    return ChannelResult(channel=channel, ok=True)


async def send_telegram(job: JobSnapshot, client: httpx.AsyncClient) -> ChannelResult:
    """Call the Bot API ``sendMessage``; a response with ``ok: false`` is a failure."""
    channel = NotificationChannel.telegram
    if not settings.TELEGRAM_BOT_TOKEN or not settings.TELEGRAM_CHANNEL_ID:
        return _failed(channel, job, "Missing Telegram configuration")

    api_url = (
        f"{settings.TELEGRAM_API_BASE.rstrip('/')}"
        f"/bot{settings.TELEGRAM_BOT_TOKEN}/sendMessage"
    )
    try:
        response = await client.post(
            api_url,
            json={
                "chat_id": settings.TELEGRAM_CHANNEL_ID,
                "text": build_telegram_message(job),
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            },
        )
    except httpx.HTTPError as exc:
        # The request URL embeds the bot token; keep it out of the error.
        return _failed(channel, job, f"Telegram request failed: {type(exc).__name__}")

    try:
        data = response.json()
    except ValueError:
        return _failed(
            channel,
            job,
            f"Telegram returned a non-JSON response ({response.status_code})",
        )

    if not isinstance(data, dict) or not data.get("ok"):
        description = data.get("description") if isinstance(data, dict) else None
        return _failed(
            channel,
            job,
            description or f"Telegram API error {response.status_code}",
        )

    logger.info("telegram_notification_sent", extra={"job_id": job.id})
    return ChannelResult(channel=channel, ok=True)


async def _attempt(
    sender: Any,
    job: JobSnapshot,
    client: httpx.AsyncClient,
    channel: NotificationChannel,
) -> ChannelResult:
    try:
        return await sender(job, client)
    except Exception as exc:
        logger.exception(
            "notification_channel_crashed",
            extra={"channel": channel.value, "job_id": job.id},
        )
        return ChannelResult(channel=channel, ok=False, error=str(exc))


async def notify(job: JobSnapshot) -> NotificationResult:
    """Announce *job* on Slack and then Telegram; never raises."""
    async with httpx.AsyncClient(timeout=settings.NOTIFY_TIMEOUT_SECONDS) as client:
        results = [
            await _attempt(send_slack, job, client, NotificationChannel.slack),
            await _attempt(send_telegram, job, client, NotificationChannel.telegram),
        ]

    outcome = NotificationResult(job_id=job.id, channel_results=results)
    logger.info(
        "job_notifications_completed",
        extra={
            "job_id": job.id,
            "delivered": [r.channel.value for r in results if r.ok],
            "failed": [r.channel.value for r in results if not r.ok],
        },
    )
    return outcome
