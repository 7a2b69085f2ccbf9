"""Unit tests for the new-job notification fan-out."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.core.config import settings
from app.models.enums import NotificationChannel
from app.models.job import JobSnapshot


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _job(**overrides: Any) -> JobSnapshot:
    data: dict[str, Any] = {
        "id": 42,
        "title": "Senior <UX> Designer & Researcher",
        "company": "Acme & Co",
        "location": "Lisbon",
        "url": "https://careers.acme.test/jobs/42?gh_jid=42&utm_source=linkedin",
        "short_code": None,
        "submitted_on": datetime(2026, 10, 1, tzinfo=timezone.utc),
        "is_active": True,
    }
    data.update(overrides)
    return JobSnapshot(**data)


def _response(status_code: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


def _patched_async_client(post: AsyncMock) -> Any:
    patcher = patch("httpx.AsyncClient")
    mock_client_class = patcher.start()
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client.post = post
    mock_client_class.return_value = mock_client
    return patcher, mock_client_class


def _result_for(outcome: Any, channel: NotificationChannel) -> Any:
    return next(r for r in outcome.channel_results if r.channel == channel)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestSlackMessage:

    def test_block_layout(self) -> None:
        from app.services.notifications import build_slack_message

        message = build_slack_message(_job())
        types = [block["type"] for block in message["blocks"]]

        assert types == ["header", "section", "actions"]
        section_text = message["blocks"][1]["text"]["text"]
        assert "*Senior <UX> Designer & Researcher*" in section_text
        assert "Acme & Co · Lisbon" in section_text

    def test_buttons_link_home_and_attributed_clean_job_url(self) -> None:
        from app.services.notifications import build_slack_message

        buttons = build_slack_message(_job())["blocks"][2]["elements"]

        assert [b["text"]["text"] for b in buttons] == ["More Jobs", "View Job"]
        assert buttons[0]["url"] == "https://jobs.example.test/?utm_medium=Slack&utm_source=LisboaUX"
        assert buttons[1]["url"] == "https://careers.acme.test/jobs/42?gh_jid=42&utm_source=LisboaUX"


class TestTelegramMessage:

    def test_escapes_markup_in_user_text(self) -> None:
        from app.services.notifications import build_telegram_message

        text = build_telegram_message(_job())

        assert text.startswith("<b>Senior &lt;UX&gt; Designer &amp; Researcher</b>\n")
        assert "Acme &amp; Co\n" in text
        assert "📍Lisbon\n" in text

    def test_prefers_short_link(self) -> None:
        from app.services.notifications import build_telegram_message

        text = build_telegram_message(_job(short_code="ab12cd"))

        assert text.endswith("https://jobs.example.test/j/ab12cd")

    def test_falls_back_to_canonical_url(self) -> None:
        from app.services.notifications import build_telegram_message

        text = build_telegram_message(_job())

        assert text.endswith("https://careers.acme.test/jobs/42?gh_jid=42")


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------


class TestNotify:

    @pytest.mark.asyncio
    async def test_both_channels_succeed(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(side_effect=[_response(200, text="ok"), _response(200, {"ok": True})])
        patcher, mock_client_class = _patched_async_client(post)
        try:
            outcome = await notify(_job())
        finally:
            patcher.stop()

        assert outcome.all_ok is True
        assert [r.channel for r in outcome.channel_results] == [
            NotificationChannel.slack,
            NotificationChannel.telegram,
        ]
        assert mock_client_class.call_args.kwargs["timeout"] == settings.NOTIFY_TIMEOUT_SECONDS

        slack_call, telegram_call = post.call_args_list
        assert slack_call.args[0] == settings.SLACK_WEBHOOK_URL
        assert telegram_call.args[0] == (
            f"https://api.telegram.org/bot{settings.TELEGRAM_BOT_TOKEN}/sendMessage"
        )
        body = telegram_call.kwargs["json"]
        assert body["chat_id"] == settings.TELEGRAM_CHANNEL_ID
        assert body["parse_mode"] == "HTML"
        assert body["disable_web_page_preview"] is True

    @pytest.mark.asyncio
    async def test_slack_failure_does_not_block_telegram(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(side_effect=[_response(500, text="invalid_payload"), _response(200, {"ok": True})])
        patcher, _ = _patched_async_client(post)
        try:
            outcome = await notify(_job())
        finally:
            patcher.stop()

        slack = _result_for(outcome, NotificationChannel.slack)
        telegram = _result_for(outcome, NotificationChannel.telegram)
        assert slack.ok is False
        assert "500" in (slack.error or "")
        assert telegram.ok is True
        assert post.await_count == 2

    @pytest.mark.asyncio
    async def test_telegram_ok_false_is_a_channel_failure(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(side_effect=[
            _response(200, text="ok"),
            _response(400, {"ok": False, "description": "Bad Request: chat not found"}),
        ])
        patcher, _ = _patched_async_client(post)
        try:
            outcome = await notify(_job())
        finally:
            patcher.stop()

        telegram = _result_for(outcome, NotificationChannel.telegram)
        assert _result_for(outcome, NotificationChannel.slack).ok is True
        assert telegram.ok is False
        assert telegram.error == "Bad Request: chat not found"

    @pytest.mark.asyncio
    async def test_network_errors_are_recorded_not_raised(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(side_effect=[
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ])
        patcher, _ = _patched_async_client(post)
        try:
            outcome = await notify(_job())
        finally:
            patcher.stop()

        assert [r.ok for r in outcome.channel_results] == [False, False]
        telegram_error = _result_for(outcome, NotificationChannel.telegram).error or ""
        assert settings.TELEGRAM_BOT_TOKEN not in telegram_error

    @pytest.mark.asyncio
    async def test_non_json_telegram_response(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(side_effect=[_response(200), _response(502, ValueError("no json"))])
        patcher, _ = _patched_async_client(post)
        try:
            outcome = await notify(_job())
        finally:
            patcher.stop()

        assert _result_for(outcome, NotificationChannel.telegram).ok is False

    @pytest.mark.asyncio
    async def test_missing_configuration_skips_the_call(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(return_value=_response(200, {"ok": True}))
        patcher, _ = _patched_async_client(post)
        try:
            with patch.object(settings, "SLACK_WEBHOOK_URL", ""):
                outcome = await notify(_job())
        finally:
            patcher.stop()

        slack = _result_for(outcome, NotificationChannel.slack)
        assert slack.ok is False
        assert "not configured" in (slack.error or "")
        assert _result_for(outcome, NotificationChannel.telegram).ok is True
        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_telegram_configuration(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(return_value=_response(200, text="ok"))
        patcher, _ = _patched_async_client(post)
        try:
            with patch.object(settings, "TELEGRAM_CHANNEL_ID", ""):
                outcome = await notify(_job())
        finally:
            patcher.stop()

        telegram = _result_for(outcome, NotificationChannel.telegram)
        assert telegram.ok is False
        assert telegram.error == "Missing Telegram configuration"
        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_sender_crash_is_contained(self) -> None:
        from app.services.notifications import notify

        post = AsyncMock(return_value=_response(200, {"ok": True}))
        patcher, _ = _patched_async_client(post)
        try:
            with patch(
                "app.services.notifications.build_slack_message",
                side_effect=KeyError("blocks"),
            ):
                outcome = await notify(_job())
        finally:
            patcher.stop()

        assert _result_for(outcome, NotificationChannel.slack).ok is False
        assert _result_for(outcome, NotificationChannel.telegram).ok is True
