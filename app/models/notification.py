"""Result models for the new-job notification fan-out.

These are never persisted; they only travel back to the webhook caller and
into the logs.
"""

from pydantic import BaseModel

from app.models.enums import NotificationChannel


class ChannelResult(BaseModel):
    """Delivery outcome for one channel."""
    channel: NotificationChannel
    ok: bool
    error: str | None = None


class NotificationResult(BaseModel):
    """Outcome of announcing one job on every channel."""
    job_id: int
    channel_results: list[ChannelResult]

    @property
    def all_ok(self) -> bool:
        return all(result.ok for result in self.channel_results)


class WebhookResponse(BaseModel):
    message: str
    channels: list[ChannelResult] = []
