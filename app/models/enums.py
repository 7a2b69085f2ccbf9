"""Enum types mirroring PostgreSQL custom enums and fixed vocabularies."""

from enum import Enum


class UserRole(str, Enum):
    """Value of ``profiles.user_role``."""
    owner = "owner"
    admin = "admin"
    user = "user"


class NotificationChannel(str, Enum):
    """Outbound channels a new job is announced on."""
    slack = "slack"
    telegram = "telegram"


class WebhookEventType(str, Enum):
    """Database webhook event kinds; only inserts are fanned out."""
    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"
