"""Domain entities describing notifications and their delivery outcomes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

NOTIFICATION_STATUS_SENT = "Sent"
NOTIFICATION_STATUS_FAILED = "Failed"


class ChannelType(str, Enum):
    """Built-in notification channels. Registry keys are case-sensitive."""

    EMAIL = "Email"
    SMS = "SMS"
    PUSH = "Push"


@dataclass(frozen=True)
class NotificationMessage:
    """Recipient-addressed message handed to one or more channels."""

    recipient: str
    subject: str
    content: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("recipient", "subject", "content"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Notification {name} is required")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))


@dataclass(frozen=True)
class ChannelResult:
    """Outcome of one channel for one dispatch call."""

    channel_type: str
    succeeded: bool
    reason: str | None = None
    attempts: int = 0


@dataclass
class NotificationRecord:
    """Durable log entry describing a notification sent through a channel."""

    id: int | None
    recipient: str
    subject: str
    message: str
    channel_type: str
    status: str
    appointment_id: int | None = None
    user_id: str | None = None
    error_message: str | None = None
    retry_count: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
    sent_at: datetime | None = None


__all__ = [
    "ChannelResult",
    "ChannelType",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_STATUS_SENT",
    "NotificationMessage",
    "NotificationRecord",
]
