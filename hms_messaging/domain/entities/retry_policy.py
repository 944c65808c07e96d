"""Process-wide delivery policy for notification channels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .notification import ChannelType

if TYPE_CHECKING:
    from hms_messaging.config import Settings


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget, pause between attempts and per-channel switches."""

    max_attempts: int = 3
    delay_seconds: float = 5.0
    email_enabled: bool = True
    sms_enabled: bool = True
    push_enabled: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

    def is_enabled(self, channel_type: str) -> bool:
        """Return whether ``channel_type`` may be used. Unknown channels are enabled."""

        switches = {
            ChannelType.EMAIL.value: self.email_enabled,
            ChannelType.SMS.value: self.sms_enabled,
            ChannelType.PUSH.value: self.push_enabled,
        }
        return switches.get(channel_type, True)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetryPolicy":
        return cls(
            max_attempts=settings.notification_retry_attempts,
            delay_seconds=settings.notification_retry_delay_seconds,
            email_enabled=settings.notification_enable_email,
            sms_enabled=settings.notification_enable_sms,
            push_enabled=settings.notification_enable_push,
        )


__all__ = ["RetryPolicy"]
