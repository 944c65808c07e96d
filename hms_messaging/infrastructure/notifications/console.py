"""Log-only sender for local development without provider credentials."""

from __future__ import annotations

import logging

from hms_messaging.domain.entities import NotificationMessage

logger = logging.getLogger(__name__)


class ConsoleChannelSender:
    def __init__(self, channel_type: str) -> None:
        self.channel_type = channel_type

    def is_available(self) -> bool:
        return True

    async def send(self, message: NotificationMessage) -> bool:
        logger.info(
            "[%s] to=%s subject=%s content=%s",
            self.channel_type,
            message.recipient,
            message.subject,
            message.content,
        )
        return True


__all__ = ["ConsoleChannelSender"]
