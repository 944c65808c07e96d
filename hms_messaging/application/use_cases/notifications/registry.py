"""Channel-type to sender lookup shared by every dispatch call."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping

from .ports import ChannelSender

logger = logging.getLogger(__name__)


class ChannelRegistry:
    """Map case-sensitive channel names such as ``"Email"`` to senders.

    Reads never lock: mutations build a new mapping under a lock and swap it in,
    so a dispatch in flight keeps the snapshot it started with.
    """

    def __init__(self, senders: Mapping[str, ChannelSender] | None = None) -> None:
        self._lock = threading.Lock()
        self._senders: Mapping[str, ChannelSender] = dict(senders or {})

    def register(self, channel_type: str, sender: ChannelSender) -> None:
        if not channel_type:
            raise ValueError("channel_type is required")
        with self._lock:
            senders = dict(self._senders)
            if channel_type in senders:
                logger.info("Replacing sender registered for channel %s", channel_type)
            senders[channel_type] = sender
            self._senders = senders

    def unregister(self, channel_type: str) -> None:
        with self._lock:
            senders = dict(self._senders)
            senders.pop(channel_type, None)
            self._senders = senders

    def resolve(self, channel_type: str) -> ChannelSender | None:
        return self._senders.get(channel_type)

    def is_available(self, channel_type: str) -> bool:
        """Ask the sender every time; availability depends on external state."""

        sender = self.resolve(channel_type)
        if sender is None:
            return False
        return bool(sender.is_available())

    def channel_types(self) -> list[str]:
        return list(self._senders)


__all__ = ["ChannelRegistry"]
