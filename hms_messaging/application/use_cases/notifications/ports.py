"""Narrow interfaces the dispatcher depends on."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from hms_messaging.domain.entities import NotificationMessage, NotificationRecord


@runtime_checkable
class ChannelSender(Protocol):
    """Transmit one message to one recipient over a single medium.

    Contract: ``send`` returns ``False`` for ordinary transport failures rather
    than raising. ``is_available`` must be cheap and must not block on the
    network.
    """

    channel_type: str

    async def send(self, message: NotificationMessage) -> bool:
        ...

    def is_available(self) -> bool:
        ...


class NotificationRecordStore(Protocol):
    """Durable log of notifications and their read state."""

    def create(self, record: NotificationRecord) -> NotificationRecord:
        ...

    def get_by_id(self, record_id: int) -> NotificationRecord | None:
        ...

    def list_all(self, *, limit: int | None = None) -> Sequence[NotificationRecord]:
        ...

    def list_by_appointment(self, appointment_id: int) -> Sequence[NotificationRecord]:
        ...

    def mark_read(self, record_id: int) -> NotificationRecord | None:
        ...

    def count_unread(self) -> int:
        ...


__all__ = ["ChannelSender", "NotificationRecordStore"]
