"""Public helpers for delivering notifications."""

from .appointment_events import (
    APPOINTMENT_ROUTING_KEYS,
    RecipientResolver,
    build_appointment_notification,
    handle_appointment_event,
    parse_event_body,
)
from .dispatcher import NotificationDispatcher
from .ports import ChannelSender, NotificationRecordStore
from .registry import ChannelRegistry

__all__ = [
    "APPOINTMENT_ROUTING_KEYS",
    "ChannelRegistry",
    "ChannelSender",
    "NotificationDispatcher",
    "NotificationRecordStore",
    "RecipientResolver",
    "build_appointment_notification",
    "handle_appointment_event",
    "parse_event_body",
]
