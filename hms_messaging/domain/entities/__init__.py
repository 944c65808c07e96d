"""Domain entities exposed by the application."""

from .attempt import AttemptState, ChannelAttempt
from .envelope import MessageEnvelope
from .events import (
    ROUTING_KEYS,
    AppointmentCancelled,
    AppointmentCreated,
    AppointmentUpdated,
    DomainEvent,
    EventType,
    PaymentFailed,
    PaymentInitiated,
    PaymentProcessed,
    RefundProcessed,
)
from .notification import (
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_SENT,
    ChannelResult,
    ChannelType,
    NotificationMessage,
    NotificationRecord,
)
from .retry_policy import RetryPolicy

__all__ = [
    "AppointmentCancelled",
    "AppointmentCreated",
    "AppointmentUpdated",
    "AttemptState",
    "ChannelAttempt",
    "ChannelResult",
    "ChannelType",
    "DomainEvent",
    "EventType",
    "MessageEnvelope",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_STATUS_SENT",
    "NotificationMessage",
    "NotificationRecord",
    "PaymentFailed",
    "PaymentInitiated",
    "PaymentProcessed",
    "ROUTING_KEYS",
    "RefundProcessed",
    "RetryPolicy",
]
