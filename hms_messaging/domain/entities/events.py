"""Domain events published by the appointment and billing services."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from hms_messaging.utils import now_utc


class EventType(str, Enum):
    """Closed set of event tags known to the envelope builder."""

    APPOINTMENT_CREATED = "AppointmentCreated"
    APPOINTMENT_UPDATED = "AppointmentUpdated"
    APPOINTMENT_CANCELLED = "AppointmentCancelled"
    PAYMENT_INITIATED = "PaymentInitiated"
    PAYMENT_PROCESSED = "PaymentProcessed"
    PAYMENT_FAILED = "PaymentFailed"
    REFUND_PROCESSED = "RefundProcessed"


ROUTING_KEYS: dict[EventType, str] = {
    EventType.APPOINTMENT_CREATED: "appointment.created",
    EventType.APPOINTMENT_UPDATED: "appointment.updated",
    EventType.APPOINTMENT_CANCELLED: "appointment.cancelled",
    EventType.PAYMENT_INITIATED: "payment.initiated",
    EventType.PAYMENT_PROCESSED: "payment.processed",
    EventType.PAYMENT_FAILED: "payment.failed",
    EventType.REFUND_PROCESSED: "refund.processed",
}

_unmapped = set(EventType) - set(ROUTING_KEYS)
if _unmapped:  # pragma: no cover - guards edits to the tables above
    raise RuntimeError(f"Event types without routing key: {sorted(_unmapped)}")


@dataclass(frozen=True)
class DomainEvent:
    """Immutable fact raised by a business operation."""

    event_type: ClassVar[EventType]

    def payload(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the event fields."""

        data = asdict(self)
        _normalize_values(data)
        return data

    def entity_ids(self) -> dict[str, Any]:
        """Return the identifiers of the entities the event originated from."""

        return {
            name: value
            for name, value in asdict(self).items()
            if name.endswith("_id") and value is not None
        }


@dataclass(frozen=True)
class AppointmentCreated(DomainEvent):
    event_type: ClassVar[EventType] = EventType.APPOINTMENT_CREATED

    appointment_id: int
    patient_id: int | None = None
    doctor_id: int | None = None
    patient_name: str = ""
    patient_email: str | None = None
    doctor_name: str = ""
    doctor_specialty: str = ""
    date: datetime | None = None
    status: str = ""
    created_at: datetime | None = None
    created_by_user_id: int | None = None
    created_by_role: str = ""
    occurred_on: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class AppointmentUpdated(DomainEvent):
    event_type: ClassVar[EventType] = EventType.APPOINTMENT_UPDATED

    appointment_id: int
    patient_id: int | None = None
    doctor_id: int | None = None
    patient_name: str = ""
    patient_email: str | None = None
    doctor_name: str = ""
    doctor_specialty: str = ""
    date: datetime | None = None
    status: str = ""
    updated_at: datetime | None = None
    updated_by_user_id: int | None = None
    updated_by_role: str = ""


@dataclass(frozen=True)
class AppointmentCancelled(DomainEvent):
    event_type: ClassVar[EventType] = EventType.APPOINTMENT_CANCELLED

    appointment_id: int
    patient_id: int | None = None
    doctor_id: int | None = None
    patient_name: str = ""
    patient_email: str | None = None
    doctor_name: str = ""
    doctor_specialty: str = ""
    date: datetime | None = None
    status: str = ""
    cancelled_at: datetime | None = None
    cancelled_by_user_id: int | None = None
    cancelled_by_role: str = ""


@dataclass(frozen=True)
class PaymentInitiated(DomainEvent):
    event_type: ClassVar[EventType] = EventType.PAYMENT_INITIATED

    billing_id: int
    appointment_id: int
    patient_id: int
    amount: Decimal
    payment_method: str = ""
    session_id: str | None = None
    initiated_at: datetime | None = None
    checkout_url: str | None = None


@dataclass(frozen=True)
class PaymentProcessed(DomainEvent):
    event_type: ClassVar[EventType] = EventType.PAYMENT_PROCESSED

    billing_id: int
    appointment_id: int
    patient_id: int
    amount: Decimal
    payment_method: str = ""
    transaction_id: str | None = None
    processed_at: datetime | None = None
    processed_by_user_id: int | None = None
    processed_by_role: str = ""
    payment_source: str | None = None
    session_id: str | None = None


@dataclass(frozen=True)
class PaymentFailed(DomainEvent):
    event_type: ClassVar[EventType] = EventType.PAYMENT_FAILED

    billing_id: int
    appointment_id: int
    patient_id: int
    amount: Decimal
    payment_method: str = ""
    failure_reason: str | None = None
    failed_at: datetime | None = None
    processed_by_user_id: int | None = None
    processed_by_role: str = ""


@dataclass(frozen=True)
class RefundProcessed(DomainEvent):
    event_type: ClassVar[EventType] = EventType.REFUND_PROCESSED

    billing_id: int
    appointment_id: int
    patient_id: int
    original_amount: Decimal
    refund_amount: Decimal
    payment_method: str = ""
    original_transaction_id: str | None = None
    refund_transaction_id: str | None = None
    refunded_at: datetime | None = None
    refunded_by_user_id: int | None = None
    refunded_by_role: str = ""


def _normalize_values(data: dict[str, Any] | list[Any]) -> None:
    """Convert ``datetime`` and ``Decimal`` values nested inside ``data`` in place."""

    items = data.items() if isinstance(data, dict) else enumerate(data)
    for key, value in list(items):
        if isinstance(value, datetime):
            data[key] = value.isoformat()
        elif isinstance(value, Decimal):
            data[key] = str(value)
        elif isinstance(value, (dict, list)):
            _normalize_values(value)


__all__ = [
    "AppointmentCancelled",
    "AppointmentCreated",
    "AppointmentUpdated",
    "DomainEvent",
    "EventType",
    "PaymentFailed",
    "PaymentInitiated",
    "PaymentProcessed",
    "ROUTING_KEYS",
    "RefundProcessed",
]
