"""Unit tests for building broker envelopes from domain events."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from hms_messaging.application.use_cases.events import build_envelope, routing_key_for
from hms_messaging.domain.entities import (
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
from hms_messaging.domain.exceptions import UnknownEventError

APPOINTMENT_DATE = datetime(2024, 5, 3, 9, 30, tzinfo=timezone.utc)


def _sample_events() -> list[DomainEvent]:
    return [
        AppointmentCreated(appointment_id=1, patient_id=7, doctor_id=3, date=APPOINTMENT_DATE),
        AppointmentUpdated(appointment_id=1, patient_id=7, date=APPOINTMENT_DATE),
        AppointmentCancelled(appointment_id=1, patient_id=7),
        PaymentInitiated(billing_id=4, appointment_id=1, patient_id=7, amount=Decimal("50.00")),
        PaymentProcessed(billing_id=4, appointment_id=1, patient_id=7, amount=Decimal("50.00")),
        PaymentFailed(
            billing_id=4,
            appointment_id=1,
            patient_id=7,
            amount=Decimal("50.00"),
            failure_reason="card declined",
        ),
        RefundProcessed(
            billing_id=4,
            appointment_id=1,
            patient_id=7,
            original_amount=Decimal("50.00"),
            refund_amount=Decimal("20.00"),
        ),
    ]


def test_every_event_type_has_a_routing_key() -> None:
    assert set(ROUTING_KEYS) == set(EventType)
    assert len(set(ROUTING_KEYS.values())) == len(ROUTING_KEYS)


@pytest.mark.parametrize(
    ("event", "expected"),
    list(
        zip(
            _sample_events(),
            [
                "appointment.created",
                "appointment.updated",
                "appointment.cancelled",
                "payment.initiated",
                "payment.processed",
                "payment.failed",
                "refund.processed",
            ],
        )
    ),
)
def test_routing_key_depends_only_on_event_type(event: DomainEvent, expected: str) -> None:
    assert routing_key_for(event) == expected
    assert build_envelope(event).routing_key == expected


def test_routing_key_ignores_payload_values() -> None:
    first = AppointmentCreated(appointment_id=1, patient_name="Ana")
    second = AppointmentCreated(appointment_id=99, patient_name="Luis", status="Confirmed")

    assert build_envelope(first).routing_key == build_envelope(second).routing_key


def test_message_ids_are_unique_per_call() -> None:
    event = AppointmentCreated(appointment_id=1)

    ids = {build_envelope(event).message_id for _ in range(50)}

    assert len(ids) == 50


def test_envelope_is_persistent_utc_and_tagged() -> None:
    envelope = build_envelope(AppointmentCancelled(appointment_id=5))

    assert envelope.persistent is True
    assert envelope.timestamp.tzinfo is not None
    assert envelope.timestamp.utcoffset().total_seconds() == 0
    assert envelope.event_type == "AppointmentCancelled"
    assert envelope.content_type == "application/json"


def test_body_serializes_dates_and_decimals_as_strings() -> None:
    event = PaymentProcessed(
        billing_id=4,
        appointment_id=1,
        patient_id=7,
        amount=Decimal("125.50"),
        processed_at=APPOINTMENT_DATE,
    )

    body = json.loads(build_envelope(event).body.decode("utf-8"))

    assert body["amount"] == "125.50"
    assert body["processed_at"] == "2024-05-03T09:30:00+00:00"
    assert body["billing_id"] == 4


def test_entity_ids_only_include_known_identifiers() -> None:
    event = AppointmentCreated(appointment_id=1, patient_id=7)

    assert event.entity_ids() == {"appointment_id": 1, "patient_id": 7}


def test_unknown_event_is_rejected() -> None:
    class NotAnEvent:
        pass

    with pytest.raises(UnknownEventError):
        build_envelope(NotAnEvent())  # type: ignore[arg-type]

    with pytest.raises(TypeError):
        routing_key_for(DomainEvent())
