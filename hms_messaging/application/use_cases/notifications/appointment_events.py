"""Turn appointment events received from the broker into patient notifications."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from hms_messaging.domain.entities import ChannelType, NotificationMessage

from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

RecipientResolver = Callable[[Mapping[str, Any]], "str | None"]

APPOINTMENT_ROUTING_KEYS = (
    "appointment.created",
    "appointment.updated",
    "appointment.cancelled",
)


def parse_event_body(body: bytes | str) -> dict[str, Any]:
    """Decode a JSON object body; anything else is a malformed delivery."""

    text = body.decode("utf-8") if isinstance(body, bytes) else body
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("Event body must decode to a JSON object")
    return parsed


def build_appointment_notification(
    routing_key: str,
    payload: Mapping[str, Any],
    recipient: str,
) -> NotificationMessage | None:
    """Return the patient message for ``routing_key`` or ``None`` when it is not ours."""

    doctor_name = payload.get("doctor_name") or ""
    appointment_date = _format_date(payload.get("date"))

    if routing_key == "appointment.created":
        subject = "Appointment Confirmation"
        content = f"Your appointment with Dr. {doctor_name} is scheduled for {appointment_date}."
    elif routing_key == "appointment.updated":
        subject = "Appointment Updated"
        content = (
            f"Your appointment with Dr. {doctor_name} has been updated. "
            f"New date: {appointment_date}."
        )
    elif routing_key == "appointment.cancelled":
        subject = "Appointment Cancelled"
        content = f"Your appointment with Dr. {doctor_name} has been cancelled."
    else:
        return None

    metadata = {
        "event_type": routing_key,
        "appointment_id": payload.get("appointment_id"),
        "user_id": payload.get("patient_id"),
        "patient_name": payload.get("patient_name"),
        "doctor_name": doctor_name,
        "doctor_specialty": payload.get("doctor_specialty"),
        "appointment_date": payload.get("date"),
    }
    return NotificationMessage(
        recipient=recipient,
        subject=subject,
        content=content,
        metadata={key: value for key, value in metadata.items() if value is not None},
    )


async def handle_appointment_event(
    routing_key: str,
    body: bytes | str,
    *,
    dispatcher: NotificationDispatcher,
    resolve_recipient: RecipientResolver,
    channel_types: Sequence[str] = (ChannelType.EMAIL.value,),
) -> dict[str, bool] | None:
    """Notify the patient about one appointment event.

    Returns the per-channel outcome, or ``None`` when the event is skipped.
    Malformed bodies raise so the consumer can reject the delivery.
    """

    payload = parse_event_body(body)
    recipient = resolve_recipient(payload)
    if not recipient:
        logger.warning(
            "No recipient for %s on appointment %s; skipping",
            routing_key,
            payload.get("appointment_id"),
        )
        return None

    message = build_appointment_notification(routing_key, payload, recipient)
    if message is None:
        logger.info("Ignoring event with routing key %s", routing_key)
        return None

    return await dispatcher.send_multi(channel_types, message)


def _format_date(value: Any) -> str:
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M")


__all__ = [
    "APPOINTMENT_ROUTING_KEYS",
    "RecipientResolver",
    "build_appointment_notification",
    "handle_appointment_event",
    "parse_event_body",
]
