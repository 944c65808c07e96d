"""Turn a domain event into a routable message envelope."""

from __future__ import annotations

import json
import uuid

from hms_messaging.domain.entities import ROUTING_KEYS, DomainEvent, MessageEnvelope
from hms_messaging.domain.exceptions import UnknownEventError
from hms_messaging.utils import now_utc


def routing_key_for(event: DomainEvent) -> str:
    """Return the dot-delimited routing key derived from the event tag alone."""

    event_type = getattr(type(event), "event_type", None)
    if not isinstance(event, DomainEvent) or event_type not in ROUTING_KEYS:
        raise UnknownEventError(f"No routing key for {type(event).__name__}")
    return ROUTING_KEYS[event_type]


def build_envelope(event: DomainEvent) -> MessageEnvelope:
    """Serialize ``event`` and stamp it with a fresh message id and UTC timestamp.

    Every call yields a new ``message_id``, so a retried publish of the same
    logical event is a distinct message for consumers to deduplicate.
    """

    routing_key = routing_key_for(event)
    body = json.dumps(event.payload(), separators=(",", ":"), sort_keys=True)
    return MessageEnvelope(
        routing_key=routing_key,
        message_id=str(uuid.uuid4()),
        timestamp=now_utc(),
        body=body.encode("utf-8"),
        event_type=type(event).event_type.value,
        persistent=True,
    )


__all__ = ["build_envelope", "routing_key_for"]
