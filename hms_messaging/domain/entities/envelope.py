"""Domain entity representing a broker-ready message."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MessageEnvelope:
    """Wire-ready unit handed to the broker for one publish attempt."""

    routing_key: str
    message_id: str
    timestamp: datetime
    body: bytes
    event_type: str
    persistent: bool = True
    content_type: str = "application/json"


__all__ = ["MessageEnvelope"]
