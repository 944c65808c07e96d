"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from hms_messaging.domain.entities import NotificationMessage


class NotificationSendRequest(BaseModel):
    """Payload used to send one notification through a single channel."""

    recipient: str = Field(..., min_length=1, description="Email address, phone number or device token")
    subject: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    channel_type: str = Field(..., min_length=1, description="Registered channel name, e.g. Email")
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> NotificationMessage:
        return NotificationMessage(
            recipient=self.recipient,
            subject=self.subject,
            content=self.content,
            metadata=self.metadata,
        )


class NotificationMultiSendRequest(BaseModel):
    """Payload used to send one notification through several channels at once."""

    recipient: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    channel_types: list[str] = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> NotificationMessage:
        return NotificationMessage(
            recipient=self.recipient,
            subject=self.subject,
            content=self.content,
            metadata=self.metadata,
        )


class NotificationSendResponse(BaseModel):
    channel_type: str
    succeeded: bool


class NotificationMultiSendResponse(BaseModel):
    results: dict[str, bool]


class NotificationRead(BaseModel):
    """Representation of a stored notification record."""

    id: int
    appointment_id: int | None = None
    user_id: str | None = None
    recipient: str
    subject: str
    message: str
    channel_type: str
    status: str
    error_message: str | None = None
    retry_count: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
    sent_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    count: int


__all__ = [
    "NotificationMultiSendRequest",
    "NotificationMultiSendResponse",
    "NotificationRead",
    "NotificationSendRequest",
    "NotificationSendResponse",
    "UnreadCountResponse",
]
