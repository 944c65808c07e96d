from .notification import (
    NotificationMultiSendRequest,
    NotificationMultiSendResponse,
    NotificationRead,
    NotificationSendRequest,
    NotificationSendResponse,
    UnreadCountResponse,
)

__all__ = [
    "NotificationMultiSendRequest",
    "NotificationMultiSendResponse",
    "NotificationRead",
    "NotificationSendRequest",
    "NotificationSendResponse",
    "UnreadCountResponse",
]
