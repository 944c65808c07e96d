"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from hms_messaging.infrastructure.database import Base
from hms_messaging.utils import now_utc_naive


class NotificationModel(Base):
    """Database representation of one notification sent through one channel."""

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, nullable=True, index=True)
    user_id = Column(String(50), nullable=True)
    recipient = Column(String(255), nullable=False)
    subject = Column(String(500), nullable=False)
    message = Column(Text, nullable=False)
    channel_type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False)
    error_message = Column(String(1000), nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    payload = Column(JSON, nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_utc_naive)
    sent_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
