"""Persistence helpers for notification records."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hms_messaging.domain.entities import NotificationRecord
from hms_messaging.infrastructure.models import NotificationModel
from hms_messaging.utils import ensure_utc, ensure_utc_naive, now_utc_naive


class NotificationRepository:
    """Provide the record-store operations for :class:`NotificationRecord` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, record: NotificationRecord) -> NotificationRecord:
        model = NotificationModel()
        self._apply_entity_to_model(model, record)
        self._save(model)
        return self._to_entity(model)

    def get_by_id(self, record_id: int) -> NotificationRecord | None:
        model = self.session.get(NotificationModel, record_id)
        if model is None:
            return None
        return self._to_entity(model)

    def list_all(self, *, limit: int | None = None) -> Sequence[NotificationRecord]:
        query = self.session.query(NotificationModel).order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_by_appointment(self, appointment_id: int) -> Sequence[NotificationRecord]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.appointment_id == appointment_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        return [self._to_entity(model) for model in query.all()]

    def mark_read(self, record_id: int) -> NotificationRecord | None:
        model = self.session.get(NotificationModel, record_id)
        if model is None:
            return None
        model.is_read = True
        self._save(model)
        return self._to_entity(model)

    def count_unread(self) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.is_read.is_(False))
            .count()
        )

    def _save(self, model: NotificationModel) -> None:
        """Commit ``model``; a failed write rolls back so the session stays usable."""

        try:
            self.session.add(model)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.refresh(model)

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, record: NotificationRecord) -> None:
        model.created_at = ensure_utc_naive(record.created_at) or now_utc_naive()
        model.sent_at = ensure_utc_naive(record.sent_at)
        model.appointment_id = record.appointment_id
        model.user_id = record.user_id
        model.recipient = record.recipient
        model.subject = record.subject
        model.message = record.message
        model.channel_type = record.channel_type
        model.status = record.status
        model.error_message = record.error_message
        model.retry_count = record.retry_count
        model.payload = record.metadata or {}
        model.is_read = record.is_read

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            appointment_id=model.appointment_id,
            user_id=model.user_id,
            recipient=model.recipient,
            subject=model.subject,
            message=model.message,
            channel_type=model.channel_type,
            status=model.status,
            error_message=model.error_message,
            retry_count=model.retry_count or 0,
            metadata=dict(model.payload or {}),
            is_read=bool(model.is_read),
            created_at=ensure_utc(model.created_at),
            sent_at=ensure_utc(model.sent_at),
        )


__all__ = ["NotificationRepository"]
