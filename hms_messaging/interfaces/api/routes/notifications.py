"""Endpoints to send notifications and browse the delivery history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hms_messaging.application.use_cases.notifications import NotificationDispatcher
from hms_messaging.domain.entities import NotificationMessage, NotificationRecord
from hms_messaging.infrastructure.repositories import NotificationRepository
from hms_messaging.interfaces.api.dependencies import (
    get_notification_dispatcher,
    get_notification_repository,
)
from hms_messaging.interfaces.api.schemas import (
    NotificationMultiSendRequest,
    NotificationMultiSendResponse,
    NotificationRead,
    NotificationSendRequest,
    NotificationSendResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _record_to_schema(record: NotificationRecord) -> NotificationRead:
    return NotificationRead(
        id=record.id or 0,
        appointment_id=record.appointment_id,
        user_id=record.user_id,
        recipient=record.recipient,
        subject=record.subject,
        message=record.message,
        channel_type=record.channel_type,
        status=record.status,
        error_message=record.error_message,
        retry_count=record.retry_count,
        metadata=record.metadata or {},
        is_read=record.is_read,
        created_at=record.created_at,
        sent_at=record.sent_at,
    )


def _build_message(payload: NotificationSendRequest | NotificationMultiSendRequest) -> NotificationMessage:
    try:
        return payload.to_message()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc


def _not_found(notification_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Notification {notification_id} not found",
    )


@router.post("/send", response_model=NotificationSendResponse)
async def send_notification(
    payload: NotificationSendRequest,
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> NotificationSendResponse:
    """Send through one channel; a failed delivery is reported, not raised."""

    message = _build_message(payload)
    succeeded = await dispatcher.send_single(payload.channel_type, message)
    return NotificationSendResponse(channel_type=payload.channel_type, succeeded=succeeded)


@router.post("/send-multi", response_model=NotificationMultiSendResponse)
async def send_multi_channel_notification(
    payload: NotificationMultiSendRequest,
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> NotificationMultiSendResponse:
    message = _build_message(payload)
    results = await dispatcher.send_multi(payload.channel_types, message)
    return NotificationMultiSendResponse(results=results)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    limit: int | None = Query(default=None, ge=1),
    repository: NotificationRepository = Depends(get_notification_repository),
) -> list[NotificationRead]:
    """Return stored notifications, newest first."""

    return [_record_to_schema(record) for record in repository.list_all(limit=limit)]


@router.get("/unread/count", response_model=UnreadCountResponse)
def count_unread_notifications(
    repository: NotificationRepository = Depends(get_notification_repository),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=repository.count_unread())


@router.get("/appointment/{appointment_id}", response_model=list[NotificationRead])
def list_appointment_notifications(
    appointment_id: int,
    repository: NotificationRepository = Depends(get_notification_repository),
) -> list[NotificationRead]:
    records = repository.list_by_appointment(appointment_id)
    return [_record_to_schema(record) for record in records]


@router.get("/{notification_id}", response_model=NotificationRead)
def get_notification(
    notification_id: int,
    repository: NotificationRepository = Depends(get_notification_repository),
) -> NotificationRead:
    record = repository.get_by_id(notification_id)
    if record is None:
        raise _not_found(notification_id)
    return _record_to_schema(record)


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    repository: NotificationRepository = Depends(get_notification_repository),
) -> NotificationRead:
    record = repository.mark_read(notification_id)
    if record is None:
        raise _not_found(notification_id)
    return _record_to_schema(record)
