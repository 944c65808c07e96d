"""Tests for the SQLAlchemy notification record store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hms_messaging.domain.entities import NotificationRecord
from hms_messaging.infrastructure.database import initialize_database
from hms_messaging.infrastructure.repositories import NotificationRepository


@pytest.fixture()
def repository():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield NotificationRepository(session)
    finally:
        session.close()
        engine.dispose()


def _record(**overrides) -> NotificationRecord:
    values = {
        "id": None,
        "recipient": "patient@example.com",
        "subject": "Appointment Confirmation",
        "message": "Your appointment is scheduled.",
        "channel_type": "Email",
        "status": "Sent",
        "appointment_id": 42,
        "user_id": "7",
        "metadata": {"event_type": "appointment.created"},
    }
    values.update(overrides)
    return NotificationRecord(**values)


def test_create_assigns_id_and_round_trips_fields(repository: NotificationRepository) -> None:
    sent_at = datetime(2024, 5, 3, 9, 30, tzinfo=timezone.utc)

    created = repository.create(_record(sent_at=sent_at, retry_count=2))
    fetched = repository.get_by_id(created.id)

    assert created.id is not None
    assert fetched == created
    assert fetched.metadata == {"event_type": "appointment.created"}
    assert fetched.sent_at == sent_at
    assert fetched.created_at.tzinfo is not None
    assert fetched.is_read is False


def test_get_by_id_returns_none_for_unknown_record(repository: NotificationRepository) -> None:
    assert repository.get_by_id(999) is None


def test_list_all_is_newest_first(repository: NotificationRepository) -> None:
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    for offset, subject in enumerate(["first", "second", "third"]):
        repository.create(_record(subject=subject, created_at=base + timedelta(minutes=offset)))

    subjects = [record.subject for record in repository.list_all()]

    assert subjects == ["third", "second", "first"]
    assert len(repository.list_all(limit=2)) == 2


def test_list_by_appointment_filters_records(repository: NotificationRepository) -> None:
    repository.create(_record(appointment_id=1, channel_type="Email"))
    repository.create(_record(appointment_id=1, channel_type="SMS"))
    repository.create(_record(appointment_id=2))

    channels = {record.channel_type for record in repository.list_by_appointment(1)}

    assert channels == {"Email", "SMS"}
    assert repository.list_by_appointment(3) == []


def test_mark_read_updates_unread_count(repository: NotificationRepository) -> None:
    first = repository.create(_record())
    repository.create(_record(status="Failed", error_message="send failed"))
    assert repository.count_unread() == 2

    updated = repository.mark_read(first.id)

    assert updated is not None and updated.is_read is True
    assert repository.count_unread() == 1
    assert repository.mark_read(999) is None


def test_failed_write_leaves_session_usable(repository: NotificationRepository) -> None:
    with pytest.raises(IntegrityError):
        repository.create(_record(recipient=None))

    created = repository.create(_record())

    assert created.id is not None
    assert [record.id for record in repository.list_all()] == [created.id]
