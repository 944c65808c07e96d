"""FastAPI dependency utilities."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from hms_messaging.application.use_cases.notifications import (
    ChannelRegistry,
    NotificationDispatcher,
)
from hms_messaging.config import get_settings
from hms_messaging.domain.entities import RetryPolicy
from hms_messaging.infrastructure.database import get_db
from hms_messaging.infrastructure.notifications import build_channel_registry
from hms_messaging.infrastructure.repositories import NotificationRepository


@lru_cache
def get_channel_registry() -> ChannelRegistry:
    """Return the process-wide registry built from the configured providers."""

    settings = get_settings()
    return build_channel_registry(
        settings, console_fallback=settings.notification_console_fallback
    )


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings(get_settings())


def get_notification_repository(db: Session = Depends(get_db)) -> NotificationRepository:
    return NotificationRepository(db)


def get_notification_dispatcher(
    registry: ChannelRegistry = Depends(get_channel_registry),
    policy: RetryPolicy = Depends(get_retry_policy),
    repository: NotificationRepository = Depends(get_notification_repository),
) -> NotificationDispatcher:
    """Return a dispatcher that records every outcome in the request's session."""

    return NotificationDispatcher(registry, policy, record_store=repository)


__all__ = [
    "get_channel_registry",
    "get_notification_dispatcher",
    "get_notification_repository",
    "get_retry_policy",
]
