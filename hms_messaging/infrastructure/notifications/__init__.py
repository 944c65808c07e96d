"""Channel senders and the registry wiring built from settings."""

from __future__ import annotations

import logging

from hms_messaging.application.use_cases.notifications import ChannelRegistry
from hms_messaging.config import Settings
from hms_messaging.domain.entities import ChannelType
from hms_messaging.infrastructure.email import EmailChannelSender

from .console import ConsoleChannelSender
from .push import PushChannelSender
from .sms import SmsChannelSender

logger = logging.getLogger(__name__)


def build_channel_registry(settings: Settings, *, console_fallback: bool = False) -> ChannelRegistry:
    """Register every configured provider.

    With ``console_fallback`` a channel without credentials is registered with a
    log-only sender instead of being left out.
    """

    registry = ChannelRegistry()
    configured = {
        ChannelType.EMAIL.value: EmailChannelSender.from_settings(settings),
        ChannelType.SMS.value: SmsChannelSender.from_settings(settings),
        ChannelType.PUSH.value: PushChannelSender.from_settings(settings),
    }
    for channel_type, sender in configured.items():
        if sender is None and console_fallback:
            logger.warning("Channel %s has no provider; using console sender", channel_type)
            sender = ConsoleChannelSender(channel_type)
        if sender is not None:
            registry.register(channel_type, sender)
    return registry


__all__ = [
    "ConsoleChannelSender",
    "EmailChannelSender",
    "PushChannelSender",
    "SmsChannelSender",
    "build_channel_registry",
]
