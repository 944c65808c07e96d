"""Push channel backed by the Firebase Cloud Messaging HTTP endpoint."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import httpx

from hms_messaging.domain.entities import ChannelType, NotificationMessage

if TYPE_CHECKING:
    from hms_messaging.config import Settings

logger = logging.getLogger(__name__)


class PushChannelSender:
    """Deliver a push notification to the device token held in ``recipient``."""

    channel_type = ChannelType.PUSH.value

    def __init__(
        self,
        server_key: str,
        *,
        api_url: str = "https://fcm.googleapis.com/fcm/send",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not server_key:
            raise ValueError("A push server key is required for push notifications")
        self._server_key = server_key
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PushChannelSender | None":
        if not settings.push_server_key:
            logger.info("Push server key missing; push channel not configured")
            return None
        return cls(
            settings.push_server_key,
            api_url=settings.push_api_url,
            timeout=settings.provider_timeout_seconds,
        )

    def is_available(self) -> bool:
        return bool(self._server_key)

    async def send(self, message: NotificationMessage) -> bool:
        # FCM data values must be strings.
        data = {
            str(key): value if isinstance(value, str) else json.dumps(value, default=str)
            for key, value in message.metadata.items()
        }
        body = {
            "to": message.recipient,
            "notification": {"title": message.subject, "body": message.content},
            "data": data,
        }
        headers = {"Authorization": f"key={self._server_key}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._api_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Push send to %s failed: %s", message.recipient, exc)
            return False

        if not response.is_success:
            logger.error("Push send failed HTTP %s: %s", response.status_code, response.text[:300])
            return False

        try:
            failures = int(response.json().get("failure", 0))
        except (ValueError, AttributeError):
            failures = 0
        if failures:
            logger.error("Push provider rejected message for %s: %s", message.recipient, response.text[:300])
            return False

        logger.info("Push notification sent to %s", message.recipient)
        return True


__all__ = ["PushChannelSender"]
