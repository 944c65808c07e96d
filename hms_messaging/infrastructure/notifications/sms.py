"""SMS channel backed by the Twilio Messages REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from hms_messaging.domain.entities import ChannelType, NotificationMessage

if TYPE_CHECKING:
    from hms_messaging.config import Settings

logger = logging.getLogger(__name__)


class SmsChannelSender:
    """Send the notification content as a text message to an E.164 number."""

    channel_type = ChannelType.SMS.value

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        base_url: str = "https://api.twilio.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not (account_sid and auth_token and from_number):
            raise ValueError("Twilio account SID, auth token and sender number are required for SMS")
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._endpoint = f"{base_url.rstrip('/')}/2010-04-01/Accounts/{account_sid}/Messages.json"
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SmsChannelSender | None":
        if not (
            settings.twilio_account_sid
            and settings.twilio_auth_token
            and settings.twilio_from_number
        ):
            logger.info("Twilio configuration incomplete; SMS channel not configured")
            return None
        return cls(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            settings.twilio_from_number,
            base_url=settings.twilio_api_base_url,
            timeout=settings.provider_timeout_seconds,
        )

    def is_available(self) -> bool:
        return bool(self._account_sid and self._auth_token and self._from_number)

    async def send(self, message: NotificationMessage) -> bool:
        data = {"To": message.recipient, "From": self._from_number, "Body": message.content}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._endpoint, data=data, auth=(self._account_sid, self._auth_token)
                )
        except httpx.HTTPError as exc:
            logger.error("Twilio SMS send to %s failed: %s", message.recipient, exc)
            return False

        if not response.is_success:
            logger.error(
                "Twilio SMS send failed HTTP %s: %s", response.status_code, response.text[:300]
            )
            return False

        logger.info("SMS sent to %s", message.recipient)
        return True


__all__ = ["SmsChannelSender"]
