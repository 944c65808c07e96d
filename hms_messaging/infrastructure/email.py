"""Email channel backed by the SendGrid REST API."""

from __future__ import annotations

import html
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import anyio
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from hms_messaging.domain.entities import ChannelType, NotificationMessage

if TYPE_CHECKING:
    from hms_messaging.config import Settings

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_exception(exc: Exception) -> None:
    """Log a SendGrid API error with helpful troubleshooting details."""

    status_code = getattr(exc, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))

    if status_code and details:
        logger.error("SendGrid API request failed with status %s: %s", status_code, details)
    elif status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid API request failed: %s", details)
    else:
        logger.exception("Error sending email via SendGrid: %s", exc)


def _log_unsuccessful_response(response: Any) -> None:
    status_code = getattr(response, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(response, "body", None))

    if details:
        logger.error("SendGrid API responded with status %s: %s", status_code, details)
    else:
        logger.error("SendGrid API responded with status %s", status_code)


def render_html_content(message: NotificationMessage) -> str:
    """Use ``metadata["html_content"]`` when given, else wrap the plain content."""

    custom = message.metadata.get("html_content")
    if isinstance(custom, str) and custom.strip():
        return custom
    paragraphs = [line for line in message.content.splitlines() if line.strip()]
    return "".join(f"<p>{html.escape(line)}</p>" for line in paragraphs)


class EmailChannelSender:
    """Send notifications as transactional emails through SendGrid."""

    channel_type = ChannelType.EMAIL.value

    def __init__(
        self,
        api_key: str,
        sender: str,
        *,
        client_factory: Callable[[str], Any] = SendGridAPIClient,
    ) -> None:
        if not api_key or not sender:
            raise ValueError("SendGrid API key and sender address are required for email")
        self._api_key = api_key
        self._sender = sender
        self._client_factory = client_factory

    @classmethod
    def from_settings(cls, settings: "Settings") -> "EmailChannelSender | None":
        if not (settings.sendgrid_api_key and settings.sendgrid_sender):
            logger.info("SendGrid configuration incomplete; email channel not configured")
            return None
        return cls(settings.sendgrid_api_key, settings.sendgrid_sender)

    def is_available(self) -> bool:
        return bool(self._api_key and self._sender)

    async def send(self, message: NotificationMessage) -> bool:
        return await anyio.to_thread.run_sync(
            self._send_blocking, message, abandon_on_cancel=True
        )

    def _send_blocking(self, message: NotificationMessage) -> bool:
        mail = Mail(
            from_email=self._sender,
            to_emails=message.recipient,
            subject=message.subject,
            html_content=render_html_content(message),
        )

        try:
            client = self._client_factory(self._api_key)
            response = client.send(mail)
        except Exception as exc:
            _log_sendgrid_exception(exc)
            return False

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            _log_unsuccessful_response(response)
            return False

        logger.info("Email sent to %s: %s", message.recipient, message.subject)
        return True


__all__ = ["EmailChannelSender", "render_html_content"]
