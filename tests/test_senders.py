"""Tests for the SendGrid, Twilio and push channel senders."""

from __future__ import annotations

import json
import types
from urllib.parse import parse_qs

import httpx
import pytest

from hms_messaging.config import Settings
from hms_messaging.domain.entities import NotificationMessage
from hms_messaging.infrastructure import email as email_module
from hms_messaging.infrastructure.notifications import (
    ConsoleChannelSender,
    EmailChannelSender,
    PushChannelSender,
    SmsChannelSender,
    build_channel_registry,
)


def _message(recipient: str = "patient@example.com", **metadata) -> NotificationMessage:
    return NotificationMessage(
        recipient=recipient,
        subject="Appointment Confirmation",
        content="Your appointment with Dr. House is scheduled.\nPlease arrive early.",
        metadata=metadata,
    )


class RecordingSendGridClient:
    """Stand-in for ``SendGridAPIClient`` that keeps the last mail it received."""

    instances: list["RecordingSendGridClient"] = []
    status_code = 202

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self.sent = []
        RecordingSendGridClient.instances.append(self)

    def send(self, mail):
        self.sent.append(mail)
        return types.SimpleNamespace(status_code=self.status_code, body=None)


@pytest.fixture(autouse=True)
def _reset_recording_client():
    RecordingSendGridClient.instances = []
    RecordingSendGridClient.status_code = 202
    yield


def test_email_sender_requires_credentials() -> None:
    with pytest.raises(ValueError):
        EmailChannelSender("", "sender@example.com")
    with pytest.raises(ValueError):
        EmailChannelSender("SG.key", "")


def test_render_html_escapes_plain_content() -> None:
    message = NotificationMessage(recipient="a@b.c", subject="S", content="1 < 2\n\nDone")

    assert email_module.render_html_content(message) == "<p>1 &lt; 2</p><p>Done</p>"


def test_render_html_prefers_metadata_override() -> None:
    message = _message(html_content="<h1>Custom</h1>")

    assert email_module.render_html_content(message) == "<h1>Custom</h1>"


@pytest.mark.anyio
async def test_email_sender_posts_mail_through_sendgrid() -> None:
    sender = EmailChannelSender("SG.key", "clinic@example.com", client_factory=RecordingSendGridClient)

    assert await sender.send(_message()) is True

    client = RecordingSendGridClient.instances[0]
    payload = client.sent[0].get()
    assert client.api_key == "SG.key"
    assert payload["from"]["email"] == "clinic@example.com"
    assert payload["subject"] == "Appointment Confirmation"
    assert payload["personalizations"][0]["to"][0]["email"] == "patient@example.com"


@pytest.mark.anyio
async def test_email_sender_reports_non_success_status(caplog) -> None:
    RecordingSendGridClient.status_code = 500
    sender = EmailChannelSender("SG.key", "clinic@example.com", client_factory=RecordingSendGridClient)

    assert await sender.send(_message()) is False
    assert "SendGrid API responded with status 500" in caplog.text


@pytest.mark.anyio
async def test_email_sender_logs_forbidden_error(caplog) -> None:
    class ForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode("utf-8")

    class ForbiddenClient(RecordingSendGridClient):
        def send(self, mail):
            raise ForbiddenError("HTTP Error 403: Forbidden")

    sender = EmailChannelSender("SG.key", "clinic@example.com", client_factory=ForbiddenClient)

    assert await sender.send(_message()) is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_sendgrid_error_details_handles_plain_text() -> None:
    assert email_module._extract_sendgrid_error_details(b"rate limited") == "rate limited"
    assert email_module._extract_sendgrid_error_details("") is None


@pytest.mark.anyio
async def test_sms_sender_posts_form_to_twilio() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={"sid": "SM123", "status": "queued"})

    sender = SmsChannelSender(
        "AC123",
        "secret",
        "+15550001111",
        base_url="https://twilio.test",
        transport=httpx.MockTransport(handler),
    )

    assert await sender.send(_message(recipient="+15552223333")) is True

    request = captured[0]
    form = parse_qs(request.content.decode("utf-8"))
    assert str(request.url) == "https://twilio.test/2010-04-01/Accounts/AC123/Messages.json"
    assert request.headers["Authorization"].startswith("Basic ")
    assert form["To"] == ["+15552223333"]
    assert form["From"] == ["+15550001111"]
    assert form["Body"][0].startswith("Your appointment with Dr. House")


@pytest.mark.anyio
async def test_sms_sender_returns_false_on_provider_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"message": "bad number"}))
    sender = SmsChannelSender("AC123", "secret", "+15550001111", transport=transport)

    assert await sender.send(_message(recipient="not-a-number")) is False


@pytest.mark.anyio
async def test_sms_sender_returns_false_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    sender = SmsChannelSender("AC123", "secret", "+15550001111", transport=httpx.MockTransport(handler))

    assert await sender.send(_message(recipient="+15552223333")) is False


@pytest.mark.anyio
async def test_push_sender_sends_notification_with_string_data() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"success": 1, "failure": 0})

    sender = PushChannelSender(
        "server-key", api_url="https://push.test/send", transport=httpx.MockTransport(handler)
    )

    assert await sender.send(_message(recipient="device-token", appointment_id=42)) is True

    body = json.loads(captured[0].content)
    assert captured[0].headers["Authorization"] == "key=server-key"
    assert body["to"] == "device-token"
    assert body["notification"]["title"] == "Appointment Confirmation"
    assert body["data"] == {"appointment_id": "42"}


@pytest.mark.anyio
async def test_push_sender_treats_rejected_token_as_failure() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"success": 0, "failure": 1})
    )
    sender = PushChannelSender("server-key", transport=transport)

    assert await sender.send(_message(recipient="stale-token")) is False


@pytest.mark.anyio
async def test_console_sender_always_succeeds(caplog) -> None:
    with caplog.at_level("INFO"):
        assert await ConsoleChannelSender("SMS").send(_message()) is True
    assert "[SMS] to=patient@example.com" in caplog.text


def test_registry_only_contains_configured_channels() -> None:
    settings = Settings(sendgrid_api_key="SG.key", sendgrid_sender="clinic@example.com")

    registry = build_channel_registry(settings)

    assert registry.channel_types() == ["Email"]
    assert isinstance(registry.resolve("Email"), EmailChannelSender)


def test_registry_console_fallback_fills_missing_channels() -> None:
    settings = Settings(push_server_key="server-key")

    registry = build_channel_registry(settings, console_fallback=True)

    assert registry.channel_types() == ["Email", "SMS", "Push"]
    assert isinstance(registry.resolve("Email"), ConsoleChannelSender)
    assert isinstance(registry.resolve("Push"), PushChannelSender)
