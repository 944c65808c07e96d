"""Tests for the channel registry and the per-channel attempt tracker."""

from __future__ import annotations

import pytest

from hms_messaging.application.use_cases.notifications import ChannelRegistry, ChannelSender
from hms_messaging.domain.entities import AttemptState, ChannelAttempt, RetryPolicy
from hms_messaging.domain.exceptions import InvalidTransitionError


class ToggleSender:
    def __init__(self, channel_type: str, available: bool = True) -> None:
        self.channel_type = channel_type
        self.available = available

    def is_available(self) -> bool:
        return self.available

    async def send(self, message) -> bool:
        return True


def test_sender_satisfies_protocol() -> None:
    assert isinstance(ToggleSender("Email"), ChannelSender)


def test_resolve_is_case_sensitive() -> None:
    sender = ToggleSender("Email")
    registry = ChannelRegistry({"Email": sender})

    assert registry.resolve("Email") is sender
    assert registry.resolve("email") is None
    assert registry.is_available("email") is False


def test_register_replaces_and_unregister_removes() -> None:
    registry = ChannelRegistry()
    first = ToggleSender("SMS")
    second = ToggleSender("SMS")

    registry.register("SMS", first)
    registry.register("SMS", second)
    assert registry.resolve("SMS") is second
    assert registry.channel_types() == ["SMS"]

    registry.unregister("SMS")
    registry.unregister("SMS")
    assert registry.resolve("SMS") is None


def test_register_requires_channel_type() -> None:
    with pytest.raises(ValueError):
        ChannelRegistry().register("", ToggleSender(""))


def test_availability_is_checked_on_every_call() -> None:
    sender = ToggleSender("Push")
    registry = ChannelRegistry({"Push": sender})

    assert registry.is_available("Push") is True
    sender.available = False
    assert registry.is_available("Push") is False


def test_snapshot_is_not_affected_by_later_registration() -> None:
    registry = ChannelRegistry({"Email": ToggleSender("Email")})
    before = registry.channel_types()

    registry.register("SMS", ToggleSender("SMS"))

    assert before == ["Email"]
    assert registry.channel_types() == ["Email", "SMS"]


def test_attempt_walks_to_success() -> None:
    attempt = ChannelAttempt("Email", max_attempts=2)

    attempt.start()
    attempt.fail()
    attempt.retry()
    attempt.start()
    attempt.succeed()

    assert attempt.state is AttemptState.SUCCEEDED
    assert attempt.attempts == 2
    assert attempt.is_terminal


def test_failed_attempt_is_terminal_once_budget_is_spent() -> None:
    attempt = ChannelAttempt("SMS", max_attempts=1)
    attempt.start()
    attempt.fail()

    assert attempt.is_terminal
    with pytest.raises(InvalidTransitionError):
        attempt.retry()


@pytest.mark.parametrize(
    "steps",
    [
        ["succeed"],
        ["fail"],
        ["start", "start"],
        ["start", "succeed", "fail"],
        ["start", "succeed", "start"],
        ["retry"],
    ],
)
def test_illegal_transitions_raise(steps: list[str]) -> None:
    attempt = ChannelAttempt("Push", max_attempts=3)

    with pytest.raises(InvalidTransitionError):
        for step in steps:
            getattr(attempt, step)()


def test_retry_policy_validates_bounds() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(delay_seconds=-1)


def test_retry_policy_switches_only_known_channels() -> None:
    policy = RetryPolicy(sms_enabled=False)

    assert policy.is_enabled("SMS") is False
    assert policy.is_enabled("Email") is True
    assert policy.is_enabled("Fax") is True
