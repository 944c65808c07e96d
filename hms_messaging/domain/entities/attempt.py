"""State tracking for a single channel's delivery attempts."""

from __future__ import annotations

from enum import Enum

from hms_messaging.domain.exceptions import InvalidTransitionError


class AttemptState(str, Enum):
    PENDING = "Pending"
    SENDING = "Sending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class ChannelAttempt:
    """Walk one channel through ``Pending -> Sending -> {Succeeded, Failed}``.

    A failed attempt goes back to ``Pending`` only while attempts remain;
    ``Succeeded`` and an exhausted ``Failed`` are terminal.
    """

    def __init__(self, channel_type: str, max_attempts: int) -> None:
        self.channel_type = channel_type
        self.max_attempts = max_attempts
        self.attempts = 0
        self.state = AttemptState.PENDING

    @property
    def remaining(self) -> int:
        return self.max_attempts - self.attempts

    @property
    def is_terminal(self) -> bool:
        if self.state is AttemptState.SUCCEEDED:
            return True
        return self.state is AttemptState.FAILED and self.remaining <= 0

    def start(self) -> None:
        self._move(AttemptState.PENDING, AttemptState.SENDING)
        self.attempts += 1

    def succeed(self) -> None:
        self._move(AttemptState.SENDING, AttemptState.SUCCEEDED)

    def fail(self) -> None:
        self._move(AttemptState.SENDING, AttemptState.FAILED)

    def retry(self) -> None:
        if self.remaining <= 0:
            raise InvalidTransitionError(
                f"{self.channel_type}: no attempts left after {self.attempts}"
            )
        self._move(AttemptState.FAILED, AttemptState.PENDING)

    def _move(self, expected: AttemptState, target: AttemptState) -> None:
        if self.state is not expected:
            raise InvalidTransitionError(
                f"{self.channel_type}: cannot move from {self.state.value} to {target.value}"
            )
        self.state = target


__all__ = ["AttemptState", "ChannelAttempt"]
