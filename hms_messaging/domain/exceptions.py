"""Error taxonomy shared by the publisher and the notification dispatcher."""

from __future__ import annotations


class MessagingError(Exception):
    """Base class for event publication and dispatch errors."""


class BrokerConnectionError(MessagingError, ConnectionError):
    """The broker could not be reached or the exchange could not be declared."""


class PublishError(MessagingError):
    """A single publish attempt failed after the connection was established."""

    def __init__(self, routing_key: str, message_id: str, reason: str) -> None:
        super().__init__(f"Failed to publish {routing_key} ({message_id}): {reason}")
        self.routing_key = routing_key
        self.message_id = message_id
        self.reason = reason


class UnknownEventError(MessagingError, TypeError):
    """An object without a routing-key mapping was handed to the envelope builder."""


class InvalidTransitionError(MessagingError, RuntimeError):
    """A channel attempt tried to leave a terminal state or skip a step."""


__all__ = [
    "BrokerConnectionError",
    "InvalidTransitionError",
    "MessagingError",
    "PublishError",
    "UnknownEventError",
]
