"""RabbitMQ client used by the event publisher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import pika

from hms_messaging.domain.entities import MessageEnvelope
from hms_messaging.utils import to_epoch_seconds

if TYPE_CHECKING:
    from hms_messaging.config import Settings

logger = logging.getLogger(__name__)

PERSISTENT_DELIVERY_MODE = 2
TRANSIENT_DELIVERY_MODE = 1


class BrokerClient(Protocol):
    """Minimal broker surface the publisher needs; swapped for a double in tests."""

    def declare_exchange(self, name: str) -> None:
        ...

    def publish(self, exchange: str, envelope: MessageEnvelope) -> None:
        ...

    def close(self) -> None:
        ...


def connection_parameters(settings: "Settings") -> pika.ConnectionParameters:
    credentials = pika.PlainCredentials(settings.rabbitmq_username, settings.rabbitmq_password)
    return pika.ConnectionParameters(
        host=settings.rabbitmq_host,
        port=settings.rabbitmq_port,
        virtual_host=settings.rabbitmq_virtual_host,
        credentials=credentials,
    )


def declare_topic_exchange(channel: Any, name: str) -> None:
    """Declare ``name`` as a durable topic exchange; repeating it is harmless."""

    channel.exchange_declare(
        exchange=name, exchange_type="topic", durable=True, auto_delete=False
    )


class PikaBrokerClient:
    """Blocking pika connection with publisher confirms enabled."""

    def __init__(self, connection: Any, channel: Any) -> None:
        self._connection = connection
        self._channel = channel

    @classmethod
    def connect(cls, settings: "Settings") -> "PikaBrokerClient":
        connection = pika.BlockingConnection(connection_parameters(settings))
        channel = connection.channel()
        channel.confirm_delivery()
        return cls(connection, channel)

    def declare_exchange(self, name: str) -> None:
        declare_topic_exchange(self._channel, name)

    def publish(self, exchange: str, envelope: MessageEnvelope) -> None:
        properties = pika.BasicProperties(
            content_type=envelope.content_type,
            delivery_mode=PERSISTENT_DELIVERY_MODE if envelope.persistent else TRANSIENT_DELIVERY_MODE,
            message_id=envelope.message_id,
            timestamp=to_epoch_seconds(envelope.timestamp),
            type=envelope.event_type,
        )
        self._channel.basic_publish(
            exchange=exchange,
            routing_key=envelope.routing_key,
            body=envelope.body,
            properties=properties,
        )

    def close(self) -> None:
        if self._channel is not None and self._channel.is_open:
            self._channel.close()
        if self._connection is not None and self._connection.is_open:
            self._connection.close()


__all__ = [
    "BrokerClient",
    "PERSISTENT_DELIVERY_MODE",
    "PikaBrokerClient",
    "connection_parameters",
    "declare_topic_exchange",
]
