"""Publish domain events to the service's durable topic exchange.

Delivery is at-least-once from the exchange to durable subscriber queues.
Consumers deduplicate on the AMQP ``message_id``; every publish gets a new one.

Known gap: there is no transactional outbox. If the process dies after the
business transaction commits but before :meth:`EventPublisher.publish`
returns, the event is lost. Callers that cannot accept this must add their own
outbox table.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType

from hms_messaging.application.use_cases.events import build_envelope
from hms_messaging.config import Settings, get_settings
from hms_messaging.domain.entities import DomainEvent, MessageEnvelope
from hms_messaging.domain.exceptions import BrokerConnectionError, PublishError

from .broker import BrokerClient, PikaBrokerClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], BrokerClient]


class EventPublisher:
    """Sole writer to one topic exchange over a single shared connection."""

    def __init__(self, client: BrokerClient, exchange: str) -> None:
        self._client = client
        self._exchange = exchange
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def open(
        cls,
        settings: Settings | None = None,
        *,
        client_factory: ClientFactory | None = None,
    ) -> "EventPublisher":
        """Connect and declare the exchange, or raise :class:`BrokerConnectionError`."""

        settings = settings or get_settings()
        factory = client_factory or PikaBrokerClient.connect
        target = f"{settings.rabbitmq_host}:{settings.rabbitmq_port}"

        try:
            client = factory(settings)
        except Exception as exc:
            logger.error("Failed to connect to RabbitMQ at %s: %s", target, exc)
            raise BrokerConnectionError(f"Cannot connect to RabbitMQ at {target}: {exc}") from exc

        try:
            client.declare_exchange(settings.rabbitmq_exchange)
        except Exception as exc:
            logger.error("Failed to declare exchange %s: %s", settings.rabbitmq_exchange, exc)
            _close_quietly(client)
            raise BrokerConnectionError(
                f"Cannot declare exchange {settings.rabbitmq_exchange}: {exc}"
            ) from exc

        logger.info("Connected to RabbitMQ at %s, exchange %s", target, settings.rabbitmq_exchange)
        return cls(client, settings.rabbitmq_exchange)

    @property
    def exchange(self) -> str:
        return self._exchange

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, envelope: MessageEnvelope) -> None:
        """Write ``envelope`` once; failures raise :class:`PublishError` and are not retried."""

        with self._lock:
            if self._closed:
                raise PublishError(envelope.routing_key, envelope.message_id, "publisher is closed")
            try:
                self._client.publish(self._exchange, envelope)
            except Exception as exc:
                logger.exception(
                    "Error publishing event %s to %s", envelope.routing_key, self._exchange
                )
                raise PublishError(envelope.routing_key, envelope.message_id, str(exc)) from exc

        logger.info(
            "Published event %s to %s (message_id=%s)",
            envelope.routing_key,
            self._exchange,
            envelope.message_id,
        )

    def publish_event(self, event: DomainEvent) -> MessageEnvelope:
        envelope = build_envelope(event)
        self.publish(envelope)
        return envelope

    def close(self) -> None:
        """Release the connection. Safe to call repeatedly, never raises."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            _close_quietly(self._client)

    def __enter__(self) -> "EventPublisher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def _close_quietly(client: BrokerClient) -> None:
    try:
        client.close()
    except Exception:
        logger.exception("Error disposing RabbitMQ connection")


__all__ = ["EventPublisher"]
