"""Consume appointment events and notify the patient."""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import anyio
import pika

from hms_messaging.application.use_cases.notifications import (
    APPOINTMENT_ROUTING_KEYS,
    NotificationDispatcher,
    RecipientResolver,
    handle_appointment_event,
)
from hms_messaging.config import Settings, get_settings
from hms_messaging.domain.entities import ChannelType

from .broker import connection_parameters, declare_topic_exchange

logger = logging.getLogger(__name__)


def recipient_from_payload(payload: Mapping[str, Any]) -> str | None:
    """Read the patient address carried on the event, if any."""

    value = payload.get("patient_email")
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class AppointmentEventConsumer:
    """Bind a durable queue to the appointment routing keys and process deliveries.

    Successful handling acks the delivery. A body that is not a JSON object is
    rejected without requeue; any other failure is nacked with requeue so the
    broker redelivers it.
    """

    def __init__(
        self,
        channel: Any,
        dispatcher: NotificationDispatcher,
        *,
        exchange: str,
        queue: str,
        resolve_recipient: RecipientResolver = recipient_from_payload,
        channel_types: Sequence[str] = (ChannelType.EMAIL.value,),
    ) -> None:
        self._channel = channel
        self._dispatcher = dispatcher
        self._exchange = exchange
        self._queue = queue
        self._resolve_recipient = resolve_recipient
        self._channel_types = tuple(channel_types)
        self._consumer_tag: str | None = None

    @classmethod
    def connect(
        cls,
        dispatcher: NotificationDispatcher,
        settings: Settings | None = None,
        **kwargs: Any,
    ) -> "AppointmentEventConsumer":
        settings = settings or get_settings()
        connection = pika.BlockingConnection(connection_parameters(settings))
        return cls(
            connection.channel(),
            dispatcher,
            exchange=settings.rabbitmq_exchange,
            queue=settings.rabbitmq_notification_queue,
            **kwargs,
        )

    def setup(self) -> None:
        declare_topic_exchange(self._channel, self._exchange)
        self._channel.queue_declare(
            queue=self._queue, durable=True, exclusive=False, auto_delete=False
        )
        for routing_key in APPOINTMENT_ROUTING_KEYS:
            self._channel.queue_bind(
                queue=self._queue, exchange=self._exchange, routing_key=routing_key
            )
        self._channel.basic_qos(prefetch_count=1)
        logger.info(
            "Queue %s bound to %s for %s", self._queue, self._exchange, ", ".join(APPOINTMENT_ROUTING_KEYS)
        )

    def start(self) -> None:
        """Declare the topology and block while consuming deliveries."""

        self.setup()
        self._consumer_tag = self._channel.basic_consume(
            queue=self._queue, on_message_callback=self.on_message, auto_ack=False
        )
        logger.info("Consuming appointment events from %s", self._queue)
        self._channel.start_consuming()

    def stop(self) -> None:
        if self._channel.is_open:
            self._channel.stop_consuming()
            self._channel.close()
        logger.info("Appointment event consumer stopped")

    def on_message(self, channel: Any, method: Any, properties: Any, body: bytes) -> None:
        routing_key = method.routing_key
        message_id = getattr(properties, "message_id", None)
        logger.info("Received %s (message_id=%s)", routing_key, message_id)

        try:
            self.process(routing_key, body)
        except ValueError:
            logger.exception("Rejecting malformed %s message %s", routing_key, message_id)
            channel.basic_nack(delivery_tag=method.delivery_tag, multiple=False, requeue=False)
            return
        except Exception:
            logger.exception("Error processing %s message %s", routing_key, message_id)
            channel.basic_nack(delivery_tag=method.delivery_tag, multiple=False, requeue=True)
            return

        channel.basic_ack(delivery_tag=method.delivery_tag, multiple=False)

    def process(self, routing_key: str, body: bytes) -> dict[str, bool] | None:
        handler = functools.partial(
            handle_appointment_event,
            routing_key,
            body,
            dispatcher=self._dispatcher,
            resolve_recipient=self._resolve_recipient,
            channel_types=self._channel_types,
        )
        return anyio.run(handler)


__all__ = ["AppointmentEventConsumer", "recipient_from_payload"]
