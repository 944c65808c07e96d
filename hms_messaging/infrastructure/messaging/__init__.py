"""RabbitMQ publishing and consumption."""

from .broker import BrokerClient, PikaBrokerClient
from .consumer import AppointmentEventConsumer, recipient_from_payload
from .publisher import EventPublisher

__all__ = [
    "AppointmentEventConsumer",
    "BrokerClient",
    "EventPublisher",
    "PikaBrokerClient",
    "recipient_from_payload",
]
