"""Run the appointment event consumer until interrupted."""

from __future__ import annotations

import argparse
import logging

from hms_messaging.application.use_cases.notifications import NotificationDispatcher
from hms_messaging.config import configure_logging, get_settings
from hms_messaging.domain.entities import ChannelType, RetryPolicy
from hms_messaging.domain.exceptions import BrokerConnectionError
from hms_messaging.infrastructure.database import SessionLocal, initialize_database
from hms_messaging.infrastructure.messaging import AppointmentEventConsumer
from hms_messaging.infrastructure.notifications import build_channel_registry
from hms_messaging.infrastructure.repositories import NotificationRepository

logger = logging.getLogger("hms_messaging.consumer")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the consumer."""

    parser = argparse.ArgumentParser(
        description="Notify patients about appointment events published on RabbitMQ.",
    )
    parser.add_argument(
        "--channel",
        dest="channels",
        action="append",
        choices=[channel.value for channel in ChannelType],
        help="Channel used for each event; repeat for several (default: Email)",
    )
    parser.add_argument(
        "--console-fallback",
        action="store_true",
        help="Log messages for channels without provider credentials.",
    )
    return parser.parse_args()


def main() -> None:
    """Consume appointment events using the provided command line arguments."""

    args = parse_args()
    settings = get_settings()
    configure_logging(settings)
    initialize_database()

    registry = build_channel_registry(
        settings,
        console_fallback=args.console_fallback or settings.notification_console_fallback,
    )
    session = SessionLocal()
    dispatcher = NotificationDispatcher(
        registry,
        RetryPolicy.from_settings(settings),
        record_store=NotificationRepository(session),
    )

    try:
        consumer = AppointmentEventConsumer.connect(
            dispatcher,
            settings,
            channel_types=args.channels or [ChannelType.EMAIL.value],
        )
    except Exception as exc:
        session.close()
        raise BrokerConnectionError(f"Cannot connect to RabbitMQ: {exc}") from exc

    try:
        consumer.start()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
        consumer.stop()
    finally:
        session.close()


if __name__ == "__main__":
    main()
