"""Application configuration settings."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Configuration values loaded once from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="SQLAlchemy URL of the notification record store",
        min_length=1,
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    rabbitmq_host: str = Field(default="localhost", min_length=1)
    rabbitmq_port: int = Field(default=5672, gt=0)
    rabbitmq_username: str = Field(default="guest")
    rabbitmq_password: str = Field(default="guest")
    rabbitmq_virtual_host: str = Field(default="/")
    rabbitmq_exchange: str = Field(
        default="hospital.events",
        description="Durable topic exchange owned by this service boundary",
        min_length=1,
    )
    rabbitmq_notification_queue: str = Field(
        default="appointment.notifications",
        description="Durable queue the notification consumer binds to the exchange",
        min_length=1,
    )

    notification_retry_attempts: int = Field(
        default=3, description="Total send attempts per channel", ge=1
    )
    notification_retry_delay_seconds: float = Field(
        default=5.0, description="Pause between two attempts on one channel", ge=0
    )
    notification_enable_email: bool = True
    notification_enable_sms: bool = True
    notification_enable_push: bool = True
    notification_console_fallback: bool = Field(
        default=False,
        description="Log messages for channels without provider credentials instead of skipping them",
    )

    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_number: str | None = None
    twilio_api_base_url: str = "https://api.twilio.com"
    push_server_key: str | None = None
    push_api_url: str = "https://fcm.googleapis.com/fcm/send"
    provider_timeout_seconds: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger."""

    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["Settings", "configure_logging", "get_settings", "reset_settings_cache"]
