"""Application settings loaded from the environment.

Uses pydantic-settings for validation. Nested sections are read from
variables such as ``SQS_BUS_SUBSCRIPTION__QUEUE_NAME`` and
``SQS_BUS_TRANSPORT__MAX_RETRIES``; a ``.env`` file is honoured when present.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqs_bus.exceptions import ConfigurationError


class SubscriptionConfig(BaseModel):
    """Which queue the consumer polls and how long each receive may wait."""

    model_config = ConfigDict(frozen=True)

    queue_name: str = Field(..., min_length=1, description="Name of the queue to subscribe to")
    queue_long_poll_time_seconds: int = Field(
        20, ge=0, le=20, description="Seconds a receive waits for a message to arrive"
    )


class TransportConfig(BaseModel):
    """Connection and retry settings for the SQS client."""

    model_config = ConfigDict(frozen=True)

    region_name: str | None = Field(None, description="AWS region, defaults to the botocore chain")
    endpoint_url: str | None = Field(None, description="Override endpoint, e.g. a local SQS emulator")
    connect_timeout: int = Field(5, gt=0, description="Connection timeout in seconds")
    read_timeout: int = Field(30, gt=0, description="Read timeout in seconds, must exceed the long poll")
    max_retries: int = Field(3, ge=0, description="Retries on transient faults before giving up")


class Settings(BaseSettings):
    """Runtime settings for the message bus."""

    model_config = SettingsConfigDict(
        env_prefix="SQS_BUS_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = Field(default="SQS Message Bus")
    log_level: str = Field(default="INFO")
    error_backoff_seconds: float = Field(default=5.0, ge=0)
    subscription: SubscriptionConfig | None = None
    transport: TransportConfig | None = None

    def require_subscription(self) -> SubscriptionConfig:
        """Return the subscription section or fail if it was never configured."""
        if self.subscription is None:
            raise ConfigurationError("SubscriptionConfig must be defined in the settings!")
        return self.subscription

    def require_transport(self) -> TransportConfig:
        """Return the transport section or fail if it was never configured."""
        if self.transport is None:
            raise ConfigurationError("TransportConfig must be defined in the settings!")
        return self.transport


def get_settings() -> Settings:
    """Return the loaded settings instance."""
    return Settings()
