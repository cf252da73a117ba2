"""Options and helpers shared by the command line tools."""

import logging
import os
import sys
from collections.abc import Callable
from typing import Any

import click
import dotenv

from sqs_bus.config import Settings, TransportConfig, get_settings


def load_settings() -> Settings:
    """Load settings, reading a local .env file first when one exists."""
    if os.path.exists(".env"):
        dotenv.load_dotenv()
    return get_settings()


def setup_logging(level: str) -> None:
    """Send log records to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def transport_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Add the transport overrides to a click command."""
    options = [
        click.option("--region", type=str, required=False, help="AWS region of the queue"),
        click.option("--endpoint-url", type=str, required=False, help="Override the SQS endpoint URL"),
        click.option("--max-retries", type=int, required=False, help="Retries on transient faults"),
        click.option("--connect-timeout", type=int, required=False, help="Connection timeout in seconds"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def build_transport_config(settings: Settings, **overrides: Any) -> TransportConfig:
    """Merge command line overrides into the configured transport section.

    Raises ConfigurationError when neither the settings nor the command line
    define a transport.
    """
    values = {
        "region_name": overrides.get("region"),
        "endpoint_url": overrides.get("endpoint_url"),
        "max_retries": overrides.get("max_retries"),
        "connect_timeout": overrides.get("connect_timeout"),
    }
    values = {key: value for key, value in values.items() if value is not None}
    if settings.transport is None and not values:
        settings.require_transport()
    base = settings.transport or TransportConfig()
    return TransportConfig.model_validate({**base.model_dump(), **values})
