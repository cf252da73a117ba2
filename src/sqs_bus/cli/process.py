"""Consume messages from a queue.

This module provides a CLI that long-polls one queue, routes each message to
the handler registered for its MessageType attribute, and deletes it once the
handler succeeds. Failed or unroutable messages are left on the queue and
become visible again when their visibility timeout expires.
"""

import asyncio
import contextlib
import importlib
import os
import signal
import sys
from typing import Any

import click
from pydantic import ValidationError

from sqs_bus.cli.options import build_transport_config, load_settings, setup_logging, transport_options
from sqs_bus.client import QueueClient
from sqs_bus.config import Settings, SubscriptionConfig
from sqs_bus.consumer import ConsumerLoop
from sqs_bus.exceptions import ConfigurationError
from sqs_bus.handlers.base import BaseHandler
from sqs_bus.router import MessageRouter
from sqs_bus.transport_base import TransportBase
from sqs_bus.transport_sqs import SQSTransport


def get_handlers(handler_modules: list[str], handlers_path: list[str] | None = None) -> list[BaseHandler]:
    """Import each handler module and instantiate its Handler class.

    Args:
        handler_modules: Dotted module names, each defining ``Handler``.
        handlers_path: Directories to append to sys.path before importing.
    Returns:
        One handler instance per module.

    Raises:
        click.ClickException: If a module cannot be imported or has no Handler.
    """
    for path in handlers_path or []:
        if os.path.exists(path) and path not in sys.path:
            sys.path.append(path)

    handlers: list[BaseHandler] = []
    for name in handler_modules:
        try:
            handler_module = importlib.import_module(name)
        except ImportError as e:
            raise click.ClickException(f"Cannot import handler module {name}: {e}") from e
        if not hasattr(handler_module, "Handler"):
            raise click.ClickException(f"No Handler class in module: {name}")
        handlers.append(handler_module.Handler())
    return handlers


def get_subscription(settings: Settings, queue_name: str | None, long_poll_seconds: int | None) -> SubscriptionConfig:
    """Build the subscription from command line options, falling back to settings."""
    if not queue_name:
        subscription = settings.require_subscription()
        queue_name = subscription.queue_name
        if long_poll_seconds is None:
            long_poll_seconds = subscription.queue_long_poll_time_seconds
    elif long_poll_seconds is None and settings.subscription is not None:
        long_poll_seconds = settings.subscription.queue_long_poll_time_seconds

    values: dict[str, Any] = {"queue_name": queue_name}
    if long_poll_seconds is not None:
        values["queue_long_poll_time_seconds"] = long_poll_seconds
    return SubscriptionConfig(**values)


async def run_consumer(consumer: ConsumerLoop, transport: TransportBase) -> None:
    """Run the consumer until SIGINT or SIGTERM, then close the transport."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # not available on every platform; Ctrl-C still interrupts there
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)
    try:
        await consumer.run(stop_event)
    finally:
        await transport.close()


@click.command()
@click.option("--queue-name", type=str, required=False, help="The queue to consume, defaults to the settings")
@click.option(
    "--long-poll-seconds",
    type=click.IntRange(0, 20),
    required=False,
    help="Seconds each receive waits for messages",
)
@click.option(
    "--handler",
    "handler_modules",
    type=str,
    required=True,
    multiple=True,
    help="Module defining a Handler class, can be used multiple times",
)
@click.option(
    "--handlers-path",
    type=str,
    multiple=True,
    help="Directory to add to the import path for handler modules, multiple allowed",
)
@click.option("--error-backoff", type=float, required=False, help="Seconds to wait after a failed poll")
@click.option("--log-level", type=str, required=False, help="Logging level, e.g. DEBUG to see retries")
@transport_options
def main(**kwargs: Any) -> None:
    """Consume messages from a queue until interrupted.

    Each message is dispatched by its MessageType attribute to exactly one
    handler and deleted after the handler returns. The queue's visibility
    timeout should be longer than the slowest handler, otherwise a message
    may be delivered again while it is still being processed.
    """
    settings = load_settings()
    setup_logging(kwargs["log_level"] or settings.log_level)

    try:
        subscription = get_subscription(settings, kwargs["queue_name"], kwargs["long_poll_seconds"])
        transport_config = build_transport_config(settings, **kwargs)
        handlers = get_handlers(list(kwargs["handler_modules"]), list(kwargs["handlers_path"]))
        router = MessageRouter(handlers)
    except (ConfigurationError, ValidationError) as e:
        raise click.ClickException(str(e)) from e

    error_backoff = kwargs["error_backoff"]
    if error_backoff is None:
        error_backoff = settings.error_backoff_seconds

    transport = SQSTransport(transport_config)
    consumer = ConsumerLoop(QueueClient(transport), router, subscription, error_backoff_seconds=error_backoff)
    click.secho(
        f"{settings.app_name}: Consuming {subscription.queue_name} with {len(handlers)} handler(s)",
        fg="green",
    )
    asyncio.run(run_consumer(consumer, transport))


if __name__ == "__main__":
    main()
