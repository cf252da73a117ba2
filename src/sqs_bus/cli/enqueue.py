"""Enqueue a message to a queue.

CLI that sends a JSON message to an existing queue, tagging it with a
MessageType attribute so a consumer can route it.
"""

import asyncio
import json

import click

from sqs_bus.cli.options import build_transport_config, load_settings, setup_logging, transport_options
from sqs_bus.client import QueueClient
from sqs_bus.config import TransportConfig
from sqs_bus.exceptions import ConfigurationError, InvalidArgument
from sqs_bus.queue_model_dto import WriteResult
from sqs_bus.router import MESSAGE_TYPE_ATTRIBUTE
from sqs_bus.transport_sqs import SQSTransport


def parse_attributes(pairs: tuple[str, ...], message_type: str | None) -> dict[str, str]:
    """Turn KEY=VALUE pairs and the message type into message attributes."""
    attributes = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair}", param_hint="--attribute")
        attributes[key] = value
    if message_type:
        attributes[MESSAGE_TYPE_ATTRIBUTE] = message_type
    return attributes


async def send(transport_config: TransportConfig, queue_name: str, body: str, attributes: dict[str, str]) -> WriteResult:
    """Write one message and close the transport."""
    async with SQSTransport(transport_config) as transport:
        return await QueueClient(transport).write(queue_name, body, attributes)


@click.command()
@click.option(
    "--queue-name",
    type=str,
    required=True,
    help="The name of the queue to enqueue the message to",
)
@click.option("--message", type=str, required=True, help="The message to enqueue (JSON)")
@click.option("--message-type", type=str, required=False, help="Value of the MessageType attribute")
@click.option("--attribute", "attributes", type=str, multiple=True, help="Extra KEY=VALUE attribute, multiple allowed")
@transport_options
def main(queue_name: str, message: str, message_type: str | None, attributes: tuple[str, ...], **kwargs) -> None:
    """Enqueue a JSON message to the specified queue."""
    click.echo(f"queue-name: {queue_name}")
    click.echo(f"message: {message}")

    settings = load_settings()
    setup_logging(settings.log_level)

    try:
        json.loads(message)
    except json.JSONDecodeError as err:
        raise click.ClickException(f"Invalid JSON: {message}") from err

    try:
        transport_config = build_transport_config(settings, **kwargs)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    try:
        result = asyncio.run(send(transport_config, queue_name, message, parse_attributes(attributes, message_type)))
    except InvalidArgument as e:
        raise click.ClickException(str(e)) from e
    if not result.sent:
        raise click.ClickException(f"Message was not sent to {queue_name}, see the log for details")
    click.echo(f"Message enqueued with ID: {result.message_id}")


if __name__ == "__main__":
    """Entry point for the enqueue CLI."""
    main()
