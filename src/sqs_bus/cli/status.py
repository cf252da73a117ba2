"""Show the status of a queue.

CLI that prints health and approximate message counts for a given queue name.
"""

import asyncio

import click
from icecream import ic

from sqs_bus.cli.options import build_transport_config, load_settings, setup_logging, transport_options
from sqs_bus.client import QueueClient
from sqs_bus.config import TransportConfig
from sqs_bus.exceptions import ConfigurationError, InvalidArgument, TransportError
from sqs_bus.queue_model_dto import QueueStatus
from sqs_bus.transport_sqs import SQSTransport


async def fetch_status(transport_config: TransportConfig, queue_name: str) -> QueueStatus:
    """Describe the queue and close the transport."""
    async with SQSTransport(transport_config) as transport:
        return await QueueClient(transport).get_status(queue_name)


@click.command()
@click.option("--queue-name", type=str, required=True, help="The name of the queue to show the status of")
@transport_options
def main(queue_name: str, **kwargs) -> None:
    """Print health, depth and in-flight counts for the specified queue."""
    click.echo("Queue status")

    settings = load_settings()
    setup_logging(settings.log_level)

    try:
        transport_config = build_transport_config(settings, **kwargs)
        status = asyncio.run(fetch_status(transport_config, queue_name))
    except (ConfigurationError, InvalidArgument, TransportError) as e:
        raise click.ClickException(str(e)) from e

    ic(status.model_dump(mode="json"))
    if not status.is_healthy:
        raise click.ClickException(f"Queue {queue_name} is not healthy")


if __name__ == "__main__":
    main()
