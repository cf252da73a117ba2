"""Queue client used by producers, the consumer loop and health checks.

Composes the endpoint resolver and a transport into write, receive-batch,
delete and status operations. Writes are best-effort: a send that fails
after the transport's retries is logged and reported in the returned
WriteResult rather than raised.
"""

import asyncio
import logging
import time
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from sqs_bus.exceptions import InvalidArgument, TransportError
from sqs_bus.queue_model_dto import RECEIVE_COUNT_ATTRIBUTE, Message, QueueStatus, WriteResult
from sqs_bus.resolver import QueueEndpointResolver
from sqs_bus.transport_base import TransportBase

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 10
ACCOUNT_MASK = "x" * 12
STATUS_ATTRIBUTES = [
    "ApproximateNumberOfMessages",
    "ApproximateNumberOfMessagesNotVisible",
    "LastModifiedTimestamp",
]


def _status_code(response: dict[str, Any]) -> int | None:
    return response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def mask_account_number(queue_url: str) -> str:
    """Replace the account segment of a queue URL with a fixed-width filler.

    ``https://sqs.us-east-1.amazonaws.com/123456789012/orders`` becomes
    ``https://sqs.us-east-1.amazonaws.com/xxxxxxxxxxxx/orders``. URLs without
    an account segment are returned unchanged.
    """
    parts = urlsplit(queue_url)
    segments = parts.path.split("/")
    if len(segments) < 3 or not segments[1]:
        return queue_url
    segments[1] = ACCOUNT_MASK
    return urlunsplit(parts._replace(path="/".join(segments)))


def to_message_attributes(attributes: dict[str, str] | None) -> dict[str, dict[str, str]] | None:
    """Convert plain string attributes to the service's typed attribute shape."""
    if attributes is None:
        return None
    return {name: {"DataType": "String", "StringValue": value} for name, value in attributes.items()}


class QueueClient:
    """Write, receive, delete and describe messages by queue name."""

    def __init__(self, transport: TransportBase, resolver: QueueEndpointResolver | None = None) -> None:
        self.transport = transport
        self.resolver = resolver or QueueEndpointResolver(transport)

    async def write(self, queue_name: str, body: str, attributes: dict[str, str] | None = None) -> WriteResult:
        """Send a message on a best-effort basis.

        Raises InvalidArgument for an empty queue name or body. Both are
        checked before the queue URL is looked up, so an invalid write never
        reaches the service. Any other failure, including the lookup, is
        logged and returned as ``WriteResult(sent=False)``.
        """
        if not queue_name:
            raise InvalidArgument("queue_name must not be empty")
        if not body:
            raise InvalidArgument("message body must not be empty")

        started = time.perf_counter()
        queue_url = None
        try:
            queue_url = await self.resolver.resolve(queue_name)
            logger.info("Sending Message=%s to QueueUrl=%s", body, mask_account_number(queue_url))
            response = await self.transport.send_message(queue_url, body, to_message_attributes(attributes))
        except TransportError as e:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                "Failed to send message to QueueName=%s, QueueUrl=%s, StatusCode=%s, Duration=%.0f: %s",
                queue_name,
                mask_account_number(queue_url) if queue_url else None,
                e.status_code,
                duration_ms,
                e,
            )
            return WriteResult(sent=False, duration_ms=duration_ms)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                "Unexpected exception sending message to QueueName=%s, Duration=%.0f",
                queue_name,
                duration_ms,
                exc_info=True,
            )
            return WriteResult(sent=False, duration_ms=duration_ms)

        duration_ms = (time.perf_counter() - started) * 1000
        message_id = response.get("MessageId")
        logger.info(
            "Response from SQS=%s, MessageId=%s, Duration=%.0f",
            _status_code(response),
            message_id,
            duration_ms,
        )
        return WriteResult(sent=True, message_id=message_id, duration_ms=duration_ms)

    async def receive_batch(
        self,
        queue_name: str,
        long_poll_timeout_seconds: int,
        stop_event: asyncio.Event | None = None,
    ) -> list[Message]:
        """Long-poll for up to a full batch of messages.

        If ``stop_event`` is set before or during the wait the pending
        receive is abandoned and an empty list is returned.
        """
        if stop_event is not None and stop_event.is_set():
            logger.warning("Skipping receive for QueueName=%s because the consumer is stopping", queue_name)
            return []

        queue_url = await self.resolver.resolve(queue_name)
        try:
            response = await self._receive_until_stopped(
                self.transport.receive_messages(
                    queue_url,
                    wait_time_seconds=long_poll_timeout_seconds,
                    max_number_of_messages=MAX_BATCH_SIZE,
                    attribute_names=[RECEIVE_COUNT_ATTRIBUTE],
                    message_attribute_names=["All"],
                ),
                stop_event,
            )
            if response is None:
                logger.warning("Receive for QueueName=%s was cancelled", queue_name)
                return []

            status_code = _status_code(response)
            if status_code != 200:
                raise TransportError(
                    f"Failed to receive messages for QueueName={queue_name}. ResponseStatusCode={status_code}",
                    status_code=status_code,
                )
            return [Message.from_sqs(raw) for raw in response.get("Messages", [])]
        except Exception:
            logger.error("Failed to receive messages for QueueName=%s", queue_name, exc_info=True)
            raise

    @staticmethod
    async def _receive_until_stopped(receive: Any, stop_event: asyncio.Event | None) -> dict[str, Any] | None:
        """Await the receive, or return None if the stop event wins the race."""
        if stop_event is None:
            return await receive

        receive_task = asyncio.ensure_future(receive)
        stop_task = asyncio.ensure_future(stop_event.wait())
        try:
            done, _ = await asyncio.wait({receive_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_task.cancel()
            if not receive_task.done():
                receive_task.cancel()
            await asyncio.gather(receive_task, stop_task, return_exceptions=True)

        if receive_task in done:
            return receive_task.result()
        return None

    async def delete(self, queue_name: str, receipt_handle: str) -> None:
        """Delete one delivery. Raises TransportError on a non-200 response."""
        queue_url = await self.resolver.resolve(queue_name)
        try:
            response = await self.transport.delete_message(queue_url, receipt_handle)
            status_code = _status_code(response)
            if status_code != 200:
                raise TransportError(
                    f"Failed to delete message with ReceiptHandle={receipt_handle} from QueueName={queue_name}. "
                    f"ResponseCode={status_code}",
                    status_code=status_code,
                )
        except Exception:
            logger.error("Failed to delete message from QueueName=%s", queue_name)
            raise

    async def get_status(self, queue_name: str) -> QueueStatus:
        """Describe the queue. ``is_healthy`` is False for any non-200 response."""
        queue_url = await self.resolver.resolve(queue_name)
        try:
            response = await self.transport.get_queue_attributes(queue_url, STATUS_ATTRIBUTES)
            attributes = response.get("Attributes", {})
            return QueueStatus(
                is_healthy=_status_code(response) == 200,
                region=self.transport.region,
                queue_name=queue_name,
                queue_url=mask_account_number(queue_url),
                approximate_number_of_messages=int(attributes.get("ApproximateNumberOfMessages", 0)),
                approximate_number_of_messages_not_visible=int(
                    attributes.get("ApproximateNumberOfMessagesNotVisible", 0)
                ),
                last_modified_timestamp=QueueStatus.parse_timestamp(attributes.get("LastModifiedTimestamp")),
            )
        except Exception:
            logger.error("Failed to get queue status for QueueName=%s", queue_name, exc_info=True)
            raise
