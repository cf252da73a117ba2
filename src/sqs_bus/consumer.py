"""Long-running consumer that polls a queue and dispatches messages.

Each iteration receives one batch, processes its messages concurrently and
waits for all of them before polling again. A message is deleted only after
its handler returns; routing faults and handler or delete errors are logged
and leave the message for the queue's own redelivery.
"""

import asyncio
import enum
import logging

from sqs_bus.client import QueueClient
from sqs_bus.config import SubscriptionConfig
from sqs_bus.exceptions import (
    AmbiguousHandler,
    ConfigurationError,
    HandlerNotFound,
    RoutingError,
    UnroutableMessage,
)
from sqs_bus.queue_model_dto import Message
from sqs_bus.router import MessageRouter

logger = logging.getLogger(__name__)


class MessageOutcome(str, enum.Enum):
    """What happened to one message in a batch."""

    DELETED = "deleted"
    UNROUTABLE = "unroutable"
    HANDLER_NOT_FOUND = "handler_not_found"
    AMBIGUOUS_HANDLER = "ambiguous_handler"
    FAILED = "failed"


_ROUTING_OUTCOMES = {
    UnroutableMessage: MessageOutcome.UNROUTABLE,
    HandlerNotFound: MessageOutcome.HANDLER_NOT_FOUND,
    AmbiguousHandler: MessageOutcome.AMBIGUOUS_HANDLER,
}


class ConsumerLoop:
    """Polls one queue until the stop event is set.

    Stopping is cooperative: the event is checked before each receive and
    while a receive is waiting. Handlers already running finish normally.
    """

    def __init__(
        self,
        client: QueueClient,
        router: MessageRouter,
        config: SubscriptionConfig | None,
        error_backoff_seconds: float = 5.0,
    ) -> None:
        if config is None:
            raise ConfigurationError("SubscriptionConfig is required to start a consumer")
        self.client = client
        self.router = router
        self.config = config
        self.error_backoff_seconds = error_backoff_seconds

    @property
    def queue_name(self) -> str:
        return self.config.queue_name

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll and dispatch until stop_event is set."""
        logger.info(
            "Starting consumer for QueueName=%s, LongPollTimeSeconds=%s",
            self.queue_name,
            self.config.queue_long_poll_time_seconds,
        )
        while not stop_event.is_set():
            try:
                await self.poll_once(stop_event)
            except Exception:
                logger.warning("Queue processing iteration failed for QueueName=%s", self.queue_name, exc_info=True)
                await self._backoff(stop_event)
        logger.info("Consumer for QueueName=%s stopped", self.queue_name)

    async def _backoff(self, stop_event: asyncio.Event) -> None:
        if self.error_backoff_seconds <= 0:
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.error_backoff_seconds)
        except asyncio.TimeoutError:
            pass

    async def poll_once(self, stop_event: asyncio.Event | None = None) -> list[MessageOutcome]:
        """Receive one batch and process every message in it concurrently."""
        messages = await self.client.receive_batch(
            self.queue_name, self.config.queue_long_poll_time_seconds, stop_event
        )
        if not messages:
            return []
        return list(await asyncio.gather(*(self.process_message(message) for message in messages)))

    async def process_message(self, message: Message) -> MessageOutcome:
        """Route, process and delete one message. Never raises."""
        try:
            handler = self.router.route(message)
        except RoutingError as e:
            logger.warning(
                "Cannot route message MessageId=%s, ReceiptHandle=%s, MessageBody=%s, QueueName=%s: %s",
                message.message_id,
                message.receipt_handle,
                message.body,
                self.queue_name,
                e,
            )
            return _ROUTING_OUTCOMES.get(type(e), MessageOutcome.FAILED)
        except Exception:
            logger.error(
                "Cannot select a handler for message MessageId=%s, ReceiptHandle=%s, MessageBody=%s, QueueName=%s",
                message.message_id,
                message.receipt_handle,
                message.body,
                self.queue_name,
                exc_info=True,
            )
            return MessageOutcome.FAILED

        try:
            await handler.process(message)
            await self.client.delete(self.queue_name, message.receipt_handle)
        except Exception:
            logger.error(
                "Cannot process message MessageId=%s, ReceiptHandle=%s, MessageBody=%s, QueueName=%s",
                message.message_id,
                message.receipt_handle,
                message.body,
                self.queue_name,
                exc_info=True,
            )
            return MessageOutcome.FAILED
        return MessageOutcome.DELETED
