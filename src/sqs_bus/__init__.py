"""Amazon SQS message bus: poll a queue and dispatch messages by MessageType."""

from sqs_bus.client import QueueClient
from sqs_bus.config import Settings, SubscriptionConfig, TransportConfig, get_settings
from sqs_bus.consumer import ConsumerLoop, MessageOutcome
from sqs_bus.handlers.base import BaseHandler
from sqs_bus.queue_model_dto import Message, QueueStatus, WriteResult
from sqs_bus.resolver import QueueEndpointResolver
from sqs_bus.router import MessageRouter
from sqs_bus.transport_sqs import SQSTransport

__all__ = [
    "BaseHandler",
    "ConsumerLoop",
    "Message",
    "MessageOutcome",
    "MessageRouter",
    "QueueClient",
    "QueueEndpointResolver",
    "QueueStatus",
    "SQSTransport",
    "Settings",
    "SubscriptionConfig",
    "TransportConfig",
    "WriteResult",
    "get_settings",
]
