"""Error types raised by the message bus.

Routing errors are contained per message by the consumer loop; transport
errors surface to callers of receive, delete and status; configuration
errors are fatal at startup.
"""


class SqsBusError(Exception):
    """Base class for all message bus errors."""


class ConfigurationError(SqsBusError):
    """A required configuration section or object is missing."""


class InvalidArgument(SqsBusError, ValueError):
    """An empty queue name or message body was supplied."""


class TransportError(SqsBusError):
    """A queue operation failed after the transport exhausted its retries."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RoutingError(SqsBusError):
    """A message could not be matched to exactly one handler."""

    def __init__(self, message: str, message_type: str | None = None) -> None:
        super().__init__(message)
        self.message_type = message_type


class UnroutableMessage(RoutingError):
    """The message carries no MessageType attribute."""


class HandlerNotFound(RoutingError):
    """No registered handler claims the message type."""


class AmbiguousHandler(RoutingError):
    """More than one registered handler claims the message type."""
