"""Route messages to handlers by their MessageType attribute."""

import logging
from collections.abc import Iterable

from sqs_bus.exceptions import AmbiguousHandler, ConfigurationError, HandlerNotFound, UnroutableMessage
from sqs_bus.handlers.base import BaseHandler
from sqs_bus.queue_model_dto import Message

logger = logging.getLogger(__name__)

MESSAGE_TYPE_ATTRIBUTE = "MessageType"


def get_message_type(message: Message) -> str | None:
    """Return the MessageType attribute (exact key match), or None when absent."""
    return message.attributes.get(MESSAGE_TYPE_ATTRIBUTE)


class MessageRouter:
    """Selects the single registered handler for a message type.

    Handlers declaring overlapping ``message_types`` are rejected when the
    router is built. Handlers with a custom ``can_process`` can only be
    checked per message, where a second claimant raises AmbiguousHandler.
    """

    def __init__(self, handlers: Iterable[BaseHandler]) -> None:
        self.handlers = list(handlers)
        self._check_declared_types()

    def _check_declared_types(self) -> None:
        owners: dict[str, BaseHandler] = {}
        for handler in self.handlers:
            for message_type in getattr(handler, "message_types", ()):
                if message_type in owners and owners[message_type] is not handler:
                    raise ConfigurationError(
                        f"MessageType={message_type} is claimed by both "
                        f"{type(owners[message_type]).__name__} and {type(handler).__name__}"
                    )
                owners[message_type] = handler

    def select_handler(self, message_type: str) -> BaseHandler | None:
        """Return the handler for message_type, None if nobody claims it."""
        matches = [handler for handler in self.handlers if handler.can_process(message_type)]
        if len(matches) > 1:
            names = ", ".join(type(handler).__name__ for handler in matches)
            raise AmbiguousHandler(
                f"More than one handler found for MessageType={message_type}: {names}",
                message_type=message_type,
            )
        return matches[0] if matches else None

    def route(self, message: Message) -> BaseHandler:
        """Return the handler for the message or raise the matching RoutingError."""
        message_type = get_message_type(message)
        if message_type is None:
            raise UnroutableMessage(f"No '{MESSAGE_TYPE_ATTRIBUTE}' attribute present in MessageId={message.message_id}")

        handler = self.select_handler(message_type)
        if handler is None:
            raise HandlerNotFound(f"No handler found for MessageType={message_type}", message_type=message_type)
        return handler
