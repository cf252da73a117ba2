"""Base handler interface for queue messages.

Handlers are selected by the message's MessageType attribute. The consumer
asks every registered handler whether it can process the type, then awaits
``process`` on the single one that does and deletes the message afterwards.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from sqs_bus.queue_model_dto import Message


class BaseHandler(ABC):
    """Abstract base for message-type handlers.

    Subclasses usually list the types they accept in ``message_types``; the
    router checks those declarations for overlaps at startup. Handlers that
    need a dynamic rule override ``can_process`` instead.
    """

    message_types: ClassVar[tuple[str, ...]] = ()

    def can_process(self, message_type: str) -> bool:
        """Return True if this handler accepts the message type."""
        return message_type in self.message_types

    @abstractmethod
    async def process(self, message: Message) -> None:
        """Process the message. Raise on failure so it is not deleted."""
