"""Abstract base for queue transports.

Defines the primitive operations the queue client builds on: send, receive,
delete, URL lookup and attribute describe. Implementations (e.g.
SQSTransport) own the network calls and retry transient faults internally,
raising TransportError once retries are exhausted.
"""

from abc import ABC, abstractmethod
from typing import Any


class TransportBase(ABC):
    """Abstract base class for queue transports.

    Every operation returns the parsed service response, including its
    ``ResponseMetadata`` so callers can check the status code.
    """

    @property
    @abstractmethod
    def region(self) -> str | None:
        """Region the transport is connected to."""

    @abstractmethod
    async def send_message(
        self, queue_url: str, body: str, attributes: dict[str, dict[str, str]] | None = None
    ) -> dict[str, Any]:
        """Append a message to the queue."""

    @abstractmethod
    async def receive_messages(
        self,
        queue_url: str,
        wait_time_seconds: int,
        max_number_of_messages: int,
        attribute_names: list[str],
        message_attribute_names: list[str],
    ) -> dict[str, Any]:
        """Long-poll the queue for up to max_number_of_messages messages."""

    @abstractmethod
    async def delete_message(self, queue_url: str, receipt_handle: str) -> dict[str, Any]:
        """Permanently delete the delivery identified by the receipt handle."""

    @abstractmethod
    async def get_queue_url(self, queue_name: str) -> dict[str, Any]:
        """Look up the URL the service assigned to the queue name."""

    @abstractmethod
    async def get_queue_attributes(self, queue_url: str, attribute_names: list[str]) -> dict[str, Any]:
        """Describe the queue, returning the requested attributes."""

    async def close(self) -> None:
        """Release network resources; the default transport holds none."""
