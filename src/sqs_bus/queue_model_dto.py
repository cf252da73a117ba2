"""Queue message data transfer objects.

Defines the shape of messages received from the queue, the queue status
snapshot, and the outcome of a best-effort write.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

RECEIVE_COUNT_ATTRIBUTE = "ApproximateReceiveCount"


class Message(BaseModel):
    """A message delivered by a single receive call.

    The receipt handle is only valid for the receive that produced it and is
    required to delete this delivery.
    """

    message_id: str = Field(..., description="Queue-assigned message identifier")
    body: str = Field("", description="Message payload")
    receipt_handle: str = Field(..., description="Single-use token for deleting this delivery")
    attributes: dict[str, str] = Field(default_factory=dict, description="String message attributes")
    approximate_receive_count: int | None = Field(None, description="How many times the queue delivered it")

    @classmethod
    def from_sqs(cls, raw: dict[str, Any]) -> "Message":
        """Build a Message from one entry of a ReceiveMessage response."""
        attributes = {}
        for name, value in (raw.get("MessageAttributes") or {}).items():
            # binary attributes carry no StringValue and cannot be routed on
            if "StringValue" in value:
                attributes[name] = value["StringValue"]

        receive_count = (raw.get("Attributes") or {}).get(RECEIVE_COUNT_ATTRIBUTE)
        return cls(
            message_id=raw["MessageId"],
            body=raw.get("Body", ""),
            receipt_handle=raw["ReceiptHandle"],
            attributes=attributes,
            approximate_receive_count=int(receive_count) if receive_count is not None else None,
        )


class QueueStatus(BaseModel):
    """Point-in-time health and depth of a queue. Never cached."""

    is_healthy: bool = Field(..., description="True if the describe call returned 200")
    region: str | None = Field(None, description="Region the queue lives in")
    queue_name: str = Field(..., description="Name of the queue")
    queue_url: str = Field(..., description="Queue URL with the account number masked")
    approximate_number_of_messages: int = Field(0, description="Messages available for retrieval")
    approximate_number_of_messages_not_visible: int = Field(0, description="Messages in flight")
    last_modified_timestamp: datetime | None = Field(None, description="When the queue was last changed")

    @staticmethod
    def parse_timestamp(value: str | None) -> datetime | None:
        """Convert an epoch-seconds attribute into an aware UTC datetime."""
        if not value:
            return None
        return datetime.fromtimestamp(int(value), tz=timezone.utc)


class WriteResult(BaseModel):
    """Outcome of a best-effort write. A failed send is logged, not raised."""

    sent: bool = Field(..., description="True if the queue accepted the message")
    message_id: str | None = Field(None, description="Queue-assigned id when sent")
    duration_ms: float = Field(0.0, description="Time spent in the send call")
