"""Demo handler for the test_message type.

Post a message with ``MessageType=test_message`` to verify a consumer is
wired up end to end.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from sqs_bus.handlers.base import BaseHandler
from sqs_bus.queue_model_dto import Message

logger = logging.getLogger(__name__)

TEST_MESSAGE_TYPE = "test_message"


class DemoPayload(BaseModel):
    """Payload carried by a test_message."""

    model_config = ConfigDict(populate_by_name=True)

    application: str = Field(..., description="Application that produced the message")
    action: str = Field(..., description="What happened")
    last_update_date_time: str | None = Field(None, alias="lastUpdateDateTime")


class Handler(BaseHandler):
    """Parses and logs test messages."""

    message_types = (TEST_MESSAGE_TYPE,)

    async def process(self, message: Message) -> None:
        """Validate the payload and log it; invalid JSON raises so the message stays queued."""
        payload = DemoPayload.model_validate_json(message.body)
        logger.info("Test Message=%s. Processed", payload.model_dump_json(by_alias=True))
