"""Amazon SQS transport using aioboto3.

botocore retries transient network and service faults with exponential
back-off; this module hooks the retry decision to log every failed attempt
and converts errors that survive the retries into TransportError.
"""

import asyncio
import contextlib
import json
import logging
from typing import Any

import aioboto3
from botocore.config import Config as BotoCoreConfig
from botocore.exceptions import BotoCoreError, ClientError

from sqs_bus.config import TransportConfig
from sqs_bus.exceptions import TransportError
from sqs_bus.transport_base import TransportBase

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> str:
    """Serialize for a log line; never fails on odd types."""
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


class SQSTransport(TransportBase):
    """Queue transport backed by an aiobotocore SQS client.

    The client is created lazily on the first call, or explicitly with
    ``open()`` / ``async with``. Call ``close()`` when done to release the
    HTTP session.
    """

    def __init__(self, config: TransportConfig | None = None, session: aioboto3.Session | None = None) -> None:
        self._config = config or TransportConfig()
        self._session = session or aioboto3.Session()
        self._boto_config = BotoCoreConfig(
            connect_timeout=self._config.connect_timeout,
            read_timeout=self._config.read_timeout,
            retries={"max_attempts": self._config.max_retries, "mode": "standard"},
        )
        self._exit_stack = contextlib.AsyncExitStack()
        self._client = None
        self._open_lock = asyncio.Lock()

    @property
    def max_retries(self) -> int:
        return self._config.max_retries

    @property
    def region(self) -> str | None:
        if self._client is not None:
            return self._client.meta.region_name
        return self._config.region_name

    async def open(self) -> "SQSTransport":
        """Create the underlying client and register the retry logger."""
        async with self._open_lock:
            if self._client is None:
                client = await self._exit_stack.enter_async_context(
                    self._session.client(
                        "sqs",
                        region_name=self._config.region_name,
                        endpoint_url=self._config.endpoint_url,
                        config=self._boto_config,
                    )
                )
                client.meta.events.register("needs-retry.sqs", self._log_retry)
                self._client = client
        return self

    async def close(self) -> None:
        """Close the client session; safe to call more than once."""
        self._client = None
        await self._exit_stack.aclose()

    async def __aenter__(self) -> "SQSTransport":
        return await self.open()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _log_retry(
        self,
        response: tuple | None = None,
        operation: Any = None,
        attempts: int | None = None,
        caught_exception: Exception | None = None,
        request_dict: dict | None = None,
        **kwargs: Any,
    ) -> None:
        """Log a failed attempt; botocore's own handler decides whether to retry.

        Returns None so the retry decision of the standard handler stands.
        """
        parsed = response[1] if response else {}
        metadata = parsed.get("ResponseMetadata", {})
        status_code = metadata.get("HTTPStatusCode")
        if caught_exception is None and status_code is not None and status_code < 400:
            return None

        logger.debug(
            "RequestName=%s RetriesCount=%s MaxRetries=%s RequestParameters=%s ResponseCode=%s ResponseMetadata=%s",
            getattr(operation, "name", None),
            attempts,
            self.max_retries,
            _json_safe((request_dict or {}).get("body")),
            status_code if status_code is not None else repr(caught_exception),
            _json_safe(metadata),
        )
        return None

    async def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        await self.open()
        try:
            return await getattr(self._client, operation)(**params)
        except ClientError as e:
            status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise TransportError(f"{operation} failed: {e}", status_code=status_code) from e
        except BotoCoreError as e:
            raise TransportError(f"{operation} failed: {e}") from e

    async def send_message(
        self, queue_url: str, body: str, attributes: dict[str, dict[str, str]] | None = None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"QueueUrl": queue_url, "MessageBody": body}
        if attributes:
            params["MessageAttributes"] = attributes
        return await self._call("send_message", **params)

    async def receive_messages(
        self,
        queue_url: str,
        wait_time_seconds: int,
        max_number_of_messages: int,
        attribute_names: list[str],
        message_attribute_names: list[str],
    ) -> dict[str, Any]:
        return await self._call(
            "receive_message",
            QueueUrl=queue_url,
            WaitTimeSeconds=wait_time_seconds,
            MaxNumberOfMessages=max_number_of_messages,
            AttributeNames=attribute_names,
            MessageAttributeNames=message_attribute_names,
        )

    async def delete_message(self, queue_url: str, receipt_handle: str) -> dict[str, Any]:
        return await self._call("delete_message", QueueUrl=queue_url, ReceiptHandle=receipt_handle)

    async def get_queue_url(self, queue_name: str) -> dict[str, Any]:
        return await self._call("get_queue_url", QueueName=queue_name)

    async def get_queue_attributes(self, queue_url: str, attribute_names: list[str]) -> dict[str, Any]:
        return await self._call("get_queue_attributes", QueueUrl=queue_url, AttributeNames=attribute_names)
