"""Queue name to queue URL resolution.

The mapping is looked up once per name and kept for the life of the
resolver. It is never invalidated, so a queue deleted and recreated under
the same name while the process runs keeps resolving to the old URL.
"""

import logging

from sqs_bus.exceptions import InvalidArgument
from sqs_bus.transport_base import TransportBase

logger = logging.getLogger(__name__)


class QueueEndpointResolver:
    """Caches the service-assigned URL for each queue name.

    Concurrent misses for the same name may each perform a lookup; the first
    result stored wins and later ones are discarded, which is harmless while
    the mapping is stable.
    """

    def __init__(self, transport: TransportBase) -> None:
        self.transport = transport
        self._cache: dict[str, str] = {}

    def cached(self, queue_name: str) -> str | None:
        """Return the cached URL without a lookup, or None."""
        return self._cache.get(queue_name)

    async def resolve(self, queue_name: str) -> str:
        """Return the URL for queue_name, looking it up on first use."""
        if not queue_name:
            raise InvalidArgument("queue_name must not be empty")

        queue_url = self._cache.get(queue_name)
        if queue_url is not None:
            return queue_url

        logger.info("Checking if %s exists", queue_name)
        response = await self.transport.get_queue_url(queue_name)
        return self._cache.setdefault(queue_name, response["QueueUrl"])
