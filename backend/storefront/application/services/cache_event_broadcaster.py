"""Cache event broadcaster: fans store transitions out to SSE clients."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Callable

from storefront.application.services.entity_cache_store import EntityCacheStore
from storefront.domain.entities import CacheEvent

logger = logging.getLogger(__name__)


class CacheEventBroadcaster:
    """Subscribes to one store and relays every transition to connected clients.

    Each connected client gets its own asyncio.Queue. A client whose queue
    fills up is disconnected instead of slowing the store down.
    """

    def __init__(self, store: EntityCacheStore, max_queue_size: int = 256) -> None:
        self._queues: list[asyncio.Queue[str | None]] = []
        self._max_queue_size = max_queue_size
        self._unsubscribe: Callable[[], None] = store.subscribe(self._on_event)

    def subscribe(self) -> AsyncGenerator[str, None]:
        """Register a client now and return its stream of SSE-formatted strings.

        The queue is attached before the first iteration, so events emitted
        while the response is being set up are not lost.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._max_queue_size)
        self._queues.append(queue)
        return self._stream(queue)

    async def _stream(self, queue: asyncio.Queue[str | None]) -> AsyncGenerator[str, None]:
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    def _on_event(self, event: CacheEvent) -> None:
        message = f"event: {event.action.value}\ndata: {json.dumps(event.to_dict())}\n\n"
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("SSE client queue full, disconnecting")

        for q in dead_queues:
            self._queues.remove(q)
            self._close(q)

    async def shutdown(self) -> None:
        """Detach from the store and disconnect all clients."""
        self._unsubscribe()
        for queue in self._queues:
            self._close(queue)
        self._queues.clear()

    @staticmethod
    def _close(queue: asyncio.Queue[str | None]) -> None:
        # Make room for the sentinel so the consumer loop terminates.
        while not queue.empty():
            queue.get_nowait()
        queue.put_nowait(None)

    @property
    def client_count(self) -> int:
        return len(self._queues)
