"""Unit tests for relaying cache transitions to SSE clients."""

import json

import pytest

from storefront.application.services import (
    CacheEventBroadcaster,
    EntityCacheStore,
    EntityRegistry,
)


@pytest.mark.asyncio
async def test_client_is_registered_before_first_read():
    store = EntityCacheStore(EntityRegistry())
    broadcaster = CacheEventBroadcaster(store)

    stream = broadcaster.subscribe()
    assert broadcaster.client_count == 1

    # Emitted before the client starts reading; still delivered.
    store.begin_fetch("allProducts")
    message = await anext(stream)

    event_line, data_line, _, _ = message.split("\n")
    assert event_line == "event: fetch_started"
    payload = json.loads(data_line.removeprefix("data: "))
    assert payload["entity"] == "products"
    assert payload["is_loading"] is True
    await broadcaster.shutdown()


@pytest.mark.asyncio
async def test_events_arrive_in_order():
    store = EntityCacheStore(EntityRegistry())
    broadcaster = CacheEventBroadcaster(store)
    stream = broadcaster.subscribe()

    store.begin_fetch("orders")
    store.complete_fetch("orders", [{"id": "o1"}])

    first = await anext(stream)
    second = await anext(stream)
    assert first.startswith("event: fetch_started")
    assert second.startswith("event: fetch_completed")
    await broadcaster.shutdown()


@pytest.mark.asyncio
async def test_shutdown_ends_client_streams():
    store = EntityCacheStore(EntityRegistry())
    broadcaster = CacheEventBroadcaster(store)
    stream = broadcaster.subscribe()

    await broadcaster.shutdown()

    with pytest.raises(StopAsyncIteration):
        await anext(stream)
    assert broadcaster.client_count == 0


@pytest.mark.asyncio
async def test_slow_client_is_disconnected():
    store = EntityCacheStore(EntityRegistry())
    broadcaster = CacheEventBroadcaster(store, max_queue_size=1)
    stream = broadcaster.subscribe()

    store.begin_fetch("products")
    store.begin_fetch("orders")

    assert broadcaster.client_count == 0
    with pytest.raises(StopAsyncIteration):
        await anext(stream)
