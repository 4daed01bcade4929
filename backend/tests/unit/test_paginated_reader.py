"""Unit tests for the infinite-scroll page reader."""

import httpx
import pytest

from storefront.application.services import PaginatedReader
from storefront.domain.exceptions import RemoteServerError
from tests.fakes import FakeStorefront


def _page_route(total: int):
    items = [{"_id": f"p{i}"} for i in range(1, total + 1)]

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        limit = int(request.url.params["limit"])
        chunk = items[(page - 1) * limit: page * limit]
        return httpx.Response(200, json={
            "products": chunk,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": -(-total // limit),
                "hasMore": page * limit < total,
            },
        })

    return handler


@pytest.mark.asyncio
async def test_pages_accumulate_until_exhausted():
    server = FakeStorefront()
    server.on("GET", "/products", _page_route(5))
    reader = PaginatedReader(server.source(), "/products", limit=2, items_key="products")

    await reader.load_first()
    assert [p["id"] for p in reader.items] == ["p1", "p2"]
    assert reader.has_more is True
    assert reader.total_count == 5

    await reader.load_more()
    await reader.load_more()
    assert [p["id"] for p in reader.items] == ["p1", "p2", "p3", "p4", "p5"]
    assert reader.has_more is False

    await reader.load_more()
    assert len(server.calls("GET", "/products")) == 3


@pytest.mark.asyncio
async def test_load_first_resets_accumulated_items():
    server = FakeStorefront()
    server.on("GET", "/products", _page_route(4))
    reader = PaginatedReader(server.source(), "/products", limit=2, items_key="products")

    await reader.load_first()
    await reader.load_more()
    await reader.load_first()

    assert [p["id"] for p in reader.items] == ["p1", "p2"]
    assert reader.page == 1


@pytest.mark.asyncio
async def test_bare_array_is_the_whole_collection():
    server = FakeStorefront()
    server.on("GET", "/products", [{"_id": "a"}, {"_id": "b"}])
    reader = PaginatedReader(server.source(), "/products")

    items = await reader.load_first()

    assert [p["id"] for p in items] == ["a", "b"]
    assert reader.has_more is False
    assert reader.total_count == 2


@pytest.mark.asyncio
async def test_failed_page_records_error():
    server = FakeStorefront()
    server.on("GET", "/products", {"error": "Database unavailable"}, status_code=503)
    reader = PaginatedReader(server.source(), "/products")

    with pytest.raises(RemoteServerError):
        await reader.load_first()

    assert reader.error == "Database unavailable"
    assert reader.is_loading is False
