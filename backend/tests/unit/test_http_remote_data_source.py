"""Unit tests for the HttpRemoteDataSource."""

import httpx
import pytest

from storefront.domain.exceptions import (
    RemoteAuthorizationError,
    RemoteConflictError,
    RemoteNotFoundError,
    RemoteServerError,
    RemoteTransportError,
    RemoteValidationError,
)
from storefront.infrastructure.http import HttpRemoteDataSource
from tests.fakes import BASE_URL, FakeStorefront, request_json


# ── Helpers ──


def _source_for(handler) -> HttpRemoteDataSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpRemoteDataSource(base_url=BASE_URL, http_client=client)


def _fixed(status_code: int, **kwargs):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, **kwargs)

    return handler


# ── Tests ──


@pytest.mark.asyncio
async def test_list_body_is_identity_normalized():
    server = FakeStorefront()
    server.on("GET", "/products", [{"_id": "1", "name": "Mug"}, {"id": "2"}])

    result = await server.source().get("/products")

    assert result == [{"id": "1", "name": "Mug"}, {"id": "2"}]


@pytest.mark.asyncio
async def test_paginated_body_normalizes_items_and_keeps_pagination():
    server = FakeStorefront()
    server.on("GET", "/products", {
        "products": [{"_id": "1"}],
        "pagination": {"page": 1, "hasMore": False},
    })

    result = await server.source().get("/products")

    assert result["products"] == [{"id": "1"}]
    assert result["pagination"] == {"page": 1, "hasMore": False}


@pytest.mark.asyncio
async def test_params_and_body_are_sent():
    server = FakeStorefront()
    server.on("GET", "/reviews", [])
    server.on("POST", "/orders", {"_id": "o1"})
    source = server.source()

    await source.get("reviews", {"productId": "p1"})
    await source.post("/orders", {"items": [1]})

    assert server.calls("GET", "/reviews")[0].url.params["productId"] == "p1"
    assert request_json(server.calls("POST", "/orders")[0]) == {"items": [1]}


@pytest.mark.asyncio
async def test_absolute_endpoint_bypasses_base_url():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"ok": True})

    await _source_for(handler).get("https://other.example.com/api/ping")

    assert seen == ["https://other.example.com/api/ping"]


@pytest.mark.asyncio
async def test_empty_body_returns_none():
    result = await _source_for(_fixed(204)).delete("/products/1")

    assert result is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, error_cls",
    [
        (400, RemoteValidationError),
        (401, RemoteAuthorizationError),
        (403, RemoteAuthorizationError),
        (404, RemoteNotFoundError),
        (409, RemoteConflictError),
        (500, RemoteServerError),
        (503, RemoteServerError),
    ],
)
async def test_status_codes_map_to_error_types(status_code, error_cls):
    source = _source_for(_fixed(status_code, json={"error": "nope"}))

    with pytest.raises(error_cls) as exc_info:
        await source.get("/products")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.server_message == "nope"


@pytest.mark.asyncio
async def test_server_message_from_nested_error_object():
    source = _source_for(_fixed(422, json={"error": {"message": "Price must be positive"}}))

    with pytest.raises(RemoteValidationError) as exc_info:
        await source.put("/products/1", {"price": -1})

    assert exc_info.value.server_message == "Price must be positive"


@pytest.mark.asyncio
async def test_server_message_from_message_field():
    source = _source_for(_fixed(400, json={"message": "Coupon expired"}))

    with pytest.raises(RemoteValidationError) as exc_info:
        await source.post("/coupons", {})

    assert exc_info.value.server_message == "Coupon expired"
    assert exc_info.value.payload == {"message": "Coupon expired"}


@pytest.mark.asyncio
async def test_non_json_error_has_no_server_message():
    source = _source_for(_fixed(502, text="<html>Bad gateway</html>"))

    with pytest.raises(RemoteServerError) as exc_info:
        await source.get("/products")

    assert exc_info.value.server_message is None
    assert exc_info.value.payload == "<html>Bad gateway</html>"


@pytest.mark.asyncio
async def test_non_json_success_body_raises():
    source = _source_for(_fixed(200, text="not json"))

    with pytest.raises(RemoteServerError):
        await source.get("/products")


@pytest.mark.asyncio
async def test_connection_error_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteTransportError):
        await _source_for(handler).get("/products")


@pytest.mark.asyncio
async def test_timeout_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RemoteTransportError, match="timed out"):
        await _source_for(handler).get("/products")


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(_fixed(200, json=[])))
    source = HttpRemoteDataSource(base_url=BASE_URL, http_client=client)

    await source.aclose()

    assert client.is_closed is False
    await client.aclose()
