"""Unit tests for the add / update / delete mutation hooks."""

import httpx
import pytest

from storefront.domain.exceptions import MutationError, UnknownEntityError
from tests.fakes import FakeStorefront, request_json


@pytest.fixture
def server() -> FakeStorefront:
    server = FakeStorefront()
    server.on("GET", "/products", [{"_id": "p1", "price": 5}])
    server.on("GET", "/categories", [{"_id": "c1", "productCount": 1}])
    server.on("GET", "/users", [{"_id": "u1"}])
    server.on("GET", "/orders", [{"_id": "o1", "userId": "u1"}])
    server.on("GET", "/banners", [{"_id": "b1"}])
    return server


async def _warm(layer, *entities):
    for name in entities:
        await layer.coordinator.fetch(name)


@pytest.mark.asyncio
async def test_create_product_cascades_to_categories(server: FakeStorefront):
    server.on("POST", "/products", {"_id": "p2", "price": 12}, status_code=201)
    layer = server.data_layer()
    await _warm(layer, "products", "categories")
    server.requests.clear()
    server.on("GET", "/products", [{"_id": "p1", "price": 5}, {"_id": "p2", "price": 12}])

    hook = layer.add_hook("allProducts")
    result = await hook.add_data({"name": "Cap", "price": 12})

    assert result == {"id": "p2", "price": 12}
    assert request_json(server.calls("POST", "/products")[0]) == {"name": "Cap", "price": 12}
    assert len(server.calls("GET", "/products")) == 1
    assert len(server.calls("GET", "/categories")) == 1
    products = layer.store.get_entity_state("products")
    assert products.last_fetched is not None
    assert [p["id"] for p in products.data] == ["p1", "p2"]
    assert layer.store.get_entity_state("categories").last_fetched is not None
    assert hook.is_loading is False
    assert hook.error is None


@pytest.mark.asyncio
async def test_write_completes_before_any_invalidation(server: FakeStorefront):
    server.on("POST", "/orders", {"_id": "o2"})
    layer = server.data_layer()
    await _warm(layer, "orders", "users", "products")
    server.requests.clear()

    await layer.add_hook("orders").add_data({"items": []})

    methods = [(r.method, r.url.path) for r in server.requests]
    assert methods[0] == ("POST", "/api/orders")
    assert sorted(methods[1:]) == [
        ("GET", "/api/orders"),
        ("GET", "/api/products"),
        ("GET", "/api/users"),
    ]


@pytest.mark.asyncio
async def test_success_callback_receives_server_payload(server: FakeStorefront):
    server.on("POST", "/banners", {"_id": "b2", "title": "Summer"})
    layer = server.data_layer()
    received = []

    await layer.add_hook("heroBanners", on_success=received.append).add_data({"title": "Summer"})

    assert received == [{"id": "b2", "title": "Summer"}]
    assert len(server.calls("GET", "/banners")) == 1


@pytest.mark.asyncio
async def test_update_with_id_and_data_uses_path_form(server: FakeStorefront):
    server.on("PUT", "/products/5", {"_id": "5", "price": 10})
    layer = server.data_layer()

    await layer.update_hook("products").update_data({"id": "5", "data": {"price": 10}})

    request = server.calls("PUT", "/products/5")[0]
    assert request_json(request) == {"price": 10}


@pytest.mark.asyncio
async def test_update_with_embedded_identity_uses_base_endpoint(server: FakeStorefront):
    server.on("PUT", "/products", {"_id": "5", "price": 10})
    layer = server.data_layer()

    await layer.update_hook("products").update_data({"_id": "5", "price": 10})

    request = server.calls("PUT", "/products")[0]
    assert request_json(request) == {"_id": "5", "price": 10}


@pytest.mark.asyncio
async def test_delete_falls_back_to_query_param_on_404(server: FakeStorefront):
    server.on("DELETE", "/reviews", {"message": "Review deleted"})
    server.on("GET", "/reviews", [])
    layer = server.data_layer()

    result = await layer.delete_hook("reviews").delete_data("r1")

    assert result == {"message": "Review deleted"}
    assert len(server.calls("DELETE", "/reviews/r1")) == 1
    fallback = server.calls("DELETE", "/reviews")[0]
    assert fallback.url.params["id"] == "r1"
    # reviews -> products cascade
    assert len(server.calls("GET", "/products")) == 1


@pytest.mark.asyncio
async def test_delete_path_form_success_skips_fallback(server: FakeStorefront):
    server.on("DELETE", "/sales/s1", {"success": True})
    server.on("GET", "/sales", [])
    layer = server.data_layer()

    await layer.delete_hook("allSales").delete_data("s1")

    assert server.calls("DELETE", "/sales") == []


@pytest.mark.asyncio
async def test_failed_write_leaves_cache_untouched(server: FakeStorefront):
    server.on("POST", "/orders", {"error": "Insufficient stock for Mug"}, status_code=409)
    layer = server.data_layer()
    await _warm(layer, "orders", "users", "products")
    before = layer.store.snapshot()
    server.requests.clear()
    hook = layer.add_hook("orders")

    with pytest.raises(MutationError) as exc_info:
        await hook.add_data({"items": [{"productId": "p1", "quantity": 99}]})

    assert exc_info.value.message == "Insufficient stock for Mug"
    assert exc_info.value.is_conflict
    assert hook.error == "Insufficient stock for Mug"
    assert hook.is_loading is False
    assert layer.store.snapshot() == before
    assert [r.method for r in server.requests] == ["POST"]


@pytest.mark.asyncio
async def test_failed_write_without_message_uses_generic_text(server: FakeStorefront):
    server.on("PUT", "/users", httpx.Response(500, text="oops"))
    layer = server.data_layer()

    with pytest.raises(MutationError) as exc_info:
        await layer.update_hook("users").update_data({"_id": "u1", "name": "A"})

    assert exc_info.value.message == "Failed to update data"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_forbidden_write_gets_denial_message(server: FakeStorefront):
    server.on("DELETE", "/categories/c1", httpx.Response(403))
    layer = server.data_layer()

    with pytest.raises(MutationError) as exc_info:
        await layer.delete_hook("categories").delete_data("c1")

    assert exc_info.value.is_authorization_error
    assert "not authorized" in exc_info.value.message
    assert layer.store.get_entity_state("categories").error is None


@pytest.mark.asyncio
async def test_refetch_failure_does_not_fail_the_mutation(server: FakeStorefront):
    server.on("POST", "/products", {"_id": "p2"})
    server.on("GET", "/categories", {"error": "categories down"}, status_code=500)
    layer = server.data_layer()

    result = await layer.add_hook("products").add_data({"name": "Cap"})

    assert result == {"id": "p2"}
    assert layer.store.get_entity_state("categories").error == "categories down"


@pytest.mark.asyncio
async def test_independent_hooks_track_their_own_state(server: FakeStorefront):
    server.on("POST", "/products", {"_id": "p2"})
    server.on("POST", "/banners", {"error": "Image required"}, status_code=400)
    layer = server.data_layer()
    products_hook = layer.add_hook("products")
    banners_hook = layer.add_hook("banners")

    await products_hook.add_data({"name": "Cap"})
    with pytest.raises(MutationError):
        await banners_hook.add_data({})

    assert products_hook.error is None
    assert banners_hook.error == "Image required"


def test_unknown_entity_is_a_configuration_error(server: FakeStorefront):
    layer = server.data_layer()
    with pytest.raises(UnknownEntityError):
        layer.add_hook("allWidgets", api="/widgets")


@pytest.mark.asyncio
async def test_unexpected_write_error_clears_loading(server: FakeStorefront):
    def broken(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("adapter bug")

    server.on("POST", "/coupons", broken)
    layer = server.data_layer()
    hook = layer.add_hook("coupons")

    with pytest.raises(RuntimeError):
        await hook.add_data({"code": "SAVE10"})

    assert hook.is_loading is False
    assert server.calls("GET", "/coupons") == []
