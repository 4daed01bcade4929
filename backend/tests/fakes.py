"""Shared test doubles: an in-memory storefront API behind httpx.MockTransport."""

import json
from collections.abc import Callable
from typing import Any

import httpx

from storefront.application.services import StorefrontDataLayer
from storefront.infrastructure.http import HttpRemoteDataSource

BASE_URL = "http://storefront.test/api"

Route = httpx.Response | Callable[[httpx.Request], httpx.Response]


class FakeStorefront:
    """Route table keyed by ``(method, path)`` that records every request.

    ``path`` is relative to ``/api``. A route may be a fixed response or a
    handler; unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, route: Route | Any, status_code: int = 200) -> None:
        if not isinstance(route, httpx.Response) and not callable(route):
            route = httpx.Response(status_code, json=route)
        self.routes[(method.upper(), path)] = route

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": f"No route for {request.method} {path}"})
        if isinstance(route, httpx.Response):
            return httpx.Response(
                route.status_code, content=route.content, headers=route.headers
            )
        return route(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path.removeprefix("/api") == path
        ]

    def source(self) -> HttpRemoteDataSource:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return HttpRemoteDataSource(base_url=BASE_URL, http_client=client)

    def data_layer(self, **kwargs: Any) -> StorefrontDataLayer:
        return StorefrontDataLayer(self.source(), **kwargs)


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)
