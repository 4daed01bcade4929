"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import get_settings
from storefront.application.services import (
    CacheEventBroadcaster,
    StorefrontDataLayer,
    EntityRegistry,
    load_invalidation_graph,
)
from storefront.infrastructure.http import HttpRemoteDataSource
from storefront.infrastructure.logging.log_config import setup_logging
from storefront.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


def build_data_layer() -> StorefrontDataLayer:
    """Wire the remote source, invalidation graph and store from settings."""
    settings = get_settings()
    registry = EntityRegistry()
    graph = load_invalidation_graph(settings.invalidation_graph_file, registry.names)
    source = HttpRemoteDataSource(
        base_url=settings.remote_api_base_url,
        timeout=settings.remote_request_timeout,
    )
    return StorefrontDataLayer(
        source,
        registry=registry,
        graph=graph,
        dedupe_inflight=settings.fetch_dedupe_inflight,
    )


def _attach(app: FastAPI, data_layer: StorefrontDataLayer) -> None:
    app.state.data_layer = data_layer
    app.state.cache_broadcaster = CacheEventBroadcaster(data_layer.store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the data layer, optionally bootstrap, then tear down."""
    settings = get_settings()
    setup_logging()

    owns_layer = getattr(app.state, "data_layer", None) is None
    if owns_layer:
        _attach(app, build_data_layer())
        logger.info("Data layer ready against %s", settings.remote_api_base_url)

    if settings.bootstrap_on_startup:
        try:
            await app.state.data_layer.coordinator.fetch_initial()
        except Exception:
            logger.exception("Initial data load failed, continuing with a cold cache")

    yield

    # Shutdown
    await app.state.cache_broadcaster.shutdown()
    if owns_layer:
        await app.state.data_layer.aclose()


def create_app(data_layer: StorefrontDataLayer | None = None) -> FastAPI:
    """Factory function that builds and configures the FastAPI application.

    Pass ``data_layer`` to run against an already-built layer (tests do);
    otherwise the lifespan builds one from settings.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    if data_layer is not None:
        _attach(app, data_layer)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8030,
        reload=True,
    )
