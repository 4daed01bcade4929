"""FastAPI dependency injection: hands the process-wide data layer to endpoints."""

from fastapi import Request

from storefront.application.services import CacheEventBroadcaster, StorefrontDataLayer


def get_data_layer(request: Request) -> StorefrontDataLayer:
    """The StorefrontDataLayer built in the application lifespan."""
    return request.app.state.data_layer


def get_cache_broadcaster(request: Request) -> CacheEventBroadcaster:
    """The broadcaster attached to the data layer's store."""
    return request.app.state.cache_broadcaster
