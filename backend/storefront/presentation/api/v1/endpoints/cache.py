"""Cache read, invalidation and event-stream endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from storefront.application.schemas import (
    CacheSummaryResponse,
    EntityStateResponse,
    FilteredReadResponse,
    InvalidationGraphResponse,
)
from storefront.application.services import CacheEventBroadcaster, StorefrontDataLayer
from storefront.application.services.selectors import describe
from storefront.domain.exceptions import RemoteDataSourceError, UnknownEntityError
from storefront.infrastructure.dependencies import get_cache_broadcaster, get_data_layer

router = APIRouter(prefix="/cache", tags=["Cache"])


def _state(layer: StorefrontDataLayer, name: str) -> EntityStateResponse:
    record = layer.store.get_entity_state(name)
    view = describe(record)
    return EntityStateResponse(entity=record.name, **asdict(view))


def _parse_filters(request: Request) -> dict[str, str | bool]:
    """Query-string filters; ``true``/``false`` become booleans."""
    filters: dict[str, str | bool] = {}
    for key, value in request.query_params.items():
        lowered = value.lower()
        if lowered == "true":
            filters[key] = True
        elif lowered == "false":
            filters[key] = False
        else:
            filters[key] = value
    return filters


@router.get("", response_model=CacheSummaryResponse)
async def cache_summary(
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> CacheSummaryResponse:
    """State of every cached entity plus the initialization flags."""
    return CacheSummaryResponse(
        initial_data_loaded=layer.store.initial_data_loaded,
        global_loading=layer.store.global_loading,
        entities=[_state(layer, name) for name in layer.store.entity_names],
    )


@router.get("/events")
async def cache_events(
    broadcaster: CacheEventBroadcaster = Depends(get_cache_broadcaster),
) -> StreamingResponse:
    """Server-Sent Events stream of every cache transition."""
    return StreamingResponse(
        broadcaster.subscribe(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/graph", response_model=InvalidationGraphResponse)
async def invalidation_graph(
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> InvalidationGraphResponse:
    """The invalidation relationship table currently in force."""
    return InvalidationGraphResponse(
        edges=layer.graph.as_dict(),
        one_way_edges=layer.graph.one_way_edges(),
    )


@router.post("/bootstrap", response_model=CacheSummaryResponse)
async def bootstrap(
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> CacheSummaryResponse:
    """Load products, categories and reviews unless already cached."""
    await layer.coordinator.fetch_initial()
    return await cache_summary(layer)


@router.post("/invalidate-all", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_all(
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> None:
    """Mark every entity stale and reset the initialization flag."""
    layer.store.invalidate_all()


@router.get("/{entity}", response_model=EntityStateResponse | FilteredReadResponse)
async def read_entity(
    entity: str,
    request: Request,
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> EntityStateResponse | FilteredReadResponse:
    """Read an entity through the cache; query parameters become filters."""
    filters = _parse_filters(request)
    try:
        definition = layer.registry.get(entity)
        query = definition.build_query(filters)
        data = await layer.coordinator.fetch(definition.name, filters)
    except UnknownEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RemoteDataSourceError as e:
        code = e.status_code if e.status_code and e.status_code < 500 else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=e.server_message or e.message)

    if query:
        return FilteredReadResponse(entity=definition.name, filters=query, data=data)
    return _state(layer, definition.name)


@router.post("/{entity}/invalidate", response_model=EntityStateResponse)
async def invalidate_entity(
    entity: str,
    refetch: bool = False,
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> EntityStateResponse:
    """Invalidate one entity, optionally refetching it right away."""
    try:
        name = layer.registry.resolve(entity)
        if refetch:
            await layer.coordinator.refetch(name)
        else:
            layer.store.invalidate(name)
    except UnknownEntityError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RemoteDataSourceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.server_message or e.message)
    return _state(layer, name)
