"""Entity write endpoints: run the mutation hooks against the remote API."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from storefront.application.schemas import MutationResponse
from storefront.application.services import StorefrontDataLayer
from storefront.domain.exceptions import MutationError, UnknownEntityError
from storefront.infrastructure.dependencies import get_data_layer

router = APIRouter(prefix="/entities", tags=["Entities"])


def _http_error(error: UnknownEntityError | MutationError) -> HTTPException:
    if isinstance(error, UnknownEntityError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    return HTTPException(
        status_code=error.status_code or status.HTTP_502_BAD_GATEWAY,
        detail=error.message,
    )


def _response(layer: StorefrontDataLayer, entity: str, result: Any) -> MutationResponse:
    return MutationResponse(
        entity=entity,
        refreshed=[entity, *layer.graph.related(entity)],
        result=result,
    )


@router.post("/{name}", response_model=MutationResponse, status_code=status.HTTP_201_CREATED)
async def create_entity(
    name: str,
    payload: dict[str, Any] = Body(...),
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> MutationResponse:
    """Create a record; the entity and its related entities are refreshed."""
    try:
        hook = layer.add_hook(name)
        result = await hook.add_data(payload)
    except (UnknownEntityError, MutationError) as e:
        raise _http_error(e)
    return _response(layer, hook.entity, result)


@router.put("/{name}", response_model=MutationResponse)
async def update_entity(
    name: str,
    payload: dict[str, Any] = Body(...),
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> MutationResponse:
    """Update a record: ``{"id": ..., "data": {...}}`` or a record with its own ``_id``."""
    try:
        hook = layer.update_hook(name)
        result = await hook.update_data(payload)
    except (UnknownEntityError, MutationError) as e:
        raise _http_error(e)
    return _response(layer, hook.entity, result)


@router.delete("/{name}/{entity_id}", response_model=MutationResponse)
async def delete_entity(
    name: str,
    entity_id: str,
    layer: StorefrontDataLayer = Depends(get_data_layer),
) -> MutationResponse:
    """Delete a record by id."""
    try:
        hook = layer.delete_hook(name)
        result = await hook.delete_data(entity_id)
    except (UnknownEntityError, MutationError) as e:
        raise _http_error(e)
    return _response(layer, hook.entity, result)
