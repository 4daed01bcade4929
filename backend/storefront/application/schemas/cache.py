"""Pydantic DTOs (Data Transfer Objects) for cache reads and mutations."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class EntityStateResponse(BaseModel):
    """Cached state of one entity as returned to the client."""

    entity: str
    data: Any = None
    is_loading: bool = False
    error: str | None = None
    last_fetched: datetime | None = None
    has_data: bool = False
    is_empty: bool = True
    count: int = 0

    model_config = {"from_attributes": True}


class FilteredReadResponse(BaseModel):
    """Result of a filtered read: never part of the cached baseline."""

    entity: str
    filters: dict[str, str]
    data: Any = None


class CacheSummaryResponse(BaseModel):
    initial_data_loaded: bool
    global_loading: bool
    entities: list[EntityStateResponse]


class InvalidationGraphResponse(BaseModel):
    edges: dict[str, list[str]]
    one_way_edges: list[tuple[str, str]] = Field(default_factory=list)


class MutationResponse(BaseModel):
    """Server response of a successful write plus the entities that were refreshed."""

    entity: str
    refreshed: list[str]
    result: Any = None
