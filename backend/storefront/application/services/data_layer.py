"""Composition root for the cache, its coordinator and the mutation hooks."""

import logging
from typing import Any

from storefront.application.interfaces import RemoteDataSource
from storefront.application.services.entity_cache_store import EntityCacheStore
from storefront.application.services.entity_registry import EntityRegistry
from storefront.application.services.fetch_coordinator import FetchCoordinator
from storefront.application.services.invalidation_graph import (
    DEFAULT_RELATED_ENTITIES,
    InvalidationGraph,
)
from storefront.application.services.mutation_hooks import (
    AddDataHook,
    DeleteDataHook,
    SuccessCallback,
    UpdateDataHook,
)

logger = logging.getLogger(__name__)


class StorefrontDataLayer:
    """Owns one store and everything that reads from or writes to it.

    Built once at process start and passed to whoever needs it. Its
    lifetime ends with ``aclose()``.
    """

    def __init__(
        self,
        source: RemoteDataSource,
        *,
        registry: EntityRegistry | None = None,
        graph: InvalidationGraph | None = None,
        dedupe_inflight: bool = False,
    ) -> None:
        self.registry = registry or EntityRegistry()
        self.graph = graph or InvalidationGraph(DEFAULT_RELATED_ENTITIES, self.registry.names)
        self.source = source
        self.store = EntityCacheStore(self.registry)
        self.coordinator = FetchCoordinator(
            self.store, source, self.registry, dedupe_inflight=dedupe_inflight
        )

    def _hook_kwargs(self, name: str, api: str | None, on_success: SuccessCallback | None) -> dict[str, Any]:
        return {
            "name": name,
            "api": api or self.registry.get(name).endpoint,
            "store": self.store,
            "coordinator": self.coordinator,
            "source": self.source,
            "registry": self.registry,
            "graph": self.graph,
            "on_success": on_success,
        }

    def add_hook(
        self, name: str, api: str | None = None, on_success: SuccessCallback | None = None
    ) -> AddDataHook:
        """Create hook for ``name``; ``api`` defaults to the entity's own endpoint."""
        return AddDataHook(**self._hook_kwargs(name, api, on_success))

    def update_hook(
        self, name: str, api: str | None = None, on_success: SuccessCallback | None = None
    ) -> UpdateDataHook:
        return UpdateDataHook(**self._hook_kwargs(name, api, on_success))

    def delete_hook(
        self, name: str, api: str | None = None, on_success: SuccessCallback | None = None
    ) -> DeleteDataHook:
        return DeleteDataHook(**self._hook_kwargs(name, api, on_success))

    async def aclose(self) -> None:
        await self.source.aclose()
        logger.info("Storefront data layer closed")
