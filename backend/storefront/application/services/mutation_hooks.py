"""Mutation hooks: create, update and delete with cache invalidation.

Each hook performs exactly one authoritative write against the remote data
source. Only after the write has resolved does it invalidate the target
entity and every entity related to it in the invalidation graph, refetching
each one so subscribers see fresh data without polling.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from storefront.application.interfaces import RemoteDataSource
from storefront.application.services.entity_cache_store import EntityCacheStore
from storefront.application.services.entity_registry import EntityRegistry
from storefront.application.services.fetch_coordinator import FetchCoordinator
from storefront.application.services.invalidation_graph import InvalidationGraph
from storefront.domain.exceptions import (
    MutationError,
    RemoteAuthorizationError,
    RemoteDataSourceError,
    RemoteNotFoundError,
    RemoteTransportError,
)
from storefront.infrastructure.logging.colored_logger import CacheLogger, CacheStage

logger = logging.getLogger(__name__)
clog = CacheLogger("MutationHooks")

SuccessCallback = Callable[[Any], None]

_DENIED_MESSAGE = "You are not authorized to perform this action"


class _MutationHook:
    """Shared write-then-invalidate flow.

    ``is_loading`` and ``error`` belong to this hook instance only, so
    independent mutations never block each other. Two mutations to the same
    entity race on which refetch lands last.
    """

    operation = "mutate"
    default_error = "Failed to save data"

    def __init__(
        self,
        *,
        name: str,
        api: str,
        store: EntityCacheStore,
        coordinator: FetchCoordinator,
        source: RemoteDataSource,
        registry: EntityRegistry,
        graph: InvalidationGraph,
        on_success: SuccessCallback | None = None,
    ) -> None:
        self.entity = registry.resolve(name)
        self.api = api.rstrip("/")
        self._store = store
        self._coordinator = coordinator
        self._source = source
        self._graph = graph
        self._on_success = on_success
        self.is_loading = False
        self.error: str | None = None

    async def _run(self, description: str, write: Callable[[], Any]) -> Any:
        self.is_loading = True
        self.error = None
        try:
            with clog.timed_step(CacheStage.MUTATION, description, entity=self.entity):
                response = await write()
            await self._invalidate_and_refetch()
        except RemoteDataSourceError as exc:
            message = self._normalize_error(exc)
            self.error = message
            raise MutationError(self.operation, message, exc.status_code) from exc
        finally:
            self.is_loading = False

        if self._on_success is not None:
            self._on_success(response)
        return response

    async def _invalidate_and_refetch(self) -> None:
        """Invalidate the target and its related set, refetching each one.

        Refetches run concurrently and are awaited before returning. A failed
        refetch is recorded on its entity and logged; the write itself has
        already succeeded so it is not raised.
        """
        targets = [self.entity, *self._graph.related(self.entity)]
        tasks: list[asyncio.Task] = []
        for target in targets:
            self._store.invalidate(target)
            clog.step_start(CacheStage.INVALIDATE, f"Invalidated '{target}'", cause=self.entity)
            tasks.append(asyncio.create_task(self._coordinator.fetch(target)))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for target, result in zip(targets, results):
            if isinstance(result, BaseException):
                clog.step_error(CacheStage.REFETCH, f"Refetch of '{target}' failed", error=result)

    def _normalize_error(self, exc: RemoteDataSourceError) -> str:
        if exc.server_message:
            return exc.server_message
        if isinstance(exc, RemoteAuthorizationError):
            return _DENIED_MESSAGE
        if isinstance(exc, RemoteTransportError):
            logger.warning("Transport failure during %s on '%s': %s", self.operation, self.entity, exc)
        return self.default_error


class AddDataHook(_MutationHook):
    """POST a new record to ``api``."""

    operation = "add"
    default_error = "Failed to add data"

    async def add_data(self, data: Mapping[str, Any]) -> Any:
        return await self._run(
            f"POST {self.api}", lambda: self._source.post(self.api, dict(data))
        )


class UpdateDataHook(_MutationHook):
    """PUT an update, either ``{"id": ..., "data": {...}}`` or a record with its own identity."""

    operation = "update"
    default_error = "Failed to update data"

    async def update_data(self, payload: Mapping[str, Any]) -> Any:
        if "id" in payload and "data" in payload:
            url = f"{self.api}/{payload['id']}"
            body = payload["data"]
        else:
            url = self.api
            body = dict(payload)
        return await self._run(f"PUT {url}", lambda: self._source.put(url, body))


class DeleteDataHook(_MutationHook):
    """DELETE by id, trying ``api/<id>`` first and ``api?id=<id>`` on a 404."""

    operation = "delete"
    default_error = "Failed to delete data"

    async def delete_data(self, item_id: Any) -> Any:
        return await self._run(f"DELETE {self.api}/{item_id}", lambda: self._delete(item_id))

    async def _delete(self, item_id: Any) -> Any:
        try:
            return await self._source.delete(f"{self.api}/{item_id}")
        except RemoteNotFoundError:
            clog.detail("Path form returned 404, retrying with query parameter", id=item_id)
            return await self._source.delete(self.api, params={"id": str(item_id)})
