"""Fetch Coordinator: read path between callers, the cache and the remote source."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from storefront.application.interfaces import RemoteDataSource
from storefront.application.services.entity_cache_store import EntityCacheStore
from storefront.application.services.entity_registry import INITIAL_ENTITIES, EntityRegistry
from storefront.domain.entities import unwrap_collection
from storefront.domain.exceptions import RemoteDataSourceError
from storefront.infrastructure.logging.colored_logger import CacheLogger, CacheStage

logger = logging.getLogger(__name__)
clog = CacheLogger("FetchCoordinator")


class FetchCoordinator:
    """Serves canonical reads from the cache and everything else from the network.

    A canonical read (no effective filter params) returns resident data when
    the entity is fresh and non-empty. Otherwise the coordinator marks the
    entity loading, performs the GET and commits the result. Filtered reads
    always go to the network and never become the canonical cache.

    By default two overlapping misses for the same entity both hit the
    network and the later response wins. With ``dedupe_inflight`` the second
    caller awaits the first caller's request instead.

    A canonical response whose request started before the entity's latest
    invalidation is returned to its caller but never committed: the
    refetch issued after the invalidation owns the cache slot.
    """

    def __init__(
        self,
        store: EntityCacheStore,
        source: RemoteDataSource,
        registry: EntityRegistry,
        *,
        dedupe_inflight: bool = False,
    ) -> None:
        self._store = store
        self._source = source
        self._registry = registry
        self._dedupe_inflight = dedupe_inflight
        self._inflight: dict[str, tuple[int, asyncio.Future]] = {}
        self._running: dict[str, int] = {}

    async def fetch(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Return the entity's data, from cache when possible.

        Raises:
            UnknownEntityError: ``name`` is not a declared entity or alias.
            RemoteDataSourceError: the GET failed; the entity's ``error`` is set too.
        """
        definition = self._registry.get(name)
        query = definition.build_query(params)
        canonical = not query

        if canonical:
            record = self._store.get_entity_state(definition.name)
            if record.is_fresh and record.has_data:
                clog.step_complete(CacheStage.CACHE_HIT, f"Serving '{definition.name}' from cache")
                return record.data

            if self._dedupe_inflight:
                pending = self._inflight.get(definition.name)
                generation = self._store.generation(definition.name)
                if pending is not None and pending[0] == generation:
                    logger.debug("Joining in-flight fetch for '%s'", definition.name)
                    return await asyncio.shield(pending[1])
                return await self._fetch_shared(definition.name, definition.endpoint)

        return await self._fetch_remote(definition.name, definition.endpoint, query)

    async def refetch(self, name: str) -> Any:
        """Invalidate ``name`` and perform its canonical fetch."""
        self._store.invalidate(name)
        return await self.fetch(name)

    async def fetch_initial(self, entities: Iterable[str] = INITIAL_ENTITIES) -> None:
        """Fetch the bootstrap batch concurrently, skipping entities already cached.

        The initialization flag is set once every fetch has settled, even if
        some failed: initialization means "attempted".
        """
        pending: list[str] = []
        for name in entities:
            record = self._store.get_entity_state(name)
            if not (record.is_fresh and record.has_data):
                pending.append(name)

        self._store.begin_initial_load()
        clog.step_start(CacheStage.BOOTSTRAP, "Loading initial data", entities=",".join(pending) or "-")
        results = await asyncio.gather(
            *(self.fetch(name) for name in pending), return_exceptions=True
        )
        failures = 0
        for name, result in zip(pending, results):
            if isinstance(result, BaseException):
                failures += 1
                clog.step_error(CacheStage.BOOTSTRAP, f"Initial fetch of '{name}' failed", error=result)
        self._store.mark_initialized()
        clog.step_complete(
            CacheStage.BOOTSTRAP, "Initial data attempted", fetched=len(pending), failed=failures
        )

    async def _fetch_shared(self, name: str, endpoint: str) -> Any:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[name] = (self._store.generation(name), future)
        try:
            data = await self._fetch_remote(name, endpoint, {})
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so a future nobody joined does not warn on GC.
            future.exception()
            raise
        else:
            future.set_result(data)
            return data
        finally:
            current = self._inflight.get(name)
            if current is not None and current[1] is future:
                del self._inflight[name]

    async def _fetch_remote(self, name: str, endpoint: str, query: dict[str, str]) -> Any:
        partial = bool(query)
        generation = self._store.generation(name)
        self._running[name] = self._running.get(name, 0) + 1
        self._store.begin_fetch(name)
        clog.step_start(CacheStage.FETCH, f"GET {endpoint}", entity=name, **query)
        try:
            payload = await self._source.get(endpoint, query or None)
        except asyncio.CancelledError:
            self._release(name, generation, partial)
            raise
        except RemoteDataSourceError as exc:
            if self._release(name, generation, partial) or not self._running[name]:
                self._store.fail_fetch(name, exc.server_message or exc.message)
            clog.step_error(CacheStage.FETCH, f"Fetching '{name}' failed", error=exc)
            raise
        except Exception as exc:
            if self._release(name, generation, partial) or not self._running[name]:
                self._store.fail_fetch(name, str(exc))
            logger.exception("Unexpected error fetching '%s'", name)
            raise

        definition = self._registry.get(name)
        data = unwrap_collection(payload, definition.items_key).items
        if not self._release(name, generation, partial):
            # Invalidated while in flight: hand the data to this caller only.
            if not self._running[name]:
                self._store.complete_fetch(name, data, partial=True)
            clog.detail(f"Discarded '{name}' response invalidated while in flight")
            return data

        self._store.complete_fetch(name, data, partial=partial)
        clog.step_complete(
            CacheStage.FETCH,
            f"'{name}' {'filtered read' if partial else 'refreshed'}",
            count=len(data) if isinstance(data, list) else 1,
        )
        return data

    def _release(self, name: str, generation: int, partial: bool) -> bool:
        """Drop this fetch from the running count; False when its canonical result is stale."""
        self._running[name] -= 1
        return partial or self._store.generation(name) == generation
