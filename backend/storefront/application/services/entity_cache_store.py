"""Entity Cache Store: the single shared, in-memory state of every cached collection.

Each entity owns one immutable ``EntityRecord``. State changes go through a
small set of transition methods (``begin_fetch``, ``complete_fetch``,
``fail_fetch``, ``invalidate``, ``invalidate_all``, ``upsert_one``,
``remove_one``, ``begin_initial_load``, ``mark_initialized``); every
transition replaces the record or the global flags and notifies
subscribers. Nothing else may write to a record.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from storefront.application.services.entity_registry import EntityRegistry
from storefront.domain.entities import CacheAction, CacheEvent, EntityRecord
from storefront.domain.exceptions import UnknownEntityError
from storefront.domain.identity import normalize_identity, record_id

logger = logging.getLogger(__name__)

CacheListener = Callable[[CacheEvent], None]


class EntityCacheStore:
    """Keyed store of entity records plus the global initialization flags.

    Construct one per application and pass it to whatever composes the data
    layer; there is no module-level instance.
    """

    def __init__(self, registry: EntityRegistry) -> None:
        self._registry = registry
        self._records: dict[str, EntityRecord] = {
            name: EntityRecord(name=name, data=registry.get(name).fresh_data())
            for name in registry.names
        }
        self._generations: dict[str, int] = dict.fromkeys(self._records, 0)
        self._listeners: list[CacheListener] = []
        self.initial_data_loaded = False
        self.global_loading = False

    # ── Reads ────────────────────────────────────────────────────────

    def get_entity_state(self, name: str) -> EntityRecord:
        """Current record for ``name`` (canonical name or alias)."""
        return self._records[self._key(name)]

    def snapshot(self) -> dict[str, EntityRecord]:
        return dict(self._records)

    def generation(self, name: str) -> int:
        """Invalidation counter for ``name``; a fetch started under an older value is stale."""
        return self._generations[self._key(name)]

    @property
    def entity_names(self) -> list[str]:
        return list(self._records)

    # ── Fetch lifecycle ──────────────────────────────────────────────

    def begin_fetch(self, name: str) -> None:
        """Mark a fetch as in flight and clear the previous error."""
        key = self._key(name)
        self._set(key, CacheAction.FETCH_STARTED, is_loading=True, error=None)

    def complete_fetch(self, name: str, data: Any, *, partial: bool = False) -> None:
        """Commit a successful fetch.

        A partial (filtered) result is handed back to its caller only; the
        canonical ``data`` and ``last_fetched`` stay as they were.
        """
        key = self._key(name)
        if partial:
            self._set(key, CacheAction.FETCH_COMPLETED, is_loading=False, error=None)
            return
        self._set(
            key,
            CacheAction.FETCH_COMPLETED,
            data=data,
            is_loading=False,
            error=None,
            last_fetched=datetime.now(timezone.utc),
        )

    def fail_fetch(self, name: str, error: str) -> None:
        """Record a failed fetch; resident data is kept (stale beats empty)."""
        key = self._key(name)
        self._set(key, CacheAction.FETCH_FAILED, is_loading=False, error=error)

    # ── Invalidation ─────────────────────────────────────────────────

    def invalidate(self, name: str) -> None:
        """Drop the freshness marker so the next canonical read refetches.

        Always advances the entity's generation, even when it is already
        stale, so a response already in flight cannot be committed as fresh.

        Data is kept for display while the refetch is pending. This does not
        schedule a fetch by itself.
        """
        key = self._key(name)
        self._generations[key] += 1
        if self._records[key].last_fetched is None:
            return
        self._set(key, CacheAction.INVALIDATED, last_fetched=None)

    def invalidate_all(self) -> None:
        """Invalidate every entity and reset the initialization flag."""
        for key in self._records:
            self.invalidate(key)
        self.initial_data_loaded = False
        logger.info("Invalidated all %d cached entities", len(self._records))

    # ── Local splices ────────────────────────────────────────────────

    def upsert_one(self, name: str, item: dict[str, Any]) -> None:
        """Replace the item with the same identity, or append it.

        ``last_fetched`` is untouched: the authoritative refetch still decides.
        """
        key = self._key(name)
        normalized = normalize_identity(item)
        item_id = record_id(normalized)
        current = list(self._records[key].data or [])
        for index, existing in enumerate(current):
            if item_id is not None and record_id(existing) == item_id:
                current[index] = normalized
                break
        else:
            current.append(normalized)
        self._set(key, CacheAction.ITEM_UPSERTED, data=current)

    def remove_one(self, name: str, item_id: Any) -> None:
        """Filter out the item whose identity equals ``item_id``."""
        key = self._key(name)
        current = self._records[key].data or []
        remaining = [item for item in current if record_id(item) != item_id]
        self._set(key, CacheAction.ITEM_REMOVED, data=remaining)

    # ── Global initialization ────────────────────────────────────────

    def begin_initial_load(self) -> None:
        self.global_loading = True
        self._notify(CacheEvent(entity="*", action=CacheAction.INITIAL_LOAD_STARTED))

    def mark_initialized(self) -> None:
        self.initial_data_loaded = True
        self.global_loading = False
        self._notify(CacheEvent(entity="*", action=CacheAction.INITIALIZED))

    # ── Subscribers ──────────────────────────────────────────────────

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register ``listener`` for every transition; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Internals ────────────────────────────────────────────────────

    def _key(self, name: str) -> str:
        try:
            key = self._registry.resolve(name)
        except UnknownEntityError:
            logger.error("Cache access for unknown entity '%s'", name)
            raise
        return key

    def _set(self, key: str, action: CacheAction, **changes: Any) -> None:
        record = replace(self._records[key], **changes)
        self._records[key] = record
        self._notify(CacheEvent(entity=key, action=action, record=record))

    def _notify(self, event: CacheEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Cache listener failed on %s/%s", event.entity, event.action.value)
