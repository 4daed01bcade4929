"""Entity Record: the cached state of one logical collection."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class EntityRecord:
    """Immutable snapshot of one entity's cache slot.

    ``last_fetched`` is a freshness marker, not a TTL: None means the next
    canonical read must hit the network, any other value means the resident
    ``data`` is authoritative until an explicit invalidation.
    """

    name: str
    data: Any = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None
    last_fetched: datetime | None = None

    @property
    def is_fresh(self) -> bool:
        return self.last_fetched is not None

    @property
    def has_data(self) -> bool:
        """True when ``data`` holds something worth serving from cache."""
        if self.data is None:
            return False
        if isinstance(self.data, (list, tuple, dict)):
            return len(self.data) > 0
        return True


class CacheAction(str, Enum):
    """State transitions the store announces to subscribers."""

    FETCH_STARTED = "fetch_started"
    FETCH_COMPLETED = "fetch_completed"
    FETCH_FAILED = "fetch_failed"
    INVALIDATED = "invalidated"
    ITEM_UPSERTED = "item_upserted"
    ITEM_REMOVED = "item_removed"
    INITIAL_LOAD_STARTED = "initial_load_started"
    INITIALIZED = "initialized"


@dataclass(frozen=True)
class CacheEvent:
    """A single store transition, delivered to subscribers after it is applied."""

    entity: str
    action: CacheAction
    record: EntityRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"entity": self.entity, "action": self.action.value}
        if self.record is not None:
            payload.update(
                is_loading=self.record.is_loading,
                error=self.record.error,
                last_fetched=(
                    self.record.last_fetched.isoformat() if self.record.last_fetched else None
                ),
            )
        return payload
