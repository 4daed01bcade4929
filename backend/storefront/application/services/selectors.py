"""Derived views over resident cache data.

Pure functions: none of them fetch. Callers make sure the entity has been
read through the FetchCoordinator at least once.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from storefront.application.services.entity_cache_store import EntityCacheStore
from storefront.domain.entities import EntityRecord
from storefront.domain.identity import record_id


@dataclass(frozen=True)
class EntityView:
    """What a read-only consumer sees for one entity."""

    data: Any
    is_loading: bool
    error: str | None
    last_fetched: datetime | None
    has_data: bool
    is_empty: bool
    count: int


def describe(record: EntityRecord) -> EntityView:
    if record.data is None:
        count = 0
    elif isinstance(record.data, list):
        count = len(record.data)
    else:
        count = 1
    return EntityView(
        data=record.data,
        is_loading=record.is_loading,
        error=record.error,
        last_fetched=record.last_fetched,
        has_data=record.has_data,
        is_empty=not record.has_data,
        count=count,
    )


def find_by_id(items: Any, item_id: Any) -> dict[str, Any] | None:
    for item in items or []:
        if record_id(item) == item_id:
            return item
    return None


def select_by_id(store: EntityCacheStore, entity: str, item_id: Any) -> dict[str, Any] | None:
    return find_by_id(store.get_entity_state(entity).data, item_id)


def reviews_by_product(store: EntityCacheStore, product_id: Any) -> list[dict[str, Any]]:
    reviews = store.get_entity_state("reviews").data or []
    return [r for r in reviews if r.get("productId") == product_id]


def approved_reviews(store: EntityCacheStore) -> list[dict[str, Any]]:
    """Reviews flagged approved under either field name the backend has used."""
    reviews = store.get_entity_state("reviews").data or []
    return [r for r in reviews if r.get("approved") is True or r.get("isApproved") is True]


def orders_by_user(store: EntityCacheStore, user_id: Any) -> list[dict[str, Any]]:
    orders = store.get_entity_state("orders").data or []
    return [o for o in orders if o.get("userId") == user_id]
