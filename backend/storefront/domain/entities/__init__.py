from .entity_record import CacheAction, CacheEvent, EntityRecord
from .collection import CollectionPage, Pagination, unwrap_collection

__all__ = [
    "CacheAction",
    "CacheEvent",
    "EntityRecord",
    "CollectionPage",
    "Pagination",
    "unwrap_collection",
]
