from .entity_registry import (
    DEFAULT_ENTITIES,
    ENTITY_ALIASES,
    INITIAL_ENTITIES,
    EntityDefinition,
    EntityRegistry,
)
from .invalidation_graph import (
    DEFAULT_RELATED_ENTITIES,
    InvalidationGraph,
    load_invalidation_graph,
)
from .entity_cache_store import EntityCacheStore
from .fetch_coordinator import FetchCoordinator
from .mutation_hooks import AddDataHook, DeleteDataHook, UpdateDataHook
from .data_layer import StorefrontDataLayer
from .cache_event_broadcaster import CacheEventBroadcaster
from .paginated_reader import PaginatedReader
from .shipping_tax import OrderTotals, ShippingTaxCalculator

__all__ = [
    "DEFAULT_ENTITIES",
    "ENTITY_ALIASES",
    "INITIAL_ENTITIES",
    "EntityDefinition",
    "EntityRegistry",
    "DEFAULT_RELATED_ENTITIES",
    "InvalidationGraph",
    "load_invalidation_graph",
    "EntityCacheStore",
    "FetchCoordinator",
    "AddDataHook",
    "DeleteDataHook",
    "UpdateDataHook",
    "StorefrontDataLayer",
    "CacheEventBroadcaster",
    "PaginatedReader",
    "OrderTotals",
    "ShippingTaxCalculator",
]
