"""Entity registry: which collections exist, where they live, and their aliases."""

import copy
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from storefront.domain.exceptions import UnknownEntityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityDefinition:
    """Static description of one cached collection.

    ``query_params`` maps caller-facing filter names to the query-string
    name the endpoint understands. ``initial_data`` is deep-copied into each
    fresh record.
    """

    name: str
    endpoint: str
    initial_data: Any = field(default_factory=list)
    query_params: Mapping[str, str] = field(default_factory=dict)
    items_key: str | None = None
    singleton: bool = False

    def fresh_data(self) -> Any:
        return copy.deepcopy(self.initial_data)

    def build_query(self, params: Mapping[str, Any] | None) -> dict[str, str]:
        """Translate filter params into query-string pairs.

        ``None`` and ``False`` values are dropped, so an all-default filter
        set collapses into the canonical, unfiltered read.
        """
        query: dict[str, str] = {}
        for key, value in (params or {}).items():
            if value is None or value is False:
                continue
            query_key = self.query_params.get(key, key)
            if value is True:
                query[query_key] = "true"
            else:
                query[query_key] = str(value)
        return query


DEFAULT_ENTITIES: tuple[EntityDefinition, ...] = (
    EntityDefinition("products", "/products", items_key="products"),
    EntityDefinition("categories", "/categories"),
    EntityDefinition(
        "reviews",
        "/reviews",
        query_params={"productId": "productId", "approved": "approved"},
    ),
    EntityDefinition("users", "/users"),
    EntityDefinition("orders", "/orders"),
    EntityDefinition("coupons", "/coupons"),
    EntityDefinition("contacts", "/contacts"),
    EntityDefinition("sales", "/sales", query_params={"activeOnly": "active"}),
    EntityDefinition("banners", "/banners", query_params={"activeOnly": "active"}),
    EntityDefinition(
        "shippingTaxSettings",
        "/shipping-tax-settings",
        initial_data=None,
        singleton=True,
    ),
    EntityDefinition(
        "businessTracking",
        "/business-tracking",
        initial_data={"totalRevenue": 0, "totalInvestment": 0, "entries": []},
        singleton=True,
    ),
)

# Remote collection names used by admin screens -> cache entity names.
ENTITY_ALIASES: dict[str, str] = {
    "allCategories": "categories",
    "allProducts": "products",
    "allReviews": "reviews",
    "allUsers": "users",
    "allOrders": "orders",
    "allCoupons": "coupons",
    "allContacts": "contacts",
    "allSales": "sales",
    "heroBanners": "banners",
}

# Collections fetched together when the application boots.
INITIAL_ENTITIES: tuple[str, ...] = ("products", "categories", "reviews")


class EntityRegistry:
    """Lookup table of entity definitions plus the alias table."""

    def __init__(
        self,
        definitions: Iterable[EntityDefinition] = DEFAULT_ENTITIES,
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._definitions: dict[str, EntityDefinition] = {d.name: d for d in definitions}
        self._aliases: dict[str, str] = {name: name for name in self._definitions}
        for alias, target in (ENTITY_ALIASES if aliases is None else aliases).items():
            if target not in self._definitions:
                raise UnknownEntityError(target, self.names)
            self._aliases[alias] = target

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def resolve(self, name: str) -> str:
        """Map a remote collection name or a cache name to the cache entity name."""
        try:
            return self._aliases[name]
        except KeyError:
            logger.error("Unresolvable entity name '%s'", name)
            raise UnknownEntityError(name, self.names) from None

    def get(self, name: str) -> EntityDefinition:
        """Definition for a canonical name or alias."""
        return self._definitions[self.resolve(name)]
