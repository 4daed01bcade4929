"""Page-by-page reader for paginated collections (infinite scroll)."""

import logging
from typing import Any

from storefront.application.interfaces import RemoteDataSource
from storefront.domain.entities import unwrap_collection
from storefront.domain.exceptions import RemoteDataSourceError

logger = logging.getLogger(__name__)


class PaginatedReader:
    """Accumulates pages of ``endpoint`` into ``items``.

    Page reads are scoped reads: they bypass the entity cache entirely. A
    bare-array response is treated as the whole collection.
    """

    def __init__(
        self,
        source: RemoteDataSource,
        endpoint: str,
        *,
        limit: int = 12,
        items_key: str | None = None,
    ) -> None:
        self._source = source
        self._endpoint = endpoint
        self._limit = limit
        self._items_key = items_key
        self.items: list[Any] = []
        self.page = 0
        self.has_more = True
        self.total_count = 0
        self.is_loading = False
        self.error: str | None = None

    async def load_first(self) -> list[Any]:
        """Reset and load page 1."""
        self.items = []
        self.page = 0
        self.has_more = True
        self.total_count = 0
        return await self._load(1)

    async def load_more(self) -> list[Any]:
        """Load the next page; a no-op when exhausted or already loading."""
        if self.is_loading or not self.has_more:
            return self.items
        return await self._load(self.page + 1)

    async def _load(self, page: int) -> list[Any]:
        self.is_loading = True
        self.error = None
        try:
            payload = await self._source.get(
                self._endpoint, {"page": str(page), "limit": str(self._limit)}
            )
        except RemoteDataSourceError as exc:
            self.error = exc.server_message or exc.message
            logger.warning("Page %d of %s failed: %s", page, self._endpoint, exc)
            raise
        finally:
            self.is_loading = False

        result = unwrap_collection(payload, self._items_key)
        items = result.items if isinstance(result.items, list) else []
        if result.pagination is None:
            self.items = list(items)
            self.has_more = False
            self.total_count = len(items)
        else:
            self.items = self.items + list(items) if page > 1 else list(items)
            self.has_more = result.pagination.has_more
            self.total_count = result.pagination.total
        self.page = page
        return self.items
