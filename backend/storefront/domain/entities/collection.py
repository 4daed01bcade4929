"""Collection payloads returned by the remote data source."""

from dataclasses import dataclass
from typing import Any


@dataclass
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Pagination":
        return cls(
            page=int(raw.get("page", 1)),
            limit=int(raw.get("limit", 0)),
            total=int(raw.get("total", 0)),
            total_pages=int(raw.get("totalPages", 0)),
            has_more=bool(raw.get("hasMore", False)),
        )


@dataclass
class CollectionPage:
    """Items of one GET plus pagination metadata when the server paginated.

    ``pagination`` is None for the bare-array form, which means "all items".
    """

    items: Any
    pagination: Pagination | None = None

    @property
    def is_paginated(self) -> bool:
        return self.pagination is not None


def unwrap_collection(payload: Any, items_key: str | None = None) -> CollectionPage:
    """Accept both the bare-array and the ``{<items>: [...], pagination}`` shapes.

    Anything else (a singleton settings object, a scalar) is returned as-is.
    """
    if isinstance(payload, dict) and isinstance(payload.get("pagination"), dict):
        pagination = Pagination.from_dict(payload["pagination"])
        if items_key and isinstance(payload.get(items_key), list):
            return CollectionPage(items=payload[items_key], pagination=pagination)
        for key, value in payload.items():
            if key != "pagination" and isinstance(value, list):
                return CollectionPage(items=value, pagination=pagination)
        return CollectionPage(items=[], pagination=pagination)
    return CollectionPage(items=payload)
