from .cache import (
    CacheSummaryResponse,
    EntityStateResponse,
    FilteredReadResponse,
    InvalidationGraphResponse,
    MutationResponse,
)

__all__ = [
    "CacheSummaryResponse",
    "EntityStateResponse",
    "FilteredReadResponse",
    "InvalidationGraphResponse",
    "MutationResponse",
]
