"""Record identity normalization.

The document store names its key ``_id`` while some callers use ``id``.
Every record is mapped to the single canonical ``id`` field before it
reaches the cache, so nothing downstream branches on which key is present.
"""

from typing import Any

ID_FIELD = "id"
SOURCE_ID_FIELD = "_id"


def normalize_identity(record: Any) -> Any:
    """Return a copy of ``record`` carrying ``id`` instead of ``_id``.

    Non-dict values pass through unchanged.
    """
    if not isinstance(record, dict) or SOURCE_ID_FIELD not in record:
        return record
    normalized = {k: v for k, v in record.items() if k != SOURCE_ID_FIELD}
    normalized.setdefault(ID_FIELD, record[SOURCE_ID_FIELD])
    return normalized


def normalize_payload(payload: Any) -> Any:
    """Normalize a whole response body: a list, a paginated wrapper or one object."""
    if isinstance(payload, list):
        return [normalize_identity(item) for item in payload]
    if isinstance(payload, dict):
        if "pagination" in payload:
            return {
                key: ([normalize_identity(i) for i in value] if isinstance(value, list) else value)
                for key, value in payload.items()
            }
        return normalize_identity(payload)
    return payload


def record_id(record: Any) -> Any:
    """Identity of an (already normalized) record, or None."""
    if isinstance(record, dict):
        return record.get(ID_FIELD)
    return getattr(record, ID_FIELD, None)
