"""Document normalisation helpers shared by every DocumentStore.

Documents imported from older exports still carry a native ``_id`` at
every level of the tree (template -> sections -> questions -> options).
``normalize_ids`` is the single tree walk that turns those into plain
string ``id`` fields; the service layer never sees ``_id``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

# Fields owned by the store; incoming values are ignored
MANAGED_FIELDS = ("id", "createdAt", "updatedAt")


def normalize_ids(value: Any) -> Any:
    """Return a copy of ``value`` with every ``_id`` key replaced by ``id``.

    Walks dicts and lists recursively.  An existing ``id`` wins over
    ``_id`` so that client-side ids are never overwritten.
    """
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key == "_id":
                continue
            result[key] = normalize_ids(item)
        if "_id" in value and value["_id"] is not None and "id" not in result:
            result["id"] = str(value["_id"])
        return result
    if isinstance(value, list):
        return [normalize_ids(item) for item in value]
    return value


def strip_managed_fields(doc: dict[str, Any]) -> dict[str, Any]:
    """Normalise ids and drop top-level fields the store manages itself."""
    cleaned = normalize_ids(doc)
    for key in MANAGED_FIELDS:
        cleaned.pop(key, None)
    return cleaned


def with_managed_fields(
    data: dict[str, Any],
    doc_id: str,
    created_at: datetime,
    updated_at: datetime,
) -> dict[str, Any]:
    """Build the outward-facing document from a payload and its metadata."""
    return {
        **data,
        "id": doc_id,
        "createdAt": created_at.isoformat(),
        "updatedAt": updated_at.isoformat(),
    }
