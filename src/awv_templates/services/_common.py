"""Helpers shared by the service classes."""

from datetime import datetime, timezone
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def paginate(items: Sequence[T], limit: Optional[int], offset: int) -> list[T]:
    """Slice an already-sorted result list."""
    end = None if limit is None else offset + limit
    return list(items[offset:end])
