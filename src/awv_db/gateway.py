"""Abstract document-store interface consumed by the service layer.

The services never talk to SQLAlchemy directly; they depend on this five
operation contract.  ``awv_db.repository.DocumentRepository`` is the
PostgreSQL implementation, and the test suite ships an in-memory one.

Typical usage::

    store: DocumentStore = DocumentRepository(db)
    doc = await store.create("templates", {"name": "AWV 2026", ...})
    same = await store.find_by_id("templates", doc["id"])

Documents are plain dicts.  Every returned document carries an ``id``
(opaque string) plus ``createdAt`` / ``updatedAt`` ISO-8601 timestamps,
all owned by the store.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

# (field, direction) pairs; direction is 1 for ascending, -1 for descending
SortSpec = Sequence[tuple[str, int]]


class GatewayError(Exception):
    """Raised when the underlying store is unavailable or rejects a write."""


class DocumentStore(ABC):
    """Generic CRUD over named collections of JSON documents."""

    @abstractmethod
    async def create(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert ``doc`` and return the stored document with its new id."""
        ...

    @abstractmethod
    async def find_by_id(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return the document with ``doc_id`` or ``None``."""
        ...

    @abstractmethod
    async def find_many(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> list[dict[str, Any]]:
        """Return documents whose top-level fields equal every ``filter`` item.

        Parameters
        ----------
        collection:
            Collection name.
        filter:
            Equality filter over top-level fields.  A ``None`` value matches
            only documents where the field is present and null.
        sort:
            Sort keys; defaults to ``[("createdAt", -1)]``.
        """
        ...

    @abstractmethod
    async def update_by_id(
        self, collection: str, doc_id: str, patch: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Shallow-merge ``patch`` into the document; ``None`` if missing."""
        ...

    @abstractmethod
    async def delete_by_id(self, collection: str, doc_id: str) -> bool:
        """Delete the document; return whether anything was removed."""
        ...
