"""Async DocumentStore implementation backed by the ``documents`` table.

The repository is bound to one ``AsyncSession`` (one per request).  Like
every write path in this package it calls ``flush()`` but never
``commit()``; the caller owns the transaction boundary.

No business-logic validation happens here; that is the service layer's
job.  Driver and constraint failures are wrapped in ``GatewayError``.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from awv_db.documents import strip_managed_fields, with_managed_fields
from awv_db.gateway import DocumentStore, GatewayError, SortSpec
from awv_db.models.document import StoredDocument

logger = logging.getLogger(__name__)

_DEFAULT_SORT: SortSpec = (("createdAt", -1),)

# Sort keys that map onto real columns rather than JSONB paths
_COLUMN_SORT_KEYS = {
    "id": StoredDocument.id,
    "createdAt": StoredDocument.created_at,
    "updatedAt": StoredDocument.updated_at,
}


def _to_document(row: StoredDocument) -> dict[str, Any]:
    return with_managed_fields(dict(row.data), row.id, row.created_at, row.updated_at)


class DocumentRepository(DocumentStore):
    """Read/write JSON documents through a bound ``AsyncSession``."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert a document and return it with its generated id."""
        row = StoredDocument(collection=collection, data=strip_managed_fields(doc))
        try:
            self._db.add(row)
            await self._db.flush()  # Populate id and timestamps
        except SQLAlchemyError as exc:
            logger.error("create failed in %s: %s", collection, exc)
            raise GatewayError(f"Failed to create document in {collection}") from exc
        logger.debug("Created %s document %s", collection, row.id)
        return _to_document(row)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def find_by_id(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        row = await self._get_row(collection, doc_id)
        return _to_document(row) if row is not None else None

    async def find_many(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> list[dict[str, Any]]:
        """List documents matching an equality filter (JSONB containment)."""
        stmt = select(StoredDocument).where(StoredDocument.collection == collection)
        if filter:
            stmt = stmt.where(StoredDocument.data.contains(filter))

        for field, direction in sort or _DEFAULT_SORT:
            column = _COLUMN_SORT_KEYS.get(field)
            if column is None:
                column = StoredDocument.data[field].astext
            stmt = stmt.order_by(column.desc() if direction < 0 else column.asc())

        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("find_many failed in %s: %s", collection, exc)
            raise GatewayError(f"Failed to query {collection}") from exc
        return [_to_document(row) for row in result.scalars().all()]

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def update_by_id(
        self, collection: str, doc_id: str, patch: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Shallow ``$set`` merge of ``patch`` into the stored payload."""
        row = await self._get_row(collection, doc_id)
        if row is None:
            return None
        # New dict so SQLAlchemy detects the JSONB mutation
        row.data = {**row.data, **strip_managed_fields(patch)}
        row.updated_at = datetime.now(timezone.utc)
        try:
            await self._db.flush()
        except SQLAlchemyError as exc:
            logger.error("update failed for %s/%s: %s", collection, doc_id, exc)
            raise GatewayError(f"Failed to update document in {collection}") from exc
        return _to_document(row)

    async def delete_by_id(self, collection: str, doc_id: str) -> bool:
        stmt = delete(StoredDocument).where(
            StoredDocument.collection == collection,
            StoredDocument.id == doc_id,
        )
        try:
            result = await self._db.execute(stmt)
            await self._db.flush()
        except SQLAlchemyError as exc:
            logger.error("delete failed for %s/%s: %s", collection, doc_id, exc)
            raise GatewayError(f"Failed to delete document in {collection}") from exc
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_row(self, collection: str, doc_id: str) -> StoredDocument | None:
        stmt = select(StoredDocument).where(
            StoredDocument.collection == collection,
            StoredDocument.id == doc_id,
        )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("lookup failed for %s/%s: %s", collection, doc_id, exc)
            raise GatewayError(f"Failed to read document from {collection}") from exc
        return result.scalar_one_or_none()
