"""StoredDocument ORM model — one row per document in any collection.

The application treats the database as a document store: every entity
(template, patient, visit) is a JSONB payload keyed by an opaque string id
and a collection name.  Only the identity and the timestamps live in real
columns; everything else stays inside ``data``.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from awv_db.models.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class StoredDocument(Base):
    """A single JSON document belonging to a named collection."""

    __tablename__ = "documents"

    # --- Identity ---
    # Opaque string id; callers never rely on its format
    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    collection: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    # --- Payload ---
    data: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        # Containment queries (data @> filter) for find_many
        Index("ix_documents_data_gin", "data", postgresql_using="gin"),
        Index("ix_documents_collection_updated", "collection", "updated_at"),
        # Medical record numbers are unique across patients
        Index(
            "uq_patients_mrn",
            text("(data->>'mrn')"),
            unique=True,
            postgresql_where=text("collection = 'patients'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<StoredDocument(id={self.id!r}, collection={self.collection!r})>"
