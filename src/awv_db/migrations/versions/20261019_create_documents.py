"""Create the documents table.

Every collection (templates, patients, visits) shares one JSONB table.
Indexes:
  - GIN on ``data`` for containment filters
  - (collection, updated_at) for listing
  - partial unique index on the patient MRN

Revision ID: 20261019_documents
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

# revision identifiers, used by Alembic.
revision = "20261019_documents"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("collection", sa.Text(), nullable=False),
        sa.Column(
            "data",
            JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_documents_collection", "documents", ["collection"])
    op.create_index(
        "ix_documents_data_gin", "documents", ["data"], postgresql_using="gin"
    )
    op.create_index(
        "ix_documents_collection_updated", "documents", ["collection", "updated_at"]
    )
    op.create_index(
        "uq_patients_mrn",
        "documents",
        [sa.text("(data->>'mrn')")],
        unique=True,
        postgresql_where=sa.text("collection = 'patients'"),
    )


def downgrade() -> None:
    op.drop_index("uq_patients_mrn", table_name="documents")
    op.drop_index("ix_documents_collection_updated", table_name="documents")
    op.drop_index("ix_documents_data_gin", table_name="documents")
    op.drop_index("ix_documents_collection", table_name="documents")
    op.drop_table("documents")
