"""awv_db — PostgreSQL-backed document store for the AWV application.

This package provides the ``DocumentStore`` contract, its JSONB-backed
implementation, the async engine factory and the Alembic migrations.  It
is consumed by the service layer in ``awv_templates`` and by the FastAPI
server.
"""

from awv_db.documents import normalize_ids
from awv_db.engine import get_engine, get_session_factory
from awv_db.gateway import DocumentStore, GatewayError
from awv_db.models.document import StoredDocument
from awv_db.models.enums import Collection, VisitStatus
from awv_db.repository import DocumentRepository

__all__ = [
    "Collection",
    "DocumentRepository",
    "DocumentStore",
    "GatewayError",
    "StoredDocument",
    "VisitStatus",
    "get_engine",
    "get_session_factory",
    "normalize_ids",
]
