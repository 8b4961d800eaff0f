"""ORM models for awv_db."""

from awv_db.models.base import Base
from awv_db.models.document import StoredDocument
from awv_db.models.enums import Collection, VisitStatus

__all__ = ["Base", "Collection", "StoredDocument", "VisitStatus"]
