"""FastAPI dependency injection — provides the document store, services and user identity.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``, wrapped in a ``DocumentRepository`` by ``get_store()``.  The
session is committed on success and rolled back on error, matching the
convention that the repository calls ``flush()`` but never ``commit()``.
"""

from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from awv_db.engine import get_session_factory
from awv_db.gateway import DocumentStore
from awv_db.repository import DocumentRepository
from awv_templates.reference import ReferenceData
from awv_templates.services import PatientService, TemplateService, VisitService


# ------------------------------------------------------------------
# Database session: transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """Bind a ``DocumentRepository`` to the request's session."""
    return DocumentRepository(db)


# ------------------------------------------------------------------
# Services & reference data, stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_template_service(request: Request) -> TemplateService:
    return request.app.state.template_service


def get_patient_service(request: Request) -> PatientService:
    return request.app.state.patient_service


def get_visit_service(request: Request) -> VisitService:
    return request.app.state.visit_service


def get_reference(request: Request) -> ReferenceData:
    return request.app.state.reference


# ------------------------------------------------------------------
# User identity: mock authentication
# ------------------------------------------------------------------

async def get_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    authorization: str | None = Header(None),
) -> str:
    """Resolve the caller's user id.

    An explicit ``X-User-ID`` header wins.  Any ``Bearer`` token, or no
    credentials at all, maps to the configured demo user.  Other
    authorization schemes are rejected with 401.
    """
    if x_user_id:
        return x_user_id
    if authorization and not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Unsupported authorization scheme")
    return request.app.state.settings.demo_user_id
