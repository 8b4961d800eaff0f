"""Visit endpoints — schedule, record responses, change status, complete.

Illegal status changes and writes to a completed or cancelled visit are
answered with 409.
"""

from fastapi import APIRouter, Depends, Query

from awv_db.gateway import DocumentStore
from awv_templates.models import ResponsesUpdate, StatusChange, VisitCreate
from awv_templates.services import VisitService

from awv_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from awv_server.dependencies import get_store, get_user_id, get_visit_service

router = APIRouter(tags=["visits"])


@router.get("/visits")
async def list_visits(
    patient_id: str | None = Query(None),
    user_id: str = Depends(get_user_id),
    store: DocumentStore = Depends(get_store),
    service: VisitService = Depends(get_visit_service),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[dict]:
    """List the caller's visits, newest first, optionally for one patient."""
    visits = await service.list_visits(
        store, user_id=user_id, patient_id=patient_id, limit=limit, offset=offset,
    )
    return [v.to_wire() for v in visits]


@router.post("/visits", status_code=201)
async def schedule_visit(
    body: VisitCreate,
    user_id: str = Depends(get_user_id),
    store: DocumentStore = Depends(get_store),
    service: VisitService = Depends(get_visit_service),
) -> dict:
    """Schedule a visit.  Returns 404 if the patient or template is missing."""
    visit = await service.schedule_visit(store, body, user_id=user_id)
    return visit.to_wire()


@router.get("/visits/{visit_id}")
async def get_visit(
    visit_id: str,
    store: DocumentStore = Depends(get_store),
    service: VisitService = Depends(get_visit_service),
) -> dict:
    visit = await service.get_visit(store, visit_id)
    return visit.to_wire()


@router.patch("/visits/{visit_id}/status")
async def change_status(
    visit_id: str,
    body: StatusChange,
    store: DocumentStore = Depends(get_store),
    service: VisitService = Depends(get_visit_service),
) -> dict:
    visit = await service.change_status(store, visit_id, body.status)
    return visit.to_wire()


@router.put("/visits/{visit_id}/responses")
async def record_responses(
    visit_id: str,
    body: ResponsesUpdate,
    store: DocumentStore = Depends(get_store),
    service: VisitService = Depends(get_visit_service),
) -> dict:
    """Merge responses into the visit; a scheduled visit becomes in-progress."""
    visit = await service.record_responses(store, visit_id, body.responses)
    return visit.to_wire()


@router.post("/visits/{visit_id}/complete")
async def complete_visit(
    visit_id: str,
    store: DocumentStore = Depends(get_store),
    service: VisitService = Depends(get_visit_service),
) -> dict:
    """Complete the visit and derive its recommendations."""
    visit = await service.complete_visit(store, visit_id)
    return visit.to_wire()
