"""Patient endpoints — list, create, read, update and soft delete.

``DELETE`` never removes the record; it stamps ``deletedAt`` and the
patient disappears from every read.
"""

from fastapi import APIRouter, Depends, Query

from awv_db.gateway import DocumentStore
from awv_templates.models import PatientCreate, PatientUpdate
from awv_templates.services import PatientService

from awv_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from awv_server.dependencies import get_patient_service, get_store, get_user_id

router = APIRouter(tags=["patients"])


@router.get("/patients")
async def list_patients(
    user_id: str = Depends(get_user_id),
    store: DocumentStore = Depends(get_store),
    service: PatientService = Depends(get_patient_service),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[dict]:
    """List the caller's patients ordered by name."""
    patients = await service.list_patients(
        store, user_id=user_id, limit=limit, offset=offset,
    )
    return [p.to_wire() for p in patients]


@router.post("/patients", status_code=201)
async def create_patient(
    body: PatientCreate,
    user_id: str = Depends(get_user_id),
    store: DocumentStore = Depends(get_store),
    service: PatientService = Depends(get_patient_service),
) -> dict:
    """Create a patient.  Returns 409 if the MRN is already in use."""
    patient = await service.create_patient(store, body, user_id=user_id)
    return patient.to_wire()


@router.get("/patients/{patient_id}")
async def get_patient(
    patient_id: str,
    store: DocumentStore = Depends(get_store),
    service: PatientService = Depends(get_patient_service),
) -> dict:
    patient = await service.get_patient(store, patient_id)
    return patient.to_wire()


@router.patch("/patients/{patient_id}")
async def update_patient(
    patient_id: str,
    body: PatientUpdate,
    store: DocumentStore = Depends(get_store),
    service: PatientService = Depends(get_patient_service),
) -> dict:
    patient = await service.update_patient(store, patient_id, body)
    return patient.to_wire()


@router.delete("/patients/{patient_id}", status_code=204)
async def soft_delete_patient(
    patient_id: str,
    store: DocumentStore = Depends(get_store),
    service: PatientService = Depends(get_patient_service),
) -> None:
    await service.soft_delete_patient(store, patient_id)
