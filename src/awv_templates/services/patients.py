"""PatientService — patient records with unique MRNs and soft delete.

Patients are never removed from the store: ``soft_delete_patient`` stamps
``deletedAt`` and every read path treats such records as missing.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from awv_db.gateway import DocumentStore
from awv_db.models.enums import Collection

from awv_templates.models.patient import Patient, PatientCreate, PatientUpdate
from awv_templates.services._common import paginate, utc_now_iso

logger = logging.getLogger(__name__)

_COLLECTION = Collection.PATIENTS.value


def _is_live(doc: dict[str, Any]) -> bool:
    return doc.get("deletedAt") is None


class PatientService:
    """Business operations on patients, over any ``DocumentStore``."""

    async def list_patients(
        self,
        store: DocumentStore,
        *,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Patient]:
        """List live patients ordered by name."""
        docs = await store.find_many(
            _COLLECTION,
            {"userId": user_id} if user_id else None,
            sort=[("name", 1)],
        )
        live = [d for d in docs if _is_live(d)]
        return [Patient.model_validate(d) for d in paginate(live, limit, offset)]

    async def get_patient(self, store: DocumentStore, patient_id: str) -> Patient:
        """Load a live patient or raise ``ValueError``."""
        doc = await store.find_by_id(_COLLECTION, patient_id)
        if doc is None or not _is_live(doc):
            raise ValueError(f"Patient not found: id={patient_id}")
        return Patient.model_validate(doc)

    async def create_patient(
        self, store: DocumentStore, data: PatientCreate, *, user_id: str
    ) -> Patient:
        """Create a patient; the MRN must not be in use."""
        await self._ensure_mrn_free(store, data.mrn)
        doc = data.to_wire()
        doc.update(userId=user_id, lastVisitDate=None, deletedAt=None)
        created = await store.create(_COLLECTION, doc)
        logger.info("Created patient %s", created["id"])
        return Patient.model_validate(created)

    async def update_patient(
        self, store: DocumentStore, patient_id: str, patch: PatientUpdate
    ) -> Patient:
        """Apply the fields present in ``patch``."""
        current = await self.get_patient(store, patient_id)
        changes = patch.model_dump(mode="json", by_alias=True, exclude_unset=True)
        if not changes:
            return current
        if "mrn" in changes and changes["mrn"] != current.mrn:
            await self._ensure_mrn_free(store, changes["mrn"], exclude_id=patient_id)

        updated = await store.update_by_id(_COLLECTION, patient_id, changes)
        if updated is None:
            raise ValueError(f"Patient not found: id={patient_id}")
        logger.info("Updated patient %s fields=%s", patient_id, sorted(changes))
        return Patient.model_validate(updated)

    async def soft_delete_patient(self, store: DocumentStore, patient_id: str) -> None:
        """Stamp ``deletedAt``; the record stays in the store."""
        await self.get_patient(store, patient_id)
        await store.update_by_id(_COLLECTION, patient_id, {"deletedAt": utc_now_iso()})
        logger.info("Soft-deleted patient %s", patient_id)

    async def record_visit_date(
        self, store: DocumentStore, patient_id: str, visit_date: str
    ) -> None:
        """Set ``lastVisitDate`` when a visit completes.

        A patient removed since the visit was scheduled is left alone.
        """
        doc = await store.find_by_id(_COLLECTION, patient_id)
        if doc is None or not _is_live(doc):
            logger.warning("Completed visit for missing patient %s", patient_id)
            return
        await store.update_by_id(_COLLECTION, patient_id, {"lastVisitDate": visit_date})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ensure_mrn_free(
        self,
        store: DocumentStore,
        mrn: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        # Soft-deleted records keep their MRN reserved
        clashes = await store.find_many(_COLLECTION, {"mrn": mrn})
        if any(doc["id"] != exclude_id for doc in clashes):
            raise ValueError(f"Patient with MRN {mrn} already exists")
