"""Reference data endpoints — question types, categories, vitals, statuses.

Read-only views over the YAML catalogues bundled with ``awv_templates``.
They don't require authentication since the data is public.
"""

from fastapi import APIRouter, Depends

from awv_db.models.enums import VisitStatus
from awv_templates.reference import ReferenceData

from awv_server.dependencies import get_reference

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/question-types")
def list_question_types(
    reference: ReferenceData = Depends(get_reference),
) -> list[dict]:
    """Question types in builder menu order, with display labels."""
    return [
        {"value": entry.value.value, "label": entry.label}
        for entry in reference.question_types
    ]


@router.get("/recommendation-categories")
def list_recommendation_categories(
    reference: ReferenceData = Depends(get_reference),
) -> list[str]:
    return list(reference.recommendation_categories)


@router.get("/vital-signs")
def list_vital_signs(
    reference: ReferenceData = Depends(get_reference),
) -> list[dict]:
    """Vital sign fields with units and plausible ranges."""
    return [entry.model_dump() for entry in reference.vital_signs]


@router.get("/visit-statuses")
def list_visit_statuses() -> list[str]:
    return [status.value for status in VisitStatus]
