"""Visit record models and the visit status state machine.

A visit binds a patient to a template snapshot (names copied at scheduling
time, not live references) plus the responses collected during the
encounter.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from awv_db.models.enums import VisitStatus
from awv_templates.models.base import WireModel

# Position along scheduled -> in-progress -> completed
_STATUS_RANK: dict[VisitStatus, int] = {
    VisitStatus.SCHEDULED: 0,
    VisitStatus.IN_PROGRESS: 1,
    VisitStatus.COMPLETED: 2,
}


def can_transition(current: VisitStatus, target: VisitStatus) -> bool:
    """Whether a visit in ``current`` may move to ``target``.

    Forward moves along scheduled -> in-progress -> completed are allowed,
    skips included.  ``cancelled`` is reachable from every other status and
    is terminal.
    """
    if current is VisitStatus.CANCELLED:
        return False
    if target is VisitStatus.CANCELLED:
        return True
    return _STATUS_RANK[target] > _STATUS_RANK[current]


class VisitRecommendation(WireModel):
    """A recommendation derived when the visit completes.

    ``linked`` is true when the recommendation came from a selected option.
    """

    text: str
    source: Optional[str] = None
    linked: bool = False


class VisitCreate(WireModel):
    patient_id: str = Field(min_length=1)
    template_id: str = Field(min_length=1)
    date: datetime
    provider: str = Field(min_length=1)
    notes: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)


class StatusChange(WireModel):
    status: VisitStatus


class ResponsesUpdate(WireModel):
    responses: Dict[str, Any]


class Visit(WireModel):
    id: str
    patient_id: str
    patient_name: str
    template_id: str
    template_name: str
    date: str
    status: VisitStatus = VisitStatus.SCHEDULED
    provider: str
    notes: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    responses: Dict[str, Any] = {}
    recommendations: List[VisitRecommendation] = []
    user_id: str
    completed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _lowercase_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value
