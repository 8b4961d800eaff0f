"""Patient record models.

``PatientCreate`` / ``PatientUpdate`` are the request shapes; ``Patient``
is the stored document.  Patients are never hard-deleted: ``deleted_at``
marks a soft delete and such records are excluded from reads.
"""

import re
from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator

from awv_templates.models.base import WireModel

Gender = Literal["Male", "Female", "Other", "Prefer not to say"]

_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


class _PatientFieldChecks(WireModel):
    """Field normalisation shared by the create and update shapes."""

    @field_validator("date_of_birth", mode="before", check_fields=False)
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        # Older records stored a full timestamp (``1950-03-04T00:00:00.000Z``)
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @field_validator("email", check_fields=False)
    @classmethod
    def _valid_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not _EMAIL_PATTERN.match(value):
            raise ValueError("Please use a valid email address")
        return value


class PatientCreate(_PatientFieldChecks):
    name: str = Field(min_length=1)
    date_of_birth: date
    gender: Gender
    mrn: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    allergies: List[str] = []
    medications: List[str] = []
    notes: Optional[str] = None


class PatientUpdate(_PatientFieldChecks):
    """Partial update; only the fields actually sent are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    mrn: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    notes: Optional[str] = None

    @field_validator("name", "date_of_birth", "gender", "mrn")
    @classmethod
    def _required_not_cleared(cls, value: Any) -> Any:
        # Omitting a field leaves it alone; sending null would blank a required one
        if value is None:
            raise ValueError("This field cannot be cleared")
        return value


class Patient(PatientCreate):
    id: str
    user_id: str
    last_visit_date: Optional[str] = None
    deleted_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
