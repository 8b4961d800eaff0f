"""Service layer: business operations between the HTTP API and the store."""

from awv_templates.services.patients import PatientService
from awv_templates.services.templates import TemplateService
from awv_templates.services.visits import VisitService, derive_recommendations

__all__ = [
    "PatientService",
    "TemplateService",
    "VisitService",
    "derive_recommendations",
]
