"""awv_templates — questionnaire templates for Annual Wellness Visits.

Public API:
    TemplateEditor      — explicit editing API over an in-memory template tree
    reorder             — pure single-element list move
    SkipLogicEvaluator  — computes question/section visibility from responses
    AutoSaver           — debounced last-writer-wins draft saving
    ReferenceData       — YAML catalogues (question types, categories, vitals)

Services (over any ``awv_db.DocumentStore``):
    TemplateService, PatientService, VisitService
"""

from awv_templates.autosave import AutoSaver
from awv_templates.editor import TemplateEditor, TemplateValidationError, reorder
from awv_templates.evaluator import SkipLogicEvaluator, Visibility
from awv_templates.models import (
    Patient,
    Question,
    QuestionType,
    Section,
    SkipLogicRule,
    Template,
    Visit,
)
from awv_templates.reference import ReferenceData, get_reference_data
from awv_templates.services import PatientService, TemplateService, VisitService

__all__ = [
    # Editing
    "AutoSaver",
    "TemplateEditor",
    "TemplateValidationError",
    "reorder",
    # Skip logic
    "SkipLogicEvaluator",
    "Visibility",
    # Models
    "Patient",
    "Question",
    "QuestionType",
    "Section",
    "SkipLogicRule",
    "Template",
    "Visit",
    # Reference data
    "ReferenceData",
    "get_reference_data",
    # Services
    "PatientService",
    "TemplateService",
    "VisitService",
]
