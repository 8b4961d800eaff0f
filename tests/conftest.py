import pytest

from awv_templates.evaluator import SkipLogicEvaluator
from awv_templates.services import PatientService, TemplateService, VisitService

from helpers.store import InMemoryDocumentStore


@pytest.fixture
def store():
    """Fresh in-memory document store for each test."""
    return InMemoryDocumentStore()


@pytest.fixture
def template_service():
    return TemplateService(SkipLogicEvaluator())


@pytest.fixture
def patient_service():
    return PatientService()


@pytest.fixture
def visit_service(template_service, patient_service):
    return VisitService(template_service, patient_service)
