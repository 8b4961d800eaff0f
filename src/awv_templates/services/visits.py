"""VisitService — scheduling, recording and completing visits.

A visit snapshots the patient and template names when it is scheduled.
Status moves forward along scheduled -> in-progress -> completed (skips
allowed); ``cancelled`` can be reached from any other status and ends the
lifecycle.  Once completed or cancelled, responses can no longer change.

Completing a visit derives its recommendations from the answers to the
questions that are visible under the template's skip logic:

  - recommendations of the selected options (``linked``)
  - the question's default recommendations
  - the recommendations of the matching scoring-scale range
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from awv_db.gateway import DocumentStore
from awv_db.models.enums import Collection, VisitStatus

from awv_templates.constants import OPTION_QUESTION_TYPES
from awv_templates.evaluator import SkipLogicEvaluator, Visibility, is_answered, stringify
from awv_templates.models.config import ScoringScaleConfig
from awv_templates.models.template import Question, Template
from awv_templates.models.visit import (
    Visit,
    VisitCreate,
    VisitRecommendation,
    can_transition,
)
from awv_templates.services._common import paginate, utc_now_iso
from awv_templates.services.patients import PatientService
from awv_templates.services.templates import TemplateService

logger = logging.getLogger(__name__)

_COLLECTION = Collection.VISITS.value

# Statuses after which the visit record is frozen
_FINAL_STATUSES = {VisitStatus.COMPLETED, VisitStatus.CANCELLED}


# ------------------------------------------------------------------
# Recommendation derivation
# ------------------------------------------------------------------


def _selected_values(answer: Any) -> set[str]:
    if isinstance(answer, (list, tuple, set)):
        return {stringify(item) for item in answer}
    return {stringify(answer)}


def _score_total(answer: Any) -> Optional[float]:
    """Total of a scoring-scale answer: a number, a list, or item -> value map."""
    if isinstance(answer, Mapping):
        answer = list(answer.values())
    values = answer if isinstance(answer, (list, tuple)) else [answer]
    try:
        return sum(float(v) for v in values if not isinstance(v, bool))
    except (TypeError, ValueError):
        return None


def _question_recommendations(
    question: Question, answer: Any
) -> Iterable[VisitRecommendation]:
    if question.type.value in OPTION_QUESTION_TYPES:
        selected = _selected_values(answer)
        for option in question.options:
            if {option.value, option.id, option.text} & selected:
                for rec in option.recommendations:
                    yield VisitRecommendation(text=rec.text, source=question.text, linked=True)

    if isinstance(question.config, ScoringScaleConfig):
        total = _score_total(answer)
        score_range = question.config.range_for(total) if total is not None else None
        if score_range is not None:
            for text in score_range.recommendations:
                yield VisitRecommendation(
                    text=text, source=f"{question.text}: {score_range.label}"
                )

    for rec in question.default_recommendations:
        yield VisitRecommendation(text=rec.text, source=question.text)


def derive_recommendations(
    template: Template,
    responses: Mapping[str, Any],
    visibility: Visibility,
) -> list[VisitRecommendation]:
    """Recommendations for every visible, answered question, de-duplicated by text."""
    seen: set[str] = set()
    result: list[VisitRecommendation] = []
    for _, question in template.iter_questions():
        if not visibility.is_question_visible(question.id):
            continue
        answer = responses.get(question.id)
        if not is_answered(answer):
            continue
        for rec in _question_recommendations(question, answer):
            if rec.text and rec.text not in seen:
                seen.add(rec.text)
                result.append(rec)
    return result


# ------------------------------------------------------------------
# Service
# ------------------------------------------------------------------


class VisitService:
    """Business operations on visits, over any ``DocumentStore``."""

    def __init__(
        self,
        templates: TemplateService,
        patients: PatientService,
        evaluator: Optional[SkipLogicEvaluator] = None,
    ) -> None:
        self._templates = templates
        self._patients = patients
        self._evaluator = evaluator or SkipLogicEvaluator()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_visits(
        self,
        store: DocumentStore,
        *,
        user_id: Optional[str] = None,
        patient_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Visit]:
        """List visits by date, newest first."""
        query: dict[str, Any] = {}
        if user_id:
            query["userId"] = user_id
        if patient_id:
            query["patientId"] = patient_id
        docs = await store.find_many(_COLLECTION, query or None, sort=[("date", -1)])
        return [Visit.model_validate(d) for d in paginate(docs, limit, offset)]

    async def get_visit(self, store: DocumentStore, visit_id: str) -> Visit:
        doc = await store.find_by_id(_COLLECTION, visit_id)
        if doc is None:
            raise ValueError(f"Visit not found: id={visit_id}")
        return Visit.model_validate(doc)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def schedule_visit(
        self, store: DocumentStore, data: VisitCreate, *, user_id: str
    ) -> Visit:
        """Create a scheduled visit, snapshotting patient and template names."""
        patient = await self._patients.get_patient(store, data.patient_id)
        template = await self._templates.get_template(store, data.template_id)

        doc = data.to_wire()
        doc.update(
            patientName=patient.name,
            templateName=template.name,
            status=VisitStatus.SCHEDULED.value,
            responses={},
            recommendations=[],
            userId=user_id,
            completedAt=None,
        )
        created = await store.create(_COLLECTION, doc)
        logger.info(
            "Scheduled visit %s patient=%s template=%s",
            created["id"],
            patient.id,
            template.id,
        )
        return Visit.model_validate(created)

    async def change_status(
        self, store: DocumentStore, visit_id: str, status: VisitStatus
    ) -> Visit:
        """Move the visit to ``status``; completing also derives recommendations."""
        status = VisitStatus(status)
        if status is VisitStatus.COMPLETED:
            return await self.complete_visit(store, visit_id)

        visit = await self.get_visit(store, visit_id)
        self._check_transition(visit, status)
        updated = await store.update_by_id(_COLLECTION, visit_id, {"status": status.value})
        logger.info("Visit %s: %s -> %s", visit_id, visit.status.value, status.value)
        return Visit.model_validate(updated)

    async def record_responses(
        self,
        store: DocumentStore,
        visit_id: str,
        responses: Mapping[str, Any],
    ) -> Visit:
        """Merge ``responses`` into the visit; a scheduled visit starts.

        Raises ``ValueError`` once the visit is completed or cancelled.
        """
        visit = await self.get_visit(store, visit_id)
        if visit.status in _FINAL_STATUSES:
            raise ValueError(
                f"Visit {visit_id} is immutable once {visit.status.value}"
            )

        patch: dict[str, Any] = {"responses": {**visit.responses, **responses}}
        if visit.status is VisitStatus.SCHEDULED:
            patch["status"] = VisitStatus.IN_PROGRESS.value
        updated = await store.update_by_id(_COLLECTION, visit_id, patch)
        logger.debug("Visit %s: recorded %d responses", visit_id, len(responses))
        return Visit.model_validate(updated)

    async def complete_visit(self, store: DocumentStore, visit_id: str) -> Visit:
        """Complete the visit, derive recommendations, update the patient."""
        visit = await self.get_visit(store, visit_id)
        self._check_transition(visit, VisitStatus.COMPLETED)

        recommendations: list[VisitRecommendation] = []
        template_doc = await store.find_by_id(
            Collection.TEMPLATES.value, visit.template_id
        )
        if template_doc is None:
            logger.warning(
                "Visit %s: template %s no longer exists, no recommendations derived",
                visit_id,
                visit.template_id,
            )
        else:
            template = Template.model_validate(template_doc)
            visibility = self._evaluator.evaluate(template, visit.responses)
            recommendations = derive_recommendations(
                template, visit.responses, visibility
            )

        updated = await store.update_by_id(
            _COLLECTION,
            visit_id,
            {
                "status": VisitStatus.COMPLETED.value,
                "completedAt": utc_now_iso(),
                "recommendations": [r.to_wire() for r in recommendations],
            },
        )
        await self._patients.record_visit_date(store, visit.patient_id, visit.date)
        logger.info(
            "Completed visit %s with %d recommendations", visit_id, len(recommendations)
        )
        return Visit.model_validate(updated)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _check_transition(visit: Visit, target: VisitStatus) -> None:
        if not can_transition(visit.status, target):
            raise ValueError(
                f"Visit {visit.id} cannot transition from "
                f"{visit.status.value} to {target.value}"
            )
