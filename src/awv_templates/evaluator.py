"""SkipLogicEvaluator — computes which questions and sections are visible.

Visibility is recomputed from scratch on every call from the template and
the current response map (question id -> raw answer):

  1. every question and section starts visible, except the targets of
     ``show`` rules, which start hidden
  2. questions are walked in section-then-question order and each of their
     rules is evaluated in list order
  3. a rule whose condition holds applies its action to its target; a
     section target propagates to all of the section's questions
  4. the last applied rule wins

A rule whose source question no longer exists in the template evaluates
to False whatever its operator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from awv_templates.models.template import SkipLogicRule, Template

logger = logging.getLogger(__name__)


@dataclass
class Visibility:
    """Result of an evaluation: question id -> visible, section id -> visible."""

    questions: dict[str, bool] = field(default_factory=dict)
    sections: dict[str, bool] = field(default_factory=dict)

    def is_question_visible(self, question_id: str) -> bool:
        return self.questions.get(question_id, True)

    def is_section_visible(self, section_id: str) -> bool:
        return self.sections.get(section_id, True)

    @property
    def hidden_question_ids(self) -> list[str]:
        return [qid for qid, visible in self.questions.items() if not visible]

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {"questions": dict(self.questions), "sections": dict(self.sections)}


def stringify(value: Any) -> str:
    """Canonical string form of an answer or a rule value.

    Booleans become ``true``/``false``, integral floats lose their ``.0``,
    lists are comma-joined.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple, set)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def is_answered(value: Any) -> bool:
    """None, blank strings and empty collections count as unanswered."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


class SkipLogicEvaluator:
    """Evaluates a template's skip-logic rules against a response map."""

    def evaluate(self, template: Template, responses: Mapping[str, Any]) -> Visibility:
        """Return the visibility of every question and section of ``template``."""
        visibility = Visibility()
        section_questions: dict[str, list[str]] = {}
        for section in template.sections:
            visibility.sections[section.id] = True
            section_questions[section.id] = [q.id for q in section.questions]
            for question in section.questions:
                visibility.questions[question.id] = True

        # Targets of show rules start hidden
        for _, question in template.iter_questions():
            for rule in question.skip_logic_rules:
                if rule.action == "show":
                    self._apply(rule, question.id, False, visibility, section_questions)

        known_ids = set(visibility.questions)
        for _, question in template.iter_questions():
            for rule in question.skip_logic_rules:
                if not self._condition_holds(rule, responses, known_ids):
                    continue
                self._apply(
                    rule, question.id, rule.action == "show", visibility, section_questions
                )
        return visibility

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _apply(
        rule: SkipLogicRule,
        owner_id: str,
        visible: bool,
        visibility: Visibility,
        section_questions: dict[str, list[str]],
    ) -> None:
        if rule.target_type == "section":
            if rule.target_id not in section_questions:
                logger.debug(
                    "Skip logic rule %s targets unknown section %s", rule.id, rule.target_id
                )
                return
            visibility.sections[rule.target_id] = visible
            for question_id in section_questions[rule.target_id]:
                visibility.questions[question_id] = visible
            return

        target_id = rule.target_id or owner_id
        if target_id not in visibility.questions:
            logger.debug(
                "Skip logic rule %s targets unknown question %s", rule.id, target_id
            )
            return
        visibility.questions[target_id] = visible

    def _condition_holds(
        self,
        rule: SkipLogicRule,
        responses: Mapping[str, Any],
        known_ids: set[str],
    ) -> bool:
        condition = rule.condition
        if condition.question_id not in known_ids:
            logger.debug(
                "Skip logic rule %s references deleted question %s",
                rule.id,
                condition.question_id,
            )
            return False

        answer = responses.get(condition.question_id)
        if condition.operator == "is-answered":
            return is_answered(answer)
        if condition.operator == "is-not-answered":
            return not is_answered(answer)
        if not is_answered(answer):
            return False
        return self._compare(condition.operator, answer, condition.value)

    @staticmethod
    def _compare(op: str, answer: Any, value: Any) -> bool:
        """Apply a value operator to an answered source."""
        if op == "equals":
            return stringify(answer) == stringify(value)

        if op == "not-equals":
            return stringify(answer) != stringify(value)

        if op == "contains":
            # List membership for multi-value answers, substring otherwise
            if isinstance(answer, (list, tuple, set)):
                return stringify(value) in {stringify(item) for item in answer}
            return stringify(value) in stringify(answer)

        # --- Numeric comparisons ---
        if op in ("greater-than", "less-than"):
            if isinstance(answer, bool) or isinstance(value, bool):
                return False
            try:
                ans_num = float(answer)
                value_num = float(value)
            except (TypeError, ValueError):
                return False
            if op == "greater-than":
                return ans_num > value_num
            return ans_num < value_num

        logger.warning("Unknown skip logic operator: %s", op)
        return False
