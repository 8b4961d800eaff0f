"""Template tree models: Template -> Section -> Question -> Option.

Every entity below a Template is owned exclusively by it; ids are opaque
strings generated client-side when absent.

The question's configuration lives in a single ``config`` attribute typed
as the ``QuestionConfig`` union.  On the wire it appears as exactly one of
``options`` / ``scaleConfig`` / ``matrixConfig`` / ``vitalSignsConfig`` /
``scoringScaleConfig``:

  - input: the wire field is lifted into ``config`` (a legacy empty
    ``options: []`` on a non-option type is ignored)
  - output: ``config`` is flattened back into its wire field
  - a configured type with no configuration receives the type's default
  - a configuration that does not match ``type`` is rejected

Always serialize with ``to_wire()`` (or ``by_alias=True``).
"""

from __future__ import annotations

from typing import Any, Iterator, List, Literal, Optional, Union

from pydantic import Field, model_serializer, model_validator

from awv_templates.models.base import WireModel, new_id
from awv_templates.models.config import (
    CONFIG_KIND_BY_TYPE,
    WIRE_FIELD_BY_KIND,
    Option,
    OptionsConfig,
    QuestionConfig,
    QuestionType,
    Recommendation,
)
from awv_templates.models.defaults import default_config

SkipOperator = Literal[
    "equals",
    "not-equals",
    "contains",
    "greater-than",
    "less-than",
    "is-answered",
    "is-not-answered",
]

# Accepted input keys for each configuration kind (wire name first)
_CONFIG_INPUT_KEYS: dict[str, tuple[str, ...]] = {
    "options": ("options",),
    "scale": ("scaleConfig", "scale_config"),
    "matrix": ("matrixConfig", "matrix_config"),
    "vital_signs": ("vitalSignsConfig", "vital_signs_config"),
    "scoring_scale": ("scoringScaleConfig", "scoring_scale_config"),
}



def _expected_kind(raw_type: Any) -> Optional[str]:
    """Configuration kind for a raw ``type`` input (``None`` if unknown)."""
    if raw_type is None:
        raw_type = QuestionType.TEXT
    try:
        return CONFIG_KIND_BY_TYPE.get(QuestionType(raw_type))
    except ValueError:
        # Left for the field validator to report
        return None


# --- Skip logic ---


class SkipLogicCondition(WireModel):
    question_id: str
    operator: SkipOperator
    value: Optional[Union[bool, int, float, str]] = None


class SkipLogicRule(WireModel):
    """Show or hide a target when a condition on an earlier answer holds.

    ``target_id`` of ``None`` with ``target_type == "question"`` means the
    rule's owning question.
    """

    id: str = Field(default_factory=new_id)
    condition: SkipLogicCondition
    action: Literal["show", "hide"] = "hide"
    target_type: Literal["question", "section"] = "question"
    target_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        # Older documents used upper-case enums and a section-only target key
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("action", "targetType", "target_type"):
            if isinstance(data.get(key), str):
                data[key] = data[key].lower()
        legacy_target = data.pop("targetSectionId", None)
        if legacy_target and not (data.get("targetId") or data.get("target_id")):
            data["targetId"] = legacy_target
        return data


# --- Questions and sections ---


class Question(WireModel):
    id: str = Field(default_factory=new_id)
    text: str = ""
    type: QuestionType = QuestionType.TEXT
    order: int = 0
    required: bool = False
    config: Optional[QuestionConfig] = None
    skip_logic_rules: List[SkipLogicRule] = []
    default_recommendations: List[Recommendation] = []

    @model_validator(mode="before")
    @classmethod
    def _lift_config(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("config") is not None:
            return data
        data = dict(data)
        takes_options = _expected_kind(data.get("type")) == "options"
        found: dict[str, Any] = {}
        for kind, keys in _CONFIG_INPUT_KEYS.items():
            for key in keys:
                value = data.pop(key, None)
                if value is None:
                    continue
                if kind == "options" and value == [] and not takes_options:
                    continue
                found[kind] = value
        if len(found) > 1:
            raise ValueError(
                f"question carries more than one configuration: {sorted(found)}"
            )
        if found:
            kind, value = found.popitem()
            if kind == "options":
                data["config"] = {"kind": kind, "options": value}
            else:
                data["config"] = {**value, "kind": kind}
        return data

    @model_validator(mode="after")
    def _check_config(self) -> "Question":
        expected = CONFIG_KIND_BY_TYPE.get(self.type)
        if self.config is None:
            if expected is not None:
                self.config = default_config(self.type)
        elif self.config.kind != expected:
            raise ValueError(
                f"{WIRE_FIELD_BY_KIND[self.config.kind]} does not match "
                f"question type {self.type.value}"
            )
        return self

    @model_serializer(mode="wrap")
    def _flatten_config(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        config = data.pop("config", None)
        if isinstance(config, dict):
            kind = config.pop("kind", None)
            wire = WIRE_FIELD_BY_KIND.get(kind)
            if wire == "options":
                data["options"] = config.get("options", [])
            elif wire is not None:
                data[wire] = config
        return data

    @property
    def options(self) -> list[Option]:
        """The option list, empty for types without options."""
        if isinstance(self.config, OptionsConfig):
            return self.config.options
        return []


class Section(WireModel):
    id: str = Field(default_factory=new_id)
    title: str = ""
    description: Optional[str] = ""
    order: int = 0
    is_active: bool = True
    questions: List[Question] = []


class Template(WireModel):
    """A reusable questionnaire definition.

    ``section_count`` / ``question_count`` are derived; call
    :meth:`refresh_counts` before persisting.
    """

    id: Optional[str] = None
    name: str = ""
    description: Optional[str] = ""
    is_active: bool = True
    is_public: bool = False
    user_id: Optional[str] = None
    sections: List[Section] = []
    section_count: int = 0
    question_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def refresh_counts(self) -> "Template":
        self.section_count = len(self.sections)
        self.question_count = sum(len(s.questions) for s in self.sections)
        return self

    def iter_questions(self) -> Iterator[tuple[Section, Question]]:
        """Yield (section, question) pairs in section-then-question order."""
        for section in self.sections:
            for question in section.questions:
                yield section, question

    def find_question(self, question_id: str) -> Optional[Question]:
        for _, question in self.iter_questions():
            if question.id == question_id:
                return question
        return None

    def find_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def question_position(self, question_id: str) -> Optional[int]:
        """Index of the question in section-then-question traversal order."""
        for position, (_, question) in enumerate(self.iter_questions()):
            if question.id == question_id:
                return position
        return None
