"""Question types and their type-specific configuration.

A question carries at most one configuration, selected by its type:

  - SELECT, MULTISELECT, CHECKBOX, RADIO -> OptionsConfig      (``options``)
  - SCALE                                -> ScaleConfig        (``scaleConfig``)
  - MATRIX                               -> MatrixConfig       (``matrixConfig``)
  - VITAL_SIGNS, BMI_CALCULATOR          -> VitalSignsConfig   (``vitalSignsConfig``)
  - SCORING_SCALE                        -> ScoringScaleConfig (``scoringScaleConfig``)
  - TEXT, TEXTAREA, DATE, NUMBER         -> no configuration

The discriminated ``QuestionConfig`` union uses ``kind`` as its
discriminator.  ``kind`` never appears on the wire; the owning ``Question``
lifts the wire field into the union on input and flattens it back out on
output (see ``awv_templates.models.template``).
"""

import enum
import re
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, model_validator

from awv_templates.constants import DEFAULT_RECOMMENDATION_CATEGORY
from awv_templates.models.base import WireModel, new_id


class QuestionType(str, enum.Enum):
    TEXT = "TEXT"
    TEXTAREA = "TEXTAREA"
    SELECT = "SELECT"
    MULTISELECT = "MULTISELECT"
    CHECKBOX = "CHECKBOX"
    RADIO = "RADIO"
    DATE = "DATE"
    NUMBER = "NUMBER"
    SCALE = "SCALE"
    MATRIX = "MATRIX"
    VITAL_SIGNS = "VITAL_SIGNS"
    BMI_CALCULATOR = "BMI_CALCULATOR"
    SCORING_SCALE = "SCORING_SCALE"


RecommendationCategory = Literal[
    "Preventive Care",
    "Lifestyle",
    "Exercise",
    "Nutrition",
    "Follow-up",
    "Medication",
    "Mental Health",
    "Specialist Referral",
    "Screenings",
    "Other",
]

VitalSignType = Literal[
    "temperature",
    "bloodPressure",
    "heartRate",
    "respiratoryRate",
    "oxygenSaturation",
    "weight",
    "height",
]

# Integers stay integers through a wire round trip
Number = Union[int, float]

_WHITESPACE = re.compile(r"\s+")


def option_value(text: str) -> str:
    """Derive an option's value token: lowercase, whitespace -> underscores."""
    return _WHITESPACE.sub("_", text.lower())


# --- Recommendations and options ---


class Recommendation(WireModel):
    """A follow-up recommendation attached to an option or a question."""

    id: str = Field(default_factory=new_id)
    text: str
    category: RecommendationCategory = DEFAULT_RECOMMENDATION_CATEGORY
    is_default: Optional[bool] = None


class Option(WireModel):
    """One choice of an option-bearing question.

    ``value`` is derived from ``text`` when not supplied.
    """

    id: str = Field(default_factory=new_id)
    text: str = ""
    value: str = ""
    order: int = 0
    recommendations: List[Recommendation] = []

    @model_validator(mode="after")
    def _derive_value(self) -> "Option":
        if not self.value:
            self.value = option_value(self.text)
        return self


# --- Configurations ---


class OptionsConfig(WireModel):
    kind: Literal["options"] = "options"
    options: List[Option] = []


class ScaleLabels(WireModel):
    min: str
    max: str


class ScaleConfig(WireModel):
    kind: Literal["scale"] = "scale"
    min: Number = 0
    max: Number = 10
    step: Number = 1
    labels: ScaleLabels


class MatrixConfig(WireModel):
    kind: Literal["matrix"] = "matrix"
    rows: List[str] = []
    columns: List[str] = []
    allow_multiple: bool = False


class VitalSignField(WireModel):
    type: VitalSignType
    unit: str
    min: Optional[Number] = None
    max: Optional[Number] = None
    required: bool = True


class VitalSignsConfig(WireModel):
    kind: Literal["vital_signs"] = "vital_signs"
    fields: List[VitalSignField] = []


class ScoringOption(WireModel):
    text: str
    value: Number


class ScoringItem(WireModel):
    text: str
    options: List[ScoringOption] = []


class ScoreRange(WireModel):
    """Inclusive total-score band with the recommendations it triggers."""

    min: Number
    max: Number
    label: str
    recommendations: List[str] = []


class ScoringRules(WireModel):
    ranges: List[ScoreRange] = []


class ScoringScaleConfig(WireModel):
    kind: Literal["scoring_scale"] = "scoring_scale"
    type: Literal["PHQ9", "GAD7", "custom"] = "custom"
    questions: List[ScoringItem] = []
    scoring_rules: ScoringRules = Field(default_factory=ScoringRules)

    def range_for(self, total: float) -> Optional[ScoreRange]:
        """Return the first range containing ``total``, if any."""
        for score_range in self.scoring_rules.ranges:
            if score_range.min <= total <= score_range.max:
                return score_range
        return None


# Discriminated union: pydantic picks the right type based on the "kind" field.
QuestionConfig = Annotated[
    Union[OptionsConfig, ScaleConfig, MatrixConfig, VitalSignsConfig, ScoringScaleConfig],
    Field(discriminator="kind"),
]

# Which configuration kind each question type requires (absent -> none).
CONFIG_KIND_BY_TYPE: dict[QuestionType, str] = {
    QuestionType.SELECT: "options",
    QuestionType.MULTISELECT: "options",
    QuestionType.CHECKBOX: "options",
    QuestionType.RADIO: "options",
    QuestionType.SCALE: "scale",
    QuestionType.MATRIX: "matrix",
    QuestionType.VITAL_SIGNS: "vital_signs",
    QuestionType.BMI_CALCULATOR: "vital_signs",
    QuestionType.SCORING_SCALE: "scoring_scale",
}

# Wire field name for each configuration kind.
WIRE_FIELD_BY_KIND: dict[str, str] = {
    "options": "options",
    "scale": "scaleConfig",
    "matrix": "matrixConfig",
    "vital_signs": "vitalSignsConfig",
    "scoring_scale": "scoringScaleConfig",
}
