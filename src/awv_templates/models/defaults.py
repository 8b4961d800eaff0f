"""Default configuration installed when a question takes on a new type."""

from typing import Optional

from awv_templates.constants import DEFAULT_OPTION_COUNT
from awv_templates.models.config import (
    CONFIG_KIND_BY_TYPE,
    MatrixConfig,
    Option,
    OptionsConfig,
    QuestionConfig,
    QuestionType,
    ScaleConfig,
    ScaleLabels,
    ScoreRange,
    ScoringItem,
    ScoringOption,
    ScoringRules,
    ScoringScaleConfig,
    VitalSignsConfig,
)

# PHQ-style frequency answers and severity bands for a new scoring scale.
_FREQUENCY_OPTIONS = [
    ("Not at all", 0),
    ("Several days", 1),
    ("More than half the days", 2),
    ("Nearly every day", 3),
]
_SCORE_RANGES = [
    (0, 4, "Minimal", "No action needed"),
    (5, 9, "Mild", "Consider follow-up"),
    (10, 14, "Moderate", "Schedule follow-up"),
    (15, 19, "Moderately Severe", "Schedule urgent follow-up"),
    (20, 27, "Severe", "Schedule immediate follow-up"),
]


def default_options(count: int = DEFAULT_OPTION_COUNT) -> list[Option]:
    """``Option 1`` .. ``Option n`` with values ``option_1`` .. ``option_n``."""
    return [Option(text=f"Option {i + 1}", order=i) for i in range(count)]


def default_config(question_type: QuestionType | str) -> Optional[QuestionConfig]:
    """Fresh default configuration for ``question_type`` (``None`` for text types)."""
    question_type = QuestionType(question_type)
    kind = CONFIG_KIND_BY_TYPE.get(question_type)

    if kind == "options":
        return OptionsConfig(options=default_options())
    if kind == "scale":
        return ScaleConfig(
            min=0, max=10, step=1, labels=ScaleLabels(min="Not at all", max="Very much")
        )
    if kind == "matrix":
        return MatrixConfig(
            rows=["Row 1", "Row 2"],
            columns=["Column 1", "Column 2"],
            allow_multiple=False,
        )
    if kind == "vital_signs":
        # Local import: the reference catalogue validates against models.config
        from awv_templates.reference import get_reference_data

        bmi_only = question_type is QuestionType.BMI_CALCULATOR
        return VitalSignsConfig(
            fields=get_reference_data().vital_sign_fields(bmi_only=bmi_only)
        )
    if kind == "scoring_scale":
        return ScoringScaleConfig(
            type="custom",
            questions=[
                ScoringItem(
                    text="Question 1",
                    options=[
                        ScoringOption(text=text, value=value)
                        for text, value in _FREQUENCY_OPTIONS
                    ],
                )
            ],
            scoring_rules=ScoringRules(
                ranges=[
                    ScoreRange(min=lo, max=hi, label=label, recommendations=[rec])
                    for lo, hi, label, rec in _SCORE_RANGES
                ]
            ),
        )
    return None
