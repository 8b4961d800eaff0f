"""Public model re-exports for awv_templates.

Consumers should import from ``awv_templates.models`` rather than
reaching into sub-modules directly.
"""

# --- Question configuration ---
from awv_templates.models.config import (
    MatrixConfig,
    Option,
    OptionsConfig,
    QuestionConfig,
    QuestionType,
    Recommendation,
    ScaleConfig,
    ScaleLabels,
    ScoreRange,
    ScoringItem,
    ScoringOption,
    ScoringRules,
    ScoringScaleConfig,
    VitalSignField,
    VitalSignsConfig,
    option_value,
)

# --- Template tree ---
from awv_templates.models.template import (
    Question,
    Section,
    SkipLogicCondition,
    SkipLogicRule,
    Template,
)

# --- Patients / visits ---
from awv_templates.models.patient import Patient, PatientCreate, PatientUpdate
from awv_templates.models.visit import (
    ResponsesUpdate,
    StatusChange,
    Visit,
    VisitCreate,
    VisitRecommendation,
    can_transition,
)

__all__ = [
    # Configuration
    "MatrixConfig",
    "Option",
    "OptionsConfig",
    "QuestionConfig",
    "QuestionType",
    "Recommendation",
    "ScaleConfig",
    "ScaleLabels",
    "ScoreRange",
    "ScoringItem",
    "ScoringOption",
    "ScoringRules",
    "ScoringScaleConfig",
    "VitalSignField",
    "VitalSignsConfig",
    "option_value",
    # Template tree
    "Question",
    "Section",
    "SkipLogicCondition",
    "SkipLogicRule",
    "Template",
    # Patients / visits
    "Patient",
    "PatientCreate",
    "PatientUpdate",
    "ResponsesUpdate",
    "StatusChange",
    "Visit",
    "VisitCreate",
    "VisitRecommendation",
    "can_transition",
]
