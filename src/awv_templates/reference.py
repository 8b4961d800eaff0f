"""ReferenceData — loads the builder's catalogues from bundled YAML.

The catalogues are the single source of truth for the labels the UI shows
and for the vital sign fields a new VITAL_SIGNS / BMI_CALCULATOR question
starts with.  They are parsed once, validated against the enumerations in
code, and cached.

Usage::

    ref = get_reference_data()
    ref.question_type_label("SCALE")      # "Scale (0-10)"
    ref.vital_sign_fields(bmi_only=True)  # weight + height
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, TypeAdapter

from awv_templates.constants import RECOMMENDATION_CATEGORIES
from awv_templates.models.config import QuestionType, VitalSignField, VitalSignType

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class QuestionTypeEntry(BaseModel):
    value: QuestionType
    label: str


class VitalSignEntry(BaseModel):
    type: VitalSignType
    label: str
    unit: str
    min: float | None = None
    max: float | None = None
    required: bool = True
    bmi: bool = False

    def to_field(self) -> VitalSignField:
        return VitalSignField(
            type=self.type,
            unit=self.unit,
            min=_compact(self.min),
            max=_compact(self.max),
            required=self.required,
        )


def _compact(value: float | None) -> int | float | None:
    # YAML integers arrive as floats after validation; keep them integral
    if value is not None and float(value).is_integer():
        return int(value)
    return value


class ReferenceData:
    """Typed view over the YAML catalogues under ``data/``.

    Attributes populated after :meth:`load`:

        question_types             — list[QuestionTypeEntry], menu order
        recommendation_categories  — list[str]
        vital_signs                — list[VitalSignEntry]
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self._base = Path(data_dir) if data_dir is not None else DATA_DIR
        self.question_types: list[QuestionTypeEntry] = []
        self.recommendation_categories: list[str] = []
        self.vital_signs: list[VitalSignEntry] = []

    def load(self) -> "ReferenceData":
        """Parse and cross-check every catalogue.

        Raises ``ValueError`` when a catalogue disagrees with the enumerations
        in code (a missing question type, an unknown category, ...).
        """
        self.question_types = TypeAdapter(List[QuestionTypeEntry]).validate_python(
            load_yaml(self._base / "question_types.yaml")
        )
        self.recommendation_categories = TypeAdapter(List[str]).validate_python(
            load_yaml(self._base / "recommendation_categories.yaml")
        )
        self.vital_signs = TypeAdapter(List[VitalSignEntry]).validate_python(
            load_yaml(self._base / "vital_signs.yaml")
        )

        missing = set(QuestionType) - {entry.value for entry in self.question_types}
        if missing:
            raise ValueError(
                f"question_types.yaml is missing: {sorted(t.value for t in missing)}"
            )
        if tuple(self.recommendation_categories) != RECOMMENDATION_CATEGORIES:
            raise ValueError(
                "recommendation_categories.yaml does not match the known categories"
            )

        logger.info(
            "ReferenceData loaded: %d question types, %d categories, %d vital signs",
            len(self.question_types),
            len(self.recommendation_categories),
            len(self.vital_signs),
        )
        return self

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def question_type_label(self, question_type: QuestionType | str) -> str:
        for entry in self.question_types:
            if entry.value == question_type:
                return entry.label
        raise KeyError(f"Unknown question type: {question_type}")

    def vital_sign_fields(self, bmi_only: bool = False) -> list[VitalSignField]:
        """Vital sign fields in catalogue order, optionally BMI inputs only."""
        return [
            entry.to_field()
            for entry in self.vital_signs
            if entry.bmi or not bmi_only
        ]


@functools.lru_cache(maxsize=1)
def get_reference_data() -> ReferenceData:
    """Process-wide ReferenceData, loaded on first use."""
    return ReferenceData().load()
