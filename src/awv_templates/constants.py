"""Constants shared across the AWV templates SDK.

Question-type groupings drive which configuration a question carries; the
recommendation categories are the closed set the builder offers.

The auto-save delay can be overridden via an environment variable so that
deployments can tune editor behaviour without code changes.
"""

import os

# Question types whose answers are picked from an ``options`` list.
OPTION_QUESTION_TYPES: frozenset[str] = frozenset(
    {"SELECT", "MULTISELECT", "CHECKBOX", "RADIO"}
)

RECOMMENDATION_CATEGORIES: tuple[str, ...] = (
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
)

# Category used for legacy recommendations stored without one.
DEFAULT_RECOMMENDATION_CATEGORY = "Other"

# Number of pre-filled options on a freshly added question vs. a question
# whose type was just changed to an option-bearing type.
NEW_QUESTION_OPTION_COUNT = 3
DEFAULT_OPTION_COUNT = 2

# Delay between the last edit and the auto-save of the template draft.
# Overridable via AUTOSAVE_DELAY_SECONDS env var.
AUTOSAVE_DELAY_SECONDS = float(os.getenv("AUTOSAVE_DELAY_SECONDS", "30"))
