"""Database-level enumerations for stored documents."""

import enum


class Collection(str, enum.Enum):
    """Logical collections inside the ``documents`` table."""

    TEMPLATES = "templates"
    PATIENTS = "patients"
    VISITS = "visits"


class VisitStatus(str, enum.Enum):
    """Lifecycle states for a visit.

    Transitions:
        scheduled -> in-progress  (first responses recorded)
        in-progress -> completed  (visit finished, recommendations derived)
        scheduled -> completed    (forward skips are allowed)
        any non-cancelled -> cancelled
    """

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
