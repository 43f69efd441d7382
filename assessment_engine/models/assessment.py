"""
Assessment lifecycle vocabularies and caller-supplied context records.

  - AssessmentStatus        — current 12-status lifecycle (V2)
  - LegacyAssessmentStatus  — old 5-status lifecycle (V1), migration input only
  - AssessmentPhase         — work phases used for prerequisite checks
  - StakeholderAssignment   — (user, assessment) → editable functional areas
  - Training*               — OCM training requirement as a tagged variant
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from assessment_engine.core.exceptions import UnknownStatusError, ValidationError
from assessment_engine.utils.helpers import get_field, normalize_key


class _ParseableEnum(str, Enum):
    """str-Enum with a strict ``parse`` that folds case and hyphens."""

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(normalize_key(value))
        except ValueError:
            raise UnknownStatusError(cls.__name__, value, [m.value for m in cls]) from None


class AssessmentStatus(_ParseableEnum):
    DRAFT = "draft"
    SCOPING = "scoping"
    IN_PROGRESS = "in_progress"
    WORKSHOP_ACTIVE = "workshop_active"
    REVIEW_CYCLE = "review_cycle"
    GAP_RESOLUTION = "gap_resolution"
    PENDING_VALIDATION = "pending_validation"
    VALIDATED = "validated"
    PENDING_SIGN_OFF = "pending_sign_off"
    SIGNED_OFF = "signed_off"
    HANDED_OFF = "handed_off"
    ARCHIVED = "archived"


class LegacyAssessmentStatus(_ParseableEnum):
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REVIEWED = "reviewed"
    SIGNED_OFF = "signed_off"


class AssessmentPhase(_ParseableEnum):
    SCOPING = "scoping"
    PROCESS_REVIEW = "process_review"
    GAP_RESOLUTION = "gap_resolution"
    INTEGRATION = "integration"
    DATA_MIGRATION = "data_migration"
    OCM = "ocm"
    VALIDATION = "validation"
    SIGN_OFF = "sign_off"


STATUS_LABELS = {
    AssessmentStatus.DRAFT: "Draft",
    AssessmentStatus.SCOPING: "Scoping",
    AssessmentStatus.IN_PROGRESS: "In Progress",
    AssessmentStatus.WORKSHOP_ACTIVE: "Workshop Active",
    AssessmentStatus.REVIEW_CYCLE: "Review Cycle",
    AssessmentStatus.GAP_RESOLUTION: "Gap Resolution",
    AssessmentStatus.PENDING_VALIDATION: "Pending Validation",
    AssessmentStatus.VALIDATED: "Validated",
    AssessmentStatus.PENDING_SIGN_OFF: "Pending Sign-Off",
    AssessmentStatus.SIGNED_OFF: "Signed Off",
    AssessmentStatus.HANDED_OFF: "Handed Off",
    AssessmentStatus.ARCHIVED: "Archived",
}


@dataclass(frozen=True)
class StakeholderAssignment:
    """A user's stakeholder record on one assessment.

    ``assigned_areas`` empty means "all areas" for roles that are not
    area-locked by nature.  Area-locked roles must list their areas.
    """
    user_id: str
    assessment_id: str
    assigned_areas: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_dict(cls, data: dict) -> "StakeholderAssignment":
        areas = get_field(data, "assigned_areas", "assignedAreas", []) or []
        if not isinstance(areas, (list, tuple, set, frozenset)):
            raise ValidationError("assigned_areas must be a list",
                                  details={"assigned_areas": "expected list"})
        return cls(
            user_id=str(get_field(data, "user_id", "userId", "")),
            assessment_id=str(get_field(data, "assessment_id", "assessmentId", "")),
            assigned_areas=frozenset(str(a) for a in areas),
        )

    def covers(self, functional_area: str | None) -> bool:
        if not self.assigned_areas:
            return True
        return functional_area in self.assigned_areas


# ── OCM training requirement ────────────────────────────────────────────────


class TrainingType(_ParseableEnum):
    INSTRUCTOR_LED = "instructor_led"
    E_LEARNING = "e_learning"
    ON_THE_JOB = "on_the_job"
    WORKSHOP = "workshop"


MAX_TRAINING_DURATION_DAYS = 365


@dataclass(frozen=True)
class TrainingRequired:
    training_type: TrainingType
    duration_days: float | None = None

    required = True

    def to_dict(self) -> dict:
        return {
            "training_required": True,
            "training_type": self.training_type.value,
            "training_duration": self.duration_days,
        }


@dataclass(frozen=True)
class TrainingNotRequired:
    required = False

    def to_dict(self) -> dict:
        return {"training_required": False}


Training = Union[TrainingRequired, TrainingNotRequired]


def parse_training(data: dict) -> Training:
    """Build the training variant from a flat OCM payload.

    Rejects "flag false but type/duration populated" and "flag true without
    a type" instead of carrying them forward.
    """
    required = bool(get_field(data, "training_required", "trainingRequired", False))
    training_type = get_field(data, "training_type", "trainingType")
    duration = get_field(data, "training_duration", "trainingDuration")

    if not required:
        if training_type is not None or duration is not None:
            raise ValidationError(
                "Training type/duration given but training is not required",
                details={"training_required": False},
            )
        return TrainingNotRequired()

    if training_type is None:
        raise ValidationError(
            "Training type is required when training is marked as required",
            details={"training_type": "required"},
        )
    if duration is not None:
        try:
            duration = float(duration)
        except (TypeError, ValueError):
            raise ValidationError("training_duration must be a number",
                                  details={"training_duration": duration}) from None
        if not 0 <= duration <= MAX_TRAINING_DURATION_DAYS:
            raise ValidationError(
                f"training_duration must be between 0 and {MAX_TRAINING_DURATION_DAYS}",
                details={"training_duration": duration},
            )
    return TrainingRequired(TrainingType.parse(training_type), duration)
