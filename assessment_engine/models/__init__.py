"""
Domain types for the assessment workflow engine.

Plain frozen dataclasses and str-Enums — no ORM.  Storage belongs to the
calling application; these types are what it hands in and gets back.
"""

from assessment_engine.models.assessment import (  # noqa: F401
    AssessmentPhase,
    AssessmentStatus,
    LegacyAssessmentStatus,
    StakeholderAssignment,
)
from assessment_engine.models.lifecycle import (  # noqa: F401
    ChangeType,
    DeltaReport,
    DeltaSummary,
    EntityType,
    ImpactSummary,
    RiskLevel,
    UnlockedEntity,
)
from assessment_engine.models.roles import CanonicalRole, RoleCapabilities  # noqa: F401
from assessment_engine.models.signoff import SignOffState  # noqa: F401
from assessment_engine.models.snapshot import Snapshot, SnapshotStatistics  # noqa: F401
from assessment_engine.models.transition import ReasonCode, TransitionResult  # noqa: F401
