"""
Phase prerequisites — which work phases must be complete before another
may start.

    scoping          ← (none)
    process_review   ← scoping
    gap_resolution   ← process_review
    integration      ← scoping
    data_migration   ← scoping
    ocm              ← scoping
    validation       ← process_review, gap_resolution
    sign_off         ← validation
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable

from assessment_engine.models.assessment import AssessmentPhase

_P = AssessmentPhase

PHASE_PREREQUISITES: MappingProxyType[AssessmentPhase, tuple[AssessmentPhase, ...]] = MappingProxyType({
    _P.SCOPING: (),
    _P.PROCESS_REVIEW: (_P.SCOPING,),
    _P.GAP_RESOLUTION: (_P.PROCESS_REVIEW,),
    _P.INTEGRATION: (_P.SCOPING,),
    _P.DATA_MIGRATION: (_P.SCOPING,),
    _P.OCM: (_P.SCOPING,),
    _P.VALIDATION: (_P.PROCESS_REVIEW, _P.GAP_RESOLUTION),
    _P.SIGN_OFF: (_P.VALIDATION,),
})


def missing_prerequisites(phase, completed_phases: Iterable) -> list[AssessmentPhase]:
    """Prerequisites of ``phase`` not present in ``completed_phases``."""
    target = AssessmentPhase.parse(phase)
    done = {AssessmentPhase.parse(p) for p in completed_phases}
    return [p for p in PHASE_PREREQUISITES[target] if p not in done]


def can_start_phase(phase, completed_phases: Iterable) -> dict:
    """
    Returns:
        {"allowed": bool, "phase": str, "missing": [str, ...]}
    """
    missing = missing_prerequisites(phase, completed_phases)
    return {
        "allowed": not missing,
        "phase": AssessmentPhase.parse(phase).value,
        "missing": [p.value for p in missing],
    }
