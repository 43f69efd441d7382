"""
Transition Gates — domain preconditions layered on the status table.

The status table (``status_machine``) decides structure and role.  Gates
run only after both pass, and only for the edges registered in
``TRANSITION_GATES``.  Every gate reads plain values the caller computed
(profile completeness %, unapproved gap count); none touches storage.

A gate whose input was not supplied is skipped: the caller did not ask for
that check.

Usage:
    from assessment_engine.services.transition_gates import GateContext, evaluate_gates

    failure = evaluate_gates("scoping", "in_progress",
                             GateContext(profile_completeness=55))
    # -> GateUnsatisfied(gate="profile_completeness", measured=55, required=60, ...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable

from assessment_engine.core.exceptions import ValidationError
from assessment_engine.models.assessment import AssessmentStatus
from assessment_engine.models.transition import GateUnsatisfied

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════════
# Threshold Configuration
# ═════════════════════════════════════════════════════════════════════════════

PROFILE_COMPLETENESS_GATE = 60      # % required to enter active work
MAX_UNAPPROVED_GAPS = 0             # gaps lacking client approval at completion


@dataclass(frozen=True)
class GateContext:
    """Externally computed inputs for the gates.

    Attributes:
        profile_completeness: Company-profile completeness, 0–100.
        unapproved_gap_count: Gap resolutions without client approval.
        profile_completeness_gate: Override for the completeness threshold.
    """
    profile_completeness: float | None = None
    unapproved_gap_count: int | None = None
    profile_completeness_gate: float = PROFILE_COMPLETENESS_GATE

    def __post_init__(self):
        # NaN fails both comparisons
        pc = self.profile_completeness
        if pc is not None and not 0 <= pc <= 100:
            raise ValidationError("profile_completeness must be between 0 and 100",
                                  details={"profile_completeness": "out of range"})
        gaps = self.unapproved_gap_count
        if gaps is not None and not gaps >= 0:
            raise ValidationError("unapproved_gap_count must be >= 0",
                                  details={"unapproved_gap_count": "out of range"})


# ═════════════════════════════════════════════════════════════════════════════
# Gate Definitions
# ═════════════════════════════════════════════════════════════════════════════

def _gate_profile_completeness(ctx: GateContext) -> GateUnsatisfied | None:
    """Profile completeness must meet the gate before active work starts."""
    if ctx.profile_completeness is None:
        return None
    required = ctx.profile_completeness_gate
    if ctx.profile_completeness >= required:
        return None
    return GateUnsatisfied(
        gate="profile_completeness",
        measured=ctx.profile_completeness,
        required=required,
        message=(f"Profile completeness is {ctx.profile_completeness:g}% — "
                 f"minimum {required:g}% required to proceed"),
    )


def _gate_gap_approval(ctx: GateContext) -> GateUnsatisfied | None:
    """Every gap resolution needs client approval before completion."""
    if ctx.unapproved_gap_count is None:
        return None
    if ctx.unapproved_gap_count <= MAX_UNAPPROVED_GAPS:
        return None
    return GateUnsatisfied(
        gate="gap_approval",
        measured=ctx.unapproved_gap_count,
        required=MAX_UNAPPROVED_GAPS,
        message=(f"{ctx.unapproved_gap_count} gap resolution(s) still need "
                 f"client approval"),
    )


GATES: MappingProxyType[str, Callable[[GateContext], GateUnsatisfied | None]] = MappingProxyType({
    "profile_completeness": _gate_profile_completeness,
    "gap_approval": _gate_gap_approval,
})

_A = AssessmentStatus

# Edge → gate names, evaluated in order
TRANSITION_GATES = MappingProxyType({
    # Entering active work from scoping (legacy draft -> in_progress)
    (_A.SCOPING, _A.IN_PROGRESS): ("profile_completeness",),
    # Leaving the working phases for completion (legacy in_progress -> completed)
    (_A.GAP_RESOLUTION, _A.PENDING_VALIDATION): ("gap_approval",),
})


# ═════════════════════════════════════════════════════════════════════════════
# Public API
# ═════════════════════════════════════════════════════════════════════════════

def gates_for(from_status: AssessmentStatus, to_status: AssessmentStatus) -> tuple[str, ...]:
    return TRANSITION_GATES.get((from_status, to_status), ())


def evaluate_gates(from_status, to_status, ctx: GateContext | None) -> GateUnsatisfied | None:
    """Run the gates registered for an edge; return the first failure."""
    if ctx is None:
        return None
    edge = (AssessmentStatus.parse(from_status), AssessmentStatus.parse(to_status))
    for name in gates_for(*edge):
        failure = GATES[name](ctx)
        if failure is not None:
            logger.debug("Gate %s blocked %s->%s: measured=%s required=%s",
                         name, edge[0].value, edge[1].value,
                         failure.measured, failure.required)
            return failure
    return None


def list_gates() -> list[dict]:
    """Gate registry for diagnostics: name, edge and description."""
    out = []
    for (src, dst), names in TRANSITION_GATES.items():
        for name in names:
            out.append({
                "gate": name,
                "edge": f"{src.value}->{dst.value}",
                "description": (GATES[name].__doc__ or "").strip(),
            })
    return out
