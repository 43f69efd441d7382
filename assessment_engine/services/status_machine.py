"""
Assessment Status Machine — 12-status lifecycle (V2)

Pure transition table plus the validator on top of it:

  1. ``to`` must be a declared successor of ``from``     → else InvalidTransition
  2. the resolved role must be on that edge's role set    → else Unauthorized
  3. gates registered for the edge must pass              → else GateUnsatisfied

Steps 1–2 read only the immutable tables below; step 3 lives in
``transition_gates`` and reads caller-supplied values.

Usage:
    from assessment_engine.services.status_machine import (
        can_transition, get_available_transitions,
    )

    result = can_transition("scoping", "in_progress", "consultant",
                            profile_completeness=72)
    if not result.allowed:
        return api_error(..., details=result.reason.to_dict())
"""

from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType

from assessment_engine.models.assessment import AssessmentStatus
from assessment_engine.models.roles import CanonicalRole
from assessment_engine.models.transition import (
    ALLOWED,
    InvalidTransition,
    TransitionResult,
    Unauthorized,
)
from assessment_engine.services.role_resolver import resolve_role, role_name
from assessment_engine.services.transition_gates import GateContext, evaluate_gates

logger = logging.getLogger(__name__)

_A = AssessmentStatus
_R = CanonicalRole

# ── Transition table ────────────────────────────────────────────────────────

VALID_TRANSITIONS: MappingProxyType[AssessmentStatus, tuple[AssessmentStatus, ...]] = MappingProxyType({
    _A.DRAFT:              (_A.SCOPING,),
    _A.SCOPING:            (_A.IN_PROGRESS, _A.DRAFT),
    _A.IN_PROGRESS:        (_A.WORKSHOP_ACTIVE, _A.REVIEW_CYCLE, _A.GAP_RESOLUTION, _A.SCOPING),
    _A.WORKSHOP_ACTIVE:    (_A.IN_PROGRESS,),
    _A.REVIEW_CYCLE:       (_A.IN_PROGRESS,),
    _A.GAP_RESOLUTION:     (_A.PENDING_VALIDATION, _A.IN_PROGRESS),
    _A.PENDING_VALIDATION: (_A.VALIDATED, _A.GAP_RESOLUTION),
    _A.VALIDATED:          (_A.PENDING_SIGN_OFF,),
    _A.PENDING_SIGN_OFF:   (_A.SIGNED_OFF, _A.VALIDATED),
    _A.SIGNED_OFF:         (_A.HANDED_OFF, _A.ARCHIVED),
    _A.HANDED_OFF:         (_A.ARCHIVED,),
    _A.ARCHIVED:           (),
})

# Roles permitted per edge
TRANSITION_ROLES: MappingProxyType[tuple[AssessmentStatus, AssessmentStatus], frozenset] = MappingProxyType({
    (_A.DRAFT, _A.SCOPING):                    frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD, _R.CONSULTANT}),
    (_A.SCOPING, _A.IN_PROGRESS):              frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD, _R.CONSULTANT}),
    (_A.SCOPING, _A.DRAFT):                    frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD, _R.CONSULTANT}),
    (_A.IN_PROGRESS, _A.WORKSHOP_ACTIVE):      frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT, _R.SOLUTION_ARCHITECT}),
    (_A.IN_PROGRESS, _A.REVIEW_CYCLE):         frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT}),
    (_A.IN_PROGRESS, _A.GAP_RESOLUTION):       frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT}),
    (_A.IN_PROGRESS, _A.SCOPING):              frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD}),
    (_A.WORKSHOP_ACTIVE, _A.IN_PROGRESS):      frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT, _R.SOLUTION_ARCHITECT}),
    (_A.REVIEW_CYCLE, _A.IN_PROGRESS):         frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT}),
    (_A.GAP_RESOLUTION, _A.PENDING_VALIDATION): frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT}),
    (_A.GAP_RESOLUTION, _A.IN_PROGRESS):       frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT}),
    (_A.PENDING_VALIDATION, _A.VALIDATED):     frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT, _R.PARTNER_LEAD}),
    (_A.PENDING_VALIDATION, _A.GAP_RESOLUTION): frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT}),
    (_A.VALIDATED, _A.PENDING_SIGN_OFF):       frozenset({_R.PLATFORM_ADMIN, _R.CONSULTANT, _R.PARTNER_LEAD}),
    (_A.PENDING_SIGN_OFF, _A.SIGNED_OFF):      frozenset({_R.PLATFORM_ADMIN, _R.EXECUTIVE_SPONSOR, _R.PARTNER_LEAD}),
    (_A.PENDING_SIGN_OFF, _A.VALIDATED):       frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD}),
    (_A.SIGNED_OFF, _A.HANDED_OFF):            frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD}),
    (_A.SIGNED_OFF, _A.ARCHIVED):              frozenset({_R.PLATFORM_ADMIN}),
    (_A.HANDED_OFF, _A.ARCHIVED):              frozenset({_R.PLATFORM_ADMIN}),
})


def edge_key(from_status, to_status) -> str:
    return f"{AssessmentStatus.parse(from_status).value}->{AssessmentStatus.parse(to_status).value}"


def allowed_roles(from_status, to_status) -> frozenset:
    """Permitted roles for an edge; empty for a non-edge."""
    edge = (AssessmentStatus.parse(from_status), AssessmentStatus.parse(to_status))
    return TRANSITION_ROLES.get(edge, frozenset())


def valid_targets(from_status) -> tuple[AssessmentStatus, ...]:
    return VALID_TRANSITIONS[AssessmentStatus.parse(from_status)]


def is_terminal_status(status) -> bool:
    return not VALID_TRANSITIONS[AssessmentStatus.parse(status)]


# ── Validator ───────────────────────────────────────────────────────────────

def check_edge(from_status, to_status, raw_role) -> TransitionResult:
    """Table + role check only; no gates."""
    src = AssessmentStatus.parse(from_status)
    dst = AssessmentStatus.parse(to_status)
    targets = VALID_TRANSITIONS[src]

    if dst not in targets:
        return TransitionResult(False, InvalidTransition(
            from_status=src.value,
            to_status=dst.value,
            valid_targets=tuple(t.value for t in targets),
        ))

    role = resolve_role(raw_role)
    if role not in allowed_roles(src, dst):
        return TransitionResult(False, Unauthorized(
            role=role_name(role),
            edge=f"{src.value}->{dst.value}",
        ))

    return ALLOWED


def can_transition(
    from_status,
    to_status,
    raw_role,
    *,
    profile_completeness: float | None = None,
    unapproved_gap_count: int | None = None,
    profile_completeness_gate: float | None = None,
) -> TransitionResult:
    """
    Decide whether ``raw_role`` may move an assessment from ``from_status``
    to ``to_status``.

    Args:
        from_status / to_status: V2 status literals or AssessmentStatus.
        raw_role: Actor's role string; legacy aliases are resolved.
        profile_completeness: Measured completeness % (gate on scoping→in_progress).
        unapproved_gap_count: Gap resolutions lacking client approval
            (gate on gap_resolution→pending_validation).
        profile_completeness_gate: Override for the completeness threshold.

    Returns:
        TransitionResult — ``reason`` set when not allowed.

    Raises:
        UnknownStatusError: a status literal is not part of the V2 vocabulary.
        ValidationError: a gate input is out of range (completeness outside
            0-100, negative gap count, NaN).
    """
    result = check_edge(from_status, to_status, raw_role)
    if not result.allowed:
        logger.debug("Transition denied: %s", result.reason.message,
                     extra={"event_type": "transition_denied"})
        return result

    overrides = {}
    if profile_completeness_gate is not None:
        overrides["profile_completeness_gate"] = profile_completeness_gate
    ctx = GateContext(
        profile_completeness=profile_completeness,
        unapproved_gap_count=unapproved_gap_count,
        **overrides,
    )
    failure = evaluate_gates(from_status, to_status, ctx)
    if failure is not None:
        return TransitionResult(False, failure)
    return ALLOWED


def get_available_transitions(current_status, raw_role) -> list[AssessmentStatus]:
    """Successors of ``current_status`` the role may move to (gates not applied)."""
    src = AssessmentStatus.parse(current_status)
    role = resolve_role(raw_role)
    return [
        target for target in VALID_TRANSITIONS[src]
        if role in TRANSITION_ROLES[(src, target)]
    ]


# ── Graph helpers ───────────────────────────────────────────────────────────

def reachable_statuses(start) -> set[AssessmentStatus]:
    """All statuses reachable from ``start`` by any role (BFS, excludes start
    unless it lies on a cycle)."""
    origin = AssessmentStatus.parse(start)
    seen: set[AssessmentStatus] = set()
    queue = deque(VALID_TRANSITIONS[origin])
    while queue:
        node = queue.popleft()
        if node in seen:
            continue
        seen.add(node)
        queue.extend(VALID_TRANSITIONS[node])
    return seen


def list_edges() -> list[dict]:
    """Flat edge list for introspection endpoints."""
    return [
        {
            "from": src.value,
            "to": dst.value,
            "roles": sorted(r.value for r in TRANSITION_ROLES[(src, dst)]),
        }
        for src, targets in VALID_TRANSITIONS.items()
        for dst in targets
    ]
