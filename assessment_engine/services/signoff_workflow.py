"""
Sign-off Sub-Workflow — formal multi-party approval chain.

Pure functions over ``SIGNOFF_TRANSITIONS``; the state lives with the caller
(one sign-off process per assessment, created from a snapshot).

Forward actor per state (``get_required_role``):

    VALIDATION_NOT_STARTED                  consultant          starts area validation
    AREA_VALIDATION_IN_PROGRESS             process_owner       completes area validation
    AREA_VALIDATION_COMPLETE                consultant
    TECHNICAL_VALIDATION_IN_PROGRESS        it_lead             completes technical validation
    TECHNICAL_VALIDATION_COMPLETE           consultant
    CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS solution_architect  completes cross-functional validation
    CROSS_FUNCTIONAL_VALIDATION_COMPLETE    consultant
    EXECUTIVE_SIGN_OFF_PENDING              executive_sponsor   signs
    EXECUTIVE_SIGNED                        partner_lead
    PARTNER_COUNTERSIGN_PENDING             partner_lead        countersigns → COMPLETED
    COMPLETED / REJECTED                    None

Usage:
    from assessment_engine.services.signoff_workflow import (
        can_transition_signoff, get_available_signoff_transitions, get_required_role,
    )
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from assessment_engine.models.roles import CanonicalRole
from assessment_engine.models.signoff import (
    INITIAL_SIGNOFF_STATE,
    SIGNOFF_TRANSITIONS,
    SignOffState,
)
from assessment_engine.models.transition import (
    ALLOWED,
    InvalidTransition,
    TransitionResult,
    Unauthorized,
)
from assessment_engine.services.role_resolver import resolve_role, role_name

logger = logging.getLogger(__name__)

_S = SignOffState
_R = CanonicalRole

REQUIRED_ROLES: MappingProxyType[SignOffState, CanonicalRole | None] = MappingProxyType({
    _S.VALIDATION_NOT_STARTED: _R.CONSULTANT,
    _S.AREA_VALIDATION_IN_PROGRESS: _R.PROCESS_OWNER,
    _S.AREA_VALIDATION_COMPLETE: _R.CONSULTANT,
    _S.TECHNICAL_VALIDATION_IN_PROGRESS: _R.IT_LEAD,
    _S.TECHNICAL_VALIDATION_COMPLETE: _R.CONSULTANT,
    _S.CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS: _R.SOLUTION_ARCHITECT,
    _S.CROSS_FUNCTIONAL_VALIDATION_COMPLETE: _R.CONSULTANT,
    _S.EXECUTIVE_SIGN_OFF_PENDING: _R.EXECUTIVE_SPONSOR,
    _S.EXECUTIVE_SIGNED: _R.PARTNER_LEAD,
    _S.PARTNER_COUNTERSIGN_PENDING: _R.PARTNER_LEAD,
    _S.COMPLETED: None,
    _S.REJECTED: None,
})

# Who may restart a rejected sign-off (same roles that may initiate one)
RESTART_ROLES = frozenset({_R.PLATFORM_ADMIN, _R.PARTNER_LEAD, _R.CONSULTANT})


def can_transition_signoff(current, target) -> bool:
    """Structural check: is ``target`` a declared successor of ``current``?"""
    return SignOffState.parse(target) in SIGNOFF_TRANSITIONS[SignOffState.parse(current)]


def get_available_signoff_transitions(current) -> list[SignOffState]:
    return list(SIGNOFF_TRANSITIONS[SignOffState.parse(current)])


def is_terminal_state(state) -> bool:
    """True only for COMPLETED; REJECTED can still restart."""
    return not SIGNOFF_TRANSITIONS[SignOffState.parse(state)]


def get_required_role(state) -> CanonicalRole | None:
    """Single role authorised for the forward transition out of ``state``."""
    return REQUIRED_ROLES[SignOffState.parse(state)]


def forward_state(state) -> SignOffState | None:
    """Next state along the approval chain (never REJECTED)."""
    for target in SIGNOFF_TRANSITIONS[SignOffState.parse(state)]:
        if target is not _S.REJECTED:
            return target
    return None


def can_perform_signoff_transition(current, target, raw_role) -> TransitionResult:
    """Structural and role check for one sign-off move.

    - forward edge: role must be ``get_required_role(current)``
    - sideways to REJECTED: same actor as the forward edge
    - REJECTED → VALIDATION_NOT_STARTED: one of RESTART_ROLES
    """
    src = SignOffState.parse(current)
    dst = SignOffState.parse(target)
    targets = SIGNOFF_TRANSITIONS[src]

    if dst not in targets:
        return TransitionResult(False, InvalidTransition(
            from_status=src.value,
            to_status=dst.value,
            valid_targets=tuple(t.value for t in targets),
        ))

    role = resolve_role(raw_role)
    if src is _S.REJECTED:
        permitted = RESTART_ROLES
    else:
        permitted = frozenset({REQUIRED_ROLES[src]})

    if role not in permitted:
        logger.debug("Sign-off move %s->%s refused for role %s",
                     src.value, dst.value, role_name(role),
                     extra={"event_type": "signoff_denied"})
        return TransitionResult(False, Unauthorized(
            role=role_name(role),
            edge=f"{src.value}->{dst.value}",
        ))
    return ALLOWED


def signoff_progress(state) -> dict:
    """Position of ``state`` on the approval chain, for progress trackers.

    Returns:
        {"state", "step", "total_steps", "percent", "is_terminal", "is_rejected"}
    """
    chain = []
    node: SignOffState | None = INITIAL_SIGNOFF_STATE
    while node is not None:
        chain.append(node)
        node = forward_state(node)

    current = SignOffState.parse(state)
    total = len(chain) - 1
    step = chain.index(current) if current in chain else 0
    return {
        "state": current.value,
        "step": step,
        "total_steps": total,
        "percent": round(step / total * 100, 1) if total else 0,
        "is_terminal": is_terminal_state(current),
        "is_rejected": current is _S.REJECTED,
    }
