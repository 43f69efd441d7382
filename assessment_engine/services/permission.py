"""
Area-scoped access checks.

Layers the stakeholder assignment on top of the capability matrix:

  1. The role must hold the capability for the action at all.
  2. Roles that see every assessment (platform_admin, partner_lead) skip
     the stakeholder lookup.
  3. Everyone else needs a StakeholderAssignment for (user, assessment);
     none → FORBIDDEN.
  4. The assignment must cover the record's functional area.  Area-locked
     roles must be assigned the area explicitly; for other roles an empty
     area set covers everything.  Not covered → AREA_LOCKED.
  5. Roles in OVERRIDE_ROLES may pass an AREA_LOCKED check by giving an
     override reason.

The caller performs the assignment lookup and passes the record (or None).

Usage:
    from assessment_engine.services.permission import check_area_access, PermissionDenied

    # Raises PermissionDenied if not allowed
    check_area_access("process_owner", assignment, "SD", user_id="u-1")

    # Structured decision
    decision = can_edit_step_response("consultant", assignment, "FI",
                                      override_reason="Covering for FI lead")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from assessment_engine.core.exceptions import PermissionDenied
from assessment_engine.models.assessment import StakeholderAssignment
from assessment_engine.models.roles import CanonicalRole
from assessment_engine.services.role_resolver import get_capabilities, resolve_role, role_name

logger = logging.getLogger(__name__)

FORBIDDEN = "FORBIDDEN"
AREA_LOCKED = "AREA_LOCKED"

# Roles allowed to make a cross-area edit when they state a reason
OVERRIDE_ROLES = frozenset({CanonicalRole.CONSULTANT})

# Scope selection is not a capability-matrix column
SCOPE_SELECTION_EDITORS = frozenset({
    CanonicalRole.PLATFORM_ADMIN,
    CanonicalRole.CONSULTANT,
    CanonicalRole.PROCESS_OWNER,
})


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    code: str | None = None
    message: str | None = None
    override_available: bool = False
    overridden: bool = False

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict:
        out = {"allowed": self.allowed}
        if self.code:
            out["code"] = self.code
            out["message"] = self.message
            out["override_available"] = self.override_available
        if self.overridden:
            out["overridden"] = True
        return out


def _denied(code: str, message: str, override_available: bool = False) -> AccessDecision:
    return AccessDecision(False, code, message, override_available)


def _evaluate(
    role,
    holds_capability: bool,
    assignment: StakeholderAssignment | None,
    functional_area: str | None,
    override_reason: str | None,
    action_label: str,
) -> AccessDecision:
    resolved = resolve_role(role)
    caps = get_capabilities(resolved)

    if not holds_capability:
        return _denied(FORBIDDEN, f"Role {role_name(resolved)} cannot {action_label}")

    if caps.can_view_all_assessments:
        return AccessDecision(True)

    if assignment is None:
        return _denied(FORBIDDEN, "You are not a stakeholder in this assessment")

    if caps.is_area_locked:
        in_area = functional_area in assignment.assigned_areas
    else:
        in_area = assignment.covers(functional_area)

    if in_area:
        return AccessDecision(True)

    can_override = resolved in OVERRIDE_ROLES
    if can_override and override_reason and override_reason.strip():
        logger.info(
            "Cross-area override: user=%s area=%s reason=%r",
            assignment.user_id, functional_area, override_reason,
            extra={"event_type": "area_override", "actor_role": role_name(resolved)},
        )
        return AccessDecision(True, overridden=True)

    message = ("Cross-area edit requires a reason" if can_override
               else "You don't have permission to edit this area")
    return _denied(AREA_LOCKED, message, override_available=can_override)


def can_edit_step_response(
    role,
    assignment: StakeholderAssignment | None,
    functional_area: str | None,
    override_reason: str | None = None,
) -> AccessDecision:
    """Step-response (classification) edit check for one functional area."""
    caps = get_capabilities(role)
    return _evaluate(role, caps.can_edit_step_responses, assignment,
                     functional_area, override_reason, "edit step responses")


def can_edit_gap_resolution(
    role,
    assignment: StakeholderAssignment | None,
    functional_area: str | None,
    override_reason: str | None = None,
) -> AccessDecision:
    caps = get_capabilities(role)
    return _evaluate(role, caps.can_edit_gap_resolutions, assignment,
                     functional_area, override_reason, "edit gap resolutions")


def can_edit_scope_selection(
    role,
    assignment: StakeholderAssignment | None,
    functional_area: str | None,
    override_reason: str | None = None,
) -> AccessDecision:
    holds = resolve_role(role) in SCOPE_SELECTION_EDITORS
    return _evaluate(role, holds, assignment, functional_area,
                     override_reason, "edit scope selections")


_ACTION_CHECKS = {
    "edit_step_response": can_edit_step_response,
    "edit_gap_resolution": can_edit_gap_resolution,
    "edit_scope_selection": can_edit_scope_selection,
}

AREA_ACTIONS = tuple(_ACTION_CHECKS)


def evaluate_area_access(
    action: str,
    role,
    assignment: StakeholderAssignment | None,
    functional_area: str | None,
    override_reason: str | None = None,
) -> AccessDecision:
    """Dispatch to the check for ``action`` (one of AREA_ACTIONS)."""
    check = _ACTION_CHECKS.get(action)
    if check is None:
        raise ValueError(f"Unknown area action: {action}")
    return check(role, assignment, functional_area, override_reason)


def has_area_access(action: str, role, assignment, functional_area,
                    override_reason: str | None = None) -> bool:
    return evaluate_area_access(action, role, assignment, functional_area,
                                override_reason).allowed


def check_area_access(
    role,
    assignment: StakeholderAssignment | None,
    functional_area: str | None,
    *,
    user_id: str,
    action: str = "edit_step_response",
    override_reason: str | None = None,
) -> None:
    """Assert access; raise PermissionDenied carrying the denial code."""
    decision = evaluate_area_access(action, role, assignment, functional_area,
                                    override_reason)
    if not decision.allowed:
        raise PermissionDenied(user_id, decision.code, decision.message, functional_area)
