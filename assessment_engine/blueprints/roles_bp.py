"""
Roles Blueprint — capability matrix, role assignment and area access.

Endpoints:
    GET    /api/v1/roles
           Returns: canonical roles with label and rank, plus legacy aliases.

    GET    /api/v1/roles/<role>/capabilities
           Returns: 200 with the capability row (all false for unknown roles).

    POST   /api/v1/roles/can-assign
           Body: { "assigner_role", "target_role" }

    POST   /api/v1/roles/area-access
           Body: { "role", "user_id", "functional_area",
                   "action": "edit_step_response|edit_gap_resolution|edit_scope_selection",
                   "assignment": { "assigned_areas": [...] } | null,
                   "override_reason": <optional> }
           Returns: 200 with the access decision (allowed or not).
"""

import logging

from flask import Blueprint, jsonify

from assessment_engine.blueprints import get_json_body, require_fields, require_strings
from assessment_engine.models.assessment import StakeholderAssignment
from assessment_engine.models.roles import (
    LEGACY_ROLE_ALIASES,
    ROLE_HIERARCHY,
    ROLE_LABELS,
    CanonicalRole,
)
from assessment_engine.services.permission import AREA_ACTIONS, evaluate_area_access
from assessment_engine.services.role_resolver import (
    assignable_roles,
    can_assign_role,
    get_capabilities,
    is_canonical,
    role_name,
)
from assessment_engine.utils.errors import E, api_error

logger = logging.getLogger(__name__)

roles_bp = Blueprint("roles", __name__, url_prefix="/api/v1/roles")


@roles_bp.route("", methods=["GET"])
def list_roles():
    roles = [
        {"value": r.value, "label": ROLE_LABELS[r], "level": ROLE_HIERARCHY[r]}
        for r in sorted(CanonicalRole, key=lambda r: ROLE_HIERARCHY[r], reverse=True)
    ]
    aliases = {alias: role.value for alias, role in LEGACY_ROLE_ALIASES.items()}
    return jsonify({"roles": roles, "aliases": aliases}), 200


@roles_bp.route("/<role>/capabilities", methods=["GET"])
def role_capabilities(role: str):
    return jsonify({
        "role": role_name(role),
        "recognised": is_canonical(role),
        "capabilities": get_capabilities(role).to_dict(),
        "assignable_roles": [r.value for r in assignable_roles(role)],
    }), 200


@roles_bp.route("/can-assign", methods=["POST"])
def check_can_assign():
    data = get_json_body()
    require_fields(data, "assigner_role", "target_role")
    require_strings(data, "assigner_role", "target_role")
    allowed = can_assign_role(data["assigner_role"], data["target_role"])
    return jsonify({
        "allowed": allowed,
        "assigner_role": role_name(data["assigner_role"]),
        "target_role": role_name(data["target_role"]),
    }), 200


@roles_bp.route("/area-access", methods=["POST"])
def check_area_access():
    data = get_json_body()
    require_fields(data, "role", "user_id")
    require_strings(data, "role", "user_id", "functional_area", "override_reason")

    action = data.get("action") or "edit_step_response"
    if action not in AREA_ACTIONS:
        return api_error(
            E.VALIDATION_INVALID,
            f"Invalid action '{action}'.",
            details={"valid_actions": list(AREA_ACTIONS)},
        )

    raw_assignment = data.get("assignment")
    assignment = None
    if raw_assignment is not None:
        if not isinstance(raw_assignment, dict):
            return api_error(E.VALIDATION_INVALID, "Field 'assignment' must be an object")
        assignment = StakeholderAssignment.from_dict({
            "user_id": data["user_id"],
            "assessment_id": data.get("assessment_id", ""),
            **raw_assignment,
        })

    decision = evaluate_area_access(
        action,
        data["role"],
        assignment,
        data.get("functional_area"),
        data.get("override_reason"),
    )
    return jsonify(decision.to_dict()), 200
