"""
Lifecycle Blueprint — assessment status machine over HTTP.

Endpoints:
    GET    /api/v1/lifecycle/statuses
           Returns: V2 statuses with labels, successors and terminal flag,
                    plus the legacy V1 vocabulary.

    GET    /api/v1/lifecycle/transitions?status=<s>&role=<r>
           Returns: 200 with transitions ``role`` may take from ``status``.
                    Without ``role``: the full edge list and gate registry.

    POST   /api/v1/lifecycle/transitions/check
           Body: { "from_status", "to_status", "role",
                   "profile_completeness": <0-100 optional>,
                   "unapproved_gap_count": <int optional>,
                   "assessment_id": <optional, for logs> }
           Returns: 200 {"allowed": true} or a denial:
                    409 invalid edge, 403 role not permitted, 422 gate failed.

    POST   /api/v1/lifecycle/statuses/migrate
           Body: { "status": "<v1>" } or { "statuses": ["<v1>", ...] }

    POST   /api/v1/lifecycle/phases/check
           Body: { "phase", "completed_phases": [...] }

Layer contract:
    - Blueprint: parse + validate input, call the pure service, return JSON.
    - Gate threshold comes from app config, never from the request.
"""

import logging
import math

from flask import Blueprint, current_app, jsonify, request

from assessment_engine.blueprints import get_json_body, require_fields, require_strings
from assessment_engine.core.exceptions import ValidationError
from assessment_engine.models.assessment import (
    STATUS_LABELS,
    AssessmentStatus,
    LegacyAssessmentStatus,
)
from assessment_engine.services import status_machine
from assessment_engine.services.phase_prerequisites import can_start_phase
from assessment_engine.services.role_resolver import role_name
from assessment_engine.services.status_migration import (
    V1_TO_V2_STATUS_MAP,
    migrate_legacy_status,
    migrate_many,
)
from assessment_engine.services.transition_gates import list_gates
from assessment_engine.utils.errors import E, api_error, transition_error

logger = logging.getLogger(__name__)

lifecycle_bp = Blueprint("lifecycle", __name__, url_prefix="/api/v1/lifecycle")


def _optional_number(data: dict, name: str, *, integer: bool = False,
                     minimum: float | None = None, maximum: float | None = None):
    """Parse an optional numeric field; non-finite or out-of-range values are a 422."""
    value = data.get(name)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number", details={name: "expected number"})
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number",
                              details={name: "expected number"}) from None
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number",
                              details={name: "expected finite number"})
    if integer:
        if not number.is_integer():
            raise ValidationError(f"{name} must be an integer", details={name: number})
        number = int(number)
    if (minimum is not None and number < minimum) or (maximum is not None and number > maximum):
        bounds = f">= {minimum:g}" if maximum is None else f"between {minimum:g} and {maximum:g}"
        raise ValidationError(f"{name} must be {bounds}", details={name: number})
    return number


# ── Routes ─────────────────────────────────────────────────────────────────────


@lifecycle_bp.route("/statuses", methods=["GET"])
def list_statuses():
    statuses = [
        {
            "value": s.value,
            "label": STATUS_LABELS[s],
            "next": [t.value for t in status_machine.valid_targets(s)],
            "is_terminal": status_machine.is_terminal_status(s),
        }
        for s in AssessmentStatus
    ]
    legacy = [
        {"value": s.value, "maps_to": V1_TO_V2_STATUS_MAP[s].value}
        for s in LegacyAssessmentStatus
    ]
    return jsonify({"statuses": statuses, "legacy_statuses": legacy}), 200


@lifecycle_bp.route("/transitions", methods=["GET"])
def list_transitions():
    status = request.args.get("status")
    role = request.args.get("role")

    if not role:
        edges = status_machine.list_edges()
        if status:
            src = AssessmentStatus.parse(status).value
            edges = [e for e in edges if e["from"] == src]
        return jsonify({"edges": edges, "gates": list_gates()}), 200

    if not status:
        return api_error(E.VALIDATION_REQUIRED, "Query parameter 'status' is required")

    available = status_machine.get_available_transitions(status, role)
    return jsonify({
        "status": AssessmentStatus.parse(status).value,
        "role": role_name(role),
        "transitions": [
            {"value": t.value, "label": STATUS_LABELS[t]} for t in available
        ],
    }), 200


@lifecycle_bp.route("/transitions/check", methods=["POST"])
def check_transition():
    data = get_json_body()
    require_fields(data, "from_status", "to_status", "role")
    require_strings(data, "role")

    result = status_machine.can_transition(
        data["from_status"],
        data["to_status"],
        data["role"],
        profile_completeness=_optional_number(data, "profile_completeness",
                                              minimum=0, maximum=100),
        unapproved_gap_count=_optional_number(data, "unapproved_gap_count",
                                              integer=True, minimum=0),
        profile_completeness_gate=current_app.config["PROFILE_COMPLETENESS_GATE"],
    )
    if not result.allowed:
        logger.info(
            "Transition refused: %s",
            result.reason.message,
            extra={
                "event_type": "transition_denied",
                "actor_role": role_name(data["role"]),
                "assessment_id": data.get("assessment_id"),
            },
        )
        return transition_error(result.reason)
    return jsonify(result.to_dict()), 200


@lifecycle_bp.route("/statuses/migrate", methods=["POST"])
def migrate_statuses():
    data = get_json_body()
    if "statuses" in data:
        statuses = data["statuses"]
        if not isinstance(statuses, list):
            return api_error(E.VALIDATION_INVALID, "Field 'statuses' must be a list")
        return jsonify({"mapping": migrate_many(statuses)}), 200

    require_fields(data, "status")
    migrated = migrate_legacy_status(data["status"])
    return jsonify({
        "legacy_status": LegacyAssessmentStatus.parse(data["status"]).value,
        "status": migrated.value,
    }), 200


@lifecycle_bp.route("/phases/check", methods=["POST"])
def check_phase():
    data = get_json_body()
    require_fields(data, "phase")
    completed = data.get("completed_phases") or []
    if not isinstance(completed, list):
        return api_error(E.VALIDATION_INVALID, "Field 'completed_phases' must be a list")
    return jsonify(can_start_phase(data["phase"], completed)), 200
