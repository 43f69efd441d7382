"""
Sign-off Workflow Blueprint — the multi-party approval chain.

Endpoints:
    GET    /api/v1/signoff/states
           Returns: every state with label, successors, required role,
                    terminal flag and progress position.

    GET    /api/v1/signoff/<state>/transitions
           Returns: 200 with the successors of ``state``.

    POST   /api/v1/signoff/transitions/check
           Body: { "current_state", "target_state", "role" (optional) }
           Without ``role`` only the structure is checked.
           Returns: 200 {"allowed": true} or a denial (409 / 403).
"""

import logging

from flask import Blueprint, jsonify

from assessment_engine.blueprints import get_json_body, require_fields, require_strings
from assessment_engine.models.signoff import (
    INITIAL_SIGNOFF_STATE,
    SIGNOFF_STATE_LABELS,
    SignOffState,
)
from assessment_engine.models.transition import ALLOWED, InvalidTransition, TransitionResult
from assessment_engine.services import signoff_workflow
from assessment_engine.services.role_resolver import role_name
from assessment_engine.utils.errors import transition_error

logger = logging.getLogger(__name__)

signoff_bp = Blueprint("signoff", __name__, url_prefix="/api/v1/signoff")


def _state_dict(state: SignOffState) -> dict:
    required = signoff_workflow.get_required_role(state)
    return {
        "value": state.value,
        "label": SIGNOFF_STATE_LABELS[state],
        "next": [t.value for t in signoff_workflow.get_available_signoff_transitions(state)],
        "required_role": required.value if required else None,
        "is_terminal": signoff_workflow.is_terminal_state(state),
        "progress": signoff_workflow.signoff_progress(state),
    }


@signoff_bp.route("/states", methods=["GET"])
def list_states():
    return jsonify({
        "initial_state": INITIAL_SIGNOFF_STATE.value,
        "states": [_state_dict(s) for s in SignOffState],
    }), 200


@signoff_bp.route("/<state>/transitions", methods=["GET"])
def state_transitions(state: str):
    current = SignOffState.parse(state)
    return jsonify({
        "state": current.value,
        "transitions": [
            {"value": t.value, "label": SIGNOFF_STATE_LABELS[t]}
            for t in signoff_workflow.get_available_signoff_transitions(current)
        ],
    }), 200


@signoff_bp.route("/transitions/check", methods=["POST"])
def check_signoff_transition():
    data = get_json_body()
    require_fields(data, "current_state", "target_state")
    require_strings(data, "role")

    current = SignOffState.parse(data["current_state"])
    target = SignOffState.parse(data["target_state"])
    role = data.get("role")

    if role:
        result = signoff_workflow.can_perform_signoff_transition(current, target, role)
    elif signoff_workflow.can_transition_signoff(current, target):
        result = ALLOWED
    else:
        result = TransitionResult(False, InvalidTransition(
            from_status=current.value,
            to_status=target.value,
            valid_targets=tuple(
                t.value for t in signoff_workflow.get_available_signoff_transitions(current)
            ),
        ))

    if not result.allowed:
        logger.info(
            "Sign-off move refused: %s",
            result.reason.message,
            extra={
                "event_type": "signoff_denied",
                "actor_role": role_name(role) if role else None,
                "assessment_id": data.get("assessment_id"),
            },
        )
        return transition_error(result.reason)
    return jsonify(result.to_dict()), 200
