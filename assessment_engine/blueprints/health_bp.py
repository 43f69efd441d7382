"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — engine self-check (transition tables consistent)
"""

import logging

from flask import Blueprint, current_app, jsonify

from assessment_engine.models.assessment import AssessmentStatus
from assessment_engine.models.roles import ROLE_CAPABILITIES, CanonicalRole
from assessment_engine.models.signoff import SIGNOFF_TRANSITIONS, SignOffState
from assessment_engine.services.signoff_workflow import REQUIRED_ROLES
from assessment_engine.services.status_machine import (
    TRANSITION_ROLES,
    VALID_TRANSITIONS,
    reachable_statuses,
)

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


def _check_status_table() -> dict:
    problems = []
    for src, targets in VALID_TRANSITIONS.items():
        for dst in targets:
            if src is dst:
                problems.append(f"self-loop on {src.value}")
            if not TRANSITION_ROLES.get((src, dst)):
                problems.append(f"no roles for {src.value}->{dst.value}")
    unreachable = set(AssessmentStatus) - reachable_statuses(AssessmentStatus.DRAFT) - {AssessmentStatus.DRAFT}
    if unreachable:
        problems.append("unreachable: " + ", ".join(sorted(s.value for s in unreachable)))
    return {"status": "error" if problems else "ok", "problems": problems}


def _check_signoff_table() -> dict:
    problems = []
    missing = set(SignOffState) - set(SIGNOFF_TRANSITIONS)
    if missing:
        problems.append("states without transitions: " + ", ".join(sorted(s.value for s in missing)))
    if set(REQUIRED_ROLES) != set(SignOffState):
        problems.append("required-role table incomplete")
    return {"status": "error" if problems else "ok", "problems": problems}


def _check_capabilities() -> dict:
    missing = set(CanonicalRole) - set(ROLE_CAPABILITIES)
    return {
        "status": "error" if missing else "ok",
        "problems": [f"no capability row for {r.value}" for r in sorted(missing)],
    }


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check of the decision tables."""
    checks = {
        "status_machine": _check_status_table(),
        "signoff_workflow": _check_signoff_table(),
        "capabilities": _check_capabilities(),
    }
    overall = all(c["status"] == "ok" for c in checks.values())
    if not overall:
        logger.error("Health check failed: %s",
                     {k: v["problems"] for k, v in checks.items() if v["problems"]})

    checks["app"] = {
        "name": "Assessment Lifecycle Engine",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
