"""
Assessment inputs Blueprint — values the application computes before asking
for a decision.

Endpoints:
    POST   /api/v1/profile/completeness
           Body: company profile fields (snake_case or camelCase)
           Returns: 200 { "score", "breakdown", "gate": {"required", "met"} }

    POST   /api/v1/ocm/training
           Body: { "training_required", "training_type", "training_duration" }
           Returns: 200 with the normalised training requirement, 422 when
                    the combination is invalid.
"""

import logging

from flask import Blueprint, current_app, jsonify

from assessment_engine.blueprints import get_json_body
from assessment_engine.models.assessment import parse_training
from assessment_engine.services.profile_completeness import calculate_profile_completeness

logger = logging.getLogger(__name__)

profile_bp = Blueprint("profile", __name__, url_prefix="/api/v1")


@profile_bp.route("/profile/completeness", methods=["POST"])
def profile_completeness():
    data = get_json_body()
    result = calculate_profile_completeness(data)
    required = current_app.config["PROFILE_COMPLETENESS_GATE"]
    result["gate"] = {"required": required, "met": result["score"] >= required}
    return jsonify(result), 200


@profile_bp.route("/ocm/training", methods=["POST"])
def validate_training():
    data = get_json_body()
    return jsonify(parse_training(data).to_dict()), 200
