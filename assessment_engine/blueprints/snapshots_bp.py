"""
Snapshots Blueprint — delta reports and change-request impact.

Endpoints:
    POST   /api/v1/snapshots/compare
           Body: { "base": <snapshot>, "compare": <snapshot> }
           Returns: 200 { "report": DeltaReport, "summary": DeltaSummary }

    POST   /api/v1/change-requests/impact
           Body: { "unlocked_entities": [ {entity_type, entity_id, reason,
                                           functional_area?}, ... ],
                   "statistics": <snapshot statistics> }
           Returns: 200 ImpactSummary

Snapshots are validated with ``Snapshot.from_dict`` before the engine sees
them; malformed payloads come back as 422.
"""

import logging

from flask import Blueprint, current_app, jsonify

from assessment_engine.blueprints import get_json_body, require_fields
from assessment_engine.core.exceptions import ValidationError
from assessment_engine.models.lifecycle import UnlockedEntity
from assessment_engine.models.snapshot import Snapshot, SnapshotStatistics
from assessment_engine.services.delta_engine import compute_delta_report, compute_delta_summary
from assessment_engine.services.impact_summary import RiskThresholds, compute_impact_summary

logger = logging.getLogger(__name__)

snapshots_bp = Blueprint("snapshots", __name__, url_prefix="/api/v1")


def _thresholds_from_config() -> RiskThresholds:
    cfg = current_app.config
    return RiskThresholds(
        critical_ratio=cfg["RISK_CRITICAL_RATIO"],
        critical_count=cfg["RISK_CRITICAL_COUNT"],
        high_ratio=cfg["RISK_HIGH_RATIO"],
        high_count=cfg["RISK_HIGH_COUNT"],
        medium_ratio=cfg["RISK_MEDIUM_RATIO"],
        medium_count=cfg["RISK_MEDIUM_COUNT"],
    )


@snapshots_bp.route("/snapshots/compare", methods=["POST"])
def compare_snapshots():
    data = get_json_body()
    require_fields(data, "base", "compare")

    base = Snapshot.from_dict(data["base"])
    compare = Snapshot.from_dict(data["compare"])
    if base.assessment_id and compare.assessment_id and base.assessment_id != compare.assessment_id:
        raise ValidationError(
            "Snapshots belong to different assessments",
            details={"base": base.assessment_id, "compare": compare.assessment_id},
        )

    report = compute_delta_report(base, compare)
    summary = compute_delta_summary(report)
    logger.info(
        "Snapshot delta v%s -> v%s: %d change(s)",
        base.version, compare.version, summary.total_changes,
        extra={"event_type": "snapshot_compared", "assessment_id": base.assessment_id},
    )
    return jsonify({"report": report.to_dict(), "summary": summary.to_dict()}), 200


@snapshots_bp.route("/change-requests/impact", methods=["POST"])
def change_request_impact():
    data = get_json_body()
    require_fields(data, "statistics")

    raw_entities = data.get("unlocked_entities")
    if raw_entities is None:
        raw_entities = data.get("unlockedEntities", [])
    if not isinstance(raw_entities, list):
        raise ValidationError("unlocked_entities must be a list",
                              details={"unlocked_entities": "expected list"})

    unlocked = [UnlockedEntity.from_dict(e) for e in raw_entities]
    statistics = SnapshotStatistics.from_dict(data["statistics"])

    summary = compute_impact_summary(unlocked, statistics,
                                     thresholds=_thresholds_from_config())
    logger.info(
        "Change-request impact: %d entities, risk=%s",
        summary.total_entities_affected, summary.risk_level.value,
        extra={"event_type": "impact_computed", "assessment_id": data.get("assessment_id")},
    )
    return jsonify(summary.to_dict()), 200
