"""
Tests: legacy status migration (V1 → V2) and phase prerequisites.
"""

import pytest

from assessment_engine.core.exceptions import UnknownStatusError
from assessment_engine.models.assessment import AssessmentStatus, LegacyAssessmentStatus
from assessment_engine.services.phase_prerequisites import (
    PHASE_PREREQUISITES,
    can_start_phase,
    missing_prerequisites,
)
from assessment_engine.services.status_migration import (
    V1_TO_V2_STATUS_MAP,
    coerce_status,
    migrate_legacy_status,
    migrate_many,
)


# ── Migration ────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("legacy, expected", [
    ("draft", "draft"),
    ("in_progress", "in_progress"),
    ("completed", "pending_validation"),
    ("reviewed", "validated"),
    ("signed_off", "signed_off"),
])
def test_legacy_status_mapping(legacy, expected):
    assert migrate_legacy_status(legacy) is AssessmentStatus(expected)


def test_mapping_is_total_over_v1():
    assert set(V1_TO_V2_STATUS_MAP) == set(LegacyAssessmentStatus)


def test_hyphenated_legacy_literal():
    assert migrate_legacy_status("In-Progress") is AssessmentStatus.IN_PROGRESS


def test_v2_only_status_is_not_a_legacy_status():
    with pytest.raises(UnknownStatusError):
        migrate_legacy_status("scoping")


def test_coerce_prefers_v2_then_falls_back_to_v1():
    assert coerce_status("scoping") is AssessmentStatus.SCOPING
    assert coerce_status("completed") is AssessmentStatus.PENDING_VALIDATION
    assert coerce_status("reviewed") is AssessmentStatus.VALIDATED


def test_coerce_unknown_lists_both_vocabularies():
    with pytest.raises(UnknownStatusError) as exc_info:
        coerce_status("finished")
    assert "completed" in exc_info.value.valid
    assert "archived" in exc_info.value.valid


def test_migrate_many():
    assert migrate_many(["completed", "reviewed"]) == {
        "completed": "pending_validation",
        "reviewed": "validated",
    }


# ── Phase prerequisites ──────────────────────────────────────────────────────


def test_scoping_has_no_prerequisites():
    assert can_start_phase("scoping", []) == {"allowed": True, "phase": "scoping", "missing": []}


def test_validation_needs_review_and_gap_resolution():
    result = can_start_phase("validation", ["scoping", "process_review"])
    assert result["allowed"] is False
    assert result["missing"] == ["gap_resolution"]


def test_sign_off_allowed_after_validation():
    assert can_start_phase("sign-off", ["validation"])["allowed"]


def test_prerequisite_graph_is_acyclic():
    for phase in PHASE_PREREQUISITES:
        seen, stack = set(), list(PHASE_PREREQUISITES[phase])
        while stack:
            node = stack.pop()
            assert node is not phase
            if node not in seen:
                seen.add(node)
                stack.extend(PHASE_PREREQUISITES[node])


def test_unknown_phase_raises():
    with pytest.raises(UnknownStatusError):
        missing_prerequisites("launch", [])
