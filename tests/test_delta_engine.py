"""
Tests: snapshot delta engine.

Covers:
    - reflexivity: compare(S, S) is empty
    - added / removed / modified classification per collection
    - only significant fields produce a modification
    - mirror symmetry: compare(A, B) vs compare(B, A)
    - summary counts
    - snapshot payload validation

Output order carries no meaning, so assertions use sets / lookups.
"""

import copy

import pytest

from assessment_engine.core.exceptions import ValidationError
from assessment_engine.models.lifecycle import ChangeType
from assessment_engine.models.snapshot import Snapshot
from assessment_engine.services.delta_engine import compute_delta_report, compute_delta_summary

CHANGE_LISTS = (
    ("scope_changes", "scope_item_id"),
    ("classification_changes", "process_step_id"),
    ("gap_resolution_changes", "gap_resolution_id"),
    ("integration_changes", "integration_id"),
    ("data_migration_changes", "data_migration_id"),
)


def _by_id(changes, id_field):
    return {getattr(c, id_field): c for c in changes}


@pytest.fixture()
def changed_snapshot(base_snapshot):
    """Version 2 of base_snapshot with one change of each kind."""
    snap = copy.deepcopy(base_snapshot)
    snap["version"] = 2
    # modified: relevance YES -> MAYBE
    snap["scopeSelections"][0]["relevance"] = "MAYBE"
    # removed: 2QY; added: 1YB
    snap["scopeSelections"] = [s for s in snap["scopeSelections"] if s["scopeItemId"] != "2QY"]
    snap["scopeSelections"].append({"scopeItemId": "1YB", "selected": True, "relevance": "YES"})
    # modified: GAP -> FIT
    snap["stepResponses"][1]["fitStatus"] = "FIT"
    # non-significant edit only
    snap["stepResponses"][0]["clientNote"] = "checked again"
    # modified: approval flag
    snap["gapResolutions"][0]["clientApproved"] = True
    # removed integration, added one
    snap["integrationPoints"] = [{"id": "int-2", "name": "Payroll export", "status": "confirmed"}]
    # modified migration status
    snap["dataMigrationObjects"][0]["status"] = "mapped"
    return snap


# ═════════════════════════════════════════════════════════════════════════════
# Reflexivity
# ═════════════════════════════════════════════════════════════════════════════


def test_identical_snapshots_have_no_changes(base_snapshot):
    snap = Snapshot.from_dict(base_snapshot)
    report = compute_delta_report(snap, snap)
    assert report.total_changes == 0
    for name, _ in CHANGE_LISTS:
        assert getattr(report, name) == ()


def test_empty_snapshots_have_no_changes(make_snapshot):
    snap = Snapshot.from_dict(make_snapshot())
    assert compute_delta_report(snap, snap).total_changes == 0


# ═════════════════════════════════════════════════════════════════════════════
# Classification
# ═════════════════════════════════════════════════════════════════════════════


def test_scope_changes(base_snapshot, changed_snapshot):
    report = compute_delta_report(Snapshot.from_dict(base_snapshot),
                                  Snapshot.from_dict(changed_snapshot))
    scope = _by_id(report.scope_changes, "scope_item_id")
    assert set(scope) == {"J58", "2QY", "1YB"}

    assert scope["J58"].change_type is ChangeType.MODIFIED
    assert scope["J58"].changed_fields == ("relevance",)
    assert scope["J58"].previous_relevance == "YES"
    assert scope["J58"].new_relevance == "MAYBE"
    assert scope["J58"].previous_selected is True and scope["J58"].new_selected is True

    assert scope["2QY"].change_type is ChangeType.REMOVED
    assert scope["2QY"].previous_relevance == "NO"
    assert scope["2QY"].new_relevance is None

    assert scope["1YB"].change_type is ChangeType.ADDED
    assert scope["1YB"].new_selected is True
    assert scope["1YB"].previous_selected is None


def test_non_significant_field_is_not_a_change(base_snapshot, changed_snapshot):
    report = compute_delta_report(Snapshot.from_dict(base_snapshot),
                                  Snapshot.from_dict(changed_snapshot))
    steps = _by_id(report.classification_changes, "process_step_id")
    assert set(steps) == {"ps-2"}
    assert steps["ps-2"].previous_fit_status == "GAP"
    assert steps["ps-2"].new_fit_status == "FIT"


def test_gap_approval_change(base_snapshot, changed_snapshot):
    report = compute_delta_report(Snapshot.from_dict(base_snapshot),
                                  Snapshot.from_dict(changed_snapshot))
    (gap,) = report.gap_resolution_changes
    assert gap.gap_resolution_id == "gr-1"
    assert gap.changed_fields == ("client_approved",)
    assert gap.previous_client_approved is False
    assert gap.new_client_approved is True


def test_integration_and_migration_changes_carry_names(base_snapshot, changed_snapshot):
    report = compute_delta_report(Snapshot.from_dict(base_snapshot),
                                  Snapshot.from_dict(changed_snapshot))
    integrations = _by_id(report.integration_changes, "integration_id")
    assert integrations["int-1"].change_type is ChangeType.REMOVED
    assert integrations["int-1"].name == "Bank statement import"
    assert integrations["int-2"].change_type is ChangeType.ADDED
    assert integrations["int-2"].new_status == "confirmed"

    (migration,) = report.data_migration_changes
    assert migration.object_name == "Customer master"
    assert (migration.previous_status, migration.new_status) == ("identified", "mapped")


def test_every_id_accounted_for_once(base_snapshot, changed_snapshot):
    base = Snapshot.from_dict(base_snapshot)
    compare = Snapshot.from_dict(changed_snapshot)
    report = compute_delta_report(base, compare)
    ids = [c.scope_item_id for c in report.scope_changes]
    assert len(ids) == len(set(ids))
    union = set(base.keyed("scope_selections")) | set(compare.keyed("scope_selections"))
    assert set(ids) <= union


def test_report_versions(base_snapshot, changed_snapshot):
    report = compute_delta_report(Snapshot.from_dict(base_snapshot),
                                  Snapshot.from_dict(changed_snapshot))
    assert (report.base_version, report.compare_version) == (1, 2)
    assert report.to_dict()["computed_at"]


# ═════════════════════════════════════════════════════════════════════════════
# Mirror symmetry
# ═════════════════════════════════════════════════════════════════════════════

_MIRROR = {
    ChangeType.ADDED: ChangeType.REMOVED,
    ChangeType.REMOVED: ChangeType.ADDED,
    ChangeType.MODIFIED: ChangeType.MODIFIED,
}


def _swapped(record) -> dict:
    out = {}
    for key, value in record.to_dict().items():
        if key.startswith("previous_"):
            out["new_" + key[len("previous_"):]] = value
        elif key.startswith("new_"):
            out["previous_" + key[len("new_"):]] = value
        else:
            out[key] = value
    return out


def test_reports_are_mirror_symmetric(base_snapshot, changed_snapshot):
    a = Snapshot.from_dict(base_snapshot)
    b = Snapshot.from_dict(changed_snapshot)
    forward = compute_delta_report(a, b)
    backward = compute_delta_report(b, a)

    for name, id_field in CHANGE_LISTS:
        fwd = _by_id(getattr(forward, name), id_field)
        bwd = _by_id(getattr(backward, name), id_field)
        assert set(fwd) == set(bwd)
        for record_id, change in fwd.items():
            mirror = bwd[record_id]
            assert mirror.change_type is _MIRROR[change.change_type]
            if change.change_type is ChangeType.MODIFIED:
                assert mirror.changed_fields == change.changed_fields
                assert _swapped(change) == mirror.to_dict()


# ═════════════════════════════════════════════════════════════════════════════
# Summary
# ═════════════════════════════════════════════════════════════════════════════


def test_summary_counts(base_snapshot, changed_snapshot):
    report = compute_delta_report(Snapshot.from_dict(base_snapshot),
                                  Snapshot.from_dict(changed_snapshot))
    summary = compute_delta_summary(report)
    assert (summary.scope_added, summary.scope_removed, summary.scope_modified) == (1, 1, 1)
    assert summary.classifications_modified == 1
    assert summary.classifications_changed == 1
    assert summary.gap_resolutions_modified == 1
    assert (summary.integrations_added, summary.integrations_removed) == (1, 1)
    assert summary.data_migration_modified == 1
    assert summary.total_changes == report.total_changes == 8


def test_summary_of_empty_report(base_snapshot):
    snap = Snapshot.from_dict(base_snapshot)
    summary = compute_delta_summary(compute_delta_report(snap, snap))
    assert not any(summary.to_dict().values())


# ═════════════════════════════════════════════════════════════════════════════
# Payload validation
# ═════════════════════════════════════════════════════════════════════════════


def test_snapshot_accepts_snake_case(base_snapshot):
    snake = {
        "assessment_id": "asm-1",
        "version": 3,
        "scope_selections": [{"scope_item_id": "J58", "selected": True}],
    }
    snap = Snapshot.from_dict(snake)
    assert snap.version == 3
    assert snap.scope_selections[0].scope_item_id == "J58"


def test_snapshot_record_missing_key_rejected():
    with pytest.raises(ValidationError) as exc_info:
        Snapshot.from_dict({"gapResolutions": [{"priority": "high"}]})
    assert exc_info.value.details["field"] == "id"


def test_snapshot_collection_must_be_list():
    with pytest.raises(ValidationError):
        Snapshot.from_dict({"scopeSelections": {"J58": {}}})


def test_snapshot_must_be_object():
    with pytest.raises(ValidationError):
        Snapshot.from_dict(None)


@pytest.mark.parametrize("bad_id", [None, "", "   ", ["J58"], {"id": "J58"}, True])
def test_snapshot_record_key_must_be_non_empty_string(bad_id):
    with pytest.raises(ValidationError) as exc_info:
        Snapshot.from_dict({"scopeSelections": [{"scopeItemId": bad_id, "selected": True}]})
    assert exc_info.value.details["field"] == "scope_item_id"


def test_snapshot_integer_key_read_as_string():
    snap = Snapshot.from_dict({"integrationPoints": [{"id": 7, "status": "open"}]})
    assert snap.integration_points[0].id == "7"
    assert set(snap.keyed("integration_points")) == {"7"}


def test_snapshot_duplicate_ids_rejected():
    with pytest.raises(ValidationError) as exc_info:
        Snapshot.from_dict({"stepResponses": [
            {"processStepId": "ps-1", "fitStatus": "FIT"},
            {"processStepId": "ps-1", "fitStatus": "GAP"},
        ]})
    assert exc_info.value.details["value"] == "ps-1"


def test_same_id_in_different_collections_is_fine():
    snap = Snapshot.from_dict({
        "gapResolutions": [{"id": "x-1"}],
        "integrationPoints": [{"id": "x-1"}],
    })
    assert len(snap.gap_resolutions) == len(snap.integration_points) == 1
