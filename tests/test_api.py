"""
API tests for the Flask adapter.

Covers every endpoint:
    health, lifecycle (statuses / transitions / check / migrate / phases),
    roles (list / capabilities / can-assign / area-access),
    sign-off (states / transitions / check),
    snapshots compare, change-request impact, profile completeness, OCM training,
    plus error envelopes (422 validation, 404, 405, 415) and request-id headers.
"""

import json

import pytest

from assessment_engine import create_app


# ═════════════════════════════════════════════════════════════════════════════
# Health & middleware
# ═════════════════════════════════════════════════════════════════════════════


def test_health_ready(client):
    res = client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.get_json() == {"status": "ok"}


def test_health_live_checks_tables(client):
    res = client.get("/api/v1/health/live")
    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "healthy"
    assert body["checks"]["status_machine"]["problems"] == []


def test_request_id_header_echoed(client):
    res = client.get("/api/v1/lifecycle/statuses", headers={"X-Request-ID": "req-123"})
    assert res.headers["X-Request-ID"] == "req-123"
    assert "X-Request-Duration-Ms" in res.headers


def test_unknown_route_is_json_404(client):
    res = client.get("/api/v1/nothing-here")
    assert res.status_code == 404
    assert res.get_json()["path"] == "/api/v1/nothing-here"


def test_wrong_method_is_405(client):
    assert client.get("/api/v1/lifecycle/transitions/check").status_code == 405


def test_non_json_body_is_415(client):
    res = client.post("/api/v1/lifecycle/transitions/check", data="from=draft",
                      content_type="text/plain")
    assert res.status_code == 415


# ═════════════════════════════════════════════════════════════════════════════
# Lifecycle
# ═════════════════════════════════════════════════════════════════════════════


def test_list_statuses(client):
    body = client.get("/api/v1/lifecycle/statuses").get_json()
    assert len(body["statuses"]) == 12
    archived = next(s for s in body["statuses"] if s["value"] == "archived")
    assert archived["is_terminal"] is True
    completed = next(s for s in body["legacy_statuses"] if s["value"] == "completed")
    assert completed["maps_to"] == "pending_validation"


def test_available_transitions_for_role(client):
    res = client.get("/api/v1/lifecycle/transitions?status=in_progress&role=partner_lead")
    assert res.status_code == 200
    assert [t["value"] for t in res.get_json()["transitions"]] == ["scoping"]


def test_transitions_without_role_lists_edges_and_gates(client):
    body = client.get("/api/v1/lifecycle/transitions?status=scoping").get_json()
    assert {e["to"] for e in body["edges"]} == {"in_progress", "draft"}
    assert len(body["gates"]) == 2


def test_transitions_with_role_requires_status(client):
    res = client.get("/api/v1/lifecycle/transitions?role=consultant")
    assert res.status_code == 400
    assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"


def test_unknown_status_query_is_422(client):
    res = client.get("/api/v1/lifecycle/transitions?status=finished&role=consultant")
    assert res.status_code == 422
    assert "draft" in res.get_json()["details"]["valid"]


def test_check_allowed(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "pending-sign-off", "to_status": "signed-off",
        "role": "executive-sponsor",
    })
    assert res.status_code == 200
    assert res.get_json() == {"allowed": True}


def test_check_invalid_edge_is_409(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "draft", "to_status": "signed_off", "role": "platform_admin",
    })
    assert res.status_code == 409
    body = res.get_json()
    assert body["code"] == "TRANSITION_INVALID"
    assert body["details"]["valid_targets"] == ["scoping"]


def test_check_unauthorized_is_403(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "pending_sign_off", "to_status": "signed_off", "role": "viewer",
    })
    assert res.status_code == 403
    assert res.get_json()["details"]["edge"] == "pending_sign_off->signed_off"


def test_check_gate_is_422_with_measured_and_required(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "scoping", "to_status": "in_progress", "role": "consultant",
        "profile_completeness": 55,
    })
    assert res.status_code == 422
    details = res.get_json()["details"]
    assert details["measured"] == 55
    assert details["required"] == 60


def test_check_missing_fields_is_422(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={"from_status": "draft"})
    assert res.status_code == 422
    assert set(res.get_json()["details"]) == {"to_status", "role"}


def test_check_non_numeric_gate_input_is_422(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "scoping", "to_status": "in_progress", "role": "consultant",
        "profile_completeness": "most of it",
    })
    assert res.status_code == 422


def test_migrate_single_and_bulk(client):
    single = client.post("/api/v1/lifecycle/statuses/migrate", json={"status": "reviewed"})
    assert single.get_json() == {"legacy_status": "reviewed", "status": "validated"}

    bulk = client.post("/api/v1/lifecycle/statuses/migrate",
                       json={"statuses": ["completed", "draft"]})
    assert bulk.get_json()["mapping"] == {"completed": "pending_validation", "draft": "draft"}


def test_phase_check(client):
    res = client.post("/api/v1/lifecycle/phases/check",
                      json={"phase": "gap_resolution", "completed_phases": ["scoping"]})
    assert res.get_json() == {"allowed": False, "phase": "gap_resolution",
                              "missing": ["process_review"]}


# ═════════════════════════════════════════════════════════════════════════════
# Roles
# ═════════════════════════════════════════════════════════════════════════════


def test_list_roles(client):
    body = client.get("/api/v1/roles").get_json()
    assert body["roles"][0]["value"] == "platform_admin"
    assert body["aliases"] == {"admin": "platform_admin", "executive": "executive_sponsor"}


def test_capabilities_for_alias(client):
    body = client.get("/api/v1/roles/admin/capabilities").get_json()
    assert body["role"] == "platform_admin"
    assert body["capabilities"]["can_delete_assessment"] is True


def test_capabilities_for_unknown_role(client):
    body = client.get("/api/v1/roles/janitor/capabilities").get_json()
    assert body["recognised"] is False
    assert not any(body["capabilities"].values())
    assert body["assignable_roles"] == []


@pytest.mark.parametrize("assigner, target, allowed", [
    ("consultant", "process_owner", True),
    ("consultant", "partner_lead", False),
    ("admin", "partner_lead", True),
])
def test_can_assign(client, assigner, target, allowed):
    res = client.post("/api/v1/roles/can-assign",
                      json={"assigner_role": assigner, "target_role": target})
    assert res.get_json()["allowed"] is allowed


def test_area_access_locked_with_override_offer(client):
    res = client.post("/api/v1/roles/area-access", json={
        "role": "consultant", "user_id": "u-1", "functional_area": "FI",
        "assignment": {"assigned_areas": ["SD"]},
    })
    body = res.get_json()
    assert body["allowed"] is False
    assert body["code"] == "AREA_LOCKED"
    assert body["override_available"] is True


def test_area_access_override_reason(client):
    res = client.post("/api/v1/roles/area-access", json={
        "role": "consultant", "user_id": "u-1", "functional_area": "FI",
        "assignment": {"assigned_areas": ["SD"]}, "override_reason": "Covering",
    })
    assert res.get_json() == {"allowed": True, "overridden": True}


def test_area_access_without_assignment_forbidden(client):
    res = client.post("/api/v1/roles/area-access", json={
        "role": "process_owner", "user_id": "u-1", "functional_area": "FI",
    })
    assert res.get_json()["code"] == "FORBIDDEN"


def test_area_access_unknown_action(client):
    res = client.post("/api/v1/roles/area-access", json={
        "role": "consultant", "user_id": "u-1", "action": "delete_assessment",
    })
    assert res.status_code == 400
    assert "edit_step_response" in res.get_json()["details"]["valid_actions"]


# ═════════════════════════════════════════════════════════════════════════════
# Sign-off
# ═════════════════════════════════════════════════════════════════════════════


def test_signoff_states(client):
    body = client.get("/api/v1/signoff/states").get_json()
    assert body["initial_state"] == "VALIDATION_NOT_STARTED"
    states = {s["value"]: s for s in body["states"]}
    assert len(states) == 12
    assert states["COMPLETED"]["is_terminal"] is True
    assert states["COMPLETED"]["required_role"] is None
    assert states["EXECUTIVE_SIGN_OFF_PENDING"]["required_role"] == "executive_sponsor"


def test_signoff_state_transitions(client):
    body = client.get("/api/v1/signoff/area-validation-in-progress/transitions").get_json()
    assert {t["value"] for t in body["transitions"]} == {"AREA_VALIDATION_COMPLETE", "REJECTED"}


def test_signoff_unknown_state_is_422(client):
    assert client.get("/api/v1/signoff/APPROVED/transitions").status_code == 422


def test_signoff_check_with_role(client):
    ok = client.post("/api/v1/signoff/transitions/check", json={
        "current_state": "PARTNER_COUNTERSIGN_PENDING", "target_state": "COMPLETED",
        "role": "partner_lead",
    })
    assert ok.status_code == 200

    denied = client.post("/api/v1/signoff/transitions/check", json={
        "current_state": "PARTNER_COUNTERSIGN_PENDING", "target_state": "COMPLETED",
        "role": "consultant",
    })
    assert denied.status_code == 403


def test_signoff_check_structure_only(client):
    res = client.post("/api/v1/signoff/transitions/check", json={
        "current_state": "COMPLETED", "target_state": "REJECTED",
    })
    assert res.status_code == 409
    assert res.get_json()["details"]["valid_targets"] == []


# ═════════════════════════════════════════════════════════════════════════════
# Snapshots & impact
# ═════════════════════════════════════════════════════════════════════════════


def test_compare_identical_snapshots(client, base_snapshot):
    res = client.post("/api/v1/snapshots/compare",
                      json={"base": base_snapshot, "compare": base_snapshot})
    assert res.status_code == 200
    body = res.get_json()
    assert body["summary"]["total_changes"] == 0
    assert body["report"]["scope_changes"] == []


def test_compare_reports_added_scope_item(client, base_snapshot, make_snapshot):
    compare = make_snapshot(version=2, scope=base_snapshot["scopeSelections"] + [
        {"scopeItemId": "1YB", "selected": True, "relevance": "YES"},
    ])
    res = client.post("/api/v1/snapshots/compare",
                      json={"base": make_snapshot(scope=base_snapshot["scopeSelections"]),
                            "compare": compare})
    body = res.get_json()
    assert body["summary"]["scope_added"] == 1
    assert body["report"]["scope_changes"] == [
        {"scope_item_id": "1YB", "change_type": "added", "changed_fields": [],
         "new_selected": True, "new_relevance": "YES"},
    ]
    assert body["report"]["compare_version"] == 2


def test_compare_different_assessments_rejected(client, base_snapshot):
    other = dict(base_snapshot, assessmentId="asm-2")
    res = client.post("/api/v1/snapshots/compare", json={"base": base_snapshot, "compare": other})
    assert res.status_code == 422


def test_compare_malformed_snapshot_is_422(client, base_snapshot):
    res = client.post("/api/v1/snapshots/compare",
                      json={"base": base_snapshot, "compare": {"scopeSelections": "all"}})
    assert res.status_code == 422
    assert res.get_json()["code"] == "ERR_VALIDATION_CONSTRAINT"


def test_impact_critical(client):
    unlocked = [{"entityType": "scope_selection", "entityId": f"s-{i}", "reason": "CR-1",
                 "functionalArea": "FI"} for i in range(60)]
    res = client.post("/api/v1/change-requests/impact", json={
        "unlocked_entities": unlocked, "statistics": {"totalScopeItems": 100},
    })
    assert res.status_code == 200
    body = res.get_json()
    assert body["risk_level"] == "critical"
    assert body["estimated_rework_days"] == 30
    assert body["affected_functional_areas"] == ["FI"]


def test_impact_rework_days(client):
    unlocked = [
        {"entity_type": "scope_selection", "entity_id": "s-1", "reason": "r"},
        {"entity_type": "gap_resolution", "entity_id": "g-1", "reason": "r"},
        {"entity_type": "integration", "entity_id": "i-1", "reason": "r"},
    ]
    res = client.post("/api/v1/change-requests/impact", json={
        "unlocked_entities": unlocked, "statistics": {"total_scope_items": 200},
    })
    assert res.get_json()["estimated_rework_days"] == 4


def test_impact_bad_entity_is_422(client):
    res = client.post("/api/v1/change-requests/impact", json={
        "unlocked_entities": [{"entity_type": "invoice", "entity_id": "x"}],
        "statistics": {"totalScopeItems": 10},
    })
    assert res.status_code == 422


def test_impact_requires_statistics(client):
    res = client.post("/api/v1/change-requests/impact", json={"unlocked_entities": []})
    assert res.status_code == 422


# ═════════════════════════════════════════════════════════════════════════════
# Profile & OCM
# ═════════════════════════════════════════════════════════════════════════════


def test_profile_completeness_reports_gate(client):
    res = client.post("/api/v1/profile/completeness", json={
        "companyName": "Acme", "industry": "Retail", "country": "US", "companySize": "mid",
    })
    body = res.get_json()
    assert body["score"] == 30
    assert body["gate"] == {"required": 60, "met": False}


def test_ocm_training_valid(client):
    res = client.post("/api/v1/ocm/training", json={
        "training_required": True, "training_type": "INSTRUCTOR_LED", "training_duration": 3,
    })
    assert res.status_code == 200
    assert res.get_json() == {"training_required": True, "training_type": "instructor_led",
                              "training_duration": 3.0}


def test_ocm_training_contradiction_is_422(client):
    res = client.post("/api/v1/ocm/training", json={
        "training_required": False, "training_duration": 3,
    })
    assert res.status_code == 422


# ═════════════════════════════════════════════════════════════════════════════
# Malformed input at the boundary
# ═════════════════════════════════════════════════════════════════════════════


def _strict_json(res):
    """Parse a response body, refusing NaN / Infinity literals."""
    def _reject(token):
        raise ValueError(f"non-standard JSON constant {token}")
    return json.loads(res.get_data(as_text=True), parse_constant=_reject)


@pytest.mark.parametrize("url, body", [
    ("/api/v1/lifecycle/transitions/check",
     {"from_status": "draft", "to_status": "scoping", "role": ["consultant"]}),
    ("/api/v1/signoff/transitions/check",
     {"current_state": "REJECTED", "target_state": "VALIDATION_NOT_STARTED",
      "role": {"name": "consultant"}}),
    ("/api/v1/roles/can-assign", {"assigner_role": ["platform_admin"], "target_role": "viewer"}),
    ("/api/v1/roles/area-access", {"role": {"r": 1}, "user_id": "u-1"}),
])
def test_non_string_role_is_422(client, url, body):
    res = client.post(url, json=body)
    assert res.status_code == 422
    assert res.get_json()["code"] == "ERR_VALIDATION_CONSTRAINT"


def test_negative_gap_count_is_422(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "gap_resolution", "to_status": "pending_validation",
        "role": "consultant", "unapproved_gap_count": -3,
    })
    assert res.status_code == 422
    assert _strict_json(res)["details"] == {"unapproved_gap_count": -3}


@pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("nan"), 101, -0.5])
def test_bad_completeness_is_422_with_valid_json(client, value):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "scoping", "to_status": "in_progress",
        "role": "consultant", "profile_completeness": value,
    })
    assert res.status_code == 422
    assert "profile_completeness" in _strict_json(res)["details"]


def test_fractional_gap_count_is_422(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "gap_resolution", "to_status": "pending_validation",
        "role": "consultant", "unapproved_gap_count": 1.5,
    })
    assert res.status_code == 422


def test_numeric_string_gate_inputs_accepted(client):
    res = client.post("/api/v1/lifecycle/transitions/check", json={
        "from_status": "gap_resolution", "to_status": "pending_validation",
        "role": "consultant", "unapproved_gap_count": "0",
    })
    assert res.status_code == 200


def test_compare_list_id_is_422(client, base_snapshot):
    bad = dict(base_snapshot, scopeSelections=[{"scopeItemId": ["J58"], "selected": True}])
    res = client.post("/api/v1/snapshots/compare", json={"base": base_snapshot, "compare": bad})
    assert res.status_code == 422
    assert res.get_json()["details"]["field"] == "scope_item_id"


def test_compare_null_ids_are_422(client, make_snapshot):
    base = make_snapshot(scope=[
        {"scopeItemId": None, "selected": True},
        {"scopeItemId": None, "selected": False},
    ])
    res = client.post("/api/v1/snapshots/compare", json={"base": base, "compare": make_snapshot()})
    assert res.status_code == 422


def test_compare_duplicate_ids_are_422(client, make_snapshot):
    base = make_snapshot(scope=[
        {"scopeItemId": "J58", "selected": True},
        {"scopeItemId": "J58", "selected": False},
    ])
    res = client.post("/api/v1/snapshots/compare", json={"base": base, "compare": make_snapshot()})
    assert res.status_code == 422
    assert res.get_json()["details"]["value"] == "J58"


# ═════════════════════════════════════════════════════════════════════════════
# App factory
# ═════════════════════════════════════════════════════════════════════════════


def test_production_requires_secret_key(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app("production")
