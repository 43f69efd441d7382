"""
Shared pytest fixtures for the Assessment Lifecycle Engine test suite.

Provides:
    - app: Flask application (session-scoped)
    - client: Flask test client (function-scoped)
    - make_snapshot: factory for JSON-shaped snapshot payloads
    - base_snapshot: a small three-item assessment snapshot (dict form)

The engine keeps no state, so nothing needs resetting between tests.
"""

import pytest

from assessment_engine import create_app


# ── App fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Snapshot fixtures ────────────────────────────────────────────────────


def _snapshot(version=1, scope=(), steps=(), gaps=(), integrations=(), migrations=(),
              total_scope_items=None):
    scope = list(scope)
    return {
        "assessmentId": "asm-1",
        "version": version,
        "status": "in_progress",
        "scopeSelections": scope,
        "stepResponses": list(steps),
        "gapResolutions": list(gaps),
        "integrationPoints": list(integrations),
        "dataMigrationObjects": list(migrations),
        "statistics": {
            "totalScopeItems": len(scope) if total_scope_items is None else total_scope_items,
            "selectedScopeItems": sum(1 for s in scope if s.get("selected")),
        },
    }


@pytest.fixture()
def make_snapshot():
    """Factory: make_snapshot(version=..., scope=[...], steps=[...], ...)."""
    return _snapshot


@pytest.fixture()
def base_snapshot():
    return _snapshot(
        version=1,
        scope=[
            {"scopeItemId": "J58", "selected": True, "relevance": "YES"},
            {"scopeItemId": "BD9", "selected": True, "relevance": "MAYBE"},
            {"scopeItemId": "2QY", "selected": False, "relevance": "NO"},
        ],
        steps=[
            {"processStepId": "ps-1", "fitStatus": "FIT", "confidence": "high"},
            {"processStepId": "ps-2", "fitStatus": "GAP", "confidence": "medium"},
        ],
        gaps=[
            {"id": "gr-1", "resolutionType": "BTP_EXT", "priority": "high",
             "clientApproved": False, "processStepId": "ps-2"},
        ],
        integrations=[
            {"id": "int-1", "name": "Bank statement import", "status": "identified"},
        ],
        migrations=[
            {"id": "dm-1", "objectName": "Customer master", "status": "identified"},
        ],
    )
