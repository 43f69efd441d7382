"""
Assessment Lifecycle Engine
Flask Application Factory.

The decision engine (``assessment_engine.services``) is pure and usable
without Flask; this factory wraps it in a thin JSON API for the
application layer.

Usage:
    from assessment_engine import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS

from assessment_engine.config import config
from assessment_engine.core.exceptions import PermissionDenied, ValidationError
from assessment_engine.middleware.logging_config import configure_logging
from assessment_engine.middleware.timing import init_request_timing
from assessment_engine.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.

    Raises:
        RuntimeError: production config without a SECRET_KEY env var.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    # Production must not fall back to the per-process random key
    if config_name == "production" and not os.getenv("SECRET_KEY"):
        raise RuntimeError("SECRET_KEY environment variable must be set in production")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Request guards (Content-Type) ────────────────────────────────────
    @app.before_request
    def _guard_request():
        from flask import abort
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if request.data and "json" not in ct:
                abort(415, description="Content-Type must be application/json")

    # ── Blueprints ───────────────────────────────────────────────────────
    from assessment_engine.blueprints.health_bp import health_bp
    from assessment_engine.blueprints.lifecycle_bp import lifecycle_bp
    from assessment_engine.blueprints.roles_bp import roles_bp
    from assessment_engine.blueprints.signoff_bp import signoff_bp
    from assessment_engine.blueprints.snapshots_bp import snapshots_bp
    from assessment_engine.blueprints.profile_bp import profile_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(lifecycle_bp)
    app.register_blueprint(roles_bp)
    app.register_blueprint(signoff_bp)
    app.register_blueprint(snapshots_bp)
    app.register_blueprint(profile_bp)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(ValidationError)
    def validation_error(e):
        return api_error(E.VALIDATION_CONSTRAINT, str(e), details=e.details)

    @app.errorhandler(PermissionDenied)
    def permission_denied(e):
        return api_error(E.AREA_LOCKED if e.code == "AREA_LOCKED" else E.FORBIDDEN,
                         str(e), details={"functional_area": e.functional_area})

    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(415)
    def unsupported_media_type(e):
        return {"error": e.description}, 415

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    logger.debug("App created: config=%s blueprints=%d",
                 config_name, len(app.blueprints))
    return app
