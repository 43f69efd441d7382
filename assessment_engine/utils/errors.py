"""Standardised API error responses.

Usage
-----
    from assessment_engine.utils.errors import api_error, E

    return api_error(E.VALIDATION_REQUIRED, "status is required")
    return api_error(E.TRANSITION_UNAUTHORIZED, reason.message,
                     details=reason.to_dict())
"""

from __future__ import annotations

from flask import jsonify

from assessment_engine.models.transition import (
    GateUnsatisfied,
    InvalidTransition,
    Unauthorized,
)


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants.

    Convention:
     • ERR_  prefix for standard application errors
     • TRANSITION_ prefix for lifecycle / sign-off transition denials
    """

    # Validation – HTTP 400 / 422
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"
    VALIDATION_CONSTRAINT = "ERR_VALIDATION_CONSTRAINT"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Permissions – HTTP 403
    FORBIDDEN = "ERR_FORBIDDEN"
    AREA_LOCKED = "ERR_AREA_LOCKED"

    # Server – HTTP 500
    INTERNAL = "ERR_INTERNAL"

    # Transition denials
    TRANSITION_INVALID = "TRANSITION_INVALID"
    TRANSITION_UNAUTHORIZED = "TRANSITION_UNAUTHORIZED"
    TRANSITION_GATE = "TRANSITION_GATE_UNSATISFIED"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.VALIDATION_CONSTRAINT: 422,
    E.NOT_FOUND: 404,
    E.FORBIDDEN: 403,
    E.AREA_LOCKED: 403,
    E.INTERNAL: 500,
    E.TRANSITION_INVALID: 409,
    E.TRANSITION_UNAUTHORIZED: 403,
    E.TRANSITION_GATE: 422,
}

# Reason type → error code
_REASON_CODES: dict[type, str] = {
    InvalidTransition: E.TRANSITION_INVALID,
    Unauthorized: E.TRANSITION_UNAUTHORIZED,
    GateUnsatisfied: E.TRANSITION_GATE,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload (denial reason, valid values, etc.).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def transition_error(reason):
    """Error response for a denied transition, keyed on the reason family."""
    return api_error(_REASON_CODES[type(reason)], reason.message,
                     details=reason.to_dict())
