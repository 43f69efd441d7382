"""
Assessment Lifecycle Engine
Blueprint registry.
"""

from flask import request

from assessment_engine.core.exceptions import ValidationError


def get_json_body() -> dict:
    """Request JSON as a dict; anything else is a 422.

    An empty body reads as ``{}``.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_fields(data: dict, *names: str) -> None:
    """Raise ValidationError listing every missing / empty field."""
    missing = [n for n in names if data.get(n) in (None, "")]
    if missing:
        raise ValidationError(
            f"Missing required field(s): {', '.join(missing)}",
            details={name: "required" for name in missing},
        )


def require_strings(data: dict, *names: str) -> None:
    """Raise ValidationError for fields given with a non-string value."""
    bad = [n for n in names if data.get(n) is not None and not isinstance(data[n], str)]
    if bad:
        raise ValidationError(
            f"Field(s) must be strings: {', '.join(bad)}",
            details={name: "expected string" for name in bad},
        )
