"""
Engine-wide exception hierarchy.

The decision functions never raise for an ordinary "no": denials come back
as values (see ``assessment_engine.models.lifecycle``).  Exceptions are
reserved for input the engine must not silently accept:

  - ValidationError      — a payload is malformed (caller precondition).
  - UnknownStatusError   — a status / sign-off state literal is not part of
                           the vocabulary.  Programmer error; fails loudly.
  - PermissionDenied     — raised only by the assertion-style helpers
                           (``check_area_access``), never by the boolean ones.

Usage:
    from assessment_engine.core.exceptions import ValidationError

    raise ValidationError("snapshot.scopeSelections must be a list",
                          details={"field": "scopeSelections"})
"""


class ValidationError(Exception):
    """Raised when input fails validation before it reaches the engine.

    Maps to HTTP 422 in the blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class UnknownStatusError(ValidationError, ValueError):
    """Raised when a status literal is not part of the given vocabulary.

    Args:
        vocabulary: Name of the enumeration that was consulted
                    (e.g. "AssessmentStatus", "SignOffState").
        value: The literal that failed to parse.
        valid: The accepted values, reported back for diagnostics.
    """

    def __init__(self, vocabulary: str, value, valid: list[str]) -> None:
        self.vocabulary = vocabulary
        self.value = value
        self.valid = valid
        super().__init__(
            f"Unknown {vocabulary} value: {value!r}",
            details={"value": value, "valid": valid},
        )


class PermissionDenied(Exception):
    """Raised when a user lacks access to a functional area of an assessment."""

    def __init__(self, user_id: str, code: str, message: str,
                 functional_area: str | None = None):
        area_msg = f" in area {functional_area}" if functional_area else ""
        super().__init__(f"User {user_id} denied{area_msg}: {message}")
        self.user_id = user_id
        self.code = code
        self.functional_area = functional_area
