"""
Sign-off sub-workflow states.

Linear approval chain with one sideways escape:

    VALIDATION_NOT_STARTED
      → AREA_VALIDATION_IN_PROGRESS → AREA_VALIDATION_COMPLETE
      → TECHNICAL_VALIDATION_IN_PROGRESS → TECHNICAL_VALIDATION_COMPLETE
      → CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS → CROSS_FUNCTIONAL_VALIDATION_COMPLETE
      → EXECUTIVE_SIGN_OFF_PENDING → EXECUTIVE_SIGNED
      → PARTNER_COUNTERSIGN_PENDING → COMPLETED

Every in-progress / pending stage may go to REJECTED; REJECTED restarts at
VALIDATION_NOT_STARTED.  COMPLETED is the only terminal state.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from assessment_engine.core.exceptions import UnknownStatusError
from assessment_engine.utils.helpers import normalize_key


class SignOffState(str, Enum):
    VALIDATION_NOT_STARTED = "VALIDATION_NOT_STARTED"
    AREA_VALIDATION_IN_PROGRESS = "AREA_VALIDATION_IN_PROGRESS"
    AREA_VALIDATION_COMPLETE = "AREA_VALIDATION_COMPLETE"
    TECHNICAL_VALIDATION_IN_PROGRESS = "TECHNICAL_VALIDATION_IN_PROGRESS"
    TECHNICAL_VALIDATION_COMPLETE = "TECHNICAL_VALIDATION_COMPLETE"
    CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS = "CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS"
    CROSS_FUNCTIONAL_VALIDATION_COMPLETE = "CROSS_FUNCTIONAL_VALIDATION_COMPLETE"
    EXECUTIVE_SIGN_OFF_PENDING = "EXECUTIVE_SIGN_OFF_PENDING"
    EXECUTIVE_SIGNED = "EXECUTIVE_SIGNED"
    PARTNER_COUNTERSIGN_PENDING = "PARTNER_COUNTERSIGN_PENDING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value) -> "SignOffState":
        if isinstance(value, cls):
            return value
        key = normalize_key(value).upper()
        key = _SHORT_NAMES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnknownStatusError(cls.__name__, value, [s.value for s in cls]) from None


# Short spellings used in workflow diagrams and UI copy
_SHORT_NAMES = {
    "NOT_STARTED": "VALIDATION_NOT_STARTED",
    "EXECUTIVE_SIGN_PENDING": "EXECUTIVE_SIGN_OFF_PENDING",
    "CROSS_FUNCTIONAL_IN_PROGRESS": "CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS",
    "CROSS_FUNCTIONAL_COMPLETE": "CROSS_FUNCTIONAL_VALIDATION_COMPLETE",
}

INITIAL_SIGNOFF_STATE = SignOffState.VALIDATION_NOT_STARTED

_S = SignOffState

SIGNOFF_TRANSITIONS: MappingProxyType[SignOffState, tuple[SignOffState, ...]] = MappingProxyType({
    _S.VALIDATION_NOT_STARTED:                  (_S.AREA_VALIDATION_IN_PROGRESS,),
    _S.AREA_VALIDATION_IN_PROGRESS:             (_S.AREA_VALIDATION_COMPLETE, _S.REJECTED),
    _S.AREA_VALIDATION_COMPLETE:                (_S.TECHNICAL_VALIDATION_IN_PROGRESS,),
    _S.TECHNICAL_VALIDATION_IN_PROGRESS:        (_S.TECHNICAL_VALIDATION_COMPLETE, _S.REJECTED),
    _S.TECHNICAL_VALIDATION_COMPLETE:           (_S.CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS,),
    _S.CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS: (_S.CROSS_FUNCTIONAL_VALIDATION_COMPLETE, _S.REJECTED),
    _S.CROSS_FUNCTIONAL_VALIDATION_COMPLETE:    (_S.EXECUTIVE_SIGN_OFF_PENDING,),
    _S.EXECUTIVE_SIGN_OFF_PENDING:              (_S.EXECUTIVE_SIGNED, _S.REJECTED),
    _S.EXECUTIVE_SIGNED:                        (_S.PARTNER_COUNTERSIGN_PENDING,),
    _S.PARTNER_COUNTERSIGN_PENDING:             (_S.COMPLETED, _S.REJECTED),
    _S.COMPLETED:                               (),
    _S.REJECTED:                                (_S.VALIDATION_NOT_STARTED,),
})

SIGNOFF_STATE_LABELS = MappingProxyType({
    _S.VALIDATION_NOT_STARTED: "Not Started",
    _S.AREA_VALIDATION_IN_PROGRESS: "Area Validation In Progress",
    _S.AREA_VALIDATION_COMPLETE: "Area Validation Complete",
    _S.TECHNICAL_VALIDATION_IN_PROGRESS: "Technical Validation In Progress",
    _S.TECHNICAL_VALIDATION_COMPLETE: "Technical Validation Complete",
    _S.CROSS_FUNCTIONAL_VALIDATION_IN_PROGRESS: "Cross-Functional Validation In Progress",
    _S.CROSS_FUNCTIONAL_VALIDATION_COMPLETE: "Cross-Functional Validation Complete",
    _S.EXECUTIVE_SIGN_OFF_PENDING: "Executive Sign-Off Pending",
    _S.EXECUTIVE_SIGNED: "Executive Signed",
    _S.PARTNER_COUNTERSIGN_PENDING: "Partner Countersign Pending",
    _S.COMPLETED: "Completed",
    _S.REJECTED: "Rejected",
})
