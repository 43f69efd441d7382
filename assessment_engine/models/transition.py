"""
Transition decision values.

A status transition check never raises for an ordinary denial.  It returns a
``TransitionResult`` whose ``reason`` belongs to exactly one of three
families:

  - InvalidTransition — (from, to) is not a declared edge
  - Unauthorized      — edge exists, resolved role is not permitted on it
  - GateUnsatisfied   — edge and role valid, a domain precondition failed
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class ReasonCode(str, Enum):
    INVALID_TRANSITION = "INVALID_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    GATE_UNSATISFIED = "GATE_UNSATISFIED"


@dataclass(frozen=True)
class InvalidTransition:
    from_status: str
    to_status: str
    valid_targets: tuple[str, ...]

    code: ClassVar[ReasonCode] = ReasonCode.INVALID_TRANSITION

    @property
    def message(self) -> str:
        targets = ", ".join(self.valid_targets) or "none"
        return (f"Invalid transition: {self.from_status} -> {self.to_status}. "
                f"Valid targets: {targets}")

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "valid_targets": list(self.valid_targets),
        }


@dataclass(frozen=True)
class Unauthorized:
    role: str
    edge: str

    code: ClassVar[ReasonCode] = ReasonCode.UNAUTHORIZED

    @property
    def message(self) -> str:
        return f"Role {self.role} cannot perform transition {self.edge}"

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "role": self.role,
            "edge": self.edge,
        }


@dataclass(frozen=True)
class GateUnsatisfied:
    gate: str
    measured: float
    required: float
    message: str

    code: ClassVar[ReasonCode] = ReasonCode.GATE_UNSATISFIED

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "gate": self.gate,
            "measured": self.measured,
            "required": self.required,
        }


Reason = Union[InvalidTransition, Unauthorized, GateUnsatisfied]


@dataclass(frozen=True)
class TransitionResult:
    allowed: bool
    reason: Reason | None = None

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict:
        out: dict = {"allowed": self.allowed}
        if self.reason is not None:
            out["reason"] = self.reason.to_dict()
        return out


ALLOWED = TransitionResult(allowed=True)
