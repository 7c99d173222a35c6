"""
Validation outcome returned by every validator
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeKind(Enum):
    """Kinds of validation result"""
    VALID = "valid"
    INVALID_FORMAT = "invalid_format"
    SUBNET_CONFLICT = "subnet_conflict"
    GATEWAY_IN_USE = "gateway_in_use"


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """
    Immutable result of a validation call.

    Build instances through the classmethods rather than directly.

    Attributes:
        kind: Which outcome this is
        reason: Human-readable explanation (empty when valid)
        conflicting_subnet: Active subnet that caused a SUBNET_CONFLICT
    """
    kind: OutcomeKind
    reason: str = ""
    conflicting_subnet: Optional[str] = None

    @classmethod
    def valid(cls) -> "ValidationOutcome":
        return cls(OutcomeKind.VALID)

    @classmethod
    def invalid_format(cls, reason: str) -> "ValidationOutcome":
        return cls(OutcomeKind.INVALID_FORMAT, reason)

    @classmethod
    def subnet_conflict(cls, subnet: str) -> "ValidationOutcome":
        return cls(
            OutcomeKind.SUBNET_CONFLICT,
            f"Conflict detected with active network: {subnet}",
            conflicting_subnet=subnet,
        )

    @classmethod
    def gateway_in_use(cls, gateway: str) -> "ValidationOutcome":
        return cls(OutcomeKind.GATEWAY_IN_USE, f"Gateway {gateway} is already in use")

    @property
    def is_valid(self) -> bool:
        return self.kind is OutcomeKind.VALID

    def __str__(self) -> str:
        if self.is_valid:
            return "[OK] valid"
        return f"[FAIL] {self.kind.value}: {self.reason}"
