from __future__ import annotations
# launchpad/errors.py
"""
Error types for the launchpad core. Every precondition failure is raised
before a new state is produced, so callers never observe partial updates.
The errors are lightweight and serializable, safe to surface over logs or an
RPC layer.

Exports:
- LaunchpadError (base)
- ConfigError
- InvalidAmount
- InvalidStatus
- UnknownParticipant
- Unauthorized
- NothingToDistribute
- ArithmeticOverflow
- DivisionByZero
- InvariantViolation
- StaleTransition
"""


from typing import Any, Dict, Mapping, Optional
import json


class LaunchpadError(Exception):
    """Base class for launchpad domain errors."""

    code: str = "LAUNCHPAD_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class ConfigError(LaunchpadError):
    """The sale configuration violates one of its field or cross-field rules."""
    code = "LAUNCHPAD_CONFIG_ERROR"

    def __init__(
        self,
        message: str = "invalid sale configuration",
        *,
        field: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if field is not None:
            d.setdefault("field", field)
        super().__init__(message, details=d)


class InvalidAmount(LaunchpadError):
    """Zero, negative, below-minimum or over-balance amount."""
    code = "LAUNCHPAD_INVALID_AMOUNT"

    def __init__(
        self,
        message: str = "invalid amount",
        *,
        amount: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if amount is not None:
            d.setdefault("amount", int(amount))
        super().__init__(message, details=d)


class InvalidStatus(LaunchpadError):
    """The operation is not permitted in the current lifecycle status."""
    code = "LAUNCHPAD_INVALID_STATUS"

    def __init__(
        self,
        *,
        operation: str,
        status: str,
        message: str = "operation not permitted in current status",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"operation": operation, "status": status})
        super().__init__(message, details=d)


class UnknownParticipant(LaunchpadError):
    """No investment (or vested stakeholder entry) exists for the identity."""
    code = "LAUNCHPAD_UNKNOWN_PARTICIPANT"

    def __init__(
        self,
        *,
        participant: str,
        message: str = "unknown participant",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d["participant"] = participant
        super().__init__(message, details=d)


class Unauthorized(LaunchpadError):
    """The funding identity or token does not match the configuration."""
    code = "LAUNCHPAD_UNAUTHORIZED"


class NothingToDistribute(LaunchpadError):
    """Every recipient has already been paid."""
    code = "LAUNCHPAD_NOTHING_TO_DISTRIBUTE"


class ArithmeticOverflow(LaunchpadError, ArithmeticError):
    """An intermediate product or result left its unsigned integer envelope."""
    code = "LAUNCHPAD_ARITHMETIC_OVERFLOW"


class DivisionByZero(LaunchpadError, ArithmeticError):
    code = "LAUNCHPAD_DIVISION_BY_ZERO"


class InvariantViolation(LaunchpadError):
    """A post-condition that must always hold did not. Indicates a bug."""
    code = "LAUNCHPAD_INVARIANT_VIOLATION"


class StaleTransition(LaunchpadError):
    """A transition computed against an older snapshot cannot be applied."""
    code = "LAUNCHPAD_STALE_TRANSITION"

    def __init__(
        self,
        *,
        expected_revision: int,
        actual_revision: int,
        message: str = "transition was computed against a stale snapshot",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"expected_revision": int(expected_revision), "actual_revision": int(actual_revision)})
        super().__init__(message, details=d)


__all__ = [
    "LaunchpadError",
    "ConfigError",
    "InvalidAmount",
    "InvalidStatus",
    "UnknownParticipant",
    "Unauthorized",
    "NothingToDistribute",
    "ArithmeticOverflow",
    "DivisionByZero",
    "InvariantViolation",
    "StaleTransition",
]
