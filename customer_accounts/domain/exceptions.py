"""Domain-level exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .customer_rules import FieldViolation


class DomainError(Exception):
    """Base exception for service-layer errors."""

    def __init__(self, message: str = "Domain error") -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Raised when a requested resource cannot be located."""


class ConflictError(DomainError):
    """Raised when a unique constraint or business rule is violated."""


class ValidationError(DomainError):
    """Raised when input fails validation rules."""

    def __init__(
        self,
        message: str = "Validation failed",
        violations: Sequence["FieldViolation"] = (),
    ) -> None:
        super().__init__(message)
        self.violations = list(violations)

    @classmethod
    def from_violations(cls, violations: Sequence["FieldViolation"]) -> "ValidationError":
        message = ", ".join(f"{v.field}: {v.message}" for v in violations)
        return cls(message or "Validation failed", violations)
