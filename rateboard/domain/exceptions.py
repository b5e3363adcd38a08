"""Domain-specific exceptions. Pure domain layer. No infrastructure."""

from typing import List, Sequence

from rateboard.domain.violations import RateViolation


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RateValidationError(DomainError):
    """Raised when a rate batch breaks one or more rate rules. Carries every violation found."""

    def __init__(self, violations: Sequence[RateViolation], message: str = "") -> None:
        self.violations: List[RateViolation] = list(violations)
        if not message:
            message = "Validation failed: " + "; ".join(v.message for v in self.violations)
        super().__init__(message)


class RecordNotFoundError(DomainError):
    """Raised when an operation addresses a currency code that does not exist."""


class DuplicateCodeError(DomainError):
    """Raised when creating a currency whose code is already taken (active or not)."""
