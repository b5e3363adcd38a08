"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from rateboard.domain.exceptions import (
    DomainError,
    DuplicateCodeError,
    RateValidationError,
    RecordNotFoundError,
)
from rateboard.domain.violations import RateViolation, ViolationKind
from rateboard.domain.models import (
    ActivityAction,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
    CurrencyRate,
    RateSnapshot,
    RateUpdate,
)
from rateboard.domain.validators import validate_currency_create, validate_rate_batch

__all__ = [
    "ActivityAction",
    "ActivityLogEntry",
    "ActivityResource",
    "ActivityStatus",
    "CurrencyRate",
    "DomainError",
    "DuplicateCodeError",
    "RateSnapshot",
    "RateUpdate",
    "RateValidationError",
    "RateViolation",
    "RecordNotFoundError",
    "ViolationKind",
    "validate_currency_create",
    "validate_rate_batch",
]
