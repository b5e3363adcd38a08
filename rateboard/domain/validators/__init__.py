"""Domain validators. Pure validation functions."""

from rateboard.domain.validators.rate_validator import (
    coerce_rate,
    normalize_code,
    validate_currency_create,
    validate_rate_batch,
    validate_rate_pair,
)

__all__ = [
    "coerce_rate",
    "normalize_code",
    "validate_currency_create",
    "validate_rate_batch",
    "validate_rate_pair",
]
