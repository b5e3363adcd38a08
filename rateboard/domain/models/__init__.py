"""Domain models. Pure business entities."""

from rateboard.domain.models.activity import (
    ANONYMOUS_ACTOR,
    ActionStats,
    ActivityAction,
    ActivityFilter,
    ActivityLogEntry,
    ActivityResource,
    ActivityStatus,
)
from rateboard.domain.models.currency import CurrencyRate, RateSnapshot, RateUpdate

__all__ = [
    "ANONYMOUS_ACTOR",
    "ActionStats",
    "ActivityAction",
    "ActivityFilter",
    "ActivityLogEntry",
    "ActivityResource",
    "ActivityStatus",
    "CurrencyRate",
    "RateSnapshot",
    "RateUpdate",
]
