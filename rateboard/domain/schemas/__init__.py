"""Domain schemas. Request/response and broadcast payloads."""

from rateboard.domain.schemas.activity import (
    ActivityLogsResponse,
    ActivityLogView,
    ActivityStatsResponse,
    PurgeResponse,
)
from rateboard.domain.schemas.currency import (
    AdminRatesResponse,
    AdminRateView,
    CurrencyCreateRequest,
    CurrencyResponse,
    CurrencyStats,
    HistoryView,
    RatesBatchRequest,
    RatesResponse,
    RatesUpdateResponse,
    RateView,
    SearchResponse,
)

__all__ = [
    "ActivityLogsResponse",
    "ActivityLogView",
    "ActivityStatsResponse",
    "AdminRatesResponse",
    "AdminRateView",
    "CurrencyCreateRequest",
    "CurrencyResponse",
    "CurrencyStats",
    "HistoryView",
    "PurgeResponse",
    "RatesBatchRequest",
    "RatesResponse",
    "RatesUpdateResponse",
    "RateView",
    "SearchResponse",
]
