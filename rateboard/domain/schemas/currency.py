"""Pydantic schemas for the rates API and broadcasts. No DB or infrastructure."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field

from rateboard.domain.models.currency import CurrencyRate, RateSnapshot


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

_FIELD_ALIASES = {"buy_rate": "buyRate", "sell_rate": "sellRate"}


class RatesBatchRequest(BaseModel):
    """
    Batch update body: {"currencies": {"USD": {"buy_rate": ..., "sell_rate": ...}}}.
    Entries stay untyped here: the rate validator checks every entry, malformed ones
    included, so all problems in a batch are reported at once.
    """

    currencies: Dict[str, Any] = Field(default_factory=dict)

    def to_batch(self) -> Dict[str, Any]:
        """snake_case pairs per code; camelCase keys are accepted. Non-object entries pass through."""
        batch: Dict[str, Any] = {}
        for code, entry in self.currencies.items():
            if isinstance(entry, dict):
                entry = {
                    field: entry.get(field, entry.get(alias))
                    for field, alias in _FIELD_ALIASES.items()
                }
            batch[code] = entry
        return batch


class CurrencyCreateRequest(BaseModel):
    """Create a new currency record for an allow-listed code."""

    code: str = Field(..., min_length=1, description="Allow-listed currency code")
    name: str = Field("", description="Human-readable label")
    buy_rate: Any = Field(None, validation_alias=AliasChoices("buy_rate", "buyRate"))
    sell_rate: Any = Field(None, validation_alias=AliasChoices("sell_rate", "sellRate"))
    is_visible: bool = True


class VisibilityRequest(BaseModel):
    is_visible: bool


class ActiveStateRequest(BaseModel):
    is_active: bool


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class RateView(BaseModel):
    """Public, formatted state of one active currency."""

    code: str
    name: str
    buy_rate: float
    sell_rate: float
    spread: float
    spread_percentage: str
    last_updated_at: datetime

    @classmethod
    def from_rate(cls, rate: CurrencyRate) -> "RateView":
        return cls(
            code=rate.code,
            name=rate.name,
            buy_rate=rate.buy_rate,
            sell_rate=rate.sell_rate,
            spread=rate.spread,
            spread_percentage=rate.spread_percentage,
            last_updated_at=rate.last_updated_at,
        )


class AdminRateView(RateView):
    """Admin view also exposes the visibility and active flags."""

    is_visible: bool
    is_active: bool

    @classmethod
    def from_rate(cls, rate: CurrencyRate) -> "AdminRateView":
        return cls(
            **RateView.from_rate(rate).model_dump(),
            is_visible=rate.is_visible,
            is_active=rate.is_active,
        )


class RatesResponse(BaseModel):
    currencies: Dict[str, RateView]


class AdminRatesResponse(BaseModel):
    currencies: Dict[str, AdminRateView]


class RatesUpdateResponse(BaseModel):
    success: bool = True
    currencies: Dict[str, RateView]
    message: str


class CurrencyResponse(BaseModel):
    currency: AdminRateView
    message: Optional[str] = None


class SnapshotView(BaseModel):
    buy_rate: float
    sell_rate: float
    updated_at: datetime
    updated_by: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: RateSnapshot) -> "SnapshotView":
        return cls(
            buy_rate=snapshot.buy_rate,
            sell_rate=snapshot.sell_rate,
            updated_at=snapshot.updated_at,
            updated_by=snapshot.updated_by,
        )


class HistoryView(BaseModel):
    code: str
    name: str
    current: RateView
    last_updated_at: datetime
    update_history: List[SnapshotView]


class CurrencyStatsDetail(BaseModel):
    code: str
    name: str
    buy_rate: float
    sell_rate: float
    spread: float
    spread_percentage: float
    last_updated_at: datetime
    update_count: int


class CurrencyStats(BaseModel):
    total_currencies: int
    total_updates: int
    average_spread: float
    average_spread_percentage: float
    last_update: Optional[datetime] = None
    currencies: List[CurrencyStatsDetail]


class SearchResponse(BaseModel):
    results: List[AdminRateView]
