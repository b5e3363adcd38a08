"""Domain model for currency rates. Pure business semantics. No ORM or infrastructure."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from rateboard.domain.exceptions import RateValidationError
from rateboard.domain.validators.rate_validator import validate_rate_pair


@dataclass(frozen=True)
class RateSnapshot:
    """One entry of a currency's update history."""

    buy_rate: float
    sell_rate: float
    updated_at: datetime
    updated_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buy_rate": self.buy_rate,
            "sell_rate": self.sell_rate,
            "updated_at": self.updated_at.isoformat(),
            "updated_by": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateSnapshot":
        return cls(
            buy_rate=float(data["buy_rate"]),
            sell_rate=float(data["sell_rate"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            updated_by=data.get("updated_by"),
        )


@dataclass(frozen=True)
class RateUpdate:
    """A validated rate change for one code. name is used only if the upsert creates the record."""

    code: str
    buy_rate: float
    sell_rate: float
    name: Optional[str] = None


@dataclass
class CurrencyRate:
    """
    One record per currency code. Rates must change only via apply_rates() so the
    spread rule and the bounded history are enforced on every write.
    """

    code: str
    name: str
    buy_rate: float
    sell_rate: float
    last_updated_at: datetime
    is_active: bool = True
    is_visible: bool = True
    created_by: str = "system"
    update_history: List[RateSnapshot] = field(default_factory=list)

    @property
    def spread(self) -> float:
        return self.sell_rate - self.buy_rate

    @property
    def spread_percentage(self) -> str:
        """Spread as a percentage of the buy rate, two decimals. Display only."""
        return f"{self.spread / self.buy_rate * 100:.2f}"

    def apply_rates(
        self,
        buy_rate: float,
        sell_rate: float,
        *,
        updated_by: Optional[str],
        updated_at: datetime,
        history_limit: int,
    ) -> bool:
        """
        Re-check the pair, then set the rates, stamp the time and append a history entry.
        Returns False (and changes nothing) when the rates equal the current ones.
        Raises RateValidationError if the pair is invalid; the record is left untouched.
        """
        violations = validate_rate_pair(self.code, buy_rate, sell_rate)
        if violations:
            raise RateValidationError(violations)
        if buy_rate == self.buy_rate and sell_rate == self.sell_rate:
            return False
        self.buy_rate = buy_rate
        self.sell_rate = sell_rate
        self.last_updated_at = updated_at
        self.record_snapshot(updated_by=updated_by, history_limit=history_limit)
        return True

    def record_snapshot(self, *, updated_by: Optional[str], history_limit: int) -> None:
        """Append the current rates to the history, evicting the oldest beyond history_limit."""
        self.update_history.append(
            RateSnapshot(
                buy_rate=self.buy_rate,
                sell_rate=self.sell_rate,
                updated_at=self.last_updated_at,
                updated_by=updated_by,
            )
        )
        if len(self.update_history) > history_limit:
            del self.update_history[: len(self.update_history) - history_limit]

    @classmethod
    def create(
        cls,
        *,
        code: str,
        name: str,
        buy_rate: float,
        sell_rate: float,
        created_by: str,
        created_at: datetime,
        history_limit: int,
        is_visible: bool = True,
    ) -> "CurrencyRate":
        """New record with its first history entry. Raises RateValidationError on a bad pair."""
        violations = validate_rate_pair(code, buy_rate, sell_rate)
        if violations:
            raise RateValidationError(violations)
        rate = cls(
            code=code,
            name=name,
            buy_rate=buy_rate,
            sell_rate=sell_rate,
            last_updated_at=created_at,
            is_visible=is_visible,
            created_by=created_by,
        )
        rate.record_snapshot(updated_by=created_by, history_limit=history_limit)
        return rate
