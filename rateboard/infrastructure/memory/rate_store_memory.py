"""In-process rate store. Implements RateStore for single-process deployments and tests."""

import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from rateboard.domain.exceptions import (
    DuplicateCodeError,
    RateValidationError,
    RecordNotFoundError,
)
from rateboard.domain.models.currency import CurrencyRate, RateUpdate

logger = logging.getLogger(__name__)


class InMemoryRateStore:
    """
    Records live in a dict keyed by code. Writes to one code are serialized by that code's
    asyncio.Lock; callers only ever receive copies, never the stored objects.
    """

    def __init__(self, history_limit: int = 10) -> None:
        self._history_limit = history_limit
        self._records: Dict[str, CurrencyRate] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, code: str) -> asyncio.Lock:
        return self._locks.setdefault(code, asyncio.Lock())

    async def get_active(self) -> List[CurrencyRate]:
        return [copy.deepcopy(r) for _, r in sorted(self._records.items()) if r.is_active]

    async def get_all(self) -> List[CurrencyRate]:
        return [copy.deepcopy(r) for _, r in sorted(self._records.items())]

    async def get_by_code(self, code: str) -> Optional[CurrencyRate]:
        rate = self._records.get(code)
        return copy.deepcopy(rate) if rate is not None else None

    async def count(self) -> int:
        return len(self._records)

    async def create(self, rate: CurrencyRate) -> CurrencyRate:
        async with self._lock(rate.code):
            if rate.code in self._records:
                raise DuplicateCodeError(f"Currency with code {rate.code} already exists")
            self._records[rate.code] = copy.deepcopy(rate)
        return copy.deepcopy(rate)

    async def upsert_batch(
        self,
        updates: Sequence[RateUpdate],
        actor: Optional[str],
    ) -> List[CurrencyRate]:
        written: List[CurrencyRate] = []
        for update in updates:
            async with self._lock(update.code):
                now = datetime.now(timezone.utc)
                current = self._records.get(update.code)
                try:
                    if current is None:
                        rate = CurrencyRate.create(
                            code=update.code,
                            name=update.name or update.code,
                            buy_rate=update.buy_rate,
                            sell_rate=update.sell_rate,
                            created_by=actor or "system",
                            created_at=now,
                            history_limit=self._history_limit,
                        )
                    else:
                        rate = copy.deepcopy(current)
                        changed = rate.apply_rates(
                            update.buy_rate,
                            update.sell_rate,
                            updated_by=actor,
                            updated_at=now,
                            history_limit=self._history_limit,
                        )
                        if not changed:
                            continue
                except RateValidationError as e:
                    logger.warning(
                        "rate_upsert_skipped",
                        extra={"code": update.code, "error": e.message},
                    )
                    continue
                self._records[update.code] = rate
                written.append(copy.deepcopy(rate))
        return written

    async def set_active(self, code: str, active: bool) -> CurrencyRate:
        return await self._set_flag(code, "is_active", active)

    async def set_visible(self, code: str, visible: bool) -> CurrencyRate:
        return await self._set_flag(code, "is_visible", visible)

    async def _set_flag(self, code: str, name: str, value: bool) -> CurrencyRate:
        async with self._lock(code):
            rate = self._records.get(code)
            if rate is None:
                raise RecordNotFoundError(f"Currency with code {code} not found")
            setattr(rate, name, value)
            return copy.deepcopy(rate)
