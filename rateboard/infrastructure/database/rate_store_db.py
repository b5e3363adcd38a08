"""DB-backed rate store. Persists currency rates to PostgreSQL (currency_rates table)."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rateboard.domain.exceptions import (
    DuplicateCodeError,
    RateValidationError,
    RecordNotFoundError,
)
from rateboard.domain.models.currency import CurrencyRate, RateSnapshot, RateUpdate
from rateboard.infrastructure.database.models import CurrencyRateRecord

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_domain(row: CurrencyRateRecord) -> CurrencyRate:
    return CurrencyRate(
        code=row.code,
        name=row.name,
        buy_rate=row.buy_rate,
        sell_rate=row.sell_rate,
        last_updated_at=_aware(row.last_updated_at),
        is_active=row.is_active,
        is_visible=row.is_visible,
        created_by=row.created_by or "system",
        update_history=[RateSnapshot.from_dict(s) for s in (row.update_history or [])],
    )


def _write_row(row: CurrencyRateRecord, rate: CurrencyRate) -> None:
    row.code = rate.code
    row.name = rate.name
    row.buy_rate = rate.buy_rate
    row.sell_rate = rate.sell_rate
    row.last_updated_at = rate.last_updated_at
    row.is_active = rate.is_active
    row.is_visible = rate.is_visible
    row.created_by = rate.created_by
    # New list object so the JSON column is flagged dirty.
    row.update_history = [s.to_dict() for s in rate.update_history]


class DbRateStore:
    """
    Implements RateStore on SQLAlchemy async. Each record is written in its own
    transaction under SELECT ... FOR UPDATE, so concurrent batches never interleave
    one record's buy and sell rates.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        history_limit: int = 10,
    ) -> None:
        self._session_factory = session_factory
        self._history_limit = history_limit

    async def get_active(self) -> List[CurrencyRate]:
        stmt = (
            select(CurrencyRateRecord)
            .where(CurrencyRateRecord.is_active == True)  # noqa: E712
            .order_by(CurrencyRateRecord.code)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_domain(row) for row in result.scalars().all()]

    async def get_all(self) -> List[CurrencyRate]:
        stmt = select(CurrencyRateRecord).order_by(CurrencyRateRecord.code)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_domain(row) for row in result.scalars().all()]

    async def get_by_code(self, code: str) -> Optional[CurrencyRate]:
        stmt = select(CurrencyRateRecord).where(CurrencyRateRecord.code == code)
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _to_domain(row) if row is not None else None

    async def count(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count()).select_from(CurrencyRateRecord))
            return int(result.scalar_one())

    async def create(self, rate: CurrencyRate) -> CurrencyRate:
        row = CurrencyRateRecord()
        _write_row(row, rate)
        try:
            async with self._session_factory() as session, session.begin():
                session.add(row)
        except IntegrityError as e:
            raise DuplicateCodeError(f"Currency with code {rate.code} already exists") from e
        return rate

    async def upsert_batch(
        self,
        updates: Sequence[RateUpdate],
        actor: Optional[str],
    ) -> List[CurrencyRate]:
        written: List[CurrencyRate] = []
        for update in updates:
            rate = await self._upsert_one(update, actor)
            if rate is not None:
                written.append(rate)
        return written

    async def _upsert_one(self, update: RateUpdate, actor: Optional[str]) -> Optional[CurrencyRate]:
        try:
            return await self._upsert_attempt(update, actor)
        except IntegrityError:
            # A concurrent writer inserted the code first; its row now exists, so update it.
            logger.info("rate_upsert_insert_conflict", extra={"code": update.code})
            return await self._upsert_attempt(update, actor)

    async def _upsert_attempt(
        self, update: RateUpdate, actor: Optional[str]
    ) -> Optional[CurrencyRate]:
        stmt = (
            select(CurrencyRateRecord)
            .where(CurrencyRateRecord.code == update.code)
            .with_for_update()
        )
        async with self._session_factory() as session, session.begin():
            row = (await session.execute(stmt)).scalar_one_or_none()
            now = datetime.now(timezone.utc)
            try:
                if row is None:
                    rate = CurrencyRate.create(
                        code=update.code,
                        name=update.name or update.code,
                        buy_rate=update.buy_rate,
                        sell_rate=update.sell_rate,
                        created_by=actor or "system",
                        created_at=now,
                        history_limit=self._history_limit,
                    )
                    row = CurrencyRateRecord()
                    session.add(row)
                else:
                    rate = _to_domain(row)
                    if not rate.apply_rates(
                        update.buy_rate,
                        update.sell_rate,
                        updated_by=actor,
                        updated_at=now,
                        history_limit=self._history_limit,
                    ):
                        return None
            except RateValidationError as e:
                logger.warning(
                    "rate_upsert_skipped",
                    extra={"code": update.code, "error": e.message},
                )
                return None
            _write_row(row, rate)
        return rate

    async def set_active(self, code: str, active: bool) -> CurrencyRate:
        return await self._set_flag(code, is_active=active)

    async def set_visible(self, code: str, visible: bool) -> CurrencyRate:
        return await self._set_flag(code, is_visible=visible)

    async def _set_flag(self, code: str, **flags: bool) -> CurrencyRate:
        stmt = (
            select(CurrencyRateRecord)
            .where(CurrencyRateRecord.code == code)
            .with_for_update()
        )
        async with self._session_factory() as session, session.begin():
            row = (await session.execute(stmt)).scalar_one_or_none()
            if row is None:
                raise RecordNotFoundError(f"Currency with code {code} not found")
            for name, value in flags.items():
                setattr(row, name, value)
            return _to_domain(row)
