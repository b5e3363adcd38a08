"""Tests for DbRateStore upserts against a scripted session factory."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from rateboard.domain.models.currency import RateUpdate
from rateboard.infrastructure.database.models import CurrencyRateRecord
from rateboard.infrastructure.database.rate_store_db import DbRateStore


class _Session:
    """One session per transaction. Commit fails when an insert collides with a concurrent one."""

    def __init__(self, row, fail_insert: bool):
        self._row = row
        self._fail_insert = fail_insert
        self.added = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def begin(self):
        return _Transaction(self)

    async def execute(self, stmt):
        result = MagicMock()
        result.scalar_one_or_none.return_value = self._row
        return result

    def add(self, row):
        self.added.append(row)


class _Transaction:
    def __init__(self, session: _Session):
        self._session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None and self._session.added and self._session._fail_insert:
            raise IntegrityError("INSERT INTO currency_rates", {}, Exception("duplicate key"))
        return False


def _existing_row() -> CurrencyRateRecord:
    return CurrencyRateRecord(
        code="JPY",
        name="Japanese Yen",
        buy_rate=100.0,
        sell_rate=105.0,
        is_active=True,
        is_visible=True,
        last_updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        created_by="admin-1",
        update_history=[],
    )


def _factory(sessions):
    it = iter(sessions)
    return lambda: next(it)


async def test_concurrent_insert_falls_back_to_update():
    row = _existing_row()
    first = _Session(row=None, fail_insert=True)
    second = _Session(row=row, fail_insert=True)
    store = DbRateStore(_factory([first, second]), history_limit=10)

    rate = await store._upsert_one(RateUpdate(code="JPY", buy_rate=101.0, sell_rate=106.0), "editor-1")

    assert len(first.added) == 1
    assert second.added == []
    assert rate.name == "Japanese Yen"
    assert (rate.buy_rate, rate.sell_rate) == (101.0, 106.0)
    assert (row.buy_rate, row.sell_rate) == (101.0, 106.0)
    assert row.update_history[-1]["updated_by"] == "editor-1"


async def test_second_conflict_propagates():
    sessions = [_Session(row=None, fail_insert=True), _Session(row=None, fail_insert=True)]
    store = DbRateStore(_factory(sessions), history_limit=10)

    with pytest.raises(IntegrityError):
        await store.upsert_batch([RateUpdate(code="JPY", buy_rate=1.0, sell_rate=2.0)], None)


async def test_insert_without_conflict():
    session = _Session(row=None, fail_insert=False)
    store = DbRateStore(_factory([session]), history_limit=10)

    written = await store.upsert_batch(
        [RateUpdate(code="JPY", buy_rate=100.0, sell_rate=105.0, name="Japanese Yen")], "admin-1"
    )

    assert [r.code for r in written] == ["JPY"]
    assert session.added[0].code == "JPY"
    assert session.added[0].name == "Japanese Yen"
