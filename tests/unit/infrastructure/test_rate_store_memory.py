"""Tests for InMemoryRateStore: copies, upsert semantics, per-record serialization."""

import asyncio
from datetime import datetime, timezone

import pytest

from rateboard.domain.exceptions import DuplicateCodeError, RecordNotFoundError
from rateboard.domain.models.currency import CurrencyRate, RateUpdate
from rateboard.infrastructure.memory import InMemoryRateStore


def _rate(code="USD", buy=15000.0, sell=15100.0):
    return CurrencyRate.create(
        code=code,
        name=code,
        buy_rate=buy,
        sell_rate=sell,
        created_by="system",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        history_limit=3,
    )


@pytest.fixture
async def store():
    s = InMemoryRateStore(history_limit=3)
    await s.create(_rate())
    return s


async def test_reads_return_copies(store):
    rate = await store.get_by_code("USD")
    rate.buy_rate = 1
    assert (await store.get_by_code("USD")).buy_rate == 15000


async def test_create_duplicate(store):
    with pytest.raises(DuplicateCodeError):
        await store.create(_rate())


async def test_upsert_creates_updates_and_skips_unchanged(store):
    written = await store.upsert_batch(
        [
            RateUpdate("USD", 15000.0, 15100.0),
            RateUpdate("EUR", 16500.0, 16600.0, name="Euro"),
        ],
        actor="editor-1",
    )
    assert [r.code for r in written] == ["EUR"]
    assert (await store.get_by_code("EUR")).name == "Euro"
    assert await store.count() == 2


async def test_upsert_skips_record_failing_recheck(store):
    written = await store.upsert_batch([RateUpdate("USD", 16000.0, 15000.0)], actor="e")
    assert written == []
    assert (await store.get_by_code("USD")).buy_rate == 15000


async def test_history_capped_per_store_limit(store):
    for i in range(1, 6):
        await store.upsert_batch([RateUpdate("USD", 15000.0 + i, 15100.0 + i)], actor="e")
    history = (await store.get_by_code("USD")).update_history
    assert [s.buy_rate for s in history] == [15003.0, 15004.0, 15005.0]


async def test_concurrent_upserts_lose_no_history(store):
    await asyncio.gather(
        *(
            store.upsert_batch([RateUpdate("USD", 15000.0 + i, 15100.0 + i)], actor="e")
            for i in range(1, 3)
        )
    )
    rate = await store.get_by_code("USD")
    assert len(rate.update_history) == 3
    assert rate.update_history[-1].buy_rate == rate.buy_rate


async def test_flags_and_active_filter(store):
    await store.create(_rate("EUR", 16500.0, 16600.0))
    await store.set_active("EUR", False)
    await store.set_visible("USD", False)
    assert [r.code for r in await store.get_active()] == ["USD"]
    assert [r.code for r in await store.get_all()] == ["EUR", "USD"]


async def test_flag_unknown_code(store):
    with pytest.raises(RecordNotFoundError):
        await store.set_visible("JPY", True)
