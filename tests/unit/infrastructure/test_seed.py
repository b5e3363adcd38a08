"""Tests for startup seeding of the default currencies."""

from rateboard.config.settings import AppSettings
from rateboard.infrastructure.memory import InMemoryRateStore
from rateboard.infrastructure.seed import seed_default_currencies


async def test_seeds_empty_store():
    store = InMemoryRateStore()
    seeded = await seed_default_currencies(store, AppSettings())
    assert seeded == ["USD", "EUR", "GBP", "TRY"]
    usd = await store.get_by_code("USD")
    assert (usd.buy_rate, usd.sell_rate, usd.name) == (15000.0, 15100.0, "US Dollar")


async def test_does_not_touch_populated_store():
    store = InMemoryRateStore()
    await seed_default_currencies(store, AppSettings())
    assert await seed_default_currencies(store, AppSettings()) == []
    assert await store.count() == 4


async def test_skips_codes_outside_allow_list():
    store = InMemoryRateStore()
    seeded = await seed_default_currencies(store, AppSettings(allowed_currency_codes=["usd"]))
    assert seeded == ["USD"]
