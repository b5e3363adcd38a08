"""Domain tests: CurrencyRate spread, apply_rates and bounded history."""

from datetime import datetime, timedelta, timezone

import pytest

from rateboard.domain.exceptions import RateValidationError
from rateboard.domain.models.currency import CurrencyRate, RateSnapshot

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _usd(history_limit: int = 10) -> CurrencyRate:
    return CurrencyRate.create(
        code="USD",
        name="US Dollar",
        buy_rate=15000,
        sell_rate=15100,
        created_by="admin-1",
        created_at=T0,
        history_limit=history_limit,
    )


def test_spread_and_percentage():
    rate = _usd()
    assert rate.spread == 100
    assert rate.spread_percentage == "0.67"


def test_create_records_first_snapshot():
    rate = _usd()
    assert rate.update_history == [
        RateSnapshot(buy_rate=15000, sell_rate=15100, updated_at=T0, updated_by="admin-1")
    ]


def test_create_rejects_inverted_pair():
    with pytest.raises(RateValidationError):
        CurrencyRate.create(
            code="EUR",
            name="Euro",
            buy_rate=2,
            sell_rate=1,
            created_by="admin-1",
            created_at=T0,
            history_limit=10,
        )


def test_apply_rates_updates_and_stamps():
    rate = _usd()
    t1 = T0 + timedelta(minutes=5)
    assert rate.apply_rates(15050, 15150, updated_by="editor-1", updated_at=t1, history_limit=10)
    assert (rate.buy_rate, rate.sell_rate, rate.last_updated_at) == (15050, 15150, t1)
    assert rate.update_history[-1].updated_by == "editor-1"


def test_apply_same_rates_is_noop():
    rate = _usd()
    t1 = T0 + timedelta(minutes=5)
    assert rate.apply_rates(15000, 15100, updated_by="x", updated_at=t1, history_limit=10) is False
    assert rate.last_updated_at == T0
    assert len(rate.update_history) == 1


def test_apply_invalid_pair_leaves_record_untouched():
    rate = _usd()
    with pytest.raises(RateValidationError):
        rate.apply_rates(16000, 15000, updated_by="x", updated_at=T0, history_limit=10)
    assert (rate.buy_rate, rate.sell_rate) == (15000, 15100)


def test_history_is_capped_oldest_first_evicted():
    rate = _usd(history_limit=3)
    for i in range(1, 6):
        rate.apply_rates(
            15000 + i,
            15100 + i,
            updated_by="editor-1",
            updated_at=T0 + timedelta(minutes=i),
            history_limit=3,
        )
    assert len(rate.update_history) == 3
    assert [s.buy_rate for s in rate.update_history] == [15003, 15004, 15005]


def test_snapshot_dict_roundtrip_keeps_timezone():
    snapshot = RateSnapshot(buy_rate=1.0, sell_rate=2.0, updated_at=T0, updated_by=None)
    assert RateSnapshot.from_dict(snapshot.to_dict()) == snapshot
