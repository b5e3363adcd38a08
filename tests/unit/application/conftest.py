"""Fixtures for application tests: in-memory stores, real AuditLogger, mocked broadcaster."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from rateboard.application.rate_service import RateService
from rateboard.domain.models.currency import CurrencyRate
from rateboard.governance.audit_logger import AuditLogger
from rateboard.infrastructure.memory import InMemoryActivityRepository, InMemoryRateStore

ALLOWED = ["USD", "EUR", "GBP", "TRY", "JPY"]
NAMES = {"USD": "US Dollar", "EUR": "Euro", "GBP": "British Pound", "TRY": "Turkish Lira", "JPY": "Japanese Yen"}


def make_rate(code: str, buy: float, sell: float, **kwargs) -> CurrencyRate:
    return CurrencyRate.create(
        code=code,
        name=NAMES.get(code, code),
        buy_rate=buy,
        sell_rate=sell,
        created_by="system",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        history_limit=10,
        **kwargs,
    )


@pytest.fixture
async def store():
    s = InMemoryRateStore(history_limit=10)
    await s.create(make_rate("USD", 14900, 15000))
    await s.create(make_rate("EUR", 16500, 16600))
    return s


@pytest.fixture
def activity_repository():
    return InMemoryActivityRepository()


@pytest.fixture
def audit_logger(activity_repository):
    return AuditLogger(repository=activity_repository)


@pytest.fixture
def broadcaster():
    b = AsyncMock()
    b.publish = AsyncMock(return_value=1)
    return b


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def rate_service(store, audit_logger, broadcaster, logger):
    return RateService(
        store=store,
        audit_logger=audit_logger,
        broadcaster=broadcaster,
        logger=logger,
        allowed_codes=ALLOWED,
        currency_names=NAMES,
        history_limit=10,
        persist_timeout=1.0,
    )


@pytest.fixture
def allowed_codes():
    return list(ALLOWED)


@pytest.fixture
def rate_factory():
    return make_rate
