"""Startup seeding of the default currency set into an empty store."""

import logging
from datetime import datetime, timezone
from typing import List

from rateboard.application.rate_store import RateStore
from rateboard.config.settings import AppSettings
from rateboard.domain.exceptions import DuplicateCodeError
from rateboard.domain.models.currency import CurrencyRate

logger = logging.getLogger(__name__)

SEED_ACTOR = "system"

# (code, buy_rate, sell_rate)
DEFAULT_SEED_RATES = (
    ("USD", 15000.0, 15100.0),
    ("EUR", 16500.0, 16600.0),
    ("GBP", 19000.0, 19100.0),
    ("TRY", 500.0, 510.0),
)


async def seed_default_currencies(store: RateStore, settings: AppSettings) -> List[str]:
    """Create the default records when the store holds none. Returns the seeded codes."""
    if await store.count() > 0:
        return []
    now = datetime.now(timezone.utc)
    seeded = []
    for code, buy_rate, sell_rate in DEFAULT_SEED_RATES:
        if code not in settings.allowed_currency_codes:
            continue
        rate = CurrencyRate.create(
            code=code,
            name=settings.currency_names.get(code, code),
            buy_rate=buy_rate,
            sell_rate=sell_rate,
            created_by=SEED_ACTOR,
            created_at=now,
            history_limit=settings.rate_history_limit,
        )
        try:
            await store.create(rate)
        except DuplicateCodeError:
            # Another worker seeded it first.
            continue
        seeded.append(code)
    logger.info("currencies_seeded", extra={"codes": seeded})
    return seeded
