"""Redis-backed cache of the public canonical rate map. Implements RatesCache."""

import json
from typing import Any, Dict, Optional

from rateboard.infrastructure.cache.redis_client import RedisClient

PUBLIC_RATES_KEY = "rates:public"


class RedisRatesCache:
    """Stores the JSON-ready public map under one key, refreshed after every commit."""

    def __init__(self, redis_client: RedisClient, ttl: int = 300) -> None:
        self._redis = redis_client
        self._ttl = ttl

    async def get_public_rates(self) -> Optional[Dict[str, Any]]:
        raw = await self._redis.get_cache(PUBLIC_RATES_KEY)
        if not raw:
            return None
        return json.loads(raw)

    async def set_public_rates(self, rates: Dict[str, Any]) -> None:
        await self._redis.set_cache(PUBLIC_RATES_KEY, json.dumps(rates), ttl=self._ttl)

    async def invalidate(self) -> None:
        await self._redis.delete_key(PUBLIC_RATES_KEY)
