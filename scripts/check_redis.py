# scripts/check_redis.py
import asyncio

from rateboard.infrastructure.cache.rates_cache_redis import RedisRatesCache
from rateboard.infrastructure.cache.redis_client import RedisClient

async def check():
    cache = RedisRatesCache(RedisClient(), ttl=30)

    await cache.set_public_rates({"USD": {"buy_rate": 15000, "sell_rate": 15100}})
    print("Cached public rates:", await cache.get_public_rates())

    await cache.invalidate()
    print("After invalidate:", await cache.get_public_rates())

asyncio.run(check())
