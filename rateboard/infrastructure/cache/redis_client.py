# rateboard/infrastructure/cache/redis_client.py

from typing import Optional

import redis.asyncio as redis

from rateboard.config.settings import settings


class RedisClient:
    def __init__(self, url: Optional[str] = None):
        self.client = redis.from_url(
            url or settings.redis_url,
            decode_responses=True,
        )

    async def set_cache(self, key: str, value: str, ttl: int = 300):
        await self.client.set(key, value, ex=ttl)

    async def get_cache(self, key: str):
        return await self.client.get(key)

    async def delete_key(self, key: str) -> None:
        """Delete a key."""
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
