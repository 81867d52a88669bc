"""Redis-backed distributed cache tier."""

import json
from typing import Any

import redis.asyncio as aioredis


class RedisCache:
    """Distributed cache tier with JSON values and key namespacing.

    Errors are not swallowed here; the orchestrator treats them as a miss.
    """

    def __init__(self, client: aioredis.Redis, prefix: str = "tmc") -> None:
        """Initialize cache.

        Args:
            client: redis.asyncio client
            prefix: Namespace prepended to every key
        """
        self._redis = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "tmc") -> "RedisCache":
        """Build a cache from a redis:// URL."""
        return cls(aioredis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Any | None:
        """Get and decode a cached value."""
        raw = await self._redis.get(self._key(key))
        if not raw:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Encode and store a value with SET ... EX ttl."""
        if ttl_seconds <= 0:
            return
        await self._redis.set(self._key(key), json.dumps(value), ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        """Remove a cached value."""
        await self._redis.delete(self._key(key))

    async def ping(self) -> bool:
        """Check connectivity."""
        return bool(await self._redis.ping())

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._redis.aclose()
