"""Redis cache backend for caching shared between processes."""

import json
from typing import Any, Optional

import redis.asyncio as aioredis

from promptgate.cache.base import CacheBackend, CacheEntry


class RedisCache(CacheBackend):
    """Redis-based cache backend.

    Entries are stored as JSON strings with ``SETEX``. Every tag is a Redis
    set holding the fingerprints that carry it, which lets a whole provider
    or model be flushed without scanning the keyspace.

    Example:
        ```python
        from promptgate.cache import CacheManager, RedisCache

        manager = CacheManager(RedisCache("redis://localhost:6379/0"))
        await manager.invalidate("openai")
        ```
    """

    supports_tags = True

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "genai_cache:",
        client: Optional[Any] = None,
    ) -> None:
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL
            key_prefix: Prefix for every key written
            client: Pre-built ``redis.asyncio`` client (mainly for testing)
        """
        self.key_prefix = key_prefix
        self._redis_url = redis_url
        self._redis = client

    def _get_redis(self):
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self.key_prefix}tag:{tag}"

    async def get(self, key: str) -> Optional[CacheEntry]:
        data = await self._get_redis().get(self._make_key(key))
        if not data:
            return None
        entry = CacheEntry.from_dict(json.loads(data))
        return None if entry.is_expired() else entry

    async def set(self, entry: CacheEntry) -> None:
        redis = self._get_redis()
        await redis.setex(
            self._make_key(entry.fingerprint),
            entry.ttl,
            json.dumps(entry.to_dict()),
        )
        for tag in entry.tags:
            tag_key = self._tag_key(tag)
            await redis.sadd(tag_key, entry.fingerprint)
            await redis.expire(tag_key, entry.ttl)

    async def delete(self, key: str) -> bool:
        result = await self._get_redis().delete(self._make_key(key))
        return bool(result)

    async def delete_by_tag(self, tag: str) -> int:
        redis = self._get_redis()
        tag_key = self._tag_key(tag)
        members = await redis.smembers(tag_key)
        removed = 0
        if members:
            removed = await redis.delete(*[self._make_key(fp) for fp in members])
        await redis.delete(tag_key)
        return int(removed or 0)

    async def clear(self) -> None:
        redis = self._get_redis()
        keys = [key async for key in redis.scan_iter(match=f"{self.key_prefix}*")]
        if keys:
            await redis.delete(*keys)

    async def get_stats(self) -> dict[str, Any]:
        redis = self._get_redis()
        count = 0
        async for key in redis.scan_iter(match=f"{self.key_prefix}*"):
            if not key.startswith(self._tag_key("")):
                count += 1
        return {
            "backend": "redis",
            "entries": count,
            "key_prefix": self.key_prefix,
        }

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
