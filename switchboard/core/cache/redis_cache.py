# switchboard/core/cache/redis_cache.py
"""
Redis-backed cache.

Degrades gracefully: when Redis is unreachable every operation logs a
warning and reports a miss, so resolvers keep working without a cache.
"""
from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisCache:
    """JSON-encoding cache on top of ``redis.asyncio``."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        client: aioredis.Redis | None = None,
        socket_timeout: float = 2.0,
    ) -> None:
        self.url = url
        self._client = client if client is not None else aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )

    async def ping(self) -> bool:
        """Check connectivity; used at startup to report cache availability."""
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as exc:
            logger.warning("Redis connection not available, caching will be disabled: %s", exc)
            return False

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except (RedisError, OSError) as exc:
            logger.warning("Error retrieving cache for %s: %s", key, exc)
            return None

        if raw is None:
            return None

        try:
            value = json.loads(raw)
        except ValueError as exc:
            logger.warning("Discarding undecodable cache entry %s: %s", key, exc)
            return None

        logger.info("Cache hit: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.warning("Value for %s is not JSON-serializable: %s", key, exc)
            return False

        try:
            await self._client.setex(key, ttl_seconds, payload)
        except (RedisError, OSError) as exc:
            logger.warning("Error setting cache for %s: %s", key, exc)
            return False

        logger.info("Cache set: %s (TTL: %ss)", key, ttl_seconds)
        return True

    async def delete(self, key: str) -> bool:
        try:
            return await self._client.delete(key) > 0
        except (RedisError, OSError) as exc:
            logger.warning("Error deleting cache for %s: %s", key, exc)
            return False

    async def clear_pattern(self, pattern: str) -> int:
        try:
            keys = await self._client.keys(pattern)
            if not keys:
                return 0
            removed = await self._client.delete(*keys)
        except (RedisError, OSError) as exc:
            logger.warning("Error clearing cache by pattern %s: %s", pattern, exc)
            return 0

        logger.info("Cache cleared: %d keys matching %s", removed, pattern)
        return removed

    async def aclose(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as exc:
            logger.error("Error disconnecting from Redis: %s", exc)
