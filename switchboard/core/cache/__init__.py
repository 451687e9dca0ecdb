"""Look-aside cache backends."""

from __future__ import annotations

from switchboard.core.cache.base import CacheFacade, NullCache
from switchboard.core.cache.memory import MemoryCache
from switchboard.core.cache.redis_cache import RedisCache
from switchboard.core.config import Settings


def create_cache(settings: Settings) -> CacheFacade:
    if settings.cache_backend == "memory":
        return MemoryCache()
    if settings.cache_backend == "redis":
        return RedisCache(settings.redis_url)
    if settings.cache_backend == "none":
        return NullCache()
    raise ValueError(f"cache backend {settings.cache_backend} not supported")


__all__ = ["CacheFacade", "MemoryCache", "NullCache", "RedisCache", "create_cache"]
