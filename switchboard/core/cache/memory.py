from __future__ import annotations

import copy
import fnmatch
import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


class MemoryCache:
    """In-process cache with per-entry expiry.

    Values are deep-copied on the way in and out so callers cannot mutate
    what is stored.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def _live(self, key: str) -> tuple[float, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[0] <= self._clock():
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = self._live(key)
        if entry is None:
            return None
        logger.debug("Cache hit: %s", key)
        return copy.deepcopy(entry[1])

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (now + ttl_seconds, copy.deepcopy(value))
        logger.debug("Cache set: %s (TTL: %ss)", key, ttl_seconds)
        return True

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def clear_pattern(self, pattern: str) -> int:
        keys = [k for k in list(self._entries) if fnmatch.fnmatchcase(k, pattern)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def __len__(self) -> int:
        return sum(1 for k in list(self._entries) if self._live(k) is not None)
