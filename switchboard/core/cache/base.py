# switchboard/core/cache/base.py
"""
Cache contract consumed by the resolver executor.

Implementations are best-effort: they report misses and failures through
their return values (``None`` / ``False`` / ``0``) instead of raising.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheFacade(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool: ...

    async def delete(self, key: str) -> bool: ...

    async def clear_pattern(self, pattern: str) -> int: ...


class NullCache:
    """Cache that never stores anything."""

    async def get(self, key: str) -> Any | None:
        return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        return False

    async def delete(self, key: str) -> bool:
        return False

    async def clear_pattern(self, pattern: str) -> int:
        return 0
