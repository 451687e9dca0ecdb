# switchboard/api/cache.py
"""
API endpoints for cache invalidation.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from switchboard.api.deps import get_cache
from switchboard.core.cache.base import CacheFacade

logger = logging.getLogger(__name__)

router = APIRouter()


@router.delete("")
async def clear_cache(
    pattern: str = Query(..., min_length=1, description="Glob pattern, e.g. users:*"),
    cache: CacheFacade = Depends(get_cache),
) -> dict[str, Any]:
    """Drop every cached entry whose key matches ``pattern``."""
    cleared = await cache.clear_pattern(pattern)
    logger.info("Cache cleared: %s keys matching %s", cleared, pattern)
    return {"status": "success", "pattern": pattern, "cleared": cleared}


@router.delete("/{key:path}")
async def delete_cache_entry(
    key: str,
    cache: CacheFacade = Depends(get_cache),
) -> dict[str, Any]:
    if not await cache.delete(key):
        raise HTTPException(status_code=404, detail=f"Cache key '{key}' not found")
    return {"status": "success", "key": key}
