# switchboard/api/datasources.py
"""
API endpoints for datasource administration and direct calls.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from switchboard.api.deps import get_cache, get_cache_ttl, get_invoker, get_registry
from switchboard.api.schemas import (
    DatasourceCallRequest,
    DatasourceListResponse,
    DatasourceRegisterRequest,
)
from switchboard.core.cache.base import CacheFacade
from switchboard.core.datasources.invoker import DatasourceInvoker
from switchboard.core.datasources.models import CallRequest, DatasourceProfile, default_headers
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.errors import ConfigurationError, DatasourceNotFound, DatasourceUnavailable

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=DatasourceListResponse)
async def list_datasources(
    registry: DatasourceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """List registered datasources."""
    datasources = [p.describe() for p in registry.list()]
    return {"total": len(datasources), "datasources": datasources}


@router.post("", status_code=201)
async def register_datasource(
    req: DatasourceRegisterRequest,
    registry: DatasourceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Register (or replace) a datasource at runtime."""
    headers = default_headers()
    headers.update(req.headers)

    try:
        profile = DatasourceProfile(
            name=req.name,
            kind=req.kind.lower(),
            base_address=req.base_address.strip(),
            timeout_ms=req.timeout_ms or 5000,
            retry_budget=req.retry_budget or 3,
            default_headers=headers,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict())

    registry.register(req.name, profile)
    return {
        "status": "success",
        "message": f"DataSource '{req.name}' registered successfully",
        "datasource": profile.describe(),
    }


@router.delete("/{name}")
async def unregister_datasource(
    name: str,
    registry: DatasourceRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Remove a datasource."""
    if not registry.unregister(name):
        raise HTTPException(status_code=404, detail=f"DataSource '{name}' not found")
    return {
        "status": "success",
        "message": f"DataSource '{name}' unregistered successfully",
    }


@router.post("/call")
async def call_datasource(
    req: DatasourceCallRequest,
    invoker: DatasourceInvoker = Depends(get_invoker),
    cache: CacheFacade = Depends(get_cache),
    cache_ttl: int = Depends(get_cache_ttl),
) -> Any:
    """Call one datasource directly, with optional look-aside caching."""
    caching = req.is_cached and bool(req.cache_key)

    if caching:
        try:
            cached = await cache.get(req.cache_key)
        except Exception as exc:
            logger.warning("Cache read failed for '%s': %s", req.cache_key, exc)
            cached = None
        if cached is not None:
            return {
                "status": "success",
                "data": cached,
                "datasource": req.datasource,
                "meta": {
                    "statusCode": 200,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "fromCache": True,
                    "cacheKey": req.cache_key,
                },
            }

    request = CallRequest(
        method=req.method,
        path=req.path,
        body=req.body,
        headers=req.headers,
        query=req.params,
    )

    try:
        result = await invoker.call(req.datasource, request)
    except DatasourceNotFound as exc:
        raise HTTPException(status_code=404, detail=exc.to_dict())
    except DatasourceUnavailable as exc:
        raise HTTPException(status_code=502, detail=exc.to_dict())

    if caching:
        try:
            await cache.set(req.cache_key, result.data, cache_ttl)
        except Exception as exc:
            logger.warning("Cache write failed for '%s': %s", req.cache_key, exc)

    # a 204 cannot carry the envelope
    return JSONResponse(
        status_code=200 if result.status == 204 else result.status,
        content={
            "status": "success",
            "data": result.data,
            "datasource": result.datasource,
            "meta": {
                "statusCode": result.status,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "fromCache": False,
                "cached": caching,
                "cacheKey": req.cache_key if caching else None,
            },
        },
    )
