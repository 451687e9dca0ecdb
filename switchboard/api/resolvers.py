# switchboard/api/resolvers.py
"""
API endpoints for resolver execution.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from switchboard.api.deps import get_executor
from switchboard.core.errors import ConfigurationError, UnsupportedResolverType
from switchboard.core.resolvers.context import ResolverResult
from switchboard.core.resolvers.definitions import (
    ResolverDefinition,
    parse_definition,
    with_caching_disabled,
)
from switchboard.core.resolvers.executor import ResolverExecutor

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse(payload: dict[str, Any]) -> ResolverDefinition:
    if not payload.get("type"):
        raise HTTPException(
            status_code=400,
            detail="type field is required (unit | pipeline)",
        )
    try:
        return parse_definition(payload)
    except (ConfigurationError, UnsupportedResolverType) as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict())


def _original_input(payload: dict[str, Any]) -> dict[str, Any]:
    """The request's ``input`` object, or the whole body when absent."""
    explicit = payload.get("input")
    if isinstance(explicit, dict):
        return explicit
    return payload


def _failure(result: ResolverResult) -> JSONResponse:
    content: dict[str, Any] = {
        "status": "error",
        "message": result.error,
        "timestamp": _now(),
    }
    if result.type == "pipeline":
        content["steps"] = [s.to_dict() for s in result.steps or []]
    else:
        content["datasource"] = result.datasource
    return JSONResponse(status_code=500, content=content)


@router.post("")
async def execute_resolver(
    payload: dict[str, Any] = Body(...),
    executor: ResolverExecutor = Depends(get_executor),
) -> Any:
    """
    Execute a unit or pipeline resolver.

    Returns:
        ``{status, data, steps?, meta: {timestamp, type, fromCache, cached, cacheKey}}``
    """
    definition = _parse(payload)
    result = await executor.execute(definition, _original_input(payload))

    if not result.ok:
        return _failure(result)

    body: dict[str, Any] = {
        "status": "success",
        "data": result.data,
        "meta": {
            "timestamp": _now(),
            "type": result.type,
            "fromCache": result.from_cache,
            "cached": result.cached,
            "cacheKey": result.cache_key,
        },
    }
    if result.type == "pipeline":
        body["steps"] = [s.to_dict() for s in result.steps or []]
    return body


@router.post("/test")
async def test_resolver(
    payload: dict[str, Any] = Body(...),
    executor: ResolverExecutor = Depends(get_executor),
) -> Any:
    """Execute a resolver with top-level caching disabled, for debugging."""
    definition = with_caching_disabled(_parse(payload))
    result = await executor.execute(definition, _original_input(payload))

    if not result.ok:
        return _failure(result)

    return {
        "status": "success",
        "data": result.data,
        "meta": {
            "timestamp": _now(),
            "type": result.type,
            "resolverChain": (
                [s.to_dict() for s in result.steps or []]
                if result.type == "pipeline"
                else None
            ),
            "message": "Test execution (caching disabled)",
        },
    }


@router.get("/docs")
async def resolver_docs() -> dict[str, Any]:
    """Describe the resolver types and the substitution markers."""
    return {
        "status": "success",
        "data": {
            "title": "Resolver System",
            "description": "Execute unit or pipeline resolvers with variable substitution",
            "endpoints": {
                "execute": {
                    "path": "POST /api/resolvers",
                    "description": "Execute any resolver (unit or pipeline)",
                    "caching": "Supported",
                },
                "test": {
                    "path": "POST /api/resolvers/test",
                    "description": "Test resolver without caching (debugging)",
                    "caching": "Disabled",
                },
            },
            "resolverTypes": {
                "unit": {
                    "description": "Single datasource call",
                    "example": {
                        "type": "unit",
                        "datasource": "USER_SERVICE",
                        "method": "GET",
                        "path": "/users/1",
                        "isCached": True,
                        "cacheKey": "users:1",
                    },
                },
                "pipeline": {
                    "description": "Multiple datasource calls with variable substitution",
                    "onError": ["failFast", "continue"],
                    "variableSupport": {
                        "$prev": "Whole output of the previous successful step",
                        "$steps.stepName": "Whole output of the named step",
                        "$input.fieldName": "Field of the original input",
                    },
                    "example": {
                        "type": "pipeline",
                        "onError": "failFast",
                        "steps": [
                            {
                                "name": "getUser",
                                "datasource": "USER_SERVICE",
                                "method": "GET",
                                "path": "/users/$input.userId",
                            },
                            {
                                "name": "getUserPosts",
                                "datasource": "POST_SERVICE",
                                "method": "POST",
                                "path": "/posts/search",
                                "body": {"author": "$prev"},
                            },
                        ],
                        "input": {"userId": 1},
                    },
                },
            },
        },
    }
