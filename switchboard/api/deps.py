# switchboard/api/deps.py
"""
Accessors for services wired onto ``app.state`` by the application factory.
"""
from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from switchboard.core.cache.base import CacheFacade
from switchboard.core.datasources.invoker import DatasourceInvoker
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.resolvers.executor import ResolverExecutor

logger = logging.getLogger(__name__)


def _from_state(request: Request, attr: str, label: str):
    value = getattr(request.app.state, attr, None)
    if value is None:
        logger.error("%s not initialized", label)
        raise HTTPException(status_code=500, detail=f"{label} not initialized")
    return value


def get_registry(request: Request) -> DatasourceRegistry:
    return _from_state(request, "datasource_registry", "Datasource registry")


def get_invoker(request: Request) -> DatasourceInvoker:
    return _from_state(request, "datasource_invoker", "Datasource invoker")


def get_executor(request: Request) -> ResolverExecutor:
    return _from_state(request, "resolver_executor", "Resolver executor")


def get_cache(request: Request) -> CacheFacade:
    return _from_state(request, "cache", "Cache")


def get_cache_ttl(request: Request) -> int:
    return getattr(request.app.state, "cache_ttl_seconds", 3600)
