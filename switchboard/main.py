# switchboard/main.py
"""
Application factory.

Everything the routes need is constructed here and attached to
``app.state``: the datasource registry is built once from the
environment and YAML config, then shared by the invoker and the
resolver executor.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Mapping

import httpx
from fastapi import FastAPI

from switchboard.api.cache import router as cache_router
from switchboard.api.datasources import router as datasources_router
from switchboard.api.resolvers import router as resolvers_router
from switchboard.core.cache import CacheFacade, RedisCache, create_cache
from switchboard.core.config import Settings, settings as default_settings
from switchboard.core.datasources.invoker import DatasourceInvoker
from switchboard.core.datasources.loader import load_and_register_datasources
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.datasources.transport import HttpxTransport, Transport
from switchboard.core.logging import configure_logging
from switchboard.core.resolvers.executor import ResolverExecutor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cache = app.state.cache
    if isinstance(cache, RedisCache):
        if await cache.ping():
            logger.info("Connected to Redis at %s", cache.url)

    yield

    transport = app.state.transport
    if isinstance(transport, HttpxTransport):
        await transport.aclose()
    if isinstance(cache, RedisCache):
        await cache.aclose()


def build_registry(
    cfg: Settings,
    environ: Mapping[str, str] | None = None,
) -> DatasourceRegistry:
    registry = DatasourceRegistry()
    try:
        load_and_register_datasources(
            registry=registry,
            patterns=cfg.datasources_config_paths,
            environ=environ,
            prefix=cfg.datasource_env_prefix,
            default_timeout_ms=cfg.default_timeout_ms,
            default_retry_count=cfg.default_retry_count,
        )
    except Exception:
        logger.exception("Failed to load datasources")
        raise
    return registry


def create_app(
    cfg: Settings | None = None,
    *,
    registry: DatasourceRegistry | None = None,
    transport: Transport | None = None,
    cache: CacheFacade | None = None,
) -> FastAPI:
    cfg = cfg or default_settings
    configure_logging(cfg.log_level)

    registry = registry if registry is not None else build_registry(cfg)
    transport = transport or HttpxTransport(httpx.AsyncClient())
    cache = cache if cache is not None else create_cache(cfg)

    invoker = DatasourceInvoker(registry, transport)
    executor = ResolverExecutor(invoker, cache, cache_ttl_seconds=cfg.cache_ttl_seconds)

    app = FastAPI(
        title="Switchboard",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Explicit wiring
    app.state.settings = cfg
    app.state.datasource_registry = registry
    app.state.transport = transport
    app.state.datasource_invoker = invoker
    app.state.cache = cache
    app.state.cache_ttl_seconds = cfg.cache_ttl_seconds
    app.state.resolver_executor = executor

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    app.include_router(resolvers_router, prefix="/api/resolvers", tags=["resolvers"])
    app.include_router(datasources_router, prefix="/api/datasources", tags=["datasources"])
    app.include_router(cache_router, prefix="/api/cache", tags=["cache"])
    return app
