# switchboard/core/datasources/invoker.py
"""
Datasource invoker: one logical call, retried with exponential backoff.

Between attempt ``k`` and ``k + 1`` the invoker sleeps
``100ms * 2 ** (k - 1)`` (100, 200, 400, ... ms). There is no jitter and
no cap, and no sleep follows the final attempt.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from switchboard.core.datasources.models import CallRequest, CallResult, DatasourceProfile
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.datasources.transport import HttpxTransport, Transport
from switchboard.core.errors import DatasourceUnavailable

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]

BASE_BACKOFF_SECONDS = 0.1


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
    return BASE_BACKOFF_SECONDS * (2 ** (attempt - 1))


class DatasourceInvoker:
    """
    Issues calls against datasource profiles.

    The sleep between attempts is injected so callers can substitute a
    deadline-aware or recording implementation; the default,
    ``asyncio.sleep``, is cancellable.
    """

    def __init__(
        self,
        registry: DatasourceRegistry,
        transport: Transport | None = None,
        *,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._registry = registry
        self._transport = transport or HttpxTransport()
        self._sleep = sleep

    @property
    def registry(self) -> DatasourceRegistry:
        return self._registry

    async def call(self, datasource: str, request: CallRequest) -> CallResult:
        """Resolve ``datasource`` by name and invoke it."""
        return await self.invoke(self._registry.resolve(datasource), request)

    async def invoke(self, profile: DatasourceProfile, request: CallRequest) -> CallResult:
        """
        Perform ``request`` against ``profile``.

        Args:
            profile: Resolved datasource profile
            request: Method, path, body, headers and query parameters

        Returns:
            ``CallResult`` of the first successful attempt

        Raises:
            DatasourceUnavailable: If all ``profile.retry_budget`` attempts failed
        """
        url = profile.url_for(request.path)
        headers = {**profile.default_headers, **(request.headers or {})}
        last_error: Exception | None = None

        for attempt in range(1, profile.retry_budget + 1):
            try:
                resp = await self._transport.send(
                    method=request.method.value,
                    url=url,
                    data=request.body,
                    headers=headers,
                    params=request.query,
                    timeout_ms=profile.timeout_ms,
                )
            except Exception as exc:
                last_error = exc
            else:
                return CallResult(
                    status=resp.status,
                    data=resp.data,
                    headers=resp.headers,
                    datasource=profile.name,
                )

            if attempt < profile.retry_budget:
                logger.warning(
                    "Retry attempt %d for %s (%s %s): %s",
                    attempt,
                    profile.name,
                    request.method.value,
                    url,
                    last_error,
                )
                await self._sleep(backoff_delay(attempt))

        logger.error(
            "Datasource '%s' unavailable after %d attempt(s): %s",
            profile.name,
            profile.retry_budget,
            last_error,
        )
        raise DatasourceUnavailable(profile.name, profile.retry_budget, last_error)
