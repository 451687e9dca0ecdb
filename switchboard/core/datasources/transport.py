# switchboard/core/datasources/transport.py
"""
Thin async HTTP transport used by the datasource invoker.

One call to :meth:`HttpxTransport.send` is exactly one attempt; retries
are the invoker's business.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import httpx

from switchboard.core.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    status: int
    data: Any
    headers: dict[str, str]


class Transport(Protocol):
    async def send(
        self,
        *,
        method: str,
        url: str,
        data: Any = None,
        headers: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        timeout_ms: int,
    ) -> TransportResponse: ...


def _query_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_query_value(v) for v in value]
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _header_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


class HttpxTransport:
    """HTTP transport backed by ``httpx.AsyncClient``.

    If no client is supplied a short-lived one is opened per request.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    def _build_kwargs(
        self,
        data: Any,
        headers: Mapping[str, Any] | None,
        params: Mapping[str, Any] | None,
        timeout_ms: int,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "headers": {str(k): _header_value(v) for k, v in (headers or {}).items()},
            "timeout": httpx.Timeout(timeout_ms / 1000.0),
            "follow_redirects": True,
        }
        if params:
            kwargs["params"] = {str(k): _query_value(v) for k, v in params.items()}
        if isinstance(data, (dict, list)):
            kwargs["json"] = data
        elif isinstance(data, (bytes, str)):
            kwargs["content"] = data
        elif data is not None:
            kwargs["json"] = data
        return kwargs

    async def _request(self, method: str, url: str, kwargs: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.request(method, url, **kwargs)

    async def send(
        self,
        *,
        method: str,
        url: str,
        data: Any = None,
        headers: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        timeout_ms: int,
    ) -> TransportResponse:
        kwargs = self._build_kwargs(data, headers, params, timeout_ms)

        try:
            # httpx timeouts are per operation; this bounds the whole attempt
            resp = await asyncio.wait_for(
                self._request(method, url, kwargs), timeout_ms / 1000.0
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise TransportError(f"timeout of {timeout_ms}ms exceeded") from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            raise TransportError(
                f"Request failed with status code {resp.status_code}",
                status=resp.status_code,
            )

        return TransportResponse(
            status=resp.status_code,
            data=_decode_body(resp),
            headers=dict(resp.headers),
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
