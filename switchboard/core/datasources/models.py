# switchboard/core/datasources/models.py
"""
Datasource profile and call value types.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from switchboard.core.errors import ConfigurationError

SERVICE_USER_AGENT = "switchboard-datasource-manager/1.0.0"


def default_headers() -> dict[str, str]:
    """Headers sent with every datasource request unless overridden."""
    return {
        "Content-Type": "application/json",
        "User-Agent": SERVICE_USER_AGENT,
    }


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def requires_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


@dataclass(frozen=True)
class DatasourceProfile:
    """
    Connection profile of one named backend.

    Attributes:
        name: Name as registered; original casing is preserved
        kind: Transport kind (only ``http`` is dispatched today)
        base_address: URL prefix every request path is appended to
        timeout_ms: Per-attempt timeout
        retry_budget: Total number of attempts, including the first
        default_headers: Headers merged under each request's own headers
    """

    name: str
    base_address: str
    kind: str = "http"
    timeout_ms: int = 5000
    retry_budget: int = 3
    default_headers: Mapping[str, str] = field(default_factory=default_headers)

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Datasource name must not be empty")
        if self.retry_budget < 1:
            raise ConfigurationError(
                f"Datasource '{self.name}': retry budget must be >= 1, got {self.retry_budget}"
            )
        if self.timeout_ms <= 0:
            raise ConfigurationError(
                f"Datasource '{self.name}': timeout must be > 0 ms, got {self.timeout_ms}"
            )
        # Frozen all the way down
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers))
        )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def url_for(self, path: Any) -> str:
        return f"{self.base_address}{'' if path is None else path}"

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "baseAddress": self.base_address,
            "timeoutMs": self.timeout_ms,
            "retryBudget": self.retry_budget,
        }


@dataclass(frozen=True)
class CallRequest:
    """One request issued against a profile."""

    method: HttpMethod = HttpMethod.GET
    path: Any = ""
    body: Any = None
    headers: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] | None = None


@dataclass
class CallResult:
    """Successful outcome of a datasource call."""

    status: int
    data: Any
    headers: dict[str, str]
    datasource: str
    ok: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "status": self.status,
            "data": self.data,
            "headers": self.headers,
            "datasource": self.datasource,
        }
