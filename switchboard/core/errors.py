# switchboard/core/errors.py
"""
Error types raised by the resolver engine.

Every error carries a ``to_dict()`` so the API layer can render it
without knowing the concrete type.
"""
from __future__ import annotations

from typing import Any


class SwitchboardError(Exception):
    """Base class for all engine errors."""

    code = "switchboard_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(SwitchboardError, ValueError):
    """Raised when a definition or profile is invalid, before any network call."""

    code = "configuration_error"

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "errors": self.errors}


class DatasourceNotFound(SwitchboardError, LookupError):
    """Raised when a datasource name is not registered."""

    code = "datasource_not_found"

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f"DataSource '{name}' not found. Available: {', '.join(available)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "available": self.available}


class TransportError(SwitchboardError):
    """A single failed attempt: network error, timeout or non-2xx response."""

    code = "transport_error"

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class DatasourceUnavailable(SwitchboardError):
    """Raised when every attempt allowed by the retry budget failed."""

    code = "datasource_unavailable"

    def __init__(self, datasource: str, attempts: int, last_error: Exception) -> None:
        self.datasource = datasource
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"DataSource call failed after {attempts} attempts. "
            f"Error: {last_error or 'Unknown error'}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "datasource": self.datasource,
            "attempts": self.attempts,
        }


class SubstitutionNoOp(SwitchboardError):
    """Substituted text looked structured but did not parse. Never fatal."""

    code = "substitution_noop"


class UnsupportedResolverType(SwitchboardError):
    """Raised when a resolver definition carries an unknown ``type``."""

    code = "unsupported_resolver_type"

    def __init__(self, resolver_type: Any) -> None:
        self.resolver_type = resolver_type
        super().__init__(
            f"Unknown resolver type: {resolver_type!r} (expected 'unit' or 'pipeline')"
        )
