# switchboard/core/datasources/loader.py
"""
Datasource loader – builds profiles from the environment and YAML files
and registers them at startup.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Mapping

from switchboard.core.datasources.models import DatasourceProfile, default_headers
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.loader import expand_env, load_yaml_files

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_RETRY_COUNT = 3


def _positive_int(raw: Any, default: int) -> int:
    """Parse a leading integer; anything unparsable or not positive falls back."""
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw if raw > 0 else default

    text = str(raw or "").strip()
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        value = int(digits)
    except ValueError:
        return default
    return value if value > 0 else default


def parse_datasource_entry(
    name: str,
    value: str,
    *,
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    default_retry_count: int = DEFAULT_RETRY_COUNT,
) -> DatasourceProfile:
    """
    Parse one ``<type>|<baseUrl>|<timeoutMs>|<retryCount>`` entry.

    Missing trailing fields take their defaults; ``name`` is kept exactly
    as given.
    """
    parts = value.split("|")
    parts += [""] * (4 - len(parts))
    kind, base_url, timeout, retry_count = parts[:4]

    return DatasourceProfile(
        name=name,
        kind=(kind or "http").lower(),
        base_address=base_url.strip(),
        timeout_ms=_positive_int(timeout, default_timeout_ms),
        retry_budget=_positive_int(retry_count, default_retry_count),
        default_headers=default_headers(),
    )


def profiles_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    prefix: str = "DATASOURCE_",
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    default_retry_count: int = DEFAULT_RETRY_COUNT,
) -> list[DatasourceProfile]:
    """Collect a profile for every non-empty ``<prefix><NAME>`` entry."""
    env = os.environ if environ is None else environ
    profiles: list[DatasourceProfile] = []

    for key, value in env.items():
        if not key.startswith(prefix) or len(key) == len(prefix) or not value:
            continue
        profiles.append(
            parse_datasource_entry(
                key[len(prefix):],
                value,
                default_timeout_ms=default_timeout_ms,
                default_retry_count=default_retry_count,
            )
        )

    return profiles


def profiles_from_yaml(
    patterns: Iterable[str],
    *,
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    default_retry_count: int = DEFAULT_RETRY_COUNT,
) -> list[DatasourceProfile]:
    """
    Load datasource profiles from YAML files.

    Expected YAML::

        datasources:
          USER_SERVICE:
            type: http
            base_url: "${USER_SERVICE_URL:-http://localhost:4001}"
            timeout_ms: 2000
            retry_count: 2
            headers:
              X-Api-Key: "${USER_SERVICE_KEY}"

    Later files override earlier ones entry by entry.

    Raises:
        ValueError: If an entry has no ``base_url`` or references an unset env var
    """
    merged: dict[str, tuple[str, dict[str, Any]]] = {}
    for data in load_yaml_files(patterns):
        for name, raw in (data.get("datasources") or {}).items():
            merged[str(name).lower()] = (str(name), raw or {})

    profiles: list[DatasourceProfile] = []
    for name, raw in merged.values():
        try:
            spec = expand_env(raw)
        except ValueError as exc:
            raise ValueError(f"Datasource '{name}' config error: {exc}") from exc

        if not spec.get("base_url"):
            raise ValueError(f"Datasource '{name}' missing required 'base_url' field")

        headers = default_headers()
        headers.update({k: str(v) for k, v in (spec.get("headers") or {}).items()})

        profiles.append(
            DatasourceProfile(
                name=name,
                kind=str(spec.get("type") or "http").lower(),
                base_address=str(spec["base_url"]).strip(),
                timeout_ms=_positive_int(spec.get("timeout_ms"), default_timeout_ms),
                retry_budget=_positive_int(spec.get("retry_count"), default_retry_count),
                default_headers=headers,
            )
        )

    return profiles


def load_and_register_datasources(
    *,
    registry: DatasourceRegistry,
    patterns: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
    prefix: str = "DATASOURCE_",
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    default_retry_count: int = DEFAULT_RETRY_COUNT,
) -> None:
    """Register env-defined profiles, then YAML-defined ones on top."""
    defaults = {
        "default_timeout_ms": default_timeout_ms,
        "default_retry_count": default_retry_count,
    }

    for profile in profiles_from_env(environ, prefix=prefix, **defaults):
        registry.register(profile.name, profile)

    for profile in profiles_from_yaml(patterns, **defaults):
        registry.register(profile.name, profile)

    if len(registry) == 0:
        logger.warning("No datasources configured")
    else:
        logger.info("%d datasource(s) initialized: %s", len(registry), registry.names())
