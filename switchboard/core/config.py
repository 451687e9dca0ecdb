# switchboard/core/config.py
"""
Central configuration for the resolver service.

Environment variables override defaults. Datasource profiles themselves
are not settings fields: they are discovered from ``DATASOURCE_<NAME>``
entries and YAML files at startup (see ``core.datasources.loader``).
"""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    # Datasource bootstrap
    datasources_config_paths: list[str] = Field(
        default_factory=lambda: ["config/datasources.yaml"]
    )
    datasource_env_prefix: str = Field(
        default="DATASOURCE_",
        description="Prefix of env entries of the form <type>|<baseUrl>|<timeoutMs>|<retryCount>",
    )
    default_timeout_ms: int = Field(default=5000, gt=0)
    default_retry_count: int = Field(default=3, ge=1)

    # Cache
    cache_backend: Literal["memory", "redis", "none"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: int = Field(default=3600, gt=0)


settings = Settings()
