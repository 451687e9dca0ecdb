from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from switchboard.core.datasources.models import HttpMethod


class DatasourceRegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    kind: str = Field(default="http", validation_alias=AliasChoices("kind", "type"))
    base_address: str = Field(
        min_length=1, validation_alias=AliasChoices("baseAddress", "baseUrl", "base_address")
    )
    timeout_ms: int | None = Field(
        default=None, gt=0, validation_alias=AliasChoices("timeoutMs", "timeout", "timeout_ms")
    )
    retry_budget: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("retryBudget", "retryCount", "retry_budget"),
    )
    headers: dict[str, str] = Field(default_factory=dict)


class DatasourceCallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    datasource: str = Field(min_length=1)
    method: HttpMethod = HttpMethod.GET
    path: str = ""
    body: Any = None
    headers: dict[str, Any] = Field(default_factory=dict)
    params: dict[str, Any] | None = None
    is_cached: bool = Field(
        default=False, validation_alias=AliasChoices("isCached", "isToBeCached", "is_cached")
    )
    cache_key: str | None = Field(
        default=None, validation_alias=AliasChoices("cacheKey", "cachingKeys", "cache_key")
    )

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class DatasourceListResponse(BaseModel):
    total: int
    datasources: list[dict[str, Any]]
