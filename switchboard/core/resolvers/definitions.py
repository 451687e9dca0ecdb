# switchboard/core/resolvers/definitions.py
"""
Resolver definitions.

A definition is a tagged variant: ``UnitResolverDefinition`` (one call) or
``PipelineResolverDefinition`` (ordered steps), told apart by ``type``.
Field names follow the JSON wire format (``isCached``, ``cacheKey``,
``onError``); the older ``isToBeCached`` / ``cachingKeys`` spellings are
accepted on input.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from switchboard.core.datasources.models import HttpMethod
from switchboard.core.errors import ConfigurationError, UnsupportedResolverType

logger = logging.getLogger(__name__)


class OnError(str, Enum):
    FAIL_FAST = "failFast"
    CONTINUE = "continue"


class _CallFields(BaseModel):
    """Fields shared by unit resolvers and pipeline steps."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    datasource: str = Field(min_length=1)
    method: HttpMethod = HttpMethod.GET
    path: str
    body: Any = None
    headers: dict[str, Any] = Field(default_factory=dict)
    params: dict[str, Any] | None = None
    is_cached: bool = Field(
        default=False,
        validation_alias=AliasChoices("isCached", "isToBeCached", "is_cached"),
        serialization_alias="isCached",
    )
    cache_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cacheKey", "cachingKeys", "cache_key"),
        serialization_alias="cacheKey",
    )

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _cache_key_required(self):
        if self.is_cached and not self.cache_key:
            raise ValueError("cacheKey is required when isCached is true")
        return self

    @property
    def caches(self) -> bool:
        return self.is_cached and bool(self.cache_key)


class StepDefinition(_CallFields):
    """One step of a pipeline; ``name`` is its substitution handle."""

    name: str = Field(min_length=1)


class UnitResolverDefinition(_CallFields):
    type: Literal["unit"] = "unit"

    @model_validator(mode="after")
    def _body_required(self):
        if self.method.requires_body and self.body is None:
            raise ValueError(f"body is required for {self.method.value} unit resolvers")
        return self


class PipelineResolverDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    type: Literal["pipeline"] = "pipeline"
    steps: list[StepDefinition] = Field(min_length=1)
    on_error: OnError = Field(
        default=OnError.FAIL_FAST,
        validation_alias=AliasChoices("onError", "on_error"),
        serialization_alias="onError",
    )
    is_cached: bool = Field(
        default=False,
        validation_alias=AliasChoices("isCached", "isToBeCached", "is_cached"),
        serialization_alias="isCached",
    )
    cache_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cacheKey", "cachingKeys", "cache_key"),
        serialization_alias="cacheKey",
    )

    @model_validator(mode="after")
    def _validate(self):
        if self.is_cached and not self.cache_key:
            raise ValueError("cacheKey is required when isCached is true")
        seen: set[str] = set()
        for step in self.steps:
            if step.name in seen:
                raise ValueError(f"duplicate step name '{step.name}'")
            seen.add(step.name)
        return self

    @property
    def caches(self) -> bool:
        return self.is_cached and bool(self.cache_key)


ResolverDefinition = Annotated[
    Union[UnitResolverDefinition, PipelineResolverDefinition],
    Field(discriminator="type"),
]

_definition_adapter: TypeAdapter[ResolverDefinition] = TypeAdapter(ResolverDefinition)

RESOLVER_TYPES = ("unit", "pipeline")


def _format_errors(exc: ValidationError) -> list[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        out.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return out


def parse_definition(raw: Mapping[str, Any]) -> ResolverDefinition:
    """
    Validate a raw resolver definition.

    Args:
        raw: Decoded JSON object

    Returns:
        A ``UnitResolverDefinition`` or ``PipelineResolverDefinition``

    Raises:
        UnsupportedResolverType: If ``type`` is missing or unknown
        ConfigurationError: If the definition is otherwise invalid
    """
    resolver_type = raw.get("type") if isinstance(raw, Mapping) else None
    if resolver_type not in RESOLVER_TYPES:
        raise UnsupportedResolverType(resolver_type)

    try:
        return _definition_adapter.validate_python(dict(raw))
    except ValidationError as exc:
        errors = _format_errors(exc)
        logger.warning("Invalid %s resolver definition: %s", resolver_type, errors)
        raise ConfigurationError(
            f"Invalid {resolver_type} resolver definition: {'; '.join(errors)}",
            errors=errors,
        ) from exc


def with_caching_disabled(definition: ResolverDefinition) -> ResolverDefinition:
    """Copy of ``definition`` whose top-level result is never cached."""
    return definition.model_copy(update={"is_cached": False})
