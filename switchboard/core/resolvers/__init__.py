"""Resolver definitions, substitution and execution."""

from switchboard.core.resolvers.context import ExecutionContext, ResolverResult, StepOutcome
from switchboard.core.resolvers.definitions import (
    OnError,
    PipelineResolverDefinition,
    ResolverDefinition,
    StepDefinition,
    UnitResolverDefinition,
    parse_definition,
)
from switchboard.core.resolvers.executor import ResolverExecutor
from switchboard.core.resolvers.substitution import SubstitutionEngine, substitute

__all__ = [
    "ExecutionContext",
    "OnError",
    "PipelineResolverDefinition",
    "ResolverDefinition",
    "ResolverExecutor",
    "ResolverResult",
    "StepDefinition",
    "StepOutcome",
    "SubstitutionEngine",
    "UnitResolverDefinition",
    "parse_definition",
    "substitute",
]
