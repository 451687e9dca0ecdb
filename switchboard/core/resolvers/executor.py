# switchboard/core/resolvers/executor.py
"""
Resolver execution engine.

Runs unit resolvers (one datasource call) and pipeline resolvers (an
ordered list of calls sharing an execution context), with optional
look-aside caching at resolver and step level.

Failure policy:

* A unit resolver never raises for datasource or cache trouble; it
  returns ``ok=False`` with the error message.
* A pipeline under ``failFast`` stops at the first failing step.
  Under ``continue`` it records the failure and moves on; the failed step
  contributes nothing to the context.
* Cache reads and writes never fail a resolver.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from switchboard.core.cache.base import CacheFacade, NullCache
from switchboard.core.datasources.invoker import DatasourceInvoker
from switchboard.core.datasources.models import CallRequest
from switchboard.core.errors import UnsupportedResolverType
from switchboard.core.resolvers.context import ExecutionContext, ResolverResult, StepOutcome
from switchboard.core.resolvers.definitions import (
    OnError,
    PipelineResolverDefinition,
    ResolverDefinition,
    StepDefinition,
    UnitResolverDefinition,
    parse_definition,
)
from switchboard.core.resolvers.substitution import SubstitutionEngine

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 3600


class ResolverExecutor:
    """Dispatches resolver definitions to the unit or pipeline state machine."""

    def __init__(
        self,
        invoker: DatasourceInvoker,
        cache: CacheFacade | None = None,
        *,
        substitution: SubstitutionEngine | None = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._invoker = invoker
        self._cache = cache if cache is not None else NullCache()
        self._substitution = substitution or SubstitutionEngine()
        self._cache_ttl = cache_ttl_seconds

    # -- cache helpers ---------------------------------------------------------

    async def _cache_get(self, key: str) -> Any | None:
        try:
            return await self._cache.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for '%s': %s", key, exc)
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            stored = await self._cache.set(key, value, self._cache_ttl)
        except Exception as exc:
            logger.warning("Cache write failed for '%s': %s", key, exc)
            return
        if not stored:
            logger.debug("Cache did not store '%s'", key)

    # -- dispatch ----------------------------------------------------------------

    async def execute(
        self,
        definition: ResolverDefinition | Mapping[str, Any],
        input: Mapping[str, Any] | None = None,
    ) -> ResolverResult:
        """
        Run a resolver definition.

        Args:
            definition: Parsed definition, or a raw mapping to parse
            input: The caller's original input, visible as ``$input.<field>``

        Returns:
            ``ResolverResult`` for the unit or pipeline run

        Raises:
            UnsupportedResolverType: If the definition type is unknown
            ConfigurationError: If a raw definition fails validation
        """
        if isinstance(definition, Mapping):
            definition = parse_definition(definition)

        original_input = dict(input or {})

        if isinstance(definition, UnitResolverDefinition):
            return await self.execute_unit(definition, original_input)
        if isinstance(definition, PipelineResolverDefinition):
            return await self.execute_pipeline(definition, original_input)
        raise UnsupportedResolverType(getattr(definition, "type", type(definition).__name__))

    # -- unit --------------------------------------------------------------------

    async def execute_unit(
        self,
        definition: UnitResolverDefinition,
        input: Mapping[str, Any] | None = None,
    ) -> ResolverResult:
        if definition.caches:
            cached = await self._cache_get(definition.cache_key)
            if cached is not None:
                logger.info("Unit resolver served from cache: %s", definition.cache_key)
                return ResolverResult(
                    ok=True,
                    type="unit",
                    data=cached,
                    datasource=definition.datasource,
                    from_cache=True,
                    cache_key=definition.cache_key,
                )

        request = CallRequest(
            method=definition.method,
            path=definition.path,
            body=definition.body,
            headers=definition.headers,
            query=definition.params,
        )

        try:
            result = await self._invoker.call(definition.datasource, request)
        except Exception as exc:
            logger.warning(
                "Unit resolver on '%s' failed: %s", definition.datasource, exc
            )
            return ResolverResult(
                ok=False,
                type="unit",
                error=str(exc),
                datasource=definition.datasource,
            )

        if definition.caches:
            await self._cache_set(definition.cache_key, result.data)

        return ResolverResult(
            ok=True,
            type="unit",
            data=result.data,
            datasource=result.datasource,
            from_cache=False,
            cached=definition.caches,
            cache_key=definition.cache_key if definition.caches else None,
        )

    # -- pipeline ----------------------------------------------------------------

    async def _run_step(
        self,
        step: StepDefinition,
        original_input: Mapping[str, Any],
        context: ExecutionContext,
    ) -> StepOutcome:
        """Materialize and run one step. Raises on failure."""
        sub = self._substitution.substitute
        request = CallRequest(
            method=step.method,
            path=sub(step.path, original_input, context),
            body=sub(step.body, original_input, context),
            headers=sub(step.headers, original_input, context) or {},
            query=sub(step.params, original_input, context),
        )

        if step.caches:
            cached = await self._cache_get(step.cache_key)
            if cached is not None:
                logger.debug("Step '%s' served from cache: %s", step.name, step.cache_key)
                return StepOutcome(
                    name=step.name,
                    ok=True,
                    datasource=step.datasource,
                    data=cached,
                    from_cache=True,
                    cached=True,
                )

        result = await self._invoker.call(step.datasource, request)

        if step.caches:
            await self._cache_set(step.cache_key, result.data)

        return StepOutcome(
            name=step.name,
            ok=True,
            datasource=step.datasource,
            data=result.data,
            cached=step.caches,
        )

    async def execute_pipeline(
        self,
        definition: PipelineResolverDefinition,
        input: Mapping[str, Any] | None = None,
    ) -> ResolverResult:
        if definition.caches:
            cached = await self._cache_get(definition.cache_key)
            if cached is not None:
                logger.info("Pipeline served from cache: %s", definition.cache_key)
                return ResolverResult(
                    ok=True,
                    type="pipeline",
                    data=cached,
                    steps=[],
                    from_cache=True,
                    cache_key=definition.cache_key,
                )

        original_input = dict(input or {})
        context = ExecutionContext(original_input=original_input)
        outcomes: list[StepOutcome] = []

        for step in definition.steps:
            try:
                outcome = await self._run_step(step, original_input, context)
            except Exception as exc:
                outcomes.append(
                    StepOutcome(
                        name=step.name,
                        ok=False,
                        datasource=step.datasource,
                        error=str(exc),
                    )
                )

                if definition.on_error is OnError.FAIL_FAST:
                    logger.warning("Pipeline aborted at step '%s': %s", step.name, exc)
                    return ResolverResult(
                        ok=False,
                        type="pipeline",
                        error=f"Pipeline failed at step '{step.name}': {exc}",
                        steps=outcomes,
                    )

                logger.warning("Pipeline step '%s' failed: %s", step.name, exc)
                continue

            context.record(step.name, outcome.data)
            outcomes.append(outcome)

        final = context.previous_output

        if definition.caches:
            await self._cache_set(definition.cache_key, final)

        return ResolverResult(
            ok=True,
            type="pipeline",
            data=final,
            steps=outcomes,
            from_cache=False,
            cached=definition.caches,
            cache_key=definition.cache_key if definition.caches else None,
        )
