# switchboard/core/resolvers/context.py
"""
Per-execution state and result records.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExecutionContext:
    """
    State of one pipeline run.

    Created when the pipeline starts and dropped when it returns; it is
    never shared between executions. A failed step leaves it untouched.
    """

    original_input: dict[str, Any] = field(default_factory=dict)
    previous_output: Any = None
    step_outputs: dict[str, Any] = field(default_factory=dict)
    has_previous: bool = False

    def record(self, step_name: str, output: Any) -> None:
        self.previous_output = output
        self.has_previous = True
        self.step_outputs[step_name] = output


@dataclass
class StepOutcome:
    """Audit record of one executed pipeline step."""

    name: str
    ok: bool
    datasource: str
    data: Any = None
    error: str | None = None
    from_cache: bool = False
    cached: bool = False

    def to_dict(self) -> dict[str, Any]:
        if not self.ok:
            return {
                "name": self.name,
                "ok": False,
                "error": self.error,
                "datasource": self.datasource,
            }
        return {
            "name": self.name,
            "ok": True,
            "data": self.data,
            "datasource": self.datasource,
            "fromCache": self.from_cache,
            "cached": self.cached,
        }


@dataclass
class ResolverResult:
    """Aggregate outcome of a unit or pipeline resolver."""

    ok: bool
    type: str
    data: Any = None
    error: str | None = None
    datasource: str | None = None
    steps: list[StepOutcome] | None = None
    from_cache: bool = False
    cached: bool = False
    cache_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"ok": self.ok}
        if self.ok:
            out["data"] = self.data
        else:
            out["error"] = self.error
            if self.type == "pipeline":
                out["data"] = None
        if self.type == "unit":
            out["datasource"] = self.datasource
        else:
            out["steps"] = [s.to_dict() for s in self.steps or []]
        out["fromCache"] = self.from_cache
        out["cached"] = self.cached
        if self.cache_key is not None:
            out["cacheKey"] = self.cache_key
        return out
