# switchboard/core/resolvers/substitution.py
"""
Marker substitution for pipeline steps.

Three markers are recognised inside string values:

* ``$prev`` – the previous successful step's output
* ``$steps.<name>`` – the output of the named step
* ``$input.<field>`` – a field of the caller's original input

Step markers always inject the *whole* serialized output. A trailing
accessor such as ``$prev.id`` or ``$steps.posts[0].id`` is consumed along
with the marker but not evaluated, so ``/posts?userId=$prev.id`` becomes
``/posts?userId={"id":7}``.

Passes run in that fixed order. If the final text starts with ``{`` or
``[`` and differs from the original, it is re-parsed as JSON; text that
does not parse is kept as is.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping

from switchboard.core.errors import SubstitutionNoOp
from switchboard.core.resolvers.context import ExecutionContext

logger = logging.getLogger(__name__)

# .field / [0] chains after a step marker
_ACCESSOR = r"(?:\.[A-Za-z_$][\w$]*|\[\d+\])*"
_END = r"(?![\w$])"

PREV_MARKER = re.compile(r"\$prev" + _END + _ACCESSOR)


def to_json(value: Any) -> str:
    """Compact JSON text, the form markers are replaced with."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _step_marker(name: str) -> re.Pattern[str]:
    return re.compile(r"\$steps\." + re.escape(name) + _END + _ACCESSOR)


def _input_marker(field: str) -> re.Pattern[str]:
    return re.compile(r"\$input\." + re.escape(str(field)) + _END)


def parse_structured(text: str) -> Any:
    """
    Parse substituted text as JSON.

    Raises:
        SubstitutionNoOp: If the text is not valid JSON
    """
    try:
        return json.loads(text)
    except ValueError as exc:
        raise SubstitutionNoOp(f"substituted text is not valid JSON: {exc}") from exc


class SubstitutionEngine:
    """Rewrites step fields from the current execution context. Stateless."""

    def substitute(
        self,
        value: Any,
        original_input: Mapping[str, Any] | None,
        context: ExecutionContext,
    ) -> Any:
        if isinstance(value, str):
            return self._substitute_string(value, original_input or {}, context)
        if isinstance(value, dict):
            return {
                key: self.substitute(item, original_input, context)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self.substitute(item, original_input, context) for item in value]
        return value

    def _substitute_string(
        self,
        value: str,
        original_input: Mapping[str, Any],
        context: ExecutionContext,
    ) -> Any:
        result = value

        if context.has_previous:
            prev = to_json(context.previous_output)
            result = PREV_MARKER.sub(lambda _: prev, result)

        for name, output in context.step_outputs.items():
            serialized = to_json(output)
            result = _step_marker(name).sub(lambda _: serialized, result)

        for field, field_value in original_input.items():
            text = field_value if isinstance(field_value, str) else to_json(field_value)
            result = _input_marker(field).sub(lambda _: text, result)

        if result != value and result.startswith(("{", "[")):
            try:
                return parse_structured(result)
            except SubstitutionNoOp as exc:
                logger.debug("Keeping substituted text as string: %s", exc)

        return result


_engine = SubstitutionEngine()


def substitute(
    value: Any,
    original_input: Mapping[str, Any] | None,
    context: ExecutionContext,
) -> Any:
    """Module-level shortcut for :meth:`SubstitutionEngine.substitute`."""
    return _engine.substitute(value, original_input, context)
