"""
Range-type predicates (``int4range``, ``tstzrange``, ...).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Mapping

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext

if TYPE_CHECKING:
    from .collector import ConditionCollector

RANGE_OPERATORS = {
    "range_contains": "@>",
    "range_contained_by": "<@",
    "range_overlaps": "&&",
    "range_strictly_left": "<<",
    "range_strictly_right": ">>",
    "range_adjacent": "-|-",
}


def _bound(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None:
        return ""
    return str(value)


def range_literal(value: Any) -> str:
    """
    Text form of a range. A ``(start, end)`` pair is half-open; a mapping
    may set ``start_bound`` / ``end_bound`` to ``"inclusive"`` or
    ``"exclusive"``. ``None`` bounds are unbounded.
    """

    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            raise InvalidArgumentError(f"A range needs exactly two bounds, got {value!r}")
        start, end = value
        return f"[{_bound(start)},{_bound(end)})"
    if isinstance(value, Mapping):
        opening = "(" if value.get("start_bound") == "exclusive" else "["
        closing = "]" if value.get("end_bound") == "inclusive" else ")"
        return f"{opening}{_bound(value.get('start'))},{_bound(value.get('end'))}{closing}"
    raise InvalidArgumentError(f"Cannot use {value!r} as a range")


class RangeConditionCollector:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def _add(self, method: str, column: Any, values: Any) -> "ConditionCollector":
        return self.parent.add(Condition(f"range_{method}", column, values))

    def contains(self, column: Any, value: Any) -> "ConditionCollector":
        """``value`` is an element or a range given as text."""
        return self._add("contains", column, value)

    def contained_by(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contained_by", column, range_literal(value))

    def overlaps(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("overlaps", column, range_literal(value))

    def strictly_left(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("strictly_left", column, range_literal(value))

    def strictly_right(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("strictly_right", column, range_literal(value))

    def adjacent(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("adjacent", column, range_literal(value))


def build_range_sql(condition: Condition, ctx: RenderContext) -> str:
    ctx.require_postgres("Range")
    operator = RANGE_OPERATORS.get(condition.method)
    if operator is None:
        raise InvalidArgumentError(f"Unknown range condition {condition.method!r}")
    return f"{ctx.column(condition.column)} {operator} {ctx.value(condition.values)}"
