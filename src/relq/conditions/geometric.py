"""
Predicates over the built-in geometric types (point, box, circle, ...).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext

if TYPE_CHECKING:
    from .collector import ConditionCollector

GEOMETRIC_OPERATORS = {
    "geometric_contains": "@>",
    "geometric_contained_by": "<@",
    "geometric_overlaps": "&&",
    "geometric_strictly_left": "<<",
    "geometric_strictly_right": ">>",
    "geometric_below": "<^",
    "geometric_above": ">^",
    "geometric_intersects": "?#",
    "geometric_is_parallel": "?||",
    "geometric_is_perpendicular": "?-|",
    "geometric_same_as": "~=",
}

_DISTANCE_OPERATORS = {
    "geometric_distance_lt": "<",
    "geometric_distance_lte": "<=",
    "geometric_distance_gt": ">",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _point(value: Sequence[Any]) -> str:
    return f"({value[0]},{value[1]})"


def geometric_literal(value: Any) -> str:
    """
    Text form of a geometric value:

    * ``(x, y)`` is a point,
    * ``((x, y), r)`` is a circle,
    * ``((x1, y1), (x2, y2))`` is a box or segment,
    * three or more points form a path or polygon.

    Strings pass through unchanged.
    """

    if isinstance(value, str):
        return value
    if not isinstance(value, (list, tuple)):
        raise InvalidArgumentError(f"Cannot use {value!r} as a geometric value")
    if len(value) == 2 and all(_is_number(part) for part in value):
        return _point(value)
    if len(value) == 2 and isinstance(value[0], (list, tuple)) and _is_number(value[1]):
        return f"<{_point(value[0])},{value[1]}>"
    if len(value) == 2 and all(isinstance(part, (list, tuple)) for part in value):
        return f"({_point(value[0])},{_point(value[1])})"
    if len(value) > 2:
        return "(" + ",".join(_point(point) for point in value) + ")"
    raise InvalidArgumentError(f"Cannot use {value!r} as a geometric value")


class GeometricConditionCollector:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def _add(self, method: str, column: Any, values: Any = None) -> "ConditionCollector":
        return self.parent.add(Condition(f"geometric_{method}", column, values))

    def contains(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contains", column, geometric_literal(value))

    def contained_by(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contained_by", column, geometric_literal(value))

    def overlaps(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("overlaps", column, geometric_literal(value))

    def strictly_left(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("strictly_left", column, geometric_literal(value))

    def strictly_right(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("strictly_right", column, geometric_literal(value))

    def below(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("below", column, geometric_literal(value))

    def above(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("above", column, geometric_literal(value))

    def intersects(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("intersects", column, geometric_literal(value))

    def is_horizontal(self, column: Any) -> "ConditionCollector":
        return self._add("is_horizontal", column)

    def is_vertical(self, column: Any) -> "ConditionCollector":
        return self._add("is_vertical", column)

    def is_parallel(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("is_parallel", column, geometric_literal(value))

    def is_perpendicular(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("is_perpendicular", column, geometric_literal(value))

    def same_as(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("same_as", column, geometric_literal(value))

    def distance_less_than(self, column: Any, value: Any, max_distance: float) -> "ConditionCollector":
        return self._add("distance_lt", column, {"value": geometric_literal(value), "threshold": max_distance})

    def distance_less_than_or_equal(self, column: Any, value: Any, max_distance: float) -> "ConditionCollector":
        return self._add("distance_lte", column, {"value": geometric_literal(value), "threshold": max_distance})

    def distance_greater_than(self, column: Any, value: Any, min_distance: float) -> "ConditionCollector":
        return self._add("distance_gt", column, {"value": geometric_literal(value), "threshold": min_distance})

    def distance_between(self, column: Any, value: Any, min_distance: float, max_distance: float) -> "ConditionCollector":
        return self._add(
            "distance_between",
            column,
            {"value": geometric_literal(value), "min": min_distance, "max": max_distance},
        )

    def is_closed(self, column: Any) -> "ConditionCollector":
        return self._add("is_closed", column)

    def is_open(self, column: Any) -> "ConditionCollector":
        return self._add("is_open", column)


def build_geometric_sql(condition: Condition, ctx: RenderContext) -> str:
    ctx.require_postgres("Geometric")
    method, values = condition.method, condition.values
    col = ctx.column(condition.column)

    if method in GEOMETRIC_OPERATORS:
        return f"{col} {GEOMETRIC_OPERATORS[method]} {ctx.text(values)}"
    if method in _DISTANCE_OPERATORS:
        return f"({col} <-> {ctx.text(values['value'])}) {_DISTANCE_OPERATORS[method]} {ctx.number(values['threshold'])}"
    if method == "geometric_distance_between":
        return (
            f"({col} <-> {ctx.text(values['value'])}) BETWEEN {ctx.number(values['min'])} "
            f"AND {ctx.number(values['max'])}"
        )
    if method == "geometric_is_horizontal":
        return f"?- {col}"
    if method == "geometric_is_vertical":
        return f"?| {col}"
    if method == "geometric_is_closed":
        return f"isclosed({col})"
    if method == "geometric_is_open":
        return f"isopen({col})"
    raise InvalidArgumentError(f"Unknown geometric condition {method!r}")
