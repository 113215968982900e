"""
JSONB predicates: containment, key existence, path extraction and
comparisons over JSON arrays of objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Sequence

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext

if TYPE_CHECKING:
    from .collector import ConditionCollector

COMPARISON_OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">="})

_EXTRACT_COMPARE = {
    "jsonb_extract_gt": ">",
    "jsonb_extract_gte": ">=",
    "jsonb_extract_lt": "<",
    "jsonb_extract_lte": "<=",
}


def _operator(operator: str) -> str:
    if operator not in COMPARISON_OPERATORS:
        raise InvalidArgumentError(f"Unsupported comparison operator {operator!r}")
    return operator


class JsonbArrayConditionCollector:
    """
    Predicates over a JSONB column holding an array; missing values count as
    an empty array.
    """

    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def _add(self, method: str, column: Any, values: Any = None) -> "ConditionCollector":
        return self.parent.add(Condition(f"jsonb_array_{method}", column, values))

    def length(self, column: Any, operator: str, value: int) -> "ConditionCollector":
        return self._add("length", column, {"operator": _operator(operator), "value": value})

    def is_empty(self, column: Any) -> "ConditionCollector":
        return self._add("empty", column, True)

    def is_not_empty(self, column: Any) -> "ConditionCollector":
        return self._add("empty", column, False)

    def contains(self, column: Any, element: Any) -> "ConditionCollector":
        return self._add("contains_element", column, element)

    def contains_all(self, column: Any, elements: Sequence[Any]) -> "ConditionCollector":
        return self._add("contains_all", column, list(elements))

    def contains_any(self, column: Any, elements: Sequence[Any]) -> "ConditionCollector":
        if not elements:
            raise InvalidArgumentError("contains_any needs at least one element")
        return self._add("contains_any", column, list(elements))

    def any(self, column: Any, key: str, operator: str, value: Any) -> "ConditionCollector":
        return self._add("any", column, {"key": key, "operator": _operator(operator), "value": value})

    def all(self, column: Any, key: str, operator: str, value: Any) -> "ConditionCollector":
        return self._add("all", column, {"key": key, "operator": _operator(operator), "value": value})

    def any_in(self, column: Any, key: str, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("any_in", column, {"key": key, "values": list(values)})

    def any_like(self, column: Any, key: str, pattern: str) -> "ConditionCollector":
        return self._add("any_like", column, {"key": key, "pattern": pattern})

    def any_ilike(self, column: Any, key: str, pattern: str) -> "ConditionCollector":
        return self._add("any_ilike", column, {"key": key, "pattern": pattern})


class JsonbConditionCollector:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent
        self._array: JsonbArrayConditionCollector | None = None

    @property
    def array(self) -> JsonbArrayConditionCollector:
        if self._array is None:
            self._array = JsonbArrayConditionCollector(self.parent)
        return self._array

    def _add(self, method: str, column: Any, values: Any = None) -> "ConditionCollector":
        return self.parent.add(Condition(f"jsonb_{method}", column, values))

    def contains(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contains", column, value)

    def contained_by(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contained_by", column, value)

    def has_key(self, column: Any, key: str) -> "ConditionCollector":
        return self._add("has_key", column, key)

    def has_any_keys(self, column: Any, keys: Iterable[str]) -> "ConditionCollector":
        return self._add("has_any_keys", column, list(keys))

    def has_all_keys(self, column: Any, keys: Iterable[str]) -> "ConditionCollector":
        return self._add("has_all_keys", column, list(keys))

    def is_null(self, column: Any) -> "ConditionCollector":
        return self._add("is_null", column, True)

    def is_not_null(self, column: Any) -> "ConditionCollector":
        return self._add("is_null", column, False)

    def type_of(self, column: Any, path: Any, json_type: str) -> "ConditionCollector":
        return self._add("typeof", column, {"path": path, "type": json_type})

    def extract(self, column: Any, path: Any) -> "ConditionCollector":
        return self._add("extract", column, path)

    def extract_text(self, column: Any, path: Any) -> "ConditionCollector":
        return self._add("extract_text", column, path)

    def get(self, column: Any, key: str) -> "ConditionCollector":
        return self._add("get", column, key)

    def get_text(self, column: Any, key: str) -> "ConditionCollector":
        return self._add("get_text", column, key)

    def extract_equal(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("extract_equal", column, {"path": path, "value": value})

    def extract_not_equal(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("extract_not_equal", column, {"path": path, "value": value})

    def extract_greater_than(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("extract_gt", column, {"path": path, "value": value})

    def extract_greater_than_or_equal(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("extract_gte", column, {"path": path, "value": value})

    def extract_less_than(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("extract_lt", column, {"path": path, "value": value})

    def extract_less_than_or_equal(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("extract_lte", column, {"path": path, "value": value})

    def extract_between(self, column: Any, path: Any, low: Any, high: Any) -> "ConditionCollector":
        return self._add("extract_between", column, {"path": path, "min": low, "max": high})

    def extract_in(self, column: Any, path: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("extract_in", column, {"path": path, "values": list(values)})

    def extract_not_in(self, column: Any, path: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("extract_not_in", column, {"path": path, "values": list(values)})

    def extract_like(self, column: Any, path: Any, pattern: str) -> "ConditionCollector":
        return self._add("extract_like", column, {"path": path, "pattern": pattern})

    def extract_ilike(self, column: Any, path: Any, pattern: str) -> "ConditionCollector":
        return self._add("extract_ilike", column, {"path": path, "pattern": pattern})

    def extract_is_null(self, column: Any, path: Any) -> "ConditionCollector":
        return self._add("extract_is_null", column, {"path": path, "is_null": True})

    def extract_is_not_null(self, column: Any, path: Any) -> "ConditionCollector":
        return self._add("extract_is_null", column, {"path": path, "is_null": False})


def _array_elements(col: str) -> str:
    return f"jsonb_array_elements(COALESCE({col}, '[]'::jsonb)) elem"


def _element_predicate(ctx: RenderContext, values: Dict[str, Any]) -> str:
    value = values["value"]
    numeric = isinstance(value, (int, float)) and not isinstance(value, bool)
    key = ctx.text(values["key"])
    left = f"(elem->>{key})::numeric" if numeric else f"elem->>{key}"
    right = ctx.number(value) if numeric else ctx.text(value)
    return f"{left} {values['operator']} {right}"


def build_jsonb_sql(condition: Condition, ctx: RenderContext) -> str:
    ctx.require_postgres("JSONB")
    method, values = condition.method, condition.values
    col = ctx.column(condition.column)

    if method == "jsonb_contains":
        return f"{col} @> {ctx.json(values)}"
    if method == "jsonb_contained_by":
        return f"{col} <@ {ctx.json(values)}"
    if method == "jsonb_has_key":
        return f"{col} ? {ctx.text(values)}"
    if method == "jsonb_has_any_keys":
        return f"{col} ?| {ctx.array(str(key) for key in values)}"
    if method == "jsonb_has_all_keys":
        return f"{col} ?& {ctx.array(str(key) for key in values)}"
    if method == "jsonb_is_null":
        return f"{col} IS NULL" if values else f"{col} IS NOT NULL"
    if method == "jsonb_typeof":
        return f"jsonb_typeof({col}#>{ctx.path(values['path'])}) = {ctx.text(values['type'])}"
    if method == "jsonb_extract":
        return f"{col}#>{ctx.path(values)}"
    if method == "jsonb_extract_text":
        return f"{col}#>>{ctx.path(values)}"
    if method == "jsonb_get":
        return f"{col}->{ctx.text(values)}"
    if method == "jsonb_get_text":
        return f"{col}->>{ctx.text(values)}"

    if method.startswith("jsonb_extract_"):
        path = ctx.path(values["path"])
        if method == "jsonb_extract_equal":
            return f"{col}#>>{path} = {ctx.value(values['value'])}"
        if method == "jsonb_extract_not_equal":
            return f"{col}#>>{path} != {ctx.value(values['value'])}"
        if method in _EXTRACT_COMPARE:
            return f"({col}#>>{path})::numeric {_EXTRACT_COMPARE[method]} {ctx.value(values['value'])}"
        if method == "jsonb_extract_between":
            return (
                f"({col}#>>{path})::numeric BETWEEN {ctx.value(values['min'])} "
                f"AND {ctx.value(values['max'])}"
            )
        if method == "jsonb_extract_in":
            return f"{col}#>>{path} IN ({ctx.values(values['values'])})"
        if method == "jsonb_extract_not_in":
            return f"{col}#>>{path} NOT IN ({ctx.values(values['values'])})"
        if method == "jsonb_extract_like":
            return f"{col}#>>{path} LIKE {ctx.text(values['pattern'])}"
        if method == "jsonb_extract_ilike":
            return f"{col}#>>{path} ILIKE {ctx.text(values['pattern'])}"
        if method == "jsonb_extract_is_null":
            if values["is_null"]:
                return f"({col}#>{path} IS NULL OR {col}#>{path} = 'null'::jsonb)"
            return f"({col}#>{path} IS NOT NULL AND {col}#>{path} <> 'null'::jsonb)"

    if method.startswith("jsonb_array_"):
        return _build_array_sql(method, col, values, ctx)

    raise InvalidArgumentError(f"Unknown JSONB condition {method!r}")


def _build_array_sql(method: str, col: str, values: Any, ctx: RenderContext) -> str:
    length = f"jsonb_array_length(COALESCE({col}, '[]'::jsonb))"
    if method == "jsonb_array_length":
        return f"{length} {values['operator']} {ctx.number(values['value'])}"
    if method == "jsonb_array_empty":
        return f"{length} = 0" if values else f"{length} > 0"
    if method == "jsonb_array_contains_element":
        return f"{col} @> {ctx.json([values])}"
    if method == "jsonb_array_contains_all":
        return f"{col} @> {ctx.json(values)}"
    if method == "jsonb_array_contains_any":
        return "(" + " OR ".join(f"{col} @> {ctx.json([element])}" for element in values) + ")"
    if method == "jsonb_array_any":
        return f"EXISTS (SELECT 1 FROM {_array_elements(col)} WHERE {_element_predicate(ctx, values)})"
    if method == "jsonb_array_all":
        return (
            f"NOT EXISTS (SELECT 1 FROM {_array_elements(col)} "
            f"WHERE NOT ({_element_predicate(ctx, values)}))"
        )
    if method == "jsonb_array_any_in":
        key = ctx.text(values["key"])
        return f"EXISTS (SELECT 1 FROM {_array_elements(col)} WHERE elem->>{key} IN ({ctx.values(values['values'])}))"
    if method == "jsonb_array_any_like":
        key = ctx.text(values["key"])
        return f"EXISTS (SELECT 1 FROM {_array_elements(col)} WHERE elem->>{key} LIKE {ctx.text(values['pattern'])})"
    if method == "jsonb_array_any_ilike":
        key = ctx.text(values["key"])
        return f"EXISTS (SELECT 1 FROM {_array_elements(col)} WHERE elem->>{key} ILIKE {ctx.text(values['pattern'])})"
    raise InvalidArgumentError(f"Unknown JSONB array condition {method!r}")
