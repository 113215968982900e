"""
Array predicates. The collector covers whole-array operators; typed element
checks live on ``.string``, ``.numeric``, ``.uuid``, ``.date`` and ``.jsonb``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Optional

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext, like_pattern

if TYPE_CHECKING:
    from .collector import ConditionCollector

ELEMENT_OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">="})
UUID_PATTERN = "^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"


class _ArrayFamily:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def _add(self, method: str, column: Any, values: Any = None) -> "ConditionCollector":
        return self.parent.add(Condition(f"array_{method}", column, values))


class ArrayStringConditionCollector(_ArrayFamily):
    def starts_with(self, column: Any, prefix: str) -> "ConditionCollector":
        return self._add("string_starts_with", column, prefix)

    def ends_with(self, column: Any, suffix: str) -> "ConditionCollector":
        return self._add("string_ends_with", column, suffix)

    def contains(self, column: Any, substring: str) -> "ConditionCollector":
        return self._add("string_contains", column, substring)

    def matches(self, column: Any, pattern: str) -> "ConditionCollector":
        return self._add("string_matches", column, pattern)

    def imatches(self, column: Any, pattern: str) -> "ConditionCollector":
        return self._add("string_imatches", column, pattern)

    def ilike(self, column: Any, pattern: str) -> "ConditionCollector":
        return self._add("string_ilike", column, pattern)

    def all_start_with(self, column: Any, prefix: str) -> "ConditionCollector":
        return self._add("string_all_start_with", column, prefix)

    def all_end_with(self, column: Any, suffix: str) -> "ConditionCollector":
        return self._add("string_all_end_with", column, suffix)

    def all_contain(self, column: Any, substring: str) -> "ConditionCollector":
        return self._add("string_all_contain", column, substring)

    def length_between(self, column: Any, low: int, high: Optional[int] = None) -> "ConditionCollector":
        return self._add("string_length_between", column, {"min": low, "max": high})

    def has_empty(self, column: Any) -> "ConditionCollector":
        return self._add("string_has_empty", column)

    def has_non_empty(self, column: Any) -> "ConditionCollector":
        return self._add("string_has_non_empty", column)

    def has_uppercase(self, column: Any) -> "ConditionCollector":
        return self._add("string_has_uppercase", column)

    def has_lowercase(self, column: Any) -> "ConditionCollector":
        return self._add("string_has_lowercase", column)

    def has_numeric(self, column: Any) -> "ConditionCollector":
        return self._add("string_has_numeric", column)

    def equals(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("string_equals", column, value)

    def iequals(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("string_iequals", column, value)


class ArrayNumericConditionCollector(_ArrayFamily):
    def greater_than(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_greater_than", column, value)

    def greater_than_or_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_greater_than_or_equal", column, value)

    def less_than(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_less_than", column, value)

    def less_than_or_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_less_than_or_equal", column, value)

    def between(self, column: Any, low: Any, high: Any) -> "ConditionCollector":
        return self._add("numeric_between", column, {"min": low, "max": high})

    def all_greater_than(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_all_greater_than", column, value)

    def all_less_than(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_all_less_than", column, value)

    def all_between(self, column: Any, low: Any, high: Any) -> "ConditionCollector":
        return self._add("numeric_all_between", column, {"min": low, "max": high})

    def sum_equals(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_sum_equals", column, target)

    def sum_greater_than(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_sum_greater_than", column, target)

    def sum_less_than(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_sum_less_than", column, target)

    def avg_equals(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_avg_equals", column, target)

    def avg_greater_than(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_avg_greater_than", column, target)

    def avg_less_than(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_avg_less_than", column, target)

    def max_equals(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_max_equals", column, target)

    def min_equals(self, column: Any, target: Any) -> "ConditionCollector":
        return self._add("numeric_min_equals", column, target)

    def equals(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("numeric_equals", column, value)

    def has_even(self, column: Any) -> "ConditionCollector":
        return self._add("numeric_has_even", column)

    def has_odd(self, column: Any) -> "ConditionCollector":
        return self._add("numeric_has_odd", column)

    def has_positive(self, column: Any) -> "ConditionCollector":
        return self._add("numeric_has_positive", column)

    def has_negative(self, column: Any) -> "ConditionCollector":
        return self._add("numeric_has_negative", column)

    def has_zero(self, column: Any) -> "ConditionCollector":
        return self._add("numeric_has_zero", column)


class ArrayUuidConditionCollector(_ArrayFamily):
    def all_valid(self, column: Any) -> "ConditionCollector":
        return self._add("uuid_all_valid", column)

    def has_version(self, column: Any, version: int) -> "ConditionCollector":
        if version not in (1, 2, 3, 4, 5, 6, 7, 8):
            raise InvalidArgumentError(f"Unknown UUID version {version!r}")
        return self._add("uuid_has_version", column, version)

    def equals(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("uuid_equals", column, str(value))


class ArrayDateConditionCollector(_ArrayFamily):
    def before(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("date_before", column, value)

    def after(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("date_after", column, value)

    def between(self, column: Any, start: Any, end: Any) -> "ConditionCollector":
        return self._add("date_between", column, {"start": start, "end": end})

    def within_days(self, column: Any, days: int) -> "ConditionCollector":
        """Positive ``days`` looks ahead from now, negative looks back."""
        return self._add("date_within_days", column, int(days))

    def equals(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("date_equals", column, value)

    def has_today(self, column: Any) -> "ConditionCollector":
        return self._add("date_has_today", column)

    def has_past(self, column: Any) -> "ConditionCollector":
        return self._add("date_has_past", column)

    def has_future(self, column: Any) -> "ConditionCollector":
        return self._add("date_has_future", column)

    def has_this_week(self, column: Any) -> "ConditionCollector":
        return self._add("date_has_this_week", column)

    def has_this_month(self, column: Any) -> "ConditionCollector":
        return self._add("date_has_this_month", column)

    def has_this_year(self, column: Any) -> "ConditionCollector":
        return self._add("date_has_this_year", column)


class ArrayJsonbConditionCollector(_ArrayFamily):
    def has_key(self, column: Any, key: str) -> "ConditionCollector":
        return self._add("jsonb_has_key", column, key)

    def has_path(self, column: Any, path: Any) -> "ConditionCollector":
        return self._add("jsonb_has_path", column, path)

    def contains(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("jsonb_contains", column, value)

    def contained_by(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("jsonb_contained_by", column, value)

    def equals(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("jsonb_equals", column, value)

    def path_equals(self, column: Any, path: Any, value: Any) -> "ConditionCollector":
        return self._add("jsonb_path_equals", column, {"path": path, "value": value})

    def has_object(self, column: Any) -> "ConditionCollector":
        return self._add("jsonb_has_object", column)

    def has_array(self, column: Any) -> "ConditionCollector":
        return self._add("jsonb_has_array", column)


class ArrayConditionCollector(_ArrayFamily):
    def __init__(self, parent: "ConditionCollector") -> None:
        super().__init__(parent)
        self.string = ArrayStringConditionCollector(parent)
        self.numeric = ArrayNumericConditionCollector(parent)
        self.integer = self.numeric
        self.uuid = ArrayUuidConditionCollector(parent)
        self.date = ArrayDateConditionCollector(parent)
        self.timestamp = self.date
        self.jsonb = ArrayJsonbConditionCollector(parent)

    def contains(self, column: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("contains", column, list(values))

    def contained_by(self, column: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("contained_by", column, list(values))

    def overlaps(self, column: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("overlaps", column, list(values))

    def equal(self, column: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("equal", column, list(values))

    def not_equal(self, column: Any, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("not_equal", column, list(values))

    def any(self, column: Any, operator: str, value: Any) -> "ConditionCollector":
        return self._add("any", column, {"operator": _element_operator(operator), "value": value})

    def all(self, column: Any, operator: str, value: Any) -> "ConditionCollector":
        return self._add("all", column, {"operator": _element_operator(operator), "value": value})

    def length(self, column: Any, length: int) -> "ConditionCollector":
        return self._add("length", column, length)

    def slice(self, column: Any, start: int, end: int, values: Iterable[Any]) -> "ConditionCollector":
        return self._add("slice", column, {"start": start, "end": end, "values": list(values)})

    def at_index(self, column: Any, index: int, value: Any) -> "ConditionCollector":
        return self._add("at_index", column, {"index": index, "value": value})

    def contains_pattern(self, column: Any, pattern: str, match: str = "prefix") -> "ConditionCollector":
        like_pattern(pattern, match)
        return self._add("contains_pattern", column, {"pattern": pattern, "match": match})

    def contains_prefix(self, column: Any, prefix: str) -> "ConditionCollector":
        return self.contains_pattern(column, prefix, "prefix")

    def contains_suffix(self, column: Any, suffix: str) -> "ConditionCollector":
        return self.contains_pattern(column, suffix, "suffix")

    def contains_substring(self, column: Any, substring: str) -> "ConditionCollector":
        return self.contains_pattern(column, substring, "contains")

    def has_non_matching(self, column: Any, pattern: str, match: str = "prefix") -> "ConditionCollector":
        like_pattern(pattern, match)
        return self._add("has_non_matching", column, {"pattern": pattern, "match": match})

    def has_non_matching_prefix(self, column: Any, prefix: str) -> "ConditionCollector":
        return self.has_non_matching(column, prefix, "prefix")

    def has_non_matching_suffix(self, column: Any, suffix: str) -> "ConditionCollector":
        return self.has_non_matching(column, suffix, "suffix")

    def all_match(self, column: Any, pattern: str, match: str = "prefix") -> "ConditionCollector":
        like_pattern(pattern, match)
        return self._add("all_match", column, {"pattern": pattern, "match": match})

    def all_match_prefix(self, column: Any, prefix: str) -> "ConditionCollector":
        return self.all_match(column, prefix, "prefix")

    def all_match_suffix(self, column: Any, suffix: str) -> "ConditionCollector":
        return self.all_match(column, suffix, "suffix")

    def all_match_substring(self, column: Any, substring: str) -> "ConditionCollector":
        return self.all_match(column, substring, "contains")


def _element_operator(operator: str) -> str:
    if operator not in ELEMENT_OPERATORS:
        raise InvalidArgumentError(f"Unsupported array element operator {operator!r}")
    return operator


def _unnest(col: str, predicate: str, negate: bool = False) -> str:
    prefix = "NOT EXISTS" if negate else "EXISTS"
    return f"{prefix} (SELECT 1 FROM unnest({col}) AS elem WHERE {predicate})"


def _aggregate(col: str, function: str) -> str:
    return f"(SELECT {function}(elem) FROM unnest({col}) AS elem)"


def _pattern_predicate(ctx: RenderContext, values: Dict[str, Any], *, negated: bool) -> str:
    like = like_pattern(values["pattern"], values["match"])
    if like is None:
        return f"elem {'<>' if negated else '='} {ctx.text(values['pattern'])}"
    return f"elem {'NOT LIKE' if negated else 'LIKE'} {ctx.text(like)}"


def _build_string(method: str, col: str, values: Any, ctx: RenderContext) -> str:
    simple = {
        "string_starts_with": lambda: _unnest(col, f"elem LIKE {ctx.text(f'{values}%')}"),
        "string_ends_with": lambda: _unnest(col, f"elem LIKE {ctx.text(f'%{values}')}"),
        "string_contains": lambda: _unnest(col, f"elem LIKE {ctx.text(f'%{values}%')}"),
        "string_matches": lambda: _unnest(col, f"elem ~ {ctx.text(values)}"),
        "string_imatches": lambda: _unnest(col, f"elem ~* {ctx.text(values)}"),
        "string_ilike": lambda: _unnest(col, f"elem ILIKE {ctx.text(values)}"),
        "string_all_start_with": lambda: _unnest(col, f"elem NOT LIKE {ctx.text(f'{values}%')}", True),
        "string_all_end_with": lambda: _unnest(col, f"elem NOT LIKE {ctx.text(f'%{values}')}", True),
        "string_all_contain": lambda: _unnest(col, f"elem NOT LIKE {ctx.text(f'%{values}%')}", True),
        "string_has_empty": lambda: _unnest(col, "elem = ''"),
        "string_has_non_empty": lambda: _unnest(col, "elem <> ''"),
        "string_has_uppercase": lambda: _unnest(col, "elem ~ '[A-Z]'"),
        "string_has_lowercase": lambda: _unnest(col, "elem ~ '[a-z]'"),
        "string_has_numeric": lambda: _unnest(col, "elem ~ '^[0-9]+$'"),
        "string_equals": lambda: _unnest(col, f"elem = {ctx.text(values)}"),
        "string_iequals": lambda: _unnest(col, f"LOWER(elem) = LOWER({ctx.text(values)})"),
    }
    if method == "string_length_between":
        low = ctx.number(values["min"])
        if values["max"] is None:
            return _unnest(col, f"length(elem) >= {low}")
        return _unnest(col, f"length(elem) BETWEEN {low} AND {ctx.number(values['max'])}")
    return _dispatch(simple, method)


_NUMERIC_ANY = {
    "numeric_greater_than": ">",
    "numeric_greater_than_or_equal": ">=",
    "numeric_less_than": "<",
    "numeric_less_than_or_equal": "<=",
    "numeric_equals": "=",
}

_NUMERIC_AGGREGATE = {
    "numeric_sum_equals": ("SUM", "="),
    "numeric_sum_greater_than": ("SUM", ">"),
    "numeric_sum_less_than": ("SUM", "<"),
    "numeric_avg_equals": ("AVG", "="),
    "numeric_avg_greater_than": ("AVG", ">"),
    "numeric_avg_less_than": ("AVG", "<"),
    "numeric_max_equals": ("MAX", "="),
    "numeric_min_equals": ("MIN", "="),
}

_NUMERIC_FLAGS = {
    "numeric_has_even": "elem % 2 = 0",
    "numeric_has_odd": "elem % 2 <> 0",
    "numeric_has_positive": "elem > 0",
    "numeric_has_negative": "elem < 0",
    "numeric_has_zero": "elem = 0",
}


def _build_numeric(method: str, col: str, values: Any, ctx: RenderContext) -> str:
    if method in _NUMERIC_ANY:
        return _unnest(col, f"elem {_NUMERIC_ANY[method]} {ctx.number(values)}")
    if method in _NUMERIC_AGGREGATE:
        function, operator = _NUMERIC_AGGREGATE[method]
        return f"{_aggregate(col, function)} {operator} {ctx.number(values)}"
    if method in _NUMERIC_FLAGS:
        return _unnest(col, _NUMERIC_FLAGS[method])
    if method == "numeric_between":
        return _unnest(col, f"elem BETWEEN {ctx.number(values['min'])} AND {ctx.number(values['max'])}")
    if method == "numeric_all_greater_than":
        return _unnest(col, f"elem <= {ctx.number(values)}", True)
    if method == "numeric_all_less_than":
        return _unnest(col, f"elem >= {ctx.number(values)}", True)
    if method == "numeric_all_between":
        return _unnest(
            col, f"elem NOT BETWEEN {ctx.number(values['min'])} AND {ctx.number(values['max'])}", True
        )
    raise InvalidArgumentError(f"Unknown array condition 'array_{method}'")


def _build_uuid(method: str, col: str, values: Any, ctx: RenderContext) -> str:
    if method == "uuid_all_valid":
        return _unnest(col, f"elem::text !~ '{UUID_PATTERN}'", True)
    if method == "uuid_has_version":
        return _unnest(col, f"substring(elem::text from 15 for 1) = {ctx.text(values)}")
    if method == "uuid_equals":
        return _unnest(col, f"elem = {ctx.text(values)}::uuid")
    raise InvalidArgumentError(f"Unknown array condition 'array_{method}'")


def _build_date(method: str, col: str, values: Any, ctx: RenderContext) -> str:
    if method == "date_before":
        return _unnest(col, f"elem < {ctx.value(values)}::timestamp")
    if method == "date_after":
        return _unnest(col, f"elem > {ctx.value(values)}::timestamp")
    if method == "date_equals":
        return _unnest(col, f"elem = {ctx.value(values)}::timestamp")
    if method == "date_between":
        return _unnest(
            col,
            f"elem BETWEEN {ctx.value(values['start'])}::timestamp AND {ctx.value(values['end'])}::timestamp",
        )
    if method == "date_within_days":
        if values >= 0:
            return _unnest(col, f"elem BETWEEN NOW() AND NOW() + INTERVAL '{values} days'")
        return _unnest(col, f"elem BETWEEN NOW() - INTERVAL '{abs(values)} days' AND NOW()")
    flags = {
        "date_has_today": "elem::date = CURRENT_DATE",
        "date_has_past": "elem < NOW()",
        "date_has_future": "elem > NOW()",
        "date_has_this_week": "date_trunc('week', elem) = date_trunc('week', NOW())",
        "date_has_this_month": "date_trunc('month', elem) = date_trunc('month', NOW())",
        "date_has_this_year": "date_trunc('year', elem) = date_trunc('year', NOW())",
    }
    if method in flags:
        return _unnest(col, flags[method])
    raise InvalidArgumentError(f"Unknown array condition 'array_{method}'")


def _build_jsonb(method: str, col: str, values: Any, ctx: RenderContext) -> str:
    if method == "jsonb_has_key":
        return _unnest(col, f"elem ? {ctx.text(values)}")
    if method == "jsonb_has_path":
        return _unnest(col, f"elem #> {ctx.path(values)} IS NOT NULL")
    if method == "jsonb_contains":
        return _unnest(col, f"elem @> {ctx.json(values)}::jsonb")
    if method == "jsonb_contained_by":
        return _unnest(col, f"elem <@ {ctx.json(values)}::jsonb")
    if method == "jsonb_equals":
        return _unnest(col, f"elem = {ctx.json(values)}::jsonb")
    if method == "jsonb_path_equals":
        return _unnest(col, f"elem #> {ctx.path(values['path'])} = {ctx.json(values['value'])}::jsonb")
    if method == "jsonb_has_object":
        return _unnest(col, "jsonb_typeof(elem) = 'object'")
    if method == "jsonb_has_array":
        return _unnest(col, "jsonb_typeof(elem) = 'array'")
    raise InvalidArgumentError(f"Unknown array condition 'array_{method}'")


def _dispatch(table: Dict[str, Callable[[], str]], method: str) -> str:
    builder = table.get(method)
    if builder is None:
        raise InvalidArgumentError(f"Unknown array condition 'array_{method}'")
    return builder()


_TYPED_BUILDERS = {
    "string": _build_string,
    "numeric": _build_numeric,
    "uuid": _build_uuid,
    "date": _build_date,
    "jsonb": _build_jsonb,
}


def build_array_sql(condition: Condition, ctx: RenderContext) -> str:
    ctx.require_postgres("Array")
    method = condition.method[len("array_"):]
    values = condition.values
    col = ctx.column(condition.column)

    typed = _TYPED_BUILDERS.get(method.partition("_")[0])
    if typed is not None:
        return typed(method, col, values, ctx)

    if method == "contains":
        return f"{col} @> {ctx.array(values)}"
    if method == "contained_by":
        return f"{col} <@ {ctx.array(values)}"
    if method == "overlaps":
        return f"{col} && {ctx.array(values)}"
    if method == "equal":
        return f"{col} = {ctx.array(values)}"
    if method == "not_equal":
        return f"{col} <> {ctx.array(values)}"
    if method == "any":
        return f"{ctx.value(values['value'])} {values['operator']} ANY({col})"
    if method == "all":
        return f"{ctx.value(values['value'])} {values['operator']} ALL({col})"
    if method == "length":
        return f"array_length({col}, 1) = {ctx.number(values)}"
    if method == "slice":
        start, end = ctx.number(values["start"]), ctx.number(values["end"])
        return f"{col}[{start}:{end}] = {ctx.array(values['values'])}"
    if method == "at_index":
        return f"{col}[{ctx.number(values['index'])}] = {ctx.value(values['value'])}"
    if method == "contains_pattern":
        return _unnest(col, _pattern_predicate(ctx, values, negated=False))
    if method == "has_non_matching":
        return _unnest(col, _pattern_predicate(ctx, values, negated=True))
    if method == "all_match":
        return _unnest(col, _pattern_predicate(ctx, values, negated=True), True)
    raise InvalidArgumentError(f"Unknown array condition {condition.method!r}")
