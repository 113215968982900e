"""
Render predicate nodes to SQL.

Family nodes are routed by method prefix; everything else is a core
comparison or a combinator.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Tuple

from ..dialects import Dialect, get_dialect
from ..errors import InvalidArgumentError
from ..formatting import Raw
from .arrays import build_array_sql
from .base import Condition, RenderContext
from .fulltext import build_fulltext_sql
from .geometric import build_geometric_sql
from .jsonb import build_jsonb_sql
from .network import build_network_sql
from .postgis import build_postgis_sql
from .ranges import build_range_sql

Renderer = Callable[[Condition, RenderContext], str]

FAMILY_RENDERERS: Tuple[Tuple[str, Renderer], ...] = (
    ("jsonb_", build_jsonb_sql),
    ("array_", build_array_sql),
    ("fulltext_", build_fulltext_sql),
    ("range_", build_range_sql),
    ("geometric_", build_geometric_sql),
    ("network_", build_network_sql),
    ("postgis_", build_postgis_sql),
)

_COMPARISONS = {
    "equal": "=",
    "not_equal": "!=",
    "less_than": "<",
    "less_than_equal": "<=",
    "greater_than": ">",
    "greater_than_equal": ">=",
}

_POSTGRES_REGEX = {
    "regex": "~",
    "iregex": "~*",
    "not_regex": "!~",
    "not_iregex": "!~*",
}


def _context(dialect: Optional[str | Dialect]) -> RenderContext:
    return RenderContext(get_dialect(dialect or "postgres"))


def build_condition_sql(condition: Condition, dialect: Optional[str | Dialect] = None) -> str:
    return render_condition(condition, _context(dialect))


def build_conditions_sql(conditions: Iterable[Condition], dialect: Optional[str | Dialect] = None) -> str:
    """
    Render in insertion order joined with ``AND``.
    """

    return render_conditions(conditions, _context(dialect), " AND ")


def render_conditions(conditions: Iterable[Condition], ctx: RenderContext, separator: str) -> str:
    parts = [render_condition(condition, ctx) for condition in conditions]
    return separator.join(part for part in parts if part)


def render_condition(condition: Condition, ctx: RenderContext) -> str:
    for prefix, renderer in FAMILY_RENDERERS:
        if condition.method.startswith(prefix):
            return renderer(condition, ctx)
    return _build_core_sql(condition, ctx)


def _subquery(value: Any) -> str:
    if isinstance(value, Raw):
        return value.sql
    if isinstance(value, str):
        return value
    to_sql = getattr(value, "to_sql", None)
    if callable(to_sql):
        return to_sql()
    raise InvalidArgumentError(f"Cannot use {value!r} as a subquery")


def _in_list(col: str, values: Any, ctx: RenderContext, negated: bool) -> str:
    keyword = "NOT IN" if negated else "IN"
    if isinstance(values, Raw):
        return f"{col} {keyword} ({values.sql})"
    items = list(values)
    if not items:
        # An empty list matches nothing (or everything when negated).
        return "1 = 1" if negated else "1 = 0"
    return f"{col} {keyword} ({ctx.values(items)})"


def _build_core_sql(condition: Condition, ctx: RenderContext) -> str:
    method, values = condition.method, condition.values

    if method in ("or", "and", "not"):
        if not values:
            return ""
        if method == "not":
            return f"NOT ({render_conditions(values, ctx, ' AND ')})"
        return f"({render_conditions(values, ctx, f' {method.upper()} ')})"
    if method == "raw":
        return values
    if method == "exists":
        return f"EXISTS ({_subquery(values)})"
    if method == "not_exists":
        return f"NOT EXISTS ({_subquery(values)})"
    if method == "overlaps":
        ctx.require_postgres("OVERLAPS")
        start_col, start_value = values["start"]
        end_col, end_value = values["end"]
        return (
            f"({ctx.column(start_col)}, {ctx.column(end_col)}) OVERLAPS "
            f"({ctx.value(start_value)}, {ctx.value(end_value)})"
        )

    col = ctx.column(condition.column)

    if method in _COMPARISONS:
        if method in ("equal", "not_equal"):
            if values is None:
                return f"{col} IS NULL" if method == "equal" else f"{col} IS NOT NULL"
            if isinstance(values, (list, tuple, set, frozenset)):
                return _in_list(col, values, ctx, negated=method == "not_equal")
        return f"{col} {_COMPARISONS[method]} {ctx.value(values)}"
    if method == "in":
        return _in_list(col, values, ctx, negated=False)
    if method == "not_in":
        return _in_list(col, values, ctx, negated=True)
    if method == "is_null":
        return f"{col} IS NULL"
    if method == "is_not_null":
        return f"{col} IS NOT NULL"
    if method == "is_true":
        return f"{col} IS TRUE"
    if method == "is_false":
        return f"{col} IS FALSE"
    if method in ("between", "not_between"):
        keyword = "NOT BETWEEN" if method == "not_between" else "BETWEEN"
        low, high = values
        return f"{col} {keyword} {ctx.value(low)} AND {ctx.value(high)}"
    if method in ("like", "not_like"):
        keyword = "NOT LIKE" if method == "not_like" else "LIKE"
        return f"{col} {keyword} {ctx.value(values)}"
    if method in ("ilike", "not_ilike"):
        negated = method == "not_ilike"
        if ctx.is_postgres:
            return f"{col} {'NOT ILIKE' if negated else 'ILIKE'} {ctx.value(values)}"
        return f"LOWER({col}) {'NOT LIKE' if negated else 'LIKE'} LOWER({ctx.value(values)})"
    if method in _POSTGRES_REGEX:
        return _regex(method, col, ctx.value(values), ctx)
    if method in ("similar_to", "not_similar_to"):
        ctx.require_postgres("SIMILAR TO")
        keyword = "NOT SIMILAR TO" if method == "not_similar_to" else "SIMILAR TO"
        return f"{col} {keyword} {ctx.value(values)}"
    if method in ("distinct_from", "not_distinct_from"):
        return _distinct(method == "distinct_from", col, ctx.value(values), ctx)
    if method in ("search", "not_search"):
        if ctx.family == "mysql":
            fragment = f"MATCH({col}) AGAINST ({ctx.text(values)} IN NATURAL LANGUAGE MODE)"
        else:
            ctx.require_postgres("Text search")
            fragment = f"to_tsvector({col}) @@ plainto_tsquery({ctx.text(values)})"
        return f"NOT ({fragment})" if method == "not_search" else fragment
    raise InvalidArgumentError(f"Unknown condition method {method!r}")


def _regex(method: str, col: str, pattern: str, ctx: RenderContext) -> str:
    if ctx.is_postgres:
        return f"{col} {_POSTGRES_REGEX[method]} {pattern}"
    negated = method.startswith("not_")
    insensitive = method.endswith("iregex")
    if ctx.family == "mysql" and insensitive:
        fragment = f"REGEXP_LIKE({col}, {pattern}, 'i')"
        return f"NOT {fragment}" if negated else fragment
    if insensitive:
        raise InvalidArgumentError(f"Case-insensitive regex is not available on {ctx.dialect.name!r}")
    return f"{col} {'NOT REGEXP' if negated else 'REGEXP'} {pattern}"


def _distinct(distinct: bool, col: str, value: str, ctx: RenderContext) -> str:
    if ctx.family == "mysql":
        return f"NOT ({col} <=> {value})" if distinct else f"{col} <=> {value}"
    if ctx.family == "sqlite":
        return f"{col} IS NOT {value}" if distinct else f"{col} IS {value}"
    return f"{col} IS {'' if distinct else 'NOT '}DISTINCT FROM {value}"
