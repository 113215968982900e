"""
Full-text search predicates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext

if TYPE_CHECKING:
    from .collector import ConditionCollector

QUERY_FUNCTIONS = {
    "plain": "plainto_tsquery",
    "phrase": "phraseto_tsquery",
    "websearch": "websearch_to_tsquery",
    "raw": "to_tsquery",
}


def is_tsvector_column(column: Any) -> bool:
    """
    Columns typed ``tsvector``, or named ``*_vector`` / ``*_tsvector``, are
    matched directly instead of through ``to_tsvector``.
    """

    if getattr(column, "type_tag", None) == "tsvector":
        return True
    name = getattr(column, "sql_column", column)
    return isinstance(name, str) and name.endswith(("_vector", "_tsvector"))


class FulltextConditionCollector:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def search(self, column: Any, query: str, config: str = "english", mode: str = "plain") -> "ConditionCollector":
        if mode not in QUERY_FUNCTIONS:
            raise InvalidArgumentError(f"Unknown text search mode {mode!r}")
        return self.parent.add(
            Condition("fulltext_search", column, {"query": query, "config": config, "mode": mode})
        )

    match = search

    def rank(
        self,
        column: Any,
        query: str,
        min_rank: float = 0,
        config: str = "english",
        mode: str = "plain",
    ) -> "ConditionCollector":
        if mode not in QUERY_FUNCTIONS:
            raise InvalidArgumentError(f"Unknown text search mode {mode!r}")
        return self.parent.add(
            Condition(
                "fulltext_rank",
                column,
                {"query": query, "config": config, "mode": mode, "min_rank": min_rank},
            )
        )


def build_fulltext_sql(condition: Condition, ctx: RenderContext) -> str:
    values = condition.values
    if ctx.family == "mysql" and condition.method == "fulltext_search":
        return f"MATCH({ctx.column(condition.column)}) AGAINST ({ctx.text(values['query'])} IN NATURAL LANGUAGE MODE)"
    ctx.require_postgres("Full-text")

    config = ctx.text(values["config"])
    query = f"{QUERY_FUNCTIONS[values['mode']]}({config}, {ctx.text(values['query'])})"
    col = ctx.column(condition.column)
    vector = col if is_tsvector_column(condition.column) else f"to_tsvector({config}, {col})"

    if condition.method == "fulltext_search":
        return f"{vector} @@ {query}"
    if condition.method == "fulltext_rank":
        return f"ts_rank({vector}, {query}) > {ctx.number(values['min_rank'])}"
    raise InvalidArgumentError(f"Unknown full-text condition {condition.method!r}")
