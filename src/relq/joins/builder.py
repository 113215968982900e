"""
Join predicates and the one-to-many join planner.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..conditions import Condition, ConditionCollector, RenderContext
from ..conditions.render import render_conditions
from ..dialects import Dialect, get_dialect
from ..errors import InvalidArgumentError
from ..formatting import Raw, SqlFormatter
from ..utils.logging import get_logger
from .proxy import ColumnRef, TableProxy

logger = get_logger("joins")

ORDER_DIRECTIONS = ("ASC", "DESC")
NULLS_ORDERING = ("FIRST", "LAST")


@dataclass(frozen=True)
class JoinPredicate:
    left: Any
    operator: str
    right: Any


@dataclass(frozen=True)
class OrderSpec:
    column: Any
    direction: str = "ASC"
    nulls: Optional[str] = None


@dataclass(frozen=True)
class InnerJoin:
    join_type: str
    table: str
    alias: str
    on: str


def format_right_side(value: Any, formatter: SqlFormatter) -> str:
    """
    Right-hand side of a join predicate: column references render as
    qualified columns, sequences as ``ARRAY[...]``, dates in ISO form,
    mappings as JSON text.
    """

    render = getattr(value, "render", None)
    if callable(render):
        return render(formatter)
    if isinstance(value, (list, tuple)):
        return "ARRAY[" + ", ".join(format_right_side(item, formatter) for item in value) + "]"
    if isinstance(value, (datetime, date, time)):
        return formatter.quote_string(value.isoformat())
    if isinstance(value, dict):
        return formatter.quote_string(json.dumps(value, default=str))
    return formatter.literal(value)


def _table_parts(table: Any, alias: Optional[str]) -> Tuple[str, str]:
    if isinstance(table, TableProxy):
        return table.table_name, alias or table.alias
    name = getattr(table, "name", table)
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(f"Cannot join {table!r}")
    return name, alias or name


class JoinConditionBuilder:
    """
    ON-clause builder: column-to-column (or column-to-value) predicates,
    ``USING`` columns and scalar ``where`` conditions, all joined by ``AND``.
    """

    def __init__(self) -> None:
        self.conditions: List[JoinPredicate] = []
        self.using_columns: List[str] = []
        self.raw_conditions: List[str] = []
        self.where_conditions: List[Condition] = []
        self.selected_columns: Optional[List[Any]] = None

    def _predicate(self, left: Any, operator: str, right: Any) -> "JoinConditionBuilder":
        self.conditions.append(JoinPredicate(left, operator, right))
        return self

    def equal(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, "=", right)

    def not_equal(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, "!=", right)

    def greater_than(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, ">", right)

    def greater_than_or_equal(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, ">=", right)

    def less_than(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, "<", right)

    def less_than_or_equal(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, "<=", right)

    def like(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, "LIKE", right)

    def ilike(self, left: Any, right: Any) -> "JoinConditionBuilder":
        return self._predicate(left, "ILIKE", right)

    eq = equal
    ne = not_equal
    gt = greater_than
    gte = greater_than_or_equal
    lt = less_than
    lte = less_than_or_equal

    def using(self, *columns: str) -> "JoinConditionBuilder":
        self.using_columns.extend(columns)
        return self

    def raw(self, sql: str) -> "JoinConditionBuilder":
        self.raw_conditions.append(sql)
        return self

    def where(self, callback: Callable[[ConditionCollector], Any]) -> "JoinConditionBuilder":
        collector = ConditionCollector()
        callback(collector)
        self.where_conditions.extend(collector.conditions)
        return self

    def select(self, *columns: Any) -> "JoinConditionBuilder":
        if len(columns) == 1 and isinstance(columns[0], (list, tuple)):
            columns = tuple(columns[0])
        self.selected_columns = list(columns)
        return self

    # Rendering ------------------------------------------------------------
    @property
    def is_using_join(self) -> bool:
        return bool(self.using_columns) and not self.conditions and not self.raw_conditions

    def to_using_sql(self, dialect: Optional[str | Dialect] = None) -> Optional[str]:
        if not self.is_using_join:
            return None
        ctx = RenderContext(get_dialect(dialect or "postgres"))
        return "USING (" + ", ".join(ctx.formatter.quote_ident(c) for c in self.using_columns) + ")"

    def _where_parts(self, ctx: RenderContext) -> List[str]:
        parts: List[str] = []
        for predicate in self.conditions:
            left = ctx.column(predicate.left)
            operator = predicate.operator
            if operator == "ILIKE" and not ctx.is_postgres:
                parts.append(f"LOWER({left}) LIKE LOWER({format_right_side(predicate.right, ctx.formatter)})")
                continue
            parts.append(f"{left} {operator} {format_right_side(predicate.right, ctx.formatter)}")
        parts.extend(self.raw_conditions)
        where_sql = render_conditions(self.where_conditions, ctx, " AND ")
        if where_sql:
            parts.append(where_sql)
        return parts

    def to_sql(self, dialect: Optional[str | Dialect] = None) -> str:
        """The ON clause body; ``USING`` columns are rendered separately."""
        ctx = RenderContext(get_dialect(dialect or "postgres"))
        return " AND ".join(self._where_parts(ctx))


class JoinManyBuilder(JoinConditionBuilder):
    """
    Right side of a one-to-many join, rendered either as a JSON-aggregating
    scalar subquery (:meth:`to_lateral_sql`) or as a plain subquery for a
    ``LATERAL`` join (:meth:`to_subquery_sql`).
    """

    def __init__(self) -> None:
        super().__init__()
        self.order_specs: List[OrderSpec] = []
        self.limit_value: Optional[int] = None
        self.offset_value: Optional[int] = None
        self.group_by_columns: List[Any] = []
        self.having_conditions: List[Condition] = []
        self.inner_joins: List[InnerJoin] = []

    def select_refs(self, columns: Sequence[Any]) -> "JoinManyBuilder":
        self.selected_columns = list(columns)
        return self

    def order_by(self, column: Any, direction: str = "ASC") -> "JoinManyBuilder":
        return self.order_by_nulls(column, direction, None)

    def order_by_nulls(self, column: Any, direction: str, nulls: Optional[str]) -> "JoinManyBuilder":
        direction = direction.upper()
        if direction not in ORDER_DIRECTIONS:
            raise InvalidArgumentError(f"Order direction must be ASC or DESC, got {direction!r}")
        if nulls is not None:
            nulls = nulls.upper()
            if nulls not in NULLS_ORDERING:
                raise InvalidArgumentError(f"NULLS ordering must be FIRST or LAST, got {nulls!r}")
        self.order_specs.append(OrderSpec(column, direction, nulls))
        return self

    def limit(self, count: int) -> "JoinManyBuilder":
        if count < 0:
            raise InvalidArgumentError("LIMIT must be non-negative")
        self.limit_value = int(count)
        return self

    def offset(self, count: int) -> "JoinManyBuilder":
        if count < 0:
            raise InvalidArgumentError("OFFSET must be non-negative")
        self.offset_value = int(count)
        return self

    def group_by(self, *columns: Any) -> "JoinManyBuilder":
        self.group_by_columns.extend(columns)
        return self

    def having(self, callback: Callable[[ConditionCollector], Any]) -> "JoinManyBuilder":
        collector = ConditionCollector()
        callback(collector)
        self.having_conditions.extend(collector.conditions)
        return self

    def inner_join(
        self,
        table: Any,
        callback: Callable[[JoinConditionBuilder, TableProxy], Any],
        alias: Optional[str] = None,
        *,
        left: bool = False,
    ) -> "JoinManyBuilder":
        """
        Join another table inside the subquery; ``callback`` receives a
        :class:`JoinConditionBuilder` and a proxy for the joined table.
        """

        name, alias = _table_parts(table, alias)
        proxy = table if isinstance(table, TableProxy) else TableProxy(
            table if not isinstance(table, str) else name, alias
        )
        on = JoinConditionBuilder()
        callback(on, proxy)
        on_sql = on.to_sql()
        if not on_sql:
            raise InvalidArgumentError(f"Join to {name!r} has no ON condition")
        self.inner_joins.append(InnerJoin("LEFT JOIN" if left else "JOIN", name, alias, on_sql))
        return self

    def left_inner_join(
        self, table: Any, callback: Callable[[JoinConditionBuilder, TableProxy], Any], alias: Optional[str] = None
    ) -> "JoinManyBuilder":
        return self.inner_join(table, callback, alias, left=True)

    def inner_join_raw(self, table: str, alias: str, on: str, *, left: bool = False) -> "JoinManyBuilder":
        self.inner_joins.append(InnerJoin("LEFT JOIN" if left else "JOIN", table, alias, on))
        return self

    def has_query_modifiers(self) -> bool:
        return bool(
            self.order_specs
            or self.selected_columns
            or self.limit_value is not None
            or self.offset_value is not None
            or self.group_by_columns
            or self.having_conditions
        )

    # Rendering ------------------------------------------------------------
    def _unqualified(self, column: Any, ctx: RenderContext) -> str:
        if isinstance(column, ColumnRef):
            return column.render_unqualified(ctx.formatter)
        if isinstance(column, Raw):
            return column.sql
        return ctx.formatter.quote_qualified(column)

    def _select_sql(self, ctx: RenderContext) -> str:
        if not self.selected_columns:
            return "*"
        return ", ".join(self._unqualified(column, ctx) for column in self.selected_columns)

    def _from_sql(self, table: str, alias: str, ctx: RenderContext) -> str:
        q = ctx.formatter.quote_ident
        sql = q(table) if alias == table else f"{q(table)} AS {q(alias)}"
        for join in self.inner_joins:
            sql += f" {join.join_type} {q(join.table)} AS {q(join.alias)} ON {join.on}"
        return sql

    def _tail_sql(self, ctx: RenderContext, extra_where: Sequence[str] = ()) -> str:
        clauses: List[str] = []
        where = [*extra_where, *self._where_parts(ctx)]
        if where:
            clauses.append("WHERE " + " AND ".join(where))
        if self.group_by_columns:
            clauses.append("GROUP BY " + ", ".join(self._unqualified(c, ctx) for c in self.group_by_columns))
        if self.having_conditions:
            clauses.append("HAVING " + render_conditions(self.having_conditions, ctx, " AND "))
        if self.order_specs:
            orders = []
            for spec in self.order_specs:
                item = f"{self._unqualified(spec.column, ctx)} {spec.direction}"
                if spec.nulls:
                    item += f" NULLS {spec.nulls}"
                orders.append(item)
            clauses.append("ORDER BY " + ", ".join(orders))
        if self.limit_value is not None:
            clauses.append(f"LIMIT {self.limit_value}")
        if self.offset_value is not None:
            clauses.append(f"OFFSET {self.offset_value}")
        return " ".join(clauses)

    def to_subquery_sql(
        self,
        right_table: Any,
        right_alias: Optional[str] = None,
        *,
        dialect: Optional[str | Dialect] = None,
    ) -> str:
        """``SELECT ... FROM right WHERE ... [GROUP BY] [HAVING] [ORDER BY] [LIMIT] [OFFSET]``."""
        ctx = RenderContext(get_dialect(dialect or "postgres"))
        table, alias = _table_parts(right_table, right_alias)
        sql = f"SELECT {self._select_sql(ctx)} FROM {self._from_sql(table, alias, ctx)}"
        tail = self._tail_sql(ctx)
        return f"{sql} {tail}" if tail else sql

    def to_lateral_sql(
        self,
        right_table: Any,
        right_alias: Optional[str] = None,
        *,
        dialect: Optional[str | Dialect] = None,
    ) -> str:
        """
        Scalar subquery aggregating the matching rows into a JSON array;
        no matches yield ``[]``, never ``NULL``.
        """

        ctx = RenderContext(get_dialect(dialect or "postgres"))
        ctx.require_postgres("JSON-aggregating join")
        table, alias = _table_parts(right_table, right_alias)
        inner = self.to_subquery_sql(table, alias, dialect=ctx.dialect)
        return (
            f"(SELECT COALESCE(json_agg(sub.*), '[]'::json) AS {ctx.formatter.quote_ident(alias)} "
            f"FROM ({inner}) sub)"
        )

    def to_through_lateral_sql(
        self,
        junction_table: Any,
        target_table: Any,
        left_alias: str,
        left_to_junction: Tuple[str, str],
        junction_to_target: Tuple[str, str],
        *,
        target_alias: Optional[str] = None,
        junction_alias: Optional[str] = None,
        dialect: Optional[str | Dialect] = None,
    ) -> str:
        """
        Many-to-many through a junction table. ``left_to_junction`` is
        ``(parent_column, junction_column)``; ``junction_to_target`` is
        ``(junction_column, target_column)``.
        """

        ctx = RenderContext(get_dialect(dialect or "postgres"))
        ctx.require_postgres("JSON-aggregating join")
        q = ctx.formatter.quote_ident
        junction, j_alias = _table_parts(junction_table, junction_alias)
        target, t_alias = _table_parts(target_table, target_alias)
        parent_column, junction_parent = left_to_junction
        junction_target, target_column = junction_to_target

        if self.selected_columns:
            select = ", ".join(
                f"{q(t_alias)}.{self._unqualified(column, ctx)}" for column in self.selected_columns
            )
        else:
            select = f"{q(t_alias)}.*"
        from_sql = (
            f"{q(junction)} AS {q(j_alias)} JOIN {q(target)} AS {q(t_alias)} "
            f"ON {q(j_alias)}.{q(junction_target)} = {q(t_alias)}.{q(target_column)}"
        )
        link = f"{q(j_alias)}.{q(junction_parent)} = {q(left_alias)}.{q(parent_column)}"
        inner = f"SELECT {select} FROM {from_sql} {self._tail_sql(ctx, [link])}"
        logger.debug("Planned through join %s -> %s -> %s", left_alias, junction, target)
        return (
            f"(SELECT COALESCE(json_agg(sub.*), '[]'::json) AS {q(t_alias)} "
            f"FROM ({inner}) sub)"
        )


def lateral_join_clause(subquery: str, alias: str, *, left: bool = True, formatter: Optional[SqlFormatter] = None) -> str:
    """
    ``LEFT JOIN LATERAL (subquery) AS "alias" ON TRUE`` for composing a
    :meth:`JoinManyBuilder.to_subquery_sql` result with the parent query.
    """

    join_type = "LEFT JOIN LATERAL" if left else "JOIN LATERAL"
    quoted = (formatter.quote_ident if formatter else RenderContext(get_dialect("postgres")).formatter.quote_ident)(alias)
    return f"{join_type} ({subquery}) AS {quoted} ON TRUE"
