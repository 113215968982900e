"""
Column references produced by proxying a table definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Optional

from ..expressions import Expr
from ..formatting import POSTGRES_FORMATTER, SqlFormatter
from ..utils.naming import camel_to_snake

if TYPE_CHECKING:
    from ..schema.table import TableDefinition


@dataclass(frozen=True)
class ColumnRef:
    """
    ``(table, alias, column, sql_column, type_tag)``; renders as
    ``"alias"."sql_column"``. Expression methods (``ref.lower()``,
    ``ref.jsonb_extract_text("k")``) are forwarded to :attr:`expr`.
    """

    table: str
    alias: str
    column: str
    sql_column: str
    type_tag: Optional[str] = None

    def render(self, formatter: Optional[SqlFormatter] = None) -> str:
        fmt = formatter or POSTGRES_FORMATTER
        return f"{fmt.quote_ident(self.alias)}.{fmt.quote_ident(self.sql_column)}"

    def render_unqualified(self, formatter: Optional[SqlFormatter] = None) -> str:
        return (formatter or POSTGRES_FORMATTER).quote_ident(self.sql_column)

    def same_column(self, other: "ColumnRef") -> bool:
        return (self.table, self.alias, self.sql_column) == (other.table, other.alias, other.sql_column)

    @property
    def expr(self) -> Expr:
        return Expr(self.render())

    def __str__(self) -> str:
        return self.render()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.expr, name)


def _type_tag(config: Any) -> Optional[str]:
    family = getattr(config, "family", None)
    if family is None:
        return None
    if getattr(config, "array_dimensions", 0):
        return f"{family}[]"
    return family


class TableProxy:
    """
    Attribute access yields :class:`ColumnRef` values. Names defined on the
    table map to their SQL column; unknown names fall back to snake case.
    """

    def __init__(self, table: "TableDefinition | str", alias: Optional[str] = None) -> None:
        if isinstance(table, str):
            self._definition = None
            self._table = table
        else:
            self._definition = table
            self._table = table.name
        self._alias = alias or self._table

    @property
    def table_name(self) -> str:
        return self._table

    @property
    def alias(self) -> str:
        return self._alias

    def ref(self, name: str) -> ColumnRef:
        config = None
        if self._definition is not None and self._definition.has_column(name):
            config = self._definition.column(name)
        sql_column = config.column_name if config is not None else camel_to_snake(name)
        return ColumnRef(self._table, self._alias, name, sql_column, _type_tag(config))

    def __getattr__(self, name: str) -> ColumnRef:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.ref(name)

    def __getitem__(self, name: str) -> ColumnRef:
        return self.ref(name)

    def __contains__(self, name: object) -> bool:
        if self._definition is None:
            return isinstance(name, str)
        return isinstance(name, str) and self._definition.has_column(name)

    def __iter__(self) -> Iterator[ColumnRef]:
        if self._definition is None:
            return iter(())
        return (self.ref(name) for name in self._definition.columns)

    def __repr__(self) -> str:
        return f"TableProxy({self._table!r}, alias={self._alias!r})"


def table_ref(table: str, column: str, alias: Optional[str] = None) -> ColumnRef:
    return ColumnRef(table, alias or table, column, camel_to_snake(column))


def left_ref(table: str, column: str, alias: Optional[str] = None) -> ColumnRef:
    """Reference into the outer (parent) side of a join."""
    return table_ref(table, column, alias)


def right_ref(table: str, column: str, alias: Optional[str] = None) -> ColumnRef:
    """Reference into the joined (child) side of a join."""
    return table_ref(table, column, alias)
