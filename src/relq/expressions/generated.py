"""
Builder handed to generated-column expressions: columns by attribute plus
every function in :class:`Functions`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Mapping

from .core import Expr, col
from .functions import Functions


class GeneratedExpressionBuilder(Functions):
    """
    ``g.email`` is the quoted ``email`` column (its SQL name when the
    logical name is mapped); ``g.lower(g.email)`` calls ``LOWER``. Use
    ``g.col(name)`` for a column whose name shadows a function.
    """

    def __init__(self, columns: Mapping[str, str]) -> None:
        self._columns: Dict[str, str] = dict(columns)

    def col(self, name: str) -> Expr:  # type: ignore[override]
        return col(self._columns.get(name, name))

    def __getattr__(self, name: str) -> Callable[..., Expr] | Expr:
        columns = self.__dict__.get("_columns", {})
        if name in columns:
            return col(columns[name])
        return super().__getattr__(name)

    def __dir__(self) -> Iterable[str]:
        return sorted({*super().__dir__(), *self._columns})


def generated(columns: Any) -> GeneratedExpressionBuilder:
    """
    Build from a table definition, a ``{name: column}`` mapping of builders
    or configs, or a plain ``{logical: sql_name}`` mapping.
    """

    if hasattr(columns, "columns") and hasattr(columns, "column_names"):
        return GeneratedExpressionBuilder({key: cfg.column_name for key, cfg in columns.columns.items()})
    mapping: Dict[str, str] = {}
    for key, value in dict(columns).items():
        if isinstance(value, str):
            mapping[key] = value
            continue
        config = getattr(value, "config", value)
        mapping[key] = getattr(config, "sql_name", None) or key
    return GeneratedExpressionBuilder(mapping)
