"""
Index definitions attached to tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..columns.defaults import expression_text
from ..errors import InvalidArgumentError

INDEX_METHODS = frozenset({"btree", "hash", "gin", "gist", "spgist", "brin", "hnsw", "ivfflat"})


@dataclass
class IndexColumn:
    """
    One indexed element: a column name or an expression, with ordering.
    """

    name: Optional[str] = None
    expression: Optional[str] = None
    direction: Optional[str] = None
    nulls: Optional[str] = None
    opclass: Optional[str] = None
    collation: Optional[str] = None

    @property
    def is_expression(self) -> bool:
        return self.expression is not None


@dataclass
class IndexDefinition:
    columns: Tuple[IndexColumn, ...]
    name: Optional[str] = None
    unique: bool = False
    method: Optional[str] = None
    where: Optional[str] = None
    include: Tuple[str, ...] = ()
    with_options: Dict[str, Any] = field(default_factory=dict)
    concurrently: bool = False
    if_not_exists: bool = False
    nulls_not_distinct: bool = False
    tablespace: Optional[str] = None
    comment: Optional[str] = None

    def column_names(self) -> Tuple[str, ...]:
        return tuple(col.name or col.expression or "" for col in self.columns)


def index_column(
    name: str,
    *,
    direction: Optional[str] = None,
    nulls: Optional[str] = None,
    opclass: Optional[str] = None,
    collation: Optional[str] = None,
) -> IndexColumn:
    if direction is not None and direction.upper() not in ("ASC", "DESC"):
        raise InvalidArgumentError(f"Index direction must be ASC or DESC, got {direction!r}")
    if nulls is not None and nulls.upper() not in ("FIRST", "LAST"):
        raise InvalidArgumentError(f"Index NULLS ordering must be FIRST or LAST, got {nulls!r}")
    return IndexColumn(
        name=name,
        direction=direction.upper() if direction else None,
        nulls=nulls.upper() if nulls else None,
        opclass=opclass,
        collation=collation,
    )


def _coerce_column(value: Any) -> IndexColumn:
    if isinstance(value, IndexColumn):
        return value
    if isinstance(value, str):
        parts = value.split()
        if len(parts) == 1:
            return IndexColumn(name=value)
        # "created_at DESC NULLS LAST"
        name, rest = parts[0], [p.upper() for p in parts[1:]]
        direction = next((p for p in rest if p in ("ASC", "DESC")), None)
        nulls = rest[rest.index("NULLS") + 1] if "NULLS" in rest[:-1] else None
        return index_column(name, direction=direction, nulls=nulls)
    return IndexColumn(expression=expression_text(value))


def index(
    *columns: Any,
    name: Optional[str] = None,
    unique: bool = False,
    using: Optional[str] = None,
    where: Optional[Any] = None,
    include: Tuple[str, ...] = (),
    with_options: Optional[Dict[str, Any]] = None,
    concurrently: bool = False,
    if_not_exists: bool = False,
    nulls_not_distinct: bool = False,
    tablespace: Optional[str] = None,
    comment: Optional[str] = None,
) -> IndexDefinition:
    """
    Build an index over column names, :class:`IndexColumn` entries or
    expressions. A column string may carry ordering, e.g.
    ``"created_at DESC NULLS LAST"``.
    """

    if not columns:
        raise InvalidArgumentError("An index needs at least one column or expression.")
    method = using.lower() if using else None
    if method is not None and method not in INDEX_METHODS:
        raise InvalidArgumentError(f"Unknown index method {using!r}")
    return IndexDefinition(
        columns=tuple(_coerce_column(col) for col in columns),
        name=name,
        unique=unique,
        method=method,
        where=expression_text(where) if where is not None else None,
        include=tuple(include),
        with_options=dict(with_options or {}),
        concurrently=concurrently,
        if_not_exists=if_not_exists,
        nulls_not_distinct=nulls_not_distinct,
        tablespace=tablespace,
        comment=comment,
    )


def unique_index(*columns: Any, **kwargs: Any) -> IndexDefinition:
    kwargs["unique"] = True
    return index(*columns, **kwargs)
