"""
Column configuration records produced by the column-type builders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

INTEGER_FAMILIES = frozenset({"smallint", "integer", "bigint", "serial", "smallserial", "bigserial"})
SERIAL_FAMILIES = frozenset({"serial", "smallserial", "bigserial"})
REFERENTIAL_ACTIONS = frozenset({"NO ACTION", "RESTRICT", "CASCADE", "SET NULL", "SET DEFAULT"})


class _NoDefault:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False


NO_DEFAULT = _NoDefault()


@dataclass
class ColumnReference:
    table: str
    column: str
    on_delete: Optional[str] = None
    on_update: Optional[str] = None
    deferrable: bool = False
    initially_deferred: bool = False


@dataclass
class ColumnCheck:
    """
    Named column check. Either an IN-list (``values``) or a raw expression.
    """

    name: str
    values: Tuple[Any, ...] = ()
    negate: bool = False
    expression: Optional[str] = None


@dataclass
class IdentityOptions:
    always: bool = True
    start: Optional[int] = None
    increment: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    cache: Optional[int] = None
    cycle: bool = False

    def sequence_options(self) -> list[str]:
        parts: list[str] = []
        if self.start is not None:
            parts.append(f"START WITH {self.start}")
        if self.increment is not None:
            parts.append(f"INCREMENT BY {self.increment}")
        if self.min_value is not None:
            parts.append(f"MINVALUE {self.min_value}")
        if self.max_value is not None:
            parts.append(f"MAXVALUE {self.max_value}")
        if self.cache is not None:
            parts.append(f"CACHE {self.cache}")
        if self.cycle:
            parts.append("CYCLE")
        return parts


@dataclass
class GeneratedExpression:
    expression: str
    stored: bool = True


@dataclass
class ColumnConfig:
    """
    Everything known about one column: type, constraints and metadata.

    ``family`` is the canonical lower-case type family (``varchar``,
    ``timestamp``, ``vector``, ``custom`` ...); ``type_name`` is the SQL
    keyword emitted for it.
    """

    family: str
    type_name: str
    name: Optional[str] = None
    sql_name: Optional[str] = None
    nullable: bool = True
    default: Any = NO_DEFAULT
    primary_key: bool = False
    unique: bool = False
    autoincrement: bool = False
    identity: Optional[IdentityOptions] = None
    references: Optional[ColumnReference] = None
    checks: list[ColumnCheck] = field(default_factory=list)
    generated: Optional[GeneratedExpression] = None
    collation: Optional[str] = None
    comment: Optional[str] = None
    array_dimensions: int = 0
    tracking_id: Optional[str] = None
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    with_timezone: bool = False
    dimensions: Optional[int] = None
    geometry_type: Optional[str] = None
    srid: Optional[int] = None
    enum_values: Optional[Tuple[str, ...]] = None
    interval_fields: Optional[str] = None

    @property
    def column_name(self) -> str:
        name = self.sql_name or self.name
        if not name:
            raise ValueError("Column has no name; attach it to a table first.")
        return name

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    @property
    def is_array(self) -> bool:
        return self.array_dimensions > 0

    @property
    def is_integer(self) -> bool:
        return self.family in INTEGER_FAMILIES

    @property
    def is_serial(self) -> bool:
        return self.family in SERIAL_FAMILIES

    @property
    def sql_type(self) -> str:
        """
        Postgres spelling of the base type, without array suffixes.
        """

        family = self.family
        if family in ("decimal", "numeric"):
            if self.precision is not None and self.scale is not None:
                return f"{self.type_name}({self.precision}, {self.scale})"
            if self.precision is not None:
                return f"{self.type_name}({self.precision})"
            return self.type_name
        if family in ("varchar", "char", "bit", "varbit"):
            if self.length is not None:
                return f"{self.type_name}({self.length})"
            return self.type_name
        if family in ("time", "timestamp"):
            base = self.type_name
            if self.with_timezone:
                base = f"{base}TZ"
            if self.precision is not None:
                return f"{base}({self.precision})"
            return base
        if family == "interval":
            base = self.type_name
            if self.interval_fields:
                base = f"{base} {self.interval_fields}"
            if self.precision is not None:
                return f"{base}({self.precision})"
            return base
        if family in ("vector", "halfvec", "sparsevec"):
            if self.dimensions is not None:
                return f"{self.type_name}({self.dimensions})"
            return self.type_name
        if family in ("geometry", "geography"):
            if self.geometry_type and self.srid is not None:
                return f"{self.type_name}({self.geometry_type}, {self.srid})"
            if self.geometry_type:
                return f"{self.type_name}({self.geometry_type})"
            return self.type_name
        return self.type_name

    @property
    def full_sql_type(self) -> str:
        return self.sql_type + "[]" * self.array_dimensions
