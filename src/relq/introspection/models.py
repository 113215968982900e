"""
Entities produced by schema introspection.

These are plain records; the compatibility validators consume them as
well, so they carry no database-specific behaviour.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class ColumnReferenceInfo:
    table: str
    column: str
    on_delete: Optional[str] = None
    on_update: Optional[str] = None


@dataclass
class ColumnInfo:
    name: str
    data_type: str
    nullable: bool = True
    default: Optional[str] = None
    is_primary_key: bool = False
    is_unique: bool = False
    is_autoincrement: bool = False
    array_dimensions: int = 0
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    comment: Optional[str] = None
    generated: Optional[str] = None
    collation: Optional[str] = None
    identity: bool = False
    references: Optional[ColumnReferenceInfo] = None

    @property
    def is_array(self) -> bool:
        return self.array_dimensions > 0

    @property
    def full_type(self) -> str:
        return self.data_type + "[]" * self.array_dimensions


@dataclass
class IndexColumnInfo:
    name: Optional[str] = None
    expression: Optional[str] = None
    direction: Optional[str] = None
    nulls: Optional[str] = None
    opclass: Optional[str] = None
    data_type: Optional[str] = None


@dataclass
class IndexInfo:
    name: str
    table: str
    columns: List[IndexColumnInfo] = field(default_factory=list)
    unique: bool = False
    primary: bool = False
    method: Optional[str] = None
    predicate: Optional[str] = None
    include: Tuple[str, ...] = ()
    concurrently: bool = False
    storage_params: Dict[str, Any] = field(default_factory=dict)
    definition: Optional[str] = None

    @property
    def column_names(self) -> List[str]:
        return [col.name or col.expression or "" for col in self.columns]


@dataclass
class ConstraintInfo:
    """
    ``type`` is one of ``PRIMARY KEY``, ``UNIQUE``, ``FOREIGN KEY``,
    ``CHECK`` or ``EXCLUDE``.
    """

    name: Optional[str]
    table: str
    type: str
    columns: List[str] = field(default_factory=list)
    definition: Optional[str] = None
    ref_table: Optional[str] = None
    ref_columns: List[str] = field(default_factory=list)
    on_delete: Optional[str] = None
    on_update: Optional[str] = None
    deferrable: bool = False
    initially_deferred: bool = False
    match_type: Optional[str] = None
    method: Optional[str] = None
    inline: bool = False


@dataclass
class TableInfo:
    name: str
    schema: Optional[str] = None
    columns: List[ColumnInfo] = field(default_factory=list)
    primary_key: List[str] = field(default_factory=list)
    indexes: List[IndexInfo] = field(default_factory=list)
    constraints: List[ConstraintInfo] = field(default_factory=list)
    comment: Optional[str] = None
    kind: str = "table"
    temporary: bool = False
    unlogged: bool = False
    inherits: Tuple[str, ...] = ()
    tablespace: Optional[str] = None
    partition_by: Optional[str] = None
    storage_params: Dict[str, Any] = field(default_factory=dict)
    row_count: Optional[int] = None

    def column(self, name: str) -> Optional[ColumnInfo]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def has_column(self, name: str) -> bool:
        return self.column(name) is not None

    @property
    def foreign_keys(self) -> List[ConstraintInfo]:
        return [c for c in self.constraints if c.type == "FOREIGN KEY"]


@dataclass
class EnumInfo:
    name: str
    values: List[str] = field(default_factory=list)
    schema: Optional[str] = None


@dataclass
class DomainInfo:
    name: str
    base_type: str
    nullable: bool = True
    default: Optional[str] = None
    checks: List[str] = field(default_factory=list)
    collation: Optional[str] = None
    schema: Optional[str] = None


@dataclass
class CompositeTypeInfo:
    name: str
    attributes: List[Tuple[str, str]] = field(default_factory=list)
    schema: Optional[str] = None


@dataclass
class SequenceInfo:
    name: str
    data_type: Optional[str] = None
    start: Optional[int] = None
    increment: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    cache: Optional[int] = None
    cycle: bool = False
    owned_by: Optional[str] = None
    schema: Optional[str] = None


@dataclass
class FunctionInfo:
    """``kind`` is ``function`` or ``procedure``."""

    name: str
    language: str = "sql"
    definition: Optional[str] = None
    return_type: Optional[str] = None
    arguments: Optional[str] = None
    kind: str = "function"
    schema: Optional[str] = None


@dataclass
class TriggerInfo:
    name: str
    table: str
    event: str
    timing: str = "BEFORE"
    function_name: Optional[str] = None
    columns: List[str] = field(default_factory=list)
    for_each: str = "ROW"
    definition: Optional[str] = None


@dataclass
class CollationInfo:
    name: str
    provider: Optional[str] = None
    locale: Optional[str] = None
    deterministic: bool = True


@dataclass
class SchemaBundle:
    """
    A whole introspected (or converted) database schema.
    """

    tables: List[TableInfo] = field(default_factory=list)
    enums: List[EnumInfo] = field(default_factory=list)
    domains: List[DomainInfo] = field(default_factory=list)
    composite_types: List[CompositeTypeInfo] = field(default_factory=list)
    sequences: List[SequenceInfo] = field(default_factory=list)
    collations: List[CollationInfo] = field(default_factory=list)
    functions: List[FunctionInfo] = field(default_factory=list)
    triggers: List[TriggerInfo] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    version: Optional[str] = None

    @property
    def indexes(self) -> List[IndexInfo]:
        return [idx for table in self.tables for idx in table.indexes]

    @property
    def constraints(self) -> List[ConstraintInfo]:
        return [con for table in self.tables for con in table.constraints]

    def table(self, name: str) -> Optional[TableInfo]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]
