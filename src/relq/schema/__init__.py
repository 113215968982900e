"""
Table, index, constraint and user-type definitions with their DDL.
"""

from .constraints import (
    CheckConstraint,
    ExclusionConstraint,
    ForeignKeyConstraint,
    Partition,
    PartitionSpec,
    TableOptions,
    UniqueConstraint,
    check,
    default_partition,
    exclude,
    foreign_key,
    hash_partition,
    list_partition,
    partition_by,
    range_partition,
    unique,
)
from .ddl import AlterStatement, DDLBuilder
from .indexes import INDEX_METHODS, IndexColumn, IndexDefinition, index, index_column, unique_index
from .objects import (
    CompositeType,
    Domain,
    DomainCheck,
    PgEnum,
    Sequence,
    composite_type,
    domain,
    pg_enum,
    sequence,
)
from .table import TableDefinition, column_to_ast, default_index_name, define_table, table_to_ast

__all__ = [
    "AlterStatement",
    "CheckConstraint",
    "CompositeType",
    "DDLBuilder",
    "Domain",
    "DomainCheck",
    "ExclusionConstraint",
    "ForeignKeyConstraint",
    "INDEX_METHODS",
    "IndexColumn",
    "IndexDefinition",
    "Partition",
    "PartitionSpec",
    "PgEnum",
    "Sequence",
    "TableDefinition",
    "TableOptions",
    "UniqueConstraint",
    "check",
    "column_to_ast",
    "composite_type",
    "default_index_name",
    "default_partition",
    "define_table",
    "domain",
    "exclude",
    "foreign_key",
    "hash_partition",
    "index",
    "index_column",
    "list_partition",
    "partition_by",
    "pg_enum",
    "range_partition",
    "sequence",
    "table_to_ast",
    "unique",
    "unique_index",
]
