"""
Table definitions assembled from column builders.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..columns.builder import ColumnBuilder, ensure_config
from ..columns.config import ColumnConfig
from ..columns.defaults import SqlExpression
from ..errors import InvalidArgumentError
from ..utils import get_logger
from .constraints import (
    CheckConstraint,
    ExclusionConstraint,
    ForeignKeyConstraint,
    Partition,
    PartitionSpec,
    TableOptions,
    UniqueConstraint,
    check as make_check,
    unique as make_unique,
)
from .ddl import DDLBuilder
from .indexes import IndexColumn, IndexDefinition

if TYPE_CHECKING:  # pragma: no cover
    from ..dialects.base import Dialect
    from ..joins.proxy import TableProxy

logger = get_logger("schema.table")


class TableDefinition:
    """
    A table: ordered columns keyed by logical name plus constraints,
    indexes and storage options. Column references inside constraints and
    indexes may use either logical or SQL names; they are stored as SQL
    names.
    """

    def __init__(
        self,
        name: str,
        columns: Mapping[str, ColumnBuilder | ColumnConfig],
        *,
        primary_key: Optional[Sequence[str]] = None,
        unique_constraints: Iterable[UniqueConstraint] = (),
        check_constraints: Iterable[CheckConstraint] = (),
        foreign_keys: Iterable[ForeignKeyConstraint] = (),
        exclusions: Iterable[ExclusionConstraint] = (),
        indexes: Iterable[IndexDefinition] = (),
        partition_by: Optional[PartitionSpec] = None,
        partitions: Iterable[Partition] = (),
        options: Optional[TableOptions] = None,
    ) -> None:
        if not name:
            raise InvalidArgumentError("Table name must be a non-empty string.")
        self.name = name
        self.options = options or TableOptions()
        self.columns: Dict[str, ColumnConfig] = {}
        for key, column in columns.items():
            config = ensure_config(column)
            config = replace(config, name=key, checks=list(config.checks))
            self.columns[key] = config
        if not self.columns:
            raise InvalidArgumentError(f"Table {name!r} must define at least one column.")

        seen: Dict[str, str] = {}
        for key, config in self.columns.items():
            sql_name = config.column_name
            if sql_name in seen:
                raise InvalidArgumentError(
                    f"Table {name!r} maps columns {seen[sql_name]!r} and {key!r} to the same name {sql_name!r}."
                )
            seen[sql_name] = key

        flagged = [config.column_name for config in self.columns.values() if config.primary_key]
        if primary_key:
            self.primary_key: List[str] = [self.sql_column(col) for col in primary_key]
            for col in flagged:
                if col not in self.primary_key:
                    self.primary_key.append(col)
            self.inline_primary_key = False
        else:
            self.primary_key = flagged
            self.inline_primary_key = len(flagged) == 1
        for col in self.primary_key:
            key = self.column_key(col)
            self.columns[key] = replace(self.columns[key], nullable=False)

        self.unique_constraints = [
            UniqueConstraint(tuple(self.sql_column(c) for c in uc.columns), uc.name, uc.nulls_not_distinct)
            for uc in unique_constraints
        ]
        self.check_constraints = list(check_constraints)
        self.foreign_keys = [self._resolve_fk(fk) for fk in foreign_keys]
        self.exclusions = list(exclusions)
        self.indexes = [self._resolve_index(idx) for idx in indexes]
        if partition_by is not None:
            partition_by = PartitionSpec(partition_by.strategy, tuple(self.sql_column(c) for c in partition_by.columns))
        self.partition_by = partition_by
        self.partitions = list(partitions)
        self._validate()

    def __repr__(self) -> str:
        return f"TableDefinition({self.name!r}, columns={list(self.columns)})"

    # Lookup ---------------------------------------------------------------
    @property
    def schema(self) -> Optional[str]:
        return self.options.schema

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name

    @property
    def tracking_id(self) -> Optional[str]:
        return self.options.tracking_id

    def column_key(self, name: str) -> str:
        """Logical key for a logical or SQL column name."""

        if name in self.columns:
            return name
        for key, config in self.columns.items():
            if config.column_name == name:
                return key
        raise InvalidArgumentError(f"Table {self.name!r} has no column {name!r}")

    def column(self, name: str) -> ColumnConfig:
        return self.columns[self.column_key(name)]

    def has_column(self, name: str) -> bool:
        try:
            self.column(name)
        except InvalidArgumentError:
            return False
        return True

    def sql_column(self, name: str) -> str:
        return self.column(name).column_name

    def column_names(self) -> List[str]:
        return [config.column_name for config in self.columns.values()]

    # Resolution / validation ------------------------------------------------
    def _resolve_fk(self, fk: ForeignKeyConstraint) -> ForeignKeyConstraint:
        if len(fk.columns) != len(fk.ref_columns):
            raise InvalidArgumentError(
                f"Foreign key on {self.name!r} has {len(fk.columns)} column(s) but references {len(fk.ref_columns)}."
            )
        return replace(fk, columns=tuple(self.sql_column(c) for c in fk.columns))

    def _resolve_index(self, idx: IndexDefinition) -> IndexDefinition:
        columns: List[IndexColumn] = [
            replace(col, name=self.sql_column(col.name)) if col.name is not None else col for col in idx.columns
        ]
        idx = replace(idx, columns=tuple(columns), include=tuple(self.sql_column(c) for c in idx.include))
        if idx.name is None:
            idx.name = default_index_name(self.name, idx)
        return idx

    def _validate(self) -> None:
        options = self.options
        if options.without_rowid and not self.primary_key:
            raise InvalidArgumentError(f"WITHOUT ROWID table {self.name!r} must declare a PRIMARY KEY.")
        for config in self.columns.values():
            if config.autoincrement and options.without_rowid:
                raise InvalidArgumentError(
                    f"AUTOINCREMENT column {config.column_name!r} is not allowed on WITHOUT ROWID table {self.name!r}."
                )
            if config.generated is not None and config.has_default:
                raise InvalidArgumentError(f"Generated column {config.column_name!r} cannot have a default.")

    # Emission ---------------------------------------------------------------
    def to_sql(self, dialect: "str | Dialect" = "postgres") -> str:
        return "\n\n".join(DDLBuilder(dialect).create_table_statements(self))

    def to_create_index_sql(self, dialect: "str | Dialect" = "postgres") -> List[str]:
        builder = DDLBuilder(dialect)
        return [builder.create_index_sql(self, idx) for idx in self.indexes]

    def to_ast(self) -> Dict[str, Any]:
        return table_to_ast(self)

    def proxy(self, alias: Optional[str] = None) -> "TableProxy":
        from ..joins.proxy import TableProxy

        return TableProxy(self, alias)


def default_index_name(table_name: str, idx: IndexDefinition) -> str:
    parts = []
    for col in idx.columns:
        if col.name:
            parts.append(col.name)
        else:
            parts.append("expr")
    return f"idx_{table_name}_{'_'.join(parts)}"


def define_table(
    name: str,
    columns: Mapping[str, ColumnBuilder | ColumnConfig],
    *,
    primary_key: Optional[Sequence[str]] = None,
    unique_constraints: Iterable[UniqueConstraint | Sequence[str]] = (),
    check_constraints: Iterable[CheckConstraint | str] = (),
    foreign_keys: Iterable[ForeignKeyConstraint] = (),
    exclusions: Iterable[ExclusionConstraint] = (),
    indexes: Iterable[IndexDefinition] = (),
    partition_by: Optional[PartitionSpec] = None,
    partitions: Iterable[Partition] = (),
    dialect: Optional[str] = None,
    dialect_strict: bool = False,
    **options: Any,
) -> TableDefinition:
    """
    Assemble a :class:`TableDefinition`.

    Remaining keyword arguments populate :class:`TableOptions` (``schema``,
    ``if_not_exists``, ``temporary``, ``unlogged``, ``strict``,
    ``without_rowid``, ``comment``, ``inherits``, ``tablespace``,
    ``with_options``, ``tracking_id``).

    When ``dialect`` is given the table is validated against it: problems
    are logged as warnings, or raised when ``dialect_strict`` is set and
    errors were found.
    """

    if "inherits" in options:
        options["inherits"] = tuple(options["inherits"])
    try:
        table_options = TableOptions(**options)
    except TypeError as exc:
        raise InvalidArgumentError(f"Unknown table option for {name!r}: {exc}") from exc
    uniques = [uc if isinstance(uc, UniqueConstraint) else make_unique(*uc) for uc in unique_constraints]
    checks = [cc if isinstance(cc, CheckConstraint) else make_check(cc) for cc in check_constraints]
    table = TableDefinition(
        name,
        columns,
        primary_key=primary_key,
        unique_constraints=uniques,
        check_constraints=checks,
        foreign_keys=foreign_keys,
        exclusions=exclusions,
        indexes=indexes,
        partition_by=partition_by,
        partitions=partitions,
        options=table_options,
    )
    if dialect is not None:
        _validate_for_dialect(table, dialect, dialect_strict)
    return table


def _validate_for_dialect(table: TableDefinition, dialect: str, strict: bool) -> None:
    from ..compat import format_diagnostics, get_validator

    result = get_validator(dialect).validate_table(table)
    if not result.errors and not result.warnings:
        return
    report = format_diagnostics(result, color=False)
    if strict and result.errors:
        raise InvalidArgumentError(f"Table {table.name!r} is not compatible with {dialect}:\n{report}")
    logger.warning("Dialect validation findings for table %r (%s):\n%s", table.name, dialect, report)


# AST ------------------------------------------------------------------------
def _default_to_ast(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, SqlExpression):
        return {"kind": "expression", "sql": value.sql}
    return {"kind": "literal", "value": value}


def column_to_ast(config: ColumnConfig) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "name": config.name,
        "sql_name": config.column_name,
        "type": config.full_sql_type,
        "family": config.family,
        "nullable": config.nullable,
        "primary_key": config.primary_key,
        "unique": config.unique,
        "default": _default_to_ast(config.default) if config.has_default else None,
        "array_dimensions": config.array_dimensions,
        "autoincrement": config.autoincrement,
        "identity": None,
        "references": None,
        "checks": [
            {
                "name": chk.name,
                "values": list(chk.values),
                "negate": chk.negate,
                "expression": chk.expression,
            }
            for chk in config.checks
        ],
        "generated": None,
        "collation": config.collation,
        "comment": config.comment,
        "tracking_id": config.tracking_id,
    }
    if config.identity is not None:
        node["identity"] = {
            "always": config.identity.always,
            "options": config.identity.sequence_options(),
        }
    if config.references is not None:
        ref = config.references
        node["references"] = {
            "table": ref.table,
            "column": ref.column,
            "on_delete": ref.on_delete,
            "on_update": ref.on_update,
            "deferrable": ref.deferrable,
            "initially_deferred": ref.initially_deferred,
        }
    if config.generated is not None:
        node["generated"] = {
            "expression": config.generated.expression,
            "stored": config.generated.stored,
        }
    return node


def table_to_ast(table: TableDefinition) -> Dict[str, Any]:
    options = table.options
    return {
        "name": table.name,
        "schema": options.schema,
        "tracking_id": options.tracking_id,
        "columns": [column_to_ast(config) for config in table.columns.values()],
        "primary_key": list(table.primary_key),
        "unique_constraints": [
            {"name": uc.name, "columns": list(uc.columns), "nulls_not_distinct": uc.nulls_not_distinct}
            for uc in table.unique_constraints
        ],
        "check_constraints": [{"name": cc.name, "expression": cc.expression} for cc in table.check_constraints],
        "foreign_keys": [
            {
                "name": fk.name,
                "columns": list(fk.columns),
                "references": {"table": fk.ref_table, "columns": list(fk.ref_columns)},
                "on_delete": fk.on_delete,
                "on_update": fk.on_update,
                "deferrable": fk.deferrable,
                "initially_deferred": fk.initially_deferred,
            }
            for fk in table.foreign_keys
        ],
        "indexes": [
            {
                "name": idx.name,
                "unique": idx.unique,
                "method": idx.method,
                "columns": [
                    {
                        "name": col.name,
                        "expression": col.expression,
                        "direction": col.direction,
                        "nulls": col.nulls,
                        "opclass": col.opclass,
                    }
                    for col in idx.columns
                ],
                "where": idx.where,
                "include": list(idx.include),
                "comment": idx.comment,
            }
            for idx in table.indexes
        ],
        "partition_by": (
            {"strategy": table.partition_by.strategy, "columns": list(table.partition_by.columns)}
            if table.partition_by
            else None
        ),
        "options": {
            "if_not_exists": options.if_not_exists,
            "temporary": options.temporary,
            "unlogged": options.unlogged,
            "strict": options.strict,
            "without_rowid": options.without_rowid,
            "comment": options.comment,
            "inherits": list(options.inherits),
            "tablespace": options.tablespace,
            "with_options": dict(options.with_options),
        },
    }
