"""
DDL builder converting table definitions and schema objects into
dialect-specific statements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from ..columns.config import NO_DEFAULT, ColumnCheck, ColumnConfig
from ..dialects import get_dialect
from ..dialects.base import Dialect
from ..errors import InvalidArgumentError
from ..utils import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from .constraints import ForeignKeyConstraint
    from .indexes import IndexColumn, IndexDefinition
    from .objects import CompositeType, Domain, PgEnum, Sequence
    from .table import TableDefinition

REBUILD_PREFIX = "_relq_new_"


@dataclass(frozen=True)
class AlterStatement:
    """
    One migration statement. ``type`` is ``CREATE``, ``ALTER`` or ``DROP``.
    """

    sql: str
    type: str
    destructive: bool = False
    affects: Tuple[str, ...] = ()


class DDLBuilder:
    """
    Produces dialect-specific SQL for schema manipulation.
    """

    def __init__(self, dialect: "str | Dialect" = "postgres") -> None:
        self.dialect = get_dialect(dialect)
        self.logger = get_logger("schema.ddl")

    @property
    def is_postgres_family(self) -> bool:
        return self.dialect.family == "postgres"

    # Naming ---------------------------------------------------------------
    def table_name(self, table: "TableDefinition", name: Optional[str] = None) -> str:
        if table.schema and self.dialect.capabilities.supports_schema_namespaces:
            return f"{self.dialect.quote_identifier(table.schema)}.{self.dialect.quote_identifier(name or table.name)}"
        return self.dialect.quote_identifier(name or table.name)

    def _q(self, identifier: str) -> str:
        return self.dialect.quote_identifier(identifier)

    def _column_list(self, columns: Tuple[str, ...] | List[str]) -> str:
        return ", ".join(self._q(col) for col in columns)

    # CREATE TABLE -----------------------------------------------------------
    def create_table_sql(self, table: "TableDefinition", *, name: Optional[str] = None) -> str:
        options = table.options
        prefix = "CREATE "
        if options.temporary:
            prefix += "TEMPORARY "
        if options.unlogged:
            if self.is_postgres_family:
                prefix += "UNLOGGED "
            else:
                self.logger.debug("Ignoring UNLOGGED for %s", self.dialect.name)
        prefix += "TABLE "
        if options.if_not_exists:
            prefix += "IF NOT EXISTS "

        definitions = [
            self.dialect.render_column_definition(config, inline_primary_key=table.inline_primary_key)
            for config in table.columns.values()
        ]
        definitions.extend(self.table_constraints(table))
        body = ",\n  ".join(definitions)
        sql = f"{prefix}{self.table_name(table, name)} (\n  {body}\n)"
        trailer = self._table_trailer(table)
        if trailer:
            sql = f"{sql} {trailer}"
        return sql + ";"

    def _table_trailer(self, table: "TableDefinition") -> str:
        options = table.options
        parts: List[str] = []
        if self.is_postgres_family:
            if options.inherits:
                parts.append(f"INHERITS ({', '.join(self.dialect.format_table(t) for t in options.inherits)})")
            if table.partition_by is not None:
                parts.append(f"PARTITION BY {table.partition_by.strategy} ({self._column_list(table.partition_by.columns)})")
            if options.with_options:
                rendered = ", ".join(f"{key} = {_option_value(value)}" for key, value in options.with_options.items())
                parts.append(f"WITH ({rendered})")
            if options.tablespace:
                parts.append(f"TABLESPACE {self._q(options.tablespace)}")
        else:
            if options.inherits or table.partition_by is not None or options.tablespace:
                self.logger.debug("Dropping Postgres-only table options for %s", self.dialect.name)
        suffix = self.dialect.table_suffix({
            "comment": options.comment,
            "strict": options.strict,
            "without_rowid": options.without_rowid,
        })
        if suffix:
            parts.append(suffix)
        return " ".join(parts)

    def table_constraints(self, table: "TableDefinition") -> List[str]:
        constraints: List[str] = []
        if table.primary_key and not table.inline_primary_key:
            constraints.append(f"PRIMARY KEY ({self._column_list(table.primary_key)})")
        for uc in table.unique_constraints:
            clause = "UNIQUE"
            if uc.nulls_not_distinct and self.is_postgres_family:
                clause += " NULLS NOT DISTINCT"
            clause += f" ({self._column_list(uc.columns)})"
            constraints.append(self._named(uc.name, clause))
        for config in table.columns.values():
            for chk in config.checks:
                constraints.append(self._named(chk.name, f"CHECK ({self.column_check_expression(config, chk)})"))
        for cc in table.check_constraints:
            constraints.append(self._named(cc.name, f"CHECK ({cc.expression})"))
        if self.is_postgres_family:
            for ex in table.exclusions:
                elements = ", ".join(f"{element} WITH {operator}" for element, operator in ex.elements)
                clause = f"EXCLUDE USING {ex.method} ({elements})"
                if ex.where:
                    clause += f" WHERE ({ex.where})"
                constraints.append(self._named(ex.name, clause))
        elif table.exclusions:
            self.logger.debug("Dropping EXCLUDE constraints unsupported by %s", self.dialect.name)
        if not self.dialect.capabilities.inline_references:
            for config in table.columns.values():
                if config.references is not None:
                    constraints.append(
                        f"FOREIGN KEY ({self._q(config.column_name)}) {self.dialect.render_references(config.references)}"
                    )
        for fk in table.foreign_keys:
            constraints.append(self.foreign_key_clause(fk))
        return constraints

    def _named(self, name: Optional[str], clause: str) -> str:
        if name:
            return f"CONSTRAINT {self._q(name)} {clause}"
        return clause

    def column_check_expression(self, config: ColumnConfig, chk: ColumnCheck) -> str:
        if chk.expression is not None:
            return chk.expression
        operator = "NOT IN" if chk.negate else "IN"
        values = self.dialect.formatter.literal_list(chk.values)
        return f"{self._q(config.column_name)} {operator} ({values})"

    def foreign_key_clause(self, fk: "ForeignKeyConstraint") -> str:
        clause = (
            f"FOREIGN KEY ({self._column_list(fk.columns)}) REFERENCES "
            f"{self.dialect.format_table(fk.ref_table)}({self._column_list(fk.ref_columns)})"
        )
        if fk.match:
            if self.is_postgres_family:
                clause += f" MATCH {fk.match}"
            else:
                self.logger.debug("Dropping MATCH %s unsupported by %s", fk.match, self.dialect.name)
        clause += self.dialect.render_referential_tail(
            fk.on_delete,
            fk.on_update,
            deferrable=fk.deferrable,
            initially_deferred=fk.initially_deferred,
        )
        return self._named(fk.name, clause)

    def comment_statements(self, table: "TableDefinition") -> List[str]:
        if not self.dialect.capabilities.supports_comment_on:
            return []
        name = self.table_name(table)
        statements: List[str] = []
        if table.options.comment:
            statements.append(f"COMMENT ON TABLE {name} IS {self.dialect.literal(table.options.comment)};")
        for config in table.columns.values():
            if config.comment:
                statements.append(
                    f"COMMENT ON COLUMN {name}.{self._q(config.column_name)} IS {self.dialect.literal(config.comment)};"
                )
        return statements

    def create_partition_sql(self, table: "TableDefinition") -> List[str]:
        if not table.partitions:
            return []
        if not self.is_postgres_family:
            raise InvalidArgumentError(f"Declarative partitions are not supported on {self.dialect.name}.")
        parent = self.table_name(table)
        statements = []
        for part in table.partitions:
            statements.append(f"CREATE TABLE {self._q(part.name)} PARTITION OF {parent} {part.bound};")
        return statements

    def create_table_statements(self, table: "TableDefinition") -> List[str]:
        statements = [self.create_table_sql(table)]
        statements.extend(self.comment_statements(table))
        statements.extend(self.create_partition_sql(table))
        return statements

    # Indexes ----------------------------------------------------------------
    def _index_element(self, col: "IndexColumn") -> str:
        if col.expression is not None:
            text = f"({col.expression})"
        else:
            text = self._q(col.name or "")
        if col.collation:
            text += f" {self.dialect.render_collation(col.collation)}"
        if col.opclass and self.is_postgres_family:
            text += f" {col.opclass}"
        if col.direction:
            text += f" {col.direction}"
        if col.nulls and self.is_postgres_family:
            text += f" NULLS {col.nulls}"
        return text

    def create_index_sql(self, table: "TableDefinition", idx: "IndexDefinition") -> str:
        parts = ["CREATE"]
        if idx.unique:
            parts.append("UNIQUE")
        parts.append("INDEX")
        if idx.concurrently:
            if self.is_postgres_family:
                parts.append("CONCURRENTLY")
            else:
                self.logger.debug("Ignoring CONCURRENTLY for %s", self.dialect.name)
        if idx.if_not_exists and self.dialect.capabilities.supports_index_if_not_exists:
            parts.append("IF NOT EXISTS")
        parts.append(self._q(idx.name or ""))
        parts.append("ON")
        parts.append(self.table_name(table))
        family = self.dialect.family
        if idx.method and idx.method != "btree" and family == "postgres":
            parts.append(f"USING {idx.method}")
        elements = ", ".join(self._index_element(col) for col in idx.columns)
        parts.append(f"({elements})")
        if idx.method and family == "mysql" and idx.method in ("btree", "hash"):
            parts.append(f"USING {idx.method.upper()}")
        if family == "postgres":
            if idx.include:
                parts.append(f"INCLUDE ({self._column_list(idx.include)})")
            if idx.nulls_not_distinct:
                parts.append("NULLS NOT DISTINCT")
            if idx.with_options:
                rendered = ", ".join(f"{key} = {_option_value(value)}" for key, value in idx.with_options.items())
                parts.append(f"WITH ({rendered})")
            if idx.tablespace:
                parts.append(f"TABLESPACE {self._q(idx.tablespace)}")
        if idx.where:
            if self.dialect.capabilities.supports_partial_indexes:
                parts.append(f"WHERE {idx.where}")
            else:
                self.logger.warning(
                    "Partial index %s: %s does not support WHERE; emitting a full index.",
                    idx.name,
                    self.dialect.name,
                )
        return " ".join(parts) + ";"

    def drop_index_sql(self, name: str, *, table: Optional[str] = None, if_exists: bool = True) -> str:
        if self.dialect.family == "mysql":
            if table is None:
                raise InvalidArgumentError("MySQL DROP INDEX requires the table name.")
            return f"DROP INDEX {self._q(name)} ON {self.dialect.format_table(table)};"
        clause = "DROP INDEX IF EXISTS" if if_exists else "DROP INDEX"
        return f"{clause} {self._q(name)};"

    # DROP / ALTER -----------------------------------------------------------
    def drop_table_sql(self, name: str, *, if_exists: bool = True, cascade: bool = False) -> str:
        table_name = self.dialect.format_table(name)
        self.logger.warning(
            "DROP TABLE generated for %s; confirm destructive migration before applying.",
            table_name,
        )
        parts = ["DROP TABLE"]
        if if_exists:
            parts.append("IF EXISTS")
        parts.append(table_name)
        if cascade:
            if self.is_postgres_family:
                parts.append("CASCADE")
            else:
                self.logger.debug("CASCADE ignored when dropping %s on %s", table_name, self.dialect.name)
        return " ".join(parts) + ";"

    def add_column_sql(self, table: "TableDefinition", config: ColumnConfig) -> str:
        definition = self.dialect.render_column_definition(config, inline_primary_key=True)
        sql = f"ALTER TABLE {self.table_name(table)} ADD COLUMN {definition}"
        if config.references is not None and not self.dialect.capabilities.inline_references:
            sql += f", ADD FOREIGN KEY ({self._q(config.column_name)}) {self.dialect.render_references(config.references)}"
        return sql + ";"

    def drop_column_sql(self, table: "TableDefinition", column_name: str, *, cascade: bool = False) -> str:
        sql = f"ALTER TABLE {self.table_name(table)} DROP COLUMN {self._q(column_name)}"
        if cascade and self.is_postgres_family:
            sql += " CASCADE"
        return sql + ";"

    def default_text(self, config: ColumnConfig) -> Optional[str]:
        if not config.has_default or config.generated is not None:
            return None
        return self.dialect.render_default(config.default)

    def column_differences(self, old: ColumnConfig, new: ColumnConfig) -> Tuple[bool, bool, bool]:
        """
        ``(type_changed, nullability_changed, default_changed)``.
        """

        return (
            self.dialect.render_type(old) != self.dialect.render_type(new),
            old.nullable != new.nullable,
            self.default_text(old) != self.default_text(new),
        )

    def alter_column_statements(self, table: "TableDefinition", old: ColumnConfig, new: ColumnConfig) -> List[AlterStatement]:
        type_changed, null_changed, default_changed = self.column_differences(old, new)
        if not (type_changed or null_changed or default_changed):
            return []
        name = self.table_name(table)
        affects = (table.name,)
        if self.dialect.family == "mysql":
            definition = self.dialect.render_column_definition(new, inline_primary_key=False)
            return [AlterStatement(f"ALTER TABLE {name} MODIFY COLUMN {definition};", "ALTER", type_changed, affects)]
        column = self._q(new.column_name)
        statements: List[AlterStatement] = []
        if type_changed:
            statements.append(
                AlterStatement(
                    f"ALTER TABLE {name} ALTER COLUMN {column} TYPE {self.dialect.render_type(new)};",
                    "ALTER",
                    True,
                    affects,
                )
            )
        if null_changed:
            if new.nullable:
                statements.append(AlterStatement(f"ALTER TABLE {name} ALTER COLUMN {column} DROP NOT NULL;", "ALTER", False, affects))
            else:
                statements.append(AlterStatement(f"ALTER TABLE {name} ALTER COLUMN {column} SET NOT NULL;", "ALTER", True, affects))
        if default_changed:
            default = self.default_text(new)
            if default is not None:
                statements.append(
                    AlterStatement(f"ALTER TABLE {name} ALTER COLUMN {column} SET DEFAULT {default};", "ALTER", False, affects)
                )
            else:
                statements.append(AlterStatement(f"ALTER TABLE {name} ALTER COLUMN {column} DROP DEFAULT;", "ALTER", False, affects))
        return statements

    def rebuild_table_statements(self, from_table: "TableDefinition", to_table: "TableDefinition") -> List[AlterStatement]:
        """
        Recreate ``to_table`` and copy the shared columns across; used where
        column types cannot be altered in place.
        """

        temp_name = f"{REBUILD_PREFIX}{to_table.name}"
        shared = [col for col in to_table.column_names() if from_table.has_column(col)]
        columns = self._column_list(shared)
        target = self.table_name(to_table)
        temp = self.table_name(to_table, temp_name)
        source = self.table_name(from_table)
        self.logger.warning("Rebuilding table %s to apply column changes; existing data is copied.", target)
        affects = (to_table.name,)
        statements = [
            AlterStatement(self.create_table_sql(to_table, name=temp_name), "CREATE", False, (temp_name,)),
            AlterStatement(f"INSERT INTO {temp} ({columns}) SELECT {columns} FROM {source};", "ALTER", False, affects),
            AlterStatement(f"DROP TABLE {source};", "DROP", True, (from_table.name,)),
            AlterStatement(f"ALTER TABLE {temp} RENAME TO {target};", "ALTER", True, affects),
        ]
        # DROP TABLE took the old indexes with it
        statements.extend(
            AlterStatement(self.create_index_sql(to_table, idx), "CREATE", False, affects) for idx in to_table.indexes
        )
        return statements

    def alter_table_statements(self, from_table: "TableDefinition", to_table: "TableDefinition") -> List[AlterStatement]:
        """
        Columns only in ``to_table`` are added, columns only in
        ``from_table`` are dropped (destructive) and shared columns whose
        type, nullability or default differ are modified.
        """

        old_columns = {config.column_name: config for config in from_table.columns.values()}
        new_columns = {config.column_name: config for config in to_table.columns.values()}
        affects = (to_table.name,)

        modified = [
            (old_columns[name], config)
            for name, config in new_columns.items()
            if name in old_columns and any(self.column_differences(old_columns[name], config))
        ]
        if modified and self.dialect.family == "sqlite":
            return self.rebuild_table_statements(from_table, to_table)

        statements: List[AlterStatement] = []
        for name, config in new_columns.items():
            if name not in old_columns:
                statements.append(AlterStatement(self.add_column_sql(to_table, config), "ALTER", False, affects))
        for name in old_columns:
            if name not in new_columns:
                self.logger.warning("DROP COLUMN generated for %s.%s", to_table.name, name)
                statements.append(AlterStatement(self.drop_column_sql(to_table, name), "ALTER", True, affects))
        for old, new in modified:
            statements.extend(self.alter_column_statements(to_table, old, new))
        return statements

    # User types -------------------------------------------------------------
    def _require_postgres(self, what: str) -> None:
        if not self.is_postgres_family:
            raise InvalidArgumentError(f"{what} is not supported on {self.dialect.name}.")

    def create_domain_sql(self, domain: "Domain") -> str:
        self._require_postgres("CREATE DOMAIN")
        parts = [f"CREATE DOMAIN {self._q(domain.name)} AS {domain.base_type}"]
        if domain.collation:
            parts.append(self.dialect.render_collation(domain.collation))
        if domain.default is not NO_DEFAULT:
            parts.append(f"DEFAULT {self.dialect.render_default(domain.default)}")
        if domain.not_null:
            parts.append("NOT NULL")
        for chk in domain.checks:
            parts.append(f"CONSTRAINT {self._q(chk.name)} CHECK ({chk.expression})")
        return " ".join(parts) + ";"

    def create_type_sql(self, composite: "CompositeType") -> str:
        self._require_postgres("CREATE TYPE")
        attributes = ",\n  ".join(f"{self._q(name)} {sql_type}" for name, sql_type in composite.attributes.items())
        return f"CREATE TYPE {self._q(composite.name)} AS (\n  {attributes}\n);"

    def create_enum_sql(self, enum: "PgEnum") -> str:
        self._require_postgres("CREATE TYPE ... AS ENUM")
        return f"CREATE TYPE {self._q(enum.name)} AS ENUM ({self.dialect.formatter.literal_list(enum.values)});"

    def create_sequence_sql(self, seq: "Sequence", *, if_not_exists: bool = False) -> str:
        if not self.dialect.capabilities.supports_sequences:
            raise InvalidArgumentError(f"CREATE SEQUENCE is not supported on {self.dialect.name}.")
        parts = ["CREATE SEQUENCE"]
        if if_not_exists:
            parts.append("IF NOT EXISTS")
        parts.append(self._q(seq.name))
        if seq.data_type and self.is_postgres_family:
            parts.append(f"AS {seq.data_type}")
        if seq.increment is not None:
            parts.append(f"INCREMENT BY {seq.increment}")
        if seq.min_value is not None:
            parts.append(f"MINVALUE {seq.min_value}")
        if seq.max_value is not None:
            parts.append(f"MAXVALUE {seq.max_value}")
        if seq.start is not None:
            parts.append(f"START WITH {seq.start}")
        if seq.cache is not None:
            parts.append(f"CACHE {seq.cache}")
        if seq.cycle:
            parts.append("CYCLE")
        if seq.owned_by and self.is_postgres_family:
            parts.append(f"OWNED BY {self.dialect.formatter.quote_qualified(seq.owned_by)}")
        return " ".join(parts) + ";"


def _option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)
