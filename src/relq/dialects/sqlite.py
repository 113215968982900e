"""
SQLite and Turso (libSQL) dialect implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, Mapping, Optional

from ..errors import InvalidArgumentError
from ..formatting import SQLITE_FORMATTER, SqlFormatter
from .base import BaseDialect, Dialect, DialectCapabilities

if TYPE_CHECKING:  # pragma: no cover
    from ..columns.config import ColumnConfig

_AFFINITY: Final[Mapping[str, str]] = {
    "smallint": "INTEGER",
    "integer": "INTEGER",
    "bigint": "INTEGER",
    "serial": "INTEGER",
    "smallserial": "INTEGER",
    "bigserial": "INTEGER",
    "boolean": "INTEGER",
    "real": "REAL",
    "double": "REAL",
    "decimal": "NUMERIC",
    "numeric": "NUMERIC",
    "money": "NUMERIC",
    "bytea": "BLOB",
}


class SQLiteDialect(BaseDialect):
    """
    SQLite dialect using qmark param style and storage-class affinities.
    """

    name = "sqlite"
    family: Final[str] = "sqlite"
    display_name = "SQLite"
    default_port: Final[Optional[int]] = None
    default_user: Final[Optional[str]] = None
    param_style: Final[str] = "qmark"
    formatter: Final[SqlFormatter] = SQLITE_FORMATTER
    capabilities = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=True,
        supports_partial_indexes=True,
        supports_schema_namespaces=False,
        supports_deferrable=True,
        supports_arrays=False,
        supports_sequences=False,
        supports_identity=False,
        supports_comment_on=False,
    )
    default_function_rewrites: Mapping[str, str] = {
        "gen_random_uuid()": "(lower(hex(randomblob(16))))",
        "uuid_generate_v4()": "(lower(hex(randomblob(16))))",
        "now()": "CURRENT_TIMESTAMP",
        "'{}'::jsonb": "'{}'",
        "'[]'::jsonb": "'[]'",
    }

    def format_table(self, table_name: str) -> str:
        return self.quote_identifier(table_name)

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT -1")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "?"

    def render_type(self, column: "ColumnConfig") -> str:
        if column.is_array:
            return "TEXT"
        return _AFFINITY.get(column.family, "TEXT")

    def render_identity(self, column: "ColumnConfig") -> Optional[str]:
        return None

    def render_collation(self, collation: str) -> str:
        return f"COLLATE {collation}"

    def render_column_definition(self, column: "ColumnConfig", *, inline_primary_key: bool = True) -> str:
        autoincrement = column.autoincrement or column.identity is not None
        if autoincrement and not (column.primary_key and inline_primary_key and column.is_integer):
            raise InvalidArgumentError(
                f"AUTOINCREMENT on {column.column_name!r} requires a single-column INTEGER PRIMARY KEY."
            )
        parts = [self.quote_identifier(column.column_name), self.render_type(column)]
        primary_inline = column.primary_key and inline_primary_key
        if primary_inline:
            parts.append("PRIMARY KEY")
            if autoincrement:
                parts.append("AUTOINCREMENT")
        elif not column.nullable:
            parts.append("NOT NULL")
        if column.unique and not column.primary_key:
            parts.append("UNIQUE")
        if column.collation:
            parts.append(self.render_collation(column.collation))
        if column.has_default and column.generated is None:
            parts.append(f"DEFAULT {self.render_default(column.default)}")
        if column.references is not None:
            parts.append(self.render_references(column.references))
        generated = self.render_generated(column)
        if generated:
            parts.append(generated)
        return " ".join(parts)

    def table_suffix(self, options: Mapping[str, Any]) -> str:
        flags: list[str] = []
        if options.get("strict"):
            flags.append("STRICT")
        if options.get("without_rowid"):
            flags.append("WITHOUT ROWID")
        return ", ".join(flags)


class TursoDialect(SQLiteDialect):
    """
    Turso / libSQL: the SQLite grammar served over the network.
    """

    name = "turso"
    display_name = "Turso"


def get_sqlite_dialect() -> Dialect:
    return SQLiteDialect()
