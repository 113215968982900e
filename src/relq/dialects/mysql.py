"""
MySQL and MariaDB dialect implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, Mapping, Optional

from ..columns.defaults import SqlExpression
from ..formatting import MYSQL_FORMATTER, SqlFormatter
from . import types as type_maps
from .base import BaseDialect, Dialect, DialectCapabilities

if TYPE_CHECKING:  # pragma: no cover
    from ..columns.config import ColumnConfig

MYSQL_TABLE_SUFFIX: Final[str] = "ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci"
_BARE_DEFAULT_KEYWORDS: Final = frozenset({"CURRENT_TIMESTAMP", "CURRENT_DATE", "CURRENT_TIME", "NULL"})

_FAMILY_TYPES: Final[Mapping[str, str]] = {
    "smallint": "SMALLINT",
    "integer": "INT",
    "bigint": "BIGINT",
    "serial": "INT",
    "smallserial": "SMALLINT",
    "bigserial": "BIGINT",
    "real": "FLOAT",
    "double": "DOUBLE",
    "money": "DECIMAL(19, 4)",
    "text": "TEXT",
    "bytea": "BLOB",
    "date": "DATE",
    "interval": "VARCHAR(64)",
    "boolean": "TINYINT(1)",
    "uuid": "CHAR(36)",
    "json": "JSON",
    "jsonb": "JSON",
    "xml": "LONGTEXT",
    "inet": "VARCHAR(45)",
    "cidr": "VARCHAR(45)",
    "macaddr": "VARCHAR(17)",
    "macaddr8": "VARCHAR(23)",
    "tsvector": "TEXT",
    "tsquery": "TEXT",
    "range": "VARCHAR(255)",
    "multirange": "TEXT",
    "oid": "BIGINT UNSIGNED",
    "pg_lsn": "VARCHAR(32)",
    "vector": "JSON",
    "halfvec": "JSON",
    "sparsevec": "JSON",
    "point": "POINT",
    "line": "LINESTRING",
    "lseg": "LINESTRING",
    "path": "LINESTRING",
    "box": "POLYGON",
    "polygon": "POLYGON",
    "circle": "GEOMETRY",
    "box2d": "POLYGON",
    "box3d": "GEOMETRY",
}


class MySQLDialect(BaseDialect):
    """
    MySQL 8 dialect: backtick identifiers and ``?`` placeholders.
    """

    name = "mysql"
    family: Final[str] = "mysql"
    display_name = "MySQL"
    default_port: Final[int] = 3306
    default_user: Final[str] = "root"
    param_style: Final[str] = "qmark"
    formatter: Final[SqlFormatter] = MYSQL_FORMATTER
    capabilities = DialectCapabilities(
        supports_returning=False,
        supports_savepoints=True,
        supports_partial_indexes=False,
        supports_schema_namespaces=True,
        supports_deferrable=False,
        supports_arrays=False,
        supports_sequences=False,
        supports_identity=False,
        supports_index_if_not_exists=False,
        supports_comment_on=False,
        supports_transactional_ddl=False,
        inline_references=False,
    )
    default_function_rewrites: Mapping[str, str] = {
        "gen_random_uuid()": "(UUID())",
        "uuid_generate_v4()": "(UUID())",
        "now()": "CURRENT_TIMESTAMP",
        "'{}'::jsonb": "(JSON_OBJECT())",
        "'[]'::jsonb": "(JSON_ARRAY())",
    }

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT 18446744073709551615")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "?"

    def render_type(self, column: "ColumnConfig") -> str:
        if column.is_array:
            return "JSON"
        family = column.family
        if family in ("varchar", "char"):
            return f"{column.type_name}({column.length or 255})"
        if family in ("bit", "varbit"):
            return f"BIT({column.length or 1})"
        if family in ("decimal", "numeric"):
            return column.sql_type.replace("NUMERIC", "DECIMAL")
        if family == "timestamp":
            base = "TIMESTAMP" if column.with_timezone else "DATETIME"
            return f"{base}({column.precision})" if column.precision is not None else base
        if family == "time":
            return f"TIME({column.precision})" if column.precision is not None else "TIME"
        if family in ("geometry", "geography"):
            subtype = (column.geometry_type or "GEOMETRY").upper()
            if column.srid is not None:
                return f"{subtype} SRID {column.srid}"
            return subtype
        if family == "custom" and column.enum_values:
            return f"ENUM({self.formatter.literal_list(column.enum_values)})"
        if family in _FAMILY_TYPES:
            return _FAMILY_TYPES[family]
        self.logger.debug("No MySQL mapping for %s; emitting it verbatim", column.sql_type)
        return column.sql_type

    def render_default(self, value: Any) -> str:
        if isinstance(value, SqlExpression):
            rewritten = self.default_function_rewrites.get(value.sql.strip().lower())
            if rewritten is not None:
                return rewritten
            if value.sql.strip().upper() in _BARE_DEFAULT_KEYWORDS:
                return value.sql.strip()
            return f"({value.sql})"
        return self.literal(value)

    def render_identity(self, column: "ColumnConfig") -> Optional[str]:
        return None

    def render_collation(self, collation: str) -> str:
        return f"COLLATE {collation}"

    def render_column_definition(self, column: "ColumnConfig", *, inline_primary_key: bool = True) -> str:
        parts = [self.quote_identifier(column.column_name), self.render_type(column)]
        if column.collation:
            parts.append(self.render_collation(column.collation))
        auto_increment = column.autoincrement or column.identity is not None or column.is_serial
        if not column.nullable or auto_increment or column.primary_key:
            parts.append("NOT NULL")
        if auto_increment:
            parts.append("AUTO_INCREMENT")
        if column.primary_key and inline_primary_key:
            parts.append("PRIMARY KEY")
        if column.unique and not column.primary_key:
            parts.append("UNIQUE")
        if column.has_default and column.generated is None and not auto_increment:
            parts.append(f"DEFAULT {self.render_default(column.default)}")
        generated = self.render_generated(column)
        if generated:
            parts.append(generated)
        if column.comment:
            parts.append(f"COMMENT {self.escape_string(column.comment)}")
        return " ".join(parts)

    def table_suffix(self, options: Mapping[str, Any]) -> str:
        suffix = MYSQL_TABLE_SUFFIX
        if options.get("comment"):
            suffix = f"{suffix} COMMENT={self.escape_string(options['comment'])}"
        return suffix

    def map_type_to_friendly(self, internal_type: str) -> str:
        lower = internal_type.lower()
        if lower in type_maps.MYSQL_INTERNAL_TO_FRIENDLY:
            return type_maps.MYSQL_INTERNAL_TO_FRIENDLY[lower]
        return type_maps.map_type_to_friendly(internal_type)

    def map_type_to_internal(self, friendly_type: str) -> str:
        return type_maps.MYSQL_FRIENDLY_TO_INTERNAL.get(friendly_type.lower(), friendly_type)

    def get_python_type(self, sql_type: str) -> str:
        if sql_type.lower() == "tinyint(1)":
            return "bool"
        return type_maps.get_python_type(self.map_type_to_friendly(sql_type))


class MariaDBDialect(MySQLDialect):
    """
    MariaDB 10.5+: MySQL emission plus ``CREATE INDEX IF NOT EXISTS``.
    """

    name = "mariadb"
    display_name = "MariaDB"
    capabilities = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=True,
        supports_partial_indexes=False,
        supports_schema_namespaces=True,
        supports_deferrable=False,
        supports_arrays=False,
        supports_sequences=True,
        supports_identity=False,
        supports_index_if_not_exists=True,
        supports_comment_on=False,
        supports_transactional_ddl=False,
        inline_references=False,
    )
    default_function_rewrites = {
        "gen_random_uuid()": "UUID()",
        "uuid_generate_v4()": "UUID()",
        "now()": "CURRENT_TIMESTAMP",
        "'{}'::jsonb": "'{}'",
        "'[]'::jsonb": "'[]'",
    }


def get_mysql_dialect() -> Dialect:
    return MySQLDialect()
