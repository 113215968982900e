"""
Dialect strategy interfaces describing quoting, typing and DDL emission.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol

from ..columns.defaults import SqlExpression
from ..formatting import POSTGRES_FORMATTER, SqlFormatter
from ..utils import get_logger
from . import types as type_maps

if TYPE_CHECKING:  # pragma: no cover
    from ..columns.config import ColumnConfig, ColumnReference


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_returning: bool = False
    supports_savepoints: bool = True
    supports_partial_indexes: bool = False
    supports_schema_namespaces: bool = False
    supports_deferrable: bool = False
    supports_arrays: bool = False
    supports_sequences: bool = False
    supports_identity: bool = False
    supports_index_if_not_exists: bool = True
    supports_comment_on: bool = False
    supports_transactional_ddl: bool = True
    supports_foreign_keys: bool = True
    inline_references: bool = True


class Dialect(Protocol):
    """
    Strategy interface consumed across schema, condition and adapter layers.
    """

    @property
    def name(self) -> str: ...

    @property
    def family(self) -> str: ...

    @property
    def param_style(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    @property
    def formatter(self) -> SqlFormatter: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def limit_clause(self, limit: int | None, offset: int | None) -> str: ...

    def parameter_placeholder(self, position: int | None = None) -> str: ...

    def literal(self, value: Any) -> str: ...

    def render_type(self, column: "ColumnConfig") -> str: ...

    def render_column_definition(self, column: "ColumnConfig", *, inline_primary_key: bool = True) -> str: ...

    def table_suffix(self, options: Mapping[str, Any]) -> str: ...

    def map_type_to_friendly(self, internal_type: str) -> str: ...

    def map_type_to_internal(self, friendly_type: str) -> str: ...

    def get_python_type(self, sql_type: str) -> str: ...


class BaseDialect:
    """
    Default rendering follows the Postgres grammar; concrete dialects
    override identity attributes and whatever their engine spells differently.
    """

    name: str = "postgres"
    family: str = "postgres"
    display_name: str = "PostgreSQL"
    default_port: Optional[int] = 5432
    default_user: Optional[str] = "postgres"
    param_style: str = "numeric"
    formatter: SqlFormatter = POSTGRES_FORMATTER
    capabilities: DialectCapabilities = DialectCapabilities()

    # Function defaults rewritten for engines that spell them differently.
    default_function_rewrites: Mapping[str, str] = {}

    def __init__(self) -> None:
        self.logger = get_logger(f"dialects.{self.name}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @property
    def quote_char(self) -> str:
        return self.formatter.quote_char

    # Identifiers / literals ---------------------------------------------
    def quote_identifier(self, identifier: str) -> str:
        return self.formatter.quote_ident(identifier)

    def format_table(self, table_name: str) -> str:
        if "." in table_name:
            schema, table = table_name.split(".", 1)
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table_name)

    def literal(self, value: Any) -> str:
        return self.formatter.literal(value)

    def escape_string(self, value: str) -> str:
        return self.formatter.quote_string(value)

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return f"${position or 1}"

    # Types ----------------------------------------------------------------
    def render_type(self, column: "ColumnConfig") -> str:
        return column.full_sql_type

    def map_type_to_friendly(self, internal_type: str) -> str:
        return type_maps.map_type_to_friendly(internal_type)

    def map_type_to_internal(self, friendly_type: str) -> str:
        return type_maps.map_type_to_internal(friendly_type)

    def get_python_type(self, sql_type: str) -> str:
        return type_maps.get_python_type(sql_type)

    # Column definitions -----------------------------------------------------
    def render_default(self, value: Any) -> str:
        if isinstance(value, SqlExpression):
            rewritten = self.default_function_rewrites.get(value.sql.strip().lower())
            if rewritten is not None:
                return rewritten
            if value.is_simple:
                return value.sql
            return f"({value.sql})"
        return self.literal(value)

    def render_identity(self, column: "ColumnConfig") -> Optional[str]:
        identity = column.identity
        if identity is None:
            if column.autoincrement:
                return "GENERATED BY DEFAULT AS IDENTITY"
            return None
        clause = "GENERATED ALWAYS AS IDENTITY" if identity.always else "GENERATED BY DEFAULT AS IDENTITY"
        options = identity.sequence_options()
        if options:
            clause = f"{clause} ({' '.join(options)})"
        return clause

    def render_collation(self, collation: str) -> str:
        return f"COLLATE {self.quote_identifier(collation)}"

    def render_references(self, reference: "ColumnReference") -> str:
        target = f"{self.format_table(reference.table)}({self.quote_identifier(reference.column)})"
        return "REFERENCES " + target + self.render_referential_tail(
            reference.on_delete,
            reference.on_update,
            deferrable=reference.deferrable,
            initially_deferred=reference.initially_deferred,
        )

    def render_referential_tail(
        self,
        on_delete: Optional[str],
        on_update: Optional[str],
        *,
        deferrable: bool = False,
        initially_deferred: bool = False,
    ) -> str:
        parts: list[str] = []
        if on_delete and on_delete != "NO ACTION":
            parts.append(f"ON DELETE {on_delete}")
        if on_update and on_update != "NO ACTION":
            parts.append(f"ON UPDATE {on_update}")
        if deferrable or initially_deferred:
            if self.capabilities.supports_deferrable:
                parts.append("DEFERRABLE")
                if initially_deferred:
                    parts.append("INITIALLY DEFERRED")
            else:
                self.logger.debug("Dropping DEFERRABLE clause unsupported by %s", self.name)
        return (" " + " ".join(parts)) if parts else ""

    def render_generated(self, column: "ColumnConfig") -> Optional[str]:
        if column.generated is None:
            return None
        kind = "STORED" if column.generated.stored else "VIRTUAL"
        return f"GENERATED ALWAYS AS ({column.generated.expression}) {kind}"

    def render_column_definition(self, column: "ColumnConfig", *, inline_primary_key: bool = True) -> str:
        parts = [self.quote_identifier(column.column_name), self.render_type(column)]
        identity = self.render_identity(column)
        if identity:
            parts.append(identity)
        if column.collation:
            parts.append(self.render_collation(column.collation))
        primary_inline = column.primary_key and inline_primary_key
        if not column.nullable and not primary_inline:
            parts.append("NOT NULL")
        if primary_inline:
            parts.append("PRIMARY KEY")
        if column.unique and not column.primary_key:
            parts.append("UNIQUE")
        if column.has_default and column.generated is None:
            parts.append(f"DEFAULT {self.render_default(column.default)}")
        if column.references is not None and self.capabilities.inline_references:
            parts.append(self.render_references(column.references))
        generated = self.render_generated(column)
        if generated:
            parts.append(generated)
        return " ".join(parts)

    def table_suffix(self, options: Mapping[str, Any]) -> str:
        return ""


