"""
Dialect adapter façade.

An adapter bundles everything one target database needs: identity, DDL
generation (through :class:`~relq.schema.DDLBuilder`), catalog
introspection, compatibility validation and type mapping.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from ..compat import CompatibilityValidator, Diagnostic, ValidationResult, get_validator
from ..config import to_connection_config
from ..dialects import get_dialect
from ..drivers import DatabaseDriver, create_driver
from ..introspection import (
    ColumnInfo,
    IntrospectionOptions,
    ProgressCallback,
    SchemaBundle,
    TableInfo,
    TABLE_STEPS,
    run_with_introspector,
)
from ..schema import AlterStatement, DDLBuilder
from ..utils import get_logger


class DialectAdapter:
    """
    Uniform contract over one dialect. Subclasses set ``dialect`` and
    override what their engine does differently.
    """

    dialect = "postgres"
    migration_metadata_type = "JSONB"

    def __init__(
        self,
        *,
        validator: Optional[CompatibilityValidator] = None,
        driver_factory: Optional[Callable[[str], DatabaseDriver]] = None,
    ) -> None:
        self.sql_dialect = get_dialect(self.dialect)
        self.ddl = DDLBuilder(self.sql_dialect)
        self.validator = validator or get_validator(self.dialect)
        self._driver_factory = driver_factory or create_driver
        self.logger = get_logger(f"adapters.{self.dialect}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self.dialect!r})"

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #
    @property
    def family(self) -> str:
        return self.sql_dialect.family

    @property
    def display_name(self) -> str:
        return self.sql_dialect.display_name

    @property
    def default_port(self) -> Optional[int]:
        return self.sql_dialect.default_port

    @property
    def default_user(self) -> Optional[str]:
        return self.sql_dialect.default_user

    @property
    def quote_char(self) -> str:
        return self.sql_dialect.quote_char

    def param_placeholder(self, position: int = 1) -> str:
        return self.sql_dialect.parameter_placeholder(position)

    def quote_identifier(self, identifier: str) -> str:
        return self.sql_dialect.quote_identifier(identifier)

    def escape_string(self, value: str) -> str:
        return self.sql_dialect.literal(value)

    # ------------------------------------------------------------------ #
    # Capability probes
    # ------------------------------------------------------------------ #
    def _type_findings(self, sql_type: str) -> List[Diagnostic]:
        table = TableInfo(name="_probe")
        column = ColumnInfo(name="_probe", data_type=sql_type)
        table.columns.append(column)
        return [diag for diag in self.validator.check_column(table, column) if diag.severity == "error"]

    def is_type_supported(self, sql_type: str) -> bool:
        return not self._type_findings(sql_type)

    def get_alternative_type(self, sql_type: str) -> Optional[str]:
        for diag in self._type_findings(sql_type):
            if diag.alternative:
                return diag.alternative
        return None

    def get_alternative(self, feature: str) -> Optional[str]:
        key = feature.strip().upper()
        for rule in (*self.validator.type_rules, *self.validator.sql_rules):
            if rule.feature.upper() == key:
                return rule.alternative
        entry = self.validator.catalog.lookup(feature.strip())
        return entry.alternative if entry is not None else None

    # ------------------------------------------------------------------ #
    # DDL
    # ------------------------------------------------------------------ #
    def generate_create_table(self, table: Any) -> str:
        return "\n".join(self.ddl.create_table_statements(table))

    def generate_create_index(self, table: Any, index: Any = None) -> List[str]:
        indexes = [index] if index is not None else list(table.indexes)
        return [self.ddl.create_index_sql(table, idx) for idx in indexes]

    def generate_drop_table(self, name: str, *, if_exists: bool = True, cascade: bool = False) -> str:
        return self.ddl.drop_table_sql(name, if_exists=if_exists, cascade=cascade)

    def generate_alter_table(self, from_table: Any, to_table: Any) -> List[AlterStatement]:
        statements = self.ddl.alter_table_statements(from_table, to_table)
        destructive = sum(1 for statement in statements if statement.destructive)
        if destructive:
            self.logger.warning(
                "ALTER of %s contains %d destructive statement(s)", to_table.name, destructive
            )
        return statements

    def get_migration_table_ddl(self, table_name: str) -> str:
        name = self.quote_identifier(table_name)
        return (
            f"CREATE TABLE IF NOT EXISTS {name} (\n"
            "    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),\n"
            "    name VARCHAR(255) NOT NULL,\n"
            "    filename VARCHAR(255) NOT NULL,\n"
            "    hash VARCHAR(255) NOT NULL,\n"
            "    batch INTEGER NOT NULL,\n"
            "    applied_at TIMESTAMPTZ DEFAULT NOW(),\n"
            "    execution_time_ms INTEGER,\n"
            f"    metadata {self.migration_metadata_type},\n"
            "    sql_up TEXT,\n"
            "    sql_down TEXT,\n"
            "    source TEXT DEFAULT 'push'\n"
            ");"
        )

    # ------------------------------------------------------------------ #
    # Connections and introspection
    # ------------------------------------------------------------------ #
    def _with_driver(self, config: Any, fn: Callable[[DatabaseDriver], Any]) -> Any:
        connection_config = to_connection_config(config)
        driver = self._driver_factory(self.dialect)
        driver.connect(connection_config)
        try:
            return fn(driver)
        finally:
            driver.close()

    def test_connection(self, config: Any) -> bool:
        """
        ``True`` when ``SELECT 1`` succeeds on a fresh connection.
        """

        try:
            self._with_driver(config, lambda driver: driver.fetch_all("SELECT 1"))
        except Exception as exc:
            self.logger.warning("Connection test against %s failed: %s", self.display_name, exc)
            return False
        return True

    def version_query(self) -> str:
        return "SHOW server_version"

    def format_version(self, row: Dict[str, Any]) -> str:
        return str(next(iter(row.values()), "unknown"))

    def get_database_version(self, config: Any) -> str:
        rows = self._with_driver(config, lambda driver: driver.fetch_all(self.version_query()))
        return self.format_version(rows[0]) if rows else "unknown"

    def introspect(
        self,
        config: Any,
        on_progress: Optional[ProgressCallback] = None,
        *,
        options: Optional[IntrospectionOptions] = None,
        only: Optional[Iterable[str]] = None,
    ) -> SchemaBundle:
        return run_with_introspector(
            self.dialect,
            config,
            lambda introspector: introspector.run(only),
            options=options,
            on_progress=on_progress,
            driver_factory=self._driver_factory,
        )

    def introspect_table(self, config: Any, table_name: str, **kwargs: Any) -> Optional[TableInfo]:
        return self.introspect(config, only=TABLE_STEPS, **kwargs).table(table_name)

    def list_tables(self, config: Any, options: Optional[IntrospectionOptions] = None) -> List[str]:
        return run_with_introspector(
            self.dialect,
            config,
            lambda introspector: introspector.list_tables(),
            options=options,
            driver_factory=self._driver_factory,
        )

    def list_schemas(self, config: Any) -> List[str]:
        return run_with_introspector(
            self.dialect,
            config,
            lambda introspector: introspector.list_schemas(),
            driver_factory=self._driver_factory,
        )

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #
    def validate(self, schema: Any) -> ValidationResult:
        return self.validator.validate_schema(schema)

    def validate_table(self, table: Any, schema: Any = None) -> ValidationResult:
        return self.validator.validate_table(table, schema)

    def validate_sql(self, sql: str, context: Any = None) -> ValidationResult:
        return self.validator.validate_sql(sql, context)

    # ------------------------------------------------------------------ #
    # Type mapping
    # ------------------------------------------------------------------ #
    def map_type_to_friendly(self, internal_type: str) -> str:
        return self.sql_dialect.map_type_to_friendly(internal_type)

    def map_type_to_internal(self, friendly_type: str) -> str:
        return self.sql_dialect.map_type_to_internal(friendly_type)

    def get_python_type(self, sql_type: str) -> str:
        return self.sql_dialect.get_python_type(sql_type)
