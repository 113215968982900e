"""
Dialect compatibility engine: rule catalogs, validators and reporting.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional, Tuple, Type
from urllib.parse import urlparse

from ..dialects import ALIASES as DIALECT_ALIASES
from ..errors import InvalidArgumentError
from .catalog import AutoFix, RuleCatalog, RuleEntry, SqlRule
from .diagnostics import SEVERITIES, Diagnostic, ValidationResult
from .model import as_bundle, as_table_info
from .report import format_diagnostic, format_diagnostics, summary_line
from .rules_crdb import CRDB_RULES
from .rules_dsql import DSQL_RULES
from .rules_mysql import MYSQL_RULES
from .rules_nile import NILE_RULES
from .rules_sqlite import SQLITE_RULES
from .validators import (
    CockroachValidator,
    CompatibilityValidator,
    DsqlValidator,
    MariaDBValidator,
    MySQLValidator,
    NileValidator,
    PlanetScaleValidator,
    PostgresValidator,
    SQLiteValidator,
    TursoValidator,
)

VALIDATORS: Dict[str, Type[CompatibilityValidator]] = {
    "postgres": PostgresValidator,
    "dsql": DsqlValidator,
    "cockroachdb": CockroachValidator,
    "nile": NileValidator,
    "mysql": MySQLValidator,
    "mariadb": MariaDBValidator,
    "planetscale": PlanetScaleValidator,
    "sqlite": SQLiteValidator,
    "turso": TursoValidator,
}

DIALECT_INFO: Dict[str, Dict[str, Any]] = {
    "postgres": {"name": "PostgreSQL", "family": "postgres", "docs": "https://www.postgresql.org/docs/current/"},
    "dsql": {
        "name": "AWS Aurora DSQL",
        "family": "postgres",
        "docs": "https://docs.aws.amazon.com/aurora-dsql/latest/userguide/",
    },
    "cockroachdb": {"name": "CockroachDB", "family": "postgres", "docs": "https://www.cockroachlabs.com/docs/stable/"},
    "nile": {"name": "Nile", "family": "postgres", "docs": "https://www.thenile.dev/docs"},
    "mysql": {"name": "MySQL", "family": "mysql", "docs": "https://dev.mysql.com/doc/refman/8.0/en/"},
    "mariadb": {"name": "MariaDB", "family": "mysql", "docs": "https://mariadb.com/kb/en/documentation/"},
    "planetscale": {"name": "PlanetScale", "family": "mysql", "docs": "https://planetscale.com/docs"},
    "sqlite": {"name": "SQLite", "family": "sqlite", "docs": "https://sqlite.org/docs.html"},
    "turso": {"name": "Turso", "family": "sqlite", "docs": "https://docs.turso.tech/"},
}

_ALIASES: Dict[str, str] = {**DIALECT_ALIASES, "ps": "planetscale", "vitess": "planetscale"}

# managed-service hostnames, checked before the scheme
_HOST_PATTERNS: Tuple[Tuple["re.Pattern[str]", str], ...] = (
    (re.compile(r"\.dsql\.[a-z0-9-]+\.on\.aws$"), "dsql"),
    (re.compile(r"\.(psdb\.cloud|planetscale\.io)$"), "planetscale"),
    (re.compile(r"\.(the)?nile\.dev$"), "nile"),
    (re.compile(r"\.(cockroachlabs\.cloud|crdb\.io)$"), "cockroachdb"),
    (re.compile(r"\.(turso|libsql)\.io$"), "turso"),
)


def normalize_validator_name(dialect: str) -> str:
    key = dialect.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in VALIDATORS:
        raise InvalidArgumentError(
            f"No compatibility validator for {dialect!r}; expected one of {', '.join(sorted(VALIDATORS))}"
        )
    return key


def get_validator(dialect: str | CompatibilityValidator) -> CompatibilityValidator:
    if isinstance(dialect, CompatibilityValidator):
        return dialect
    return VALIDATORS[normalize_validator_name(dialect)]()


def validate_schema(schema: Any, dialect: str) -> ValidationResult:
    return get_validator(dialect).validate_schema(schema)


def validate_table(table: Any, dialect: str, schema: Any = None) -> ValidationResult:
    return get_validator(dialect).validate_table(table, schema)


def validate_sql(sql: str, dialect: str, location: Mapping[str, Any] | str | None = None) -> ValidationResult:
    return get_validator(dialect).validate_sql(sql, location)


def detect_dialect_from_connection_string(url: str) -> Optional[str]:
    """
    Best-effort guess of the target dialect from a connection URL; returns
    ``None`` when nothing matches.
    """

    text = url.strip()
    lowered = text.lower()
    scheme = urlparse(text).scheme.lower()
    host = (urlparse(text).hostname or "").lower()

    for pattern, dialect in _HOST_PATTERNS:
        if pattern.search(host):
            return dialect

    if scheme in ("postgres", "postgresql"):
        if "cockroachlabs" in lowered or "cockroachdb" in lowered:
            return "cockroachdb"
        if "thenile.dev" in host or "nile" in host:
            return "nile"
        if "dsql.amazonaws.com" in host or "aurora-dsql" in lowered:
            return "dsql"
        return "postgres"
    if scheme in ("mysql", "mysql2"):
        if "psdb" in host or "planetscale" in host:
            return "planetscale"
        return "mysql"
    if scheme == "mariadb":
        return "mariadb"
    if scheme == "libsql" or (scheme in ("http", "https", "wss", "ws") and "turso" in host):
        return "turso"
    if scheme in ("sqlite", "sqlite3", "file") or lowered.endswith((".sqlite", ".sqlite3", ".db")):
        return "sqlite"
    return None


__all__ = [
    "AutoFix",
    "CRDB_RULES",
    "CockroachValidator",
    "CompatibilityValidator",
    "DIALECT_INFO",
    "DSQL_RULES",
    "Diagnostic",
    "DsqlValidator",
    "MYSQL_RULES",
    "MariaDBValidator",
    "MySQLValidator",
    "NILE_RULES",
    "NileValidator",
    "PlanetScaleValidator",
    "PostgresValidator",
    "RuleCatalog",
    "RuleEntry",
    "SEVERITIES",
    "SQLITE_RULES",
    "SQLiteValidator",
    "SqlRule",
    "TursoValidator",
    "VALIDATORS",
    "ValidationResult",
    "as_bundle",
    "as_table_info",
    "detect_dialect_from_connection_string",
    "format_diagnostic",
    "format_diagnostics",
    "get_validator",
    "normalize_validator_name",
    "summary_line",
    "validate_schema",
    "validate_sql",
    "validate_table",
]
