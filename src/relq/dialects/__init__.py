"""
Dialect strategy registry.
"""

from __future__ import annotations

from typing import Dict, Type

from ..errors import InvalidArgumentError
from .base import BaseDialect, Dialect, DialectCapabilities
from .cockroachdb import CockroachDialect
from .dsql import DsqlDialect
from .mysql import MariaDBDialect, MySQLDialect
from .nile import NileDialect
from .postgres import PostgresDialect
from .sqlite import SQLiteDialect, TursoDialect

DIALECTS: Dict[str, Type[BaseDialect]] = {
    "postgres": PostgresDialect,
    "dsql": DsqlDialect,
    "cockroachdb": CockroachDialect,
    "nile": NileDialect,
    "mysql": MySQLDialect,
    "mariadb": MariaDBDialect,
    "sqlite": SQLiteDialect,
    "turso": TursoDialect,
}

ALIASES: Dict[str, str] = {
    "postgresql": "postgres",
    "pg": "postgres",
    "crdb": "cockroachdb",
    "cockroach": "cockroachdb",
    "aurora-dsql": "dsql",
    "sqlite3": "sqlite",
    "libsql": "turso",
}


def normalize_dialect_name(name: str) -> str:
    key = name.strip().lower()
    key = ALIASES.get(key, key)
    if key not in DIALECTS:
        raise InvalidArgumentError(
            f"Unknown dialect {name!r}; expected one of {', '.join(sorted(DIALECTS))}"
        )
    return key


def get_dialect(name: str | Dialect) -> Dialect:
    if not isinstance(name, str):
        return name
    return DIALECTS[normalize_dialect_name(name)]()


__all__ = [
    "ALIASES",
    "BaseDialect",
    "CockroachDialect",
    "DIALECTS",
    "Dialect",
    "DialectCapabilities",
    "DsqlDialect",
    "MariaDBDialect",
    "MySQLDialect",
    "NileDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "TursoDialect",
    "get_dialect",
    "normalize_dialect_name",
]
