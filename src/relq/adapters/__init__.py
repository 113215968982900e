"""
Dialect adapters and their registry.
"""

from typing import Dict, Type

from ..dialects import normalize_dialect_name
from .base import DialectAdapter
from .mysql import MariaDBAdapter, MySQLAdapter
from .postgres import CockroachAdapter, DsqlAdapter, NileAdapter, PostgresAdapter
from .sqlite import SQLiteAdapter, TursoAdapter

ADAPTERS: Dict[str, Type[DialectAdapter]] = {
    "postgres": PostgresAdapter,
    "dsql": DsqlAdapter,
    "cockroachdb": CockroachAdapter,
    "nile": NileAdapter,
    "mysql": MySQLAdapter,
    "mariadb": MariaDBAdapter,
    "sqlite": SQLiteAdapter,
    "turso": TursoAdapter,
}


def get_adapter(name: str, **kwargs) -> DialectAdapter:
    """
    Instantiate the adapter for ``name``; aliases such as ``crdb`` or
    ``postgresql`` are accepted.
    """

    return ADAPTERS[normalize_dialect_name(name)](**kwargs)


__all__ = [
    "ADAPTERS",
    "CockroachAdapter",
    "DialectAdapter",
    "DsqlAdapter",
    "MariaDBAdapter",
    "MySQLAdapter",
    "NileAdapter",
    "PostgresAdapter",
    "SQLiteAdapter",
    "TursoAdapter",
    "get_adapter",
]
