"""
Database driver wrappers and the connection registry.
"""

from __future__ import annotations

from typing import Callable, Dict

from .base import (
    CatalogError,
    DBAPIDriver,
    ConnectionConfig,
    DatabaseDriver,
    DriverConfigurationError,
    DriverConnectionError,
    DriverError,
    DriverExecutionError,
    DriverNotFoundError,
    SSLConfig,
)
from .mysql import MySQLDriver
from .pool import IDLE_TIMEOUT_SECONDS, PoolEntry, PoolManager
from .postgres import PostgresDriver
from .sqlite import SQLiteDriver

_DRIVERS: Dict[str, Callable[[str], DatabaseDriver]] = {
    "postgres": PostgresDriver,
    "dsql": PostgresDriver,
    "cockroachdb": PostgresDriver,
    "nile": PostgresDriver,
    "mysql": MySQLDriver,
    "mariadb": MySQLDriver,
    "sqlite": SQLiteDriver,
    "turso": SQLiteDriver,
}


def create_driver(dialect: str) -> DatabaseDriver:
    """
    Instantiate the driver wrapper for a canonical dialect name.
    """

    factory = _DRIVERS.get(dialect)
    if factory is None:
        raise DriverConfigurationError(f"No driver registered for dialect {dialect!r}")
    return factory(dialect)


__all__ = [
    "CatalogError",
    "DBAPIDriver",
    "ConnectionConfig",
    "DatabaseDriver",
    "DriverConfigurationError",
    "DriverConnectionError",
    "DriverError",
    "DriverExecutionError",
    "DriverNotFoundError",
    "IDLE_TIMEOUT_SECONDS",
    "MySQLDriver",
    "PoolEntry",
    "PoolManager",
    "PostgresDriver",
    "SQLiteDriver",
    "SSLConfig",
    "create_driver",
]
