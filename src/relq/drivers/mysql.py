"""
MySQL / MariaDB driver wrapper (PyMySQL, or mysqlclient when installed).
"""

from __future__ import annotations

from typing import Any

from ..security.dsns import DSNConfig
from .base import (
    ConnectionConfig,
    DBAPIDriver,
    DriverConfigurationError,
    DriverConnectionError,
    DriverNotFoundError,
)


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


def connect_kwargs(dsn: DSNConfig, config: ConnectionConfig) -> dict[str, Any]:
    """
    The client libraries take discrete fields rather than a URL; SSL and
    timeout settings fill in what the URL query left unset.
    """

    options = dict(config.options or {})
    if config.ssl:
        for key, value in config.ssl.mysql_options().items():
            options.setdefault(key, value)
    if config.timeout and "connect_timeout" not in options:
        options["connect_timeout"] = int(config.timeout)
    kwargs = {
        "host": dsn.host or "localhost",
        "user": dsn.username,
        "password": dsn.password,
        "database": dsn.database,
        **options,
    }
    if dsn.port:
        kwargs["port"] = dsn.port
    return kwargs


class MySQLDriver(DBAPIDriver):
    def __init__(self, dialect: str = "mysql", slow_query_ms: int | None = None) -> None:
        super().__init__(dialect, slow_query_ms)

    def _open(self, config: ConnectionConfig) -> Any:
        client = _load_driver()
        if client is None:
            raise DriverNotFoundError("PyMySQL", self.name)
        if not config.dsn:
            raise DriverConfigurationError(f"{self.name} connections need a ConnectionConfig built from a URL.")
        self.logger.info(
            "Connecting to %s %s (autocommit=%s)", self.name, config.descriptive_label(), config.autocommit
        )
        try:
            connection = client.connect(**connect_kwargs(config.dsn, config))
        except Exception as exc:
            raise DriverConnectionError(f"Failed to connect to {self.name}.") from exc
        if hasattr(connection, "autocommit"):
            connection.autocommit(config.autocommit)
        return connection

    def begin(self) -> None:
        self.execute("START TRANSACTION")
