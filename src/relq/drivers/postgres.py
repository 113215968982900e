"""
psycopg driver wrapper shared by PostgreSQL, CockroachDB, Aurora DSQL and Nile.
"""

from __future__ import annotations

from typing import Any

from .base import ConnectionConfig, DBAPIDriver, DriverConnectionError, DriverNotFoundError


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


def connect_options(config: ConnectionConfig) -> dict[str, Any]:
    """
    Keyword arguments for ``psycopg.connect``: URL query options first, then
    SSL settings and the connect timeout where the URL left them unset.
    """

    options = dict(config.options or {})
    if config.ssl:
        for key, value in config.ssl.postgres_options().items():
            options.setdefault(key, value)
    if config.timeout and "connect_timeout" not in options:
        options["connect_timeout"] = int(config.timeout)
    return options


class PostgresDriver(DBAPIDriver):
    """
    Every Postgres-wire dialect talks through this class. Without autocommit
    psycopg opens a transaction on the first statement, so ``begin`` only
    issues ``BEGIN`` on autocommit connections.
    """

    def __init__(self, dialect: str = "postgres", slow_query_ms: int | None = None) -> None:
        super().__init__(dialect, slow_query_ms)

    def _open(self, config: ConnectionConfig) -> Any:
        psycopg = _load_driver()
        if psycopg is None:
            raise DriverNotFoundError("psycopg", self.name)
        self.logger.info(
            "Connecting to %s %s (autocommit=%s)", self.name, config.descriptive_label(), config.autocommit
        )
        try:
            connection = psycopg.connect(config.url, **connect_options(config))
        except Exception as exc:
            raise DriverConnectionError(f"Failed to connect to {self.name}.") from exc
        connection.autocommit = bool(config.autocommit)
        return connection

    @property
    def autocommit(self) -> bool:
        return bool(getattr(self.connection, "autocommit", False))

    def begin(self) -> None:
        if self.autocommit:
            self.execute("BEGIN")

    def commit(self) -> None:
        if self.autocommit:
            self.execute("COMMIT")
        else:
            super().commit()

    def rollback(self) -> None:
        if self.autocommit:
            self.execute("ROLLBACK")
        else:
            super().rollback()
