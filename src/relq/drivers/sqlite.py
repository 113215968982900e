"""
SQLite driver wrapper around the stdlib sqlite3 module (also used for
local Turso/libSQL database files).
"""

from __future__ import annotations

import sqlite3

from .base import ConnectionConfig, DBAPIDriver, DriverConfigurationError, DriverConnectionError

_REMOTE_SCHEMES = ("libsql://", "http://", "https://", "ws://", "wss://")


class SQLiteDriver(DBAPIDriver):
    """
    Connections run with ``isolation_level=None``; transactions are the
    explicit BEGIN / COMMIT / ROLLBACK statements.
    """

    placeholder = "?"

    def __init__(self, dialect: str = "sqlite", slow_query_ms: int | None = None) -> None:
        super().__init__(dialect, slow_query_ms)

    def _open(self, config: ConnectionConfig) -> sqlite3.Connection:
        if config.url.startswith(_REMOTE_SCHEMES):
            raise DriverConfigurationError(
                f"Remote {self.name} URLs are not supported by the sqlite3 driver; use a local database file."
            )
        path = self.normalize_path(config.url)
        self.logger.info("Opening %s database %s", self.name, path)
        try:
            connection = sqlite3.connect(
                path,
                isolation_level=None,
                timeout=config.timeout if config.timeout is not None else 5.0,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise DriverConnectionError(f"Failed to open {self.name} database {path!r}.") from exc
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    def commit(self) -> None:
        self.execute("COMMIT")

    def rollback(self) -> None:
        self.execute("ROLLBACK")

    @staticmethod
    def normalize_path(url: str) -> str:
        if url in ("sqlite:///:memory:", "sqlite://", ":memory:"):
            return ":memory:"
        for prefix in ("sqlite:///", "file:"):
            if url.startswith(prefix):
                return url[len(prefix):]
        return url
