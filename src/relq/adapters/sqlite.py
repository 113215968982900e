"""
SQLite and Turso adapters. Turso speaks the SQLite dialect; only local
database files are reachable through the stdlib driver.
"""

from __future__ import annotations

from .base import DialectAdapter


class SQLiteAdapter(DialectAdapter):
    dialect = "sqlite"

    def get_migration_table_ddl(self, table_name: str) -> str:
        name = self.quote_identifier(table_name)
        return (
            f"CREATE TABLE IF NOT EXISTS {name} (\n"
            "    id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "    name TEXT NOT NULL,\n"
            "    filename TEXT NOT NULL,\n"
            "    hash TEXT NOT NULL,\n"
            "    batch INTEGER NOT NULL,\n"
            "    applied_at TEXT DEFAULT (datetime('now')),\n"
            "    execution_time_ms INTEGER,\n"
            "    metadata TEXT\n"
            ");"
        )

    def version_query(self) -> str:
        return "SELECT sqlite_version() AS version"


class TursoAdapter(SQLiteAdapter):
    dialect = "turso"
