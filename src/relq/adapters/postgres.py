"""
PostgreSQL-family adapters: PostgreSQL, Aurora DSQL, CockroachDB and Nile.
"""

from __future__ import annotations

import re
from typing import Any, Dict

from ..compat.rules_nile import TENANT_COLUMN
from .base import DialectAdapter

_CRDB_VERSION = re.compile(r"CockroachDB\s+\w+\s+(v[\d.]+)", re.IGNORECASE)


class PostgresAdapter(DialectAdapter):
    dialect = "postgres"

    def format_version(self, row: Dict[str, Any]) -> str:
        return str(row.get("server_version") or "unknown")


class DsqlAdapter(PostgresAdapter):
    """
    Aurora DSQL. JSON is stored as TEXT because JSONB is not available.
    """

    dialect = "dsql"
    migration_metadata_type = "TEXT"

    def format_version(self, row: Dict[str, Any]) -> str:
        return f"Aurora DSQL (PostgreSQL {row.get('server_version') or 'unknown'})"


class CockroachAdapter(PostgresAdapter):
    dialect = "cockroachdb"

    def version_query(self) -> str:
        return "SELECT version() AS version"

    def format_version(self, row: Dict[str, Any]) -> str:
        version = str(row.get("version") or "")
        match = _CRDB_VERSION.search(version)
        return match.group(1) if match else version or "unknown"


class NileAdapter(PostgresAdapter):
    dialect = "nile"

    def is_tenant_table(self, table: Any) -> bool:
        return any(column.name == TENANT_COLUMN for column in table.columns)
