"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from typing import Final

from .base import BaseDialect, Dialect, DialectCapabilities


class PostgresDialect(BaseDialect):
    """
    PostgreSQL dialect using ``$N`` positional parameters.
    """

    name: Final[str] = "postgres"
    display_name: Final[str] = "PostgreSQL"
    default_port: Final[int] = 5432
    default_user: Final[str] = "postgres"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=True,
        supports_partial_indexes=True,
        supports_schema_namespaces=True,
        supports_deferrable=True,
        supports_arrays=True,
        supports_sequences=True,
        supports_identity=True,
        supports_comment_on=True,
    )


def get_postgres_dialect() -> Dialect:
    return PostgresDialect()
