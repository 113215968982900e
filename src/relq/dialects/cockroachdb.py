"""
CockroachDB dialect implementation.
"""

from __future__ import annotations

from typing import Final

from .base import BaseDialect, DialectCapabilities


class CockroachDialect(BaseDialect):
    """
    Postgres wire-compatible; constraints cannot be deferred.
    """

    name: Final[str] = "cockroachdb"
    display_name: Final[str] = "CockroachDB"
    default_port: Final[int] = 26257
    default_user: Final[str] = "root"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=True,
        supports_partial_indexes=True,
        supports_schema_namespaces=True,
        supports_deferrable=False,
        supports_arrays=True,
        supports_sequences=True,
        supports_identity=True,
        supports_comment_on=True,
    )
