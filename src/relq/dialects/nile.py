"""
Nile dialect: multi-tenant Postgres 15.
"""

from __future__ import annotations

from typing import Final

from .base import BaseDialect, DialectCapabilities


class NileDialect(BaseDialect):
    """
    Nile speaks the Postgres 15 grammar; tenant rules live in the
    compatibility validator, not in DDL emission.
    """

    name: Final[str] = "nile"
    display_name: Final[str] = "Nile"
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
