"""
Aurora DSQL dialect implementation.
"""

from __future__ import annotations

from typing import Final

from .base import BaseDialect, DialectCapabilities


class DsqlDialect(BaseDialect):
    """
    Aurora DSQL accepts a Postgres subset: no sequences, no deferred
    constraints and no enforced foreign keys. Emission stays Postgres;
    the compatibility validator reports what the engine will reject.
    """

    name: Final[str] = "dsql"
    display_name: Final[str] = "AWS Aurora DSQL"
    default_port: Final[int] = 5432
    default_user: Final[str] = "admin"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=False,
        supports_partial_indexes=False,
        supports_schema_namespaces=True,
        supports_deferrable=False,
        supports_arrays=False,
        supports_sequences=False,
        supports_identity=False,
        supports_comment_on=True,
        supports_transactional_ddl=False,
        supports_foreign_keys=False,
    )
