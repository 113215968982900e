"""
Credential handling helpers.
"""

from .dsns import DSNConfig, build_dsn, dsn_from_env, parse_dsn
from .redaction import REDACTED_VALUE, redact_params, redact_query_params, redact_value

__all__ = [
    "DSNConfig",
    "REDACTED_VALUE",
    "build_dsn",
    "dsn_from_env",
    "parse_dsn",
    "redact_params",
    "redact_query_params",
    "redact_value",
]
