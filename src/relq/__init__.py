"""
relq public package initialization.

Schema definition, DDL generation, condition and expression builders,
dialect adapters with catalog introspection, and the compatibility
engine. Database drivers are imported only when a connection is opened.
"""

from . import columns  # noqa: F401
from .adapters import DialectAdapter, get_adapter  # noqa: F401
from .columns import DEFAULT, ColumnBuilder, SqlExpression, sql  # noqa: F401
from .compat import (  # noqa: F401
    Diagnostic,
    ValidationResult,
    detect_dialect_from_connection_string,
    format_diagnostics,
    get_validator,
)
from .conditions import ConditionCollector, build_condition_sql, build_conditions_sql  # noqa: F401
from .config import RelqConfig, validate_and_migrate_config  # noqa: F401
from .dialects import get_dialect  # noqa: F401
from .errors import (  # noqa: F401
    ConfigurationError,
    InvalidArgumentError,
    RelqError,
    UnsupportedNodeError,
)
from .expressions import F, case, col  # noqa: F401
from .formatting import format_sql, ident, literal, quote_ident  # noqa: F401
from .introspection import SchemaBundle, introspect  # noqa: F401
from .joins import JoinConditionBuilder, JoinManyBuilder, left_ref, right_ref  # noqa: F401
from .schema import (  # noqa: F401
    CompositeType,
    Domain,
    PgEnum,
    Sequence,
    composite_type,
    define_table,
    domain,
    pg_enum,
    sequence,
)
from .transpile import ast_to_builder, format_generated_expression  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "columns",
    "ColumnBuilder",
    "SqlExpression",
    "sql",
    "DEFAULT",
    "define_table",
    "Domain",
    "domain",
    "CompositeType",
    "composite_type",
    "Sequence",
    "sequence",
    "PgEnum",
    "pg_enum",
    "ConditionCollector",
    "build_condition_sql",
    "build_conditions_sql",
    "F",
    "col",
    "case",
    "JoinConditionBuilder",
    "JoinManyBuilder",
    "left_ref",
    "right_ref",
    "format_sql",
    "ident",
    "literal",
    "quote_ident",
    "get_dialect",
    "DialectAdapter",
    "get_adapter",
    "SchemaBundle",
    "introspect",
    "Diagnostic",
    "ValidationResult",
    "get_validator",
    "format_diagnostics",
    "detect_dialect_from_connection_string",
    "RelqConfig",
    "validate_and_migrate_config",
    "ast_to_builder",
    "format_generated_expression",
    "RelqError",
    "InvalidArgumentError",
    "UnsupportedNodeError",
    "ConfigurationError",
]
