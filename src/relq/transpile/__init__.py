"""
Generated-column expression transpiler: PostgreSQL parse trees to builder
source code.
"""

from .builder import BuilderTranspiler, TranspileOptions, ast_to_builder, escape_string, is_chainable_node
from .concat import FormattedExpression, format_generated_expression, replace_concat_placeholders
from .functions import (
    CHAINABLE_FUNCTIONS,
    KNOWN_BUILDER_FUNCTIONS,
    is_chainable_function,
    map_function_to_builder,
)

__all__ = [
    "BuilderTranspiler",
    "CHAINABLE_FUNCTIONS",
    "FormattedExpression",
    "KNOWN_BUILDER_FUNCTIONS",
    "TranspileOptions",
    "ast_to_builder",
    "escape_string",
    "format_generated_expression",
    "is_chainable_function",
    "is_chainable_node",
    "map_function_to_builder",
    "replace_concat_placeholders",
]
