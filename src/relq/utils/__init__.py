"""
Utility helpers shared across relq packages.
"""

from .logging import configure_logging, get_correlation_id, get_logger, set_correlation_id, time_call
from .naming import camel_to_snake, to_camel_case, to_pascal_case
from .settings import resolve_slow_query_ms

__all__ = [
    "camel_to_snake",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "resolve_slow_query_ms",
    "set_correlation_id",
    "time_call",
    "to_camel_case",
    "to_pascal_case",
]
