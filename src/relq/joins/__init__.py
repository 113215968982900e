"""
Column references and join planning.
"""

from .builder import JoinConditionBuilder, JoinManyBuilder, format_right_side, lateral_join_clause
from .proxy import ColumnRef, TableProxy, left_ref, right_ref, table_ref

__all__ = [
    "ColumnRef",
    "JoinConditionBuilder",
    "JoinManyBuilder",
    "TableProxy",
    "format_right_side",
    "lateral_join_clause",
    "left_ref",
    "right_ref",
    "table_ref",
]
