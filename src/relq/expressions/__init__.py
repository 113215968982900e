"""
Composable SQL expressions and the function namespace ``F``.
"""

from .case import CaseBuilder, case
from .core import Expr, col, raw, to_sql
from .functions import F, Functions
from .generated import GeneratedExpressionBuilder, generated
from .registry import KEYWORD_FUNCTIONS, SIMPLE_FUNCTIONS

__all__ = [
    "CaseBuilder",
    "Expr",
    "F",
    "Functions",
    "GeneratedExpressionBuilder",
    "KEYWORD_FUNCTIONS",
    "SIMPLE_FUNCTIONS",
    "case",
    "col",
    "generated",
    "raw",
    "to_sql",
]
