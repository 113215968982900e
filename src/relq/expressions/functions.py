"""
Function namespace for building expressions without a receiver.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

from ..errors import InvalidArgumentError
from .case import CaseBuilder
from .core import COMPARISON_OPERATORS, REGEX_OPERATORS, Expr, _field, col, raw, to_sql
from .registry import KEYWORD_FUNCTIONS, SIMPLE_FUNCTIONS


def _expr(value: Any) -> Expr:
    if isinstance(value, Expr):
        return value
    return Expr(to_sql(value))


class Functions:
    """
    ``F.lower(col("email"))`` style access to SQL functions. Plain functions
    listed in :data:`SIMPLE_FUNCTIONS` and the parenthesis-free keywords in
    :data:`KEYWORD_FUNCTIONS` resolve dynamically; everything with special
    syntax is an explicit method.
    """

    def __getattr__(self, name: str) -> Callable[..., Expr]:
        if name in KEYWORD_FUNCTIONS:
            keyword = KEYWORD_FUNCTIONS[name]
            return lambda: Expr(keyword)
        function = SIMPLE_FUNCTIONS.get(name)
        if function is None or name.startswith("_"):
            raise AttributeError(f"Unknown SQL function {name!r}")

        def call(*args: Any) -> Expr:
            return Expr(f"{function}({', '.join(to_sql(arg) for arg in args)})")

        call.__name__ = name
        return call

    def __dir__(self) -> Iterable[str]:
        return sorted({*super().__dir__(), *SIMPLE_FUNCTIONS, *KEYWORD_FUNCTIONS})

    # References -------------------------------------------------------------
    col = staticmethod(col)
    raw = staticmethod(raw)

    def value(self, value: Any) -> Expr:
        return Expr(to_sql(value))

    # Aggregates -------------------------------------------------------------
    def count(self, value: Any = None, *, distinct: bool = False) -> Expr:
        if value is None:
            return Expr("COUNT(*)")
        prefix = "DISTINCT " if distinct else ""
        return Expr(f"COUNT({prefix}{to_sql(value)})")

    # Arithmetic / comparison --------------------------------------------------
    def add(self, left: Any, right: Any) -> Expr:
        return _expr(left).add(right)

    def subtract(self, left: Any, right: Any) -> Expr:
        return _expr(left).subtract(right)

    def multiply(self, left: Any, right: Any) -> Expr:
        return _expr(left).multiply(right)

    def divide(self, left: Any, right: Any) -> Expr:
        return _expr(left).divide(right)

    def negate(self, value: Any) -> Expr:
        return _expr(value).negate()

    def compare(self, left: Any, operator: str, right: Any) -> Expr:
        if operator not in COMPARISON_OPERATORS:
            raise InvalidArgumentError(f"Unknown comparison operator {operator!r}")
        return _expr(left).op(operator, right)

    def regex(self, left: Any, operator: str, pattern: Any) -> Expr:
        if operator not in REGEX_OPERATORS:
            raise InvalidArgumentError(f"Unknown regex operator {operator!r}")
        return _expr(left).op(operator, pattern)

    def ts_match(self, vector: Any, query: Any) -> Expr:
        return _expr(vector).ts_match(query)

    def op(self, left: Any, operator: str, right: Any) -> Expr:
        return _expr(left).op(operator, right)

    def func(self, name: str, *args: Any) -> Expr:
        return Expr(f"{name.upper()}({', '.join(to_sql(arg) for arg in args)})")

    def concat_op(self, *parts: Any) -> Expr:
        if not parts:
            raise InvalidArgumentError("concat_op needs at least one operand.")
        return _expr(parts[0]).concat_op(*parts[1:])

    # Boolean ----------------------------------------------------------------
    def and_(self, *conditions: Any) -> Expr:
        if not conditions:
            raise InvalidArgumentError("and_ needs at least one condition.")
        return _expr(conditions[0]).and_(*conditions[1:])

    def or_(self, *conditions: Any) -> Expr:
        if not conditions:
            raise InvalidArgumentError("or_ needs at least one condition.")
        return _expr(conditions[0]).or_(*conditions[1:])

    def not_(self, condition: Any) -> Expr:
        return _expr(condition).not_()

    def is_null(self, value: Any) -> Expr:
        return _expr(value).is_null()

    def is_not_null(self, value: Any) -> Expr:
        return _expr(value).is_not_null()

    def case(self, subject: Any = None) -> CaseBuilder:
        return CaseBuilder(subject)

    # Special syntax ---------------------------------------------------------
    def cast(self, value: Any, type_name: str) -> Expr:
        return _expr(value).cast(type_name)

    def as_text(self, value: Any) -> Expr:
        return _expr(value).as_text()

    def as_integer(self, value: Any) -> Expr:
        return _expr(value).as_integer()

    def as_numeric(self, value: Any, precision: Optional[int] = None, scale: Optional[int] = None) -> Expr:
        return _expr(value).as_numeric(precision, scale)

    def as_timestamp(self, value: Any) -> Expr:
        return _expr(value).as_timestamp()

    def as_date(self, value: Any) -> Expr:
        return _expr(value).as_date()

    def substring(self, value: Any, start: int, length: Optional[int] = None) -> Expr:
        return _expr(value).substring(start, length)

    def position(self, value: Any, substring: Any) -> Expr:
        return _expr(value).position(substring)

    def overlay(self, value: Any, replacement: Any, start: int, length: Optional[int] = None) -> Expr:
        return _expr(value).overlay(replacement, start, length)

    def extract(self, field: str, value: Any) -> Expr:
        return Expr(f"EXTRACT({_field(field)} FROM {to_sql(value)})")

    def jsonb_extract(self, value: Any, key: Any) -> Expr:
        return _expr(value).jsonb_extract(key)

    def jsonb_extract_text(self, value: Any, key: Any) -> Expr:
        return _expr(value).jsonb_extract_text(key)

    json_extract = jsonb_extract
    json_extract_text = jsonb_extract_text

    def jsonb_object(self, pairs: Mapping[str, Any]) -> Expr:
        """
        ``JSONB_BUILD_OBJECT`` from a mapping of keys to values.
        """

        args = []
        for key, value in pairs.items():
            args.append(to_sql(str(key)))
            args.append(to_sql(value))
        return Expr(f"JSONB_BUILD_OBJECT({', '.join(args)})")


F = Functions()
