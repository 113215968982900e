"""
Chainable SQL expressions.

An :class:`Expr` wraps a trusted SQL fragment. Every method returns a new
expression, so calls compile left to right::

    col("email").lower().concat("x")   # CONCAT(LOWER("email"), 'x')
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence

from ..errors import InvalidArgumentError
from ..formatting import POSTGRES_FORMATTER, Raw
from .registry import SIMPLE_FUNCTIONS

COMPARISON_OPERATORS = frozenset({"=", "<>", "!=", "<", ">", "<=", ">="})
REGEX_OPERATORS = frozenset({"~", "~*", "!~", "!~*"})
TS_WEIGHTS = frozenset({"A", "B", "C", "D"})


def to_sql(value: Any) -> str:
    """
    SQL text for an expression operand: expressions pass through, plain
    Python values become literals.
    """

    if isinstance(value, Raw):
        return value.sql
    if hasattr(value, "to_sql"):
        return value.to_sql()
    return POSTGRES_FORMATTER.literal(value)


def _string(value: str) -> str:
    return POSTGRES_FORMATTER.quote_string(value)


def _json_key(key: Any) -> str:
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    return to_sql(key)


class Expr(Raw):
    __slots__ = ()

    def to_sql(self) -> str:
        return self.sql

    def _call(self, function: str, *args: Any) -> "Expr":
        parts = [self.sql, *(to_sql(arg) for arg in args)]
        return Expr(f"{function}({', '.join(parts)})")

    def __getattr__(self, name: str) -> Callable[..., "Expr"]:
        # Plain functions whose first argument is the receiver.
        function = SIMPLE_FUNCTIONS.get(name)
        if function is None or name.startswith("_"):
            raise AttributeError(f"{type(self).__name__!s} has no attribute {name!r}")

        def call(*args: Any) -> "Expr":
            return self._call(function, *args)

        call.__name__ = name
        return call

    # Arithmetic ------------------------------------------------------------
    def add(self, value: Any) -> "Expr":
        return Expr(f"({self.sql} + {to_sql(value)})")

    def subtract(self, value: Any) -> "Expr":
        return Expr(f"({self.sql} - {to_sql(value)})")

    def multiply(self, value: Any) -> "Expr":
        return Expr(f"({self.sql} * {to_sql(value)})")

    def divide(self, value: Any) -> "Expr":
        return Expr(f"({self.sql} / {to_sql(value)})")

    def negate(self) -> "Expr":
        return Expr(f"(-{self.sql})")

    plus = add
    minus = subtract
    times = multiply
    divided_by = divide

    def mod(self, divisor: Any) -> "Expr":
        return self._call("MOD", divisor)

    def __add__(self, other: Any) -> "Expr":
        return self.add(other)

    def __radd__(self, other: Any) -> "Expr":
        return Expr(f"({to_sql(other)} + {self.sql})")

    def __sub__(self, other: Any) -> "Expr":
        return self.subtract(other)

    def __rsub__(self, other: Any) -> "Expr":
        return Expr(f"({to_sql(other)} - {self.sql})")

    def __neg__(self) -> "Expr":
        return self.negate()

    def __mul__(self, other: Any) -> "Expr":
        return self.multiply(other)

    def __rmul__(self, other: Any) -> "Expr":
        return Expr(f"({to_sql(other)} * {self.sql})")

    def __truediv__(self, other: Any) -> "Expr":
        return self.divide(other)

    def __mod__(self, other: Any) -> "Expr":
        return self.mod(other)

    # Comparison ------------------------------------------------------------
    def op(self, operator: str, right: Any) -> "Expr":
        return Expr(f"({self.sql} {operator} {to_sql(right)})")

    def compare(self, operator: str, right: Any) -> "Expr":
        if operator not in COMPARISON_OPERATORS:
            raise InvalidArgumentError(f"Unknown comparison operator {operator!r}")
        return self.op(operator, right)

    def eq(self, value: Any) -> "Expr":
        return self.op("=", value)

    def ne(self, value: Any) -> "Expr":
        return self.op("<>", value)

    neq = ne

    def gt(self, value: Any) -> "Expr":
        return self.op(">", value)

    def gte(self, value: Any) -> "Expr":
        return self.op(">=", value)

    def lt(self, value: Any) -> "Expr":
        return self.op("<", value)

    def lte(self, value: Any) -> "Expr":
        return self.op("<=", value)

    def between(self, low: Any, high: Any) -> "Expr":
        return Expr(f"({self.sql} BETWEEN {to_sql(low)} AND {to_sql(high)})")

    def not_between(self, low: Any, high: Any) -> "Expr":
        return Expr(f"({self.sql} NOT BETWEEN {to_sql(low)} AND {to_sql(high)})")

    def in_(self, *values: Any) -> "Expr":
        return Expr(f"({self.sql} IN ({', '.join(to_sql(v) for v in _flatten(values))}))")

    def not_in(self, *values: Any) -> "Expr":
        return Expr(f"({self.sql} NOT IN ({', '.join(to_sql(v) for v in _flatten(values))}))")

    def is_distinct_from(self, other: Any) -> "Expr":
        return self.op("IS DISTINCT FROM", other)

    def is_not_distinct_from(self, other: Any) -> "Expr":
        return self.op("IS NOT DISTINCT FROM", other)

    def like(self, pattern: str) -> "Expr":
        return self.op("LIKE", pattern)

    def ilike(self, pattern: str) -> "Expr":
        return self.op("ILIKE", pattern)

    def similar(self, pattern: str) -> "Expr":
        return self.op("SIMILAR TO", pattern)

    def matches(self, pattern: Any, flags: str = "") -> "Expr":
        return self.op("~*" if "i" in flags else "~", pattern)

    def regex(self, operator: str, pattern: Any) -> "Expr":
        if operator not in REGEX_OPERATORS:
            raise InvalidArgumentError(f"Unknown regex operator {operator!r}")
        return self.op(operator, pattern)

    def is_null(self) -> "Expr":
        return Expr(f"({self.sql} IS NULL)")

    def is_not_null(self) -> "Expr":
        return Expr(f"({self.sql} IS NOT NULL)")

    # Boolean ----------------------------------------------------------------
    def and_(self, *others: Any) -> "Expr":
        return Expr("(" + " AND ".join([self.sql, *(to_sql(o) for o in others)]) + ")")

    def or_(self, *others: Any) -> "Expr":
        return Expr("(" + " OR ".join([self.sql, *(to_sql(o) for o in others)]) + ")")

    def not_(self) -> "Expr":
        return Expr(f"(NOT {self.sql})")

    def __and__(self, other: Any) -> "Expr":
        return self.and_(other)

    def __or__(self, other: Any) -> "Expr":
        return self.or_(other)

    def __invert__(self) -> "Expr":
        return self.not_()

    # Casts ------------------------------------------------------------------
    def cast(self, type_name: str) -> "Expr":
        return Expr(f"({self.sql})::{type_name}")

    def as_text(self) -> "Expr":
        return self.cast("TEXT")

    def as_varchar(self) -> "Expr":
        return self.cast("VARCHAR")

    def as_integer(self) -> "Expr":
        return self.cast("INTEGER")

    def as_bigint(self) -> "Expr":
        return self.cast("BIGINT")

    def as_smallint(self) -> "Expr":
        return self.cast("SMALLINT")

    def as_numeric(self, precision: Optional[int] = None, scale: Optional[int] = None) -> "Expr":
        if precision is not None and scale is not None:
            return self.cast(f"NUMERIC({precision}, {scale})")
        if precision is not None:
            return self.cast(f"NUMERIC({precision})")
        return self.cast("NUMERIC")

    def as_real(self) -> "Expr":
        return self.cast("REAL")

    def as_double(self) -> "Expr":
        return self.cast("DOUBLE PRECISION")

    def as_bool(self) -> "Expr":
        return self.cast("BOOLEAN")

    def as_date(self) -> "Expr":
        return self.cast("DATE")

    def as_time(self) -> "Expr":
        return self.cast("TIME")

    def as_timestamp(self) -> "Expr":
        return self.cast("TIMESTAMP")

    def as_timestamptz(self) -> "Expr":
        return self.cast("TIMESTAMPTZ")

    def as_interval(self) -> "Expr":
        return self.cast("INTERVAL")

    def as_uuid(self) -> "Expr":
        return self.cast("UUID")

    def as_json(self) -> "Expr":
        return self.cast("JSON")

    def as_jsonb(self) -> "Expr":
        return self.cast("JSONB")

    # Strings ----------------------------------------------------------------
    def substring(self, start: int, length: Optional[int] = None) -> "Expr":
        if length is None:
            return Expr(f"SUBSTRING({self.sql} FROM {start})")
        return Expr(f"SUBSTRING({self.sql} FROM {start} FOR {length})")

    def position(self, substring: Any) -> "Expr":
        return Expr(f"POSITION({to_sql(substring)} IN {self.sql})")

    def overlay(self, replacement: Any, start: int, length: Optional[int] = None) -> "Expr":
        tail = f" FOR {length}" if length is not None else ""
        return Expr(f"OVERLAY({self.sql} PLACING {to_sql(replacement)} FROM {start}{tail})")

    def concat_op(self, *parts: Any) -> "Expr":
        return Expr("(" + " || ".join([self.sql, *(to_sql(p) for p in parts)]) + ")")

    # JSON -------------------------------------------------------------------
    def jsonb_extract(self, key: Any) -> "Expr":
        return Expr(f"{self.sql}->{_json_key(key)}")

    def jsonb_extract_text(self, key: Any) -> "Expr":
        return Expr(f"{self.sql}->>{_json_key(key)}")

    json_extract = jsonb_extract
    json_extract_text = jsonb_extract_text

    def jsonb_path(self, path: Sequence[Any]) -> "Expr":
        return Expr(f"{self.sql}#>ARRAY[{POSTGRES_FORMATTER.literal_list(str(p) for p in path)}]")

    def jsonb_path_text(self, path: Sequence[Any]) -> "Expr":
        return Expr(f"{self.sql}#>>ARRAY[{POSTGRES_FORMATTER.literal_list(str(p) for p in path)}]")

    # Arrays -----------------------------------------------------------------
    def array_get(self, index: int) -> "Expr":
        return Expr(f"({self.sql})[{int(index)}]")

    # Full-text --------------------------------------------------------------
    def _with_config(self, function: str, config: Optional[str]) -> "Expr":
        if config is None:
            return Expr(f"{function}({self.sql})")
        return Expr(f"{function}({to_sql(config)}, {self.sql})")

    def to_tsvector(self, config: Optional[str] = None) -> "Expr":
        return self._with_config("TO_TSVECTOR", config)

    def to_tsquery(self, config: Optional[str] = None) -> "Expr":
        return self._with_config("TO_TSQUERY", config)

    def plain_to_tsquery(self, config: Optional[str] = None) -> "Expr":
        return self._with_config("PLAINTO_TSQUERY", config)

    def phrase_to_tsquery(self, config: Optional[str] = None) -> "Expr":
        return self._with_config("PHRASETO_TSQUERY", config)

    def websearch_to_tsquery(self, config: Optional[str] = None) -> "Expr":
        return self._with_config("WEBSEARCH_TO_TSQUERY", config)

    def set_weight(self, weight: str) -> "Expr":
        if weight.upper() not in TS_WEIGHTS:
            raise InvalidArgumentError(f"Text-search weight must be one of A, B, C, D; got {weight!r}")
        return self._call("SETWEIGHT", weight.upper())

    def ts_match(self, query: Any) -> "Expr":
        return self.op("@@", query)

    def tsv_concat(self, other: Any) -> "Expr":
        return self.op("||", other)

    def ts_filter(self, weights: Iterable[str]) -> "Expr":
        return Expr(f"TS_FILTER({self.sql}, ARRAY[{POSTGRES_FORMATTER.literal_list(weights)}])")

    def ts_delete(self, lexemes: Iterable[str]) -> "Expr":
        return Expr(f"TS_DELETE({self.sql}, ARRAY[{POSTGRES_FORMATTER.literal_list(lexemes)}])")

    # Date / time ------------------------------------------------------------
    def extract(self, field: str) -> "Expr":
        return Expr(f"EXTRACT({_field(field)} FROM {self.sql})")

    def epoch(self) -> "Expr":
        return self.extract("epoch")

    def date_part(self, field: str) -> "Expr":
        return Expr(f"DATE_PART({_string(field)}, {self.sql})")

    def date_trunc(self, field: str) -> "Expr":
        return Expr(f"DATE_TRUNC({_string(field)}, {self.sql})")

    # Misc -------------------------------------------------------------------
    def if_then(self, then_value: Any, else_value: Any) -> "Expr":
        return Expr(f"CASE WHEN {self.sql} THEN {to_sql(then_value)} ELSE {to_sql(else_value)} END")

    def parentheses(self) -> "Expr":
        return Expr(f"({self.sql})")

    def func(self, name: str, *args: Any) -> "Expr":
        return self._call(name.upper(), *args)

    def as_(self, alias: str) -> "Expr":
        return Expr(f"{self.sql} AS {POSTGRES_FORMATTER.quote_ident(alias)}")


_FIELD_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ_")


def _field(field: Any) -> str:
    text = (field.sql.strip("'") if isinstance(field, Raw) else str(field)).upper()
    if not text or not set(text) <= _FIELD_CHARS:
        raise InvalidArgumentError(f"Invalid EXTRACT field {field!r}")
    return text


def _flatten(values: Sequence[Any]) -> Iterable[Any]:
    if len(values) == 1 and isinstance(values[0], (list, tuple, set, frozenset)):
        return list(values[0])
    return values


def col(name: str, table: Optional[str] = None) -> Expr:
    """
    Quoted column reference, optionally qualified by a table or alias.
    """

    if table:
        return Expr(f"{POSTGRES_FORMATTER.quote_ident(table)}.{POSTGRES_FORMATTER.quote_ident(name)}")
    return Expr(POSTGRES_FORMATTER.quote_ident(name))


def raw(sql: str) -> Expr:
    return Expr(sql)
