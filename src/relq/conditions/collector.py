"""
Fluent predicate collector.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, Union

from ..dialects import Dialect
from ..errors import InvalidArgumentError
from ..formatting import Raw
from .arrays import ArrayConditionCollector
from .base import Condition
from .fulltext import FulltextConditionCollector
from .geometric import GeometricConditionCollector
from .jsonb import JsonbConditionCollector
from .network import NetworkConditionCollector
from .postgis import PostgisConditionCollector
from .ranges import RangeConditionCollector
from .render import build_conditions_sql

ConditionCallback = Callable[["ConditionCollector"], Any]
Group = Union[ConditionCallback, "ConditionCollector"]


class ConditionCollector:
    """
    Accumulates predicates in call order; every method returns the
    collector so calls chain::

        c = ConditionCollector().eq("status", "active").and_(lambda c: c.in_("role", ["admin", "owner"]))
        c.to_sql()  # "status" = 'active' AND ("role" IN ('admin', 'owner'))

    Type-family predicates hang off lazily created sub-builders
    (``c.jsonb``, ``c.array``, ``c.fulltext``, ``c.range``, ``c.geometric``,
    ``c.network``, ``c.postgis``) which append to this collector.
    Collectors also combine with ``&``, ``|`` and ``~`` into new collectors.
    """

    def __init__(self, conditions: Optional[Iterable[Condition]] = None) -> None:
        self.conditions: List[Condition] = list(conditions or ())
        self._jsonb: Optional[JsonbConditionCollector] = None
        self._array: Optional[ArrayConditionCollector] = None
        self._fulltext: Optional[FulltextConditionCollector] = None
        self._range: Optional[RangeConditionCollector] = None
        self._geometric: Optional[GeometricConditionCollector] = None
        self._network: Optional[NetworkConditionCollector] = None
        self._postgis: Optional[PostgisConditionCollector] = None

    def add(self, condition: Condition) -> "ConditionCollector":
        self.conditions.append(condition)
        return self

    def __iter__(self) -> Iterator[Condition]:
        return iter(self.conditions)

    def __len__(self) -> int:
        return len(self.conditions)

    def __repr__(self) -> str:
        return f"ConditionCollector({self.conditions!r})"

    def to_sql(self, dialect: Optional[str | Dialect] = None) -> str:
        return build_conditions_sql(self.conditions, dialect)

    # Sub-builders -------------------------------------------------------
    @property
    def jsonb(self) -> JsonbConditionCollector:
        if self._jsonb is None:
            self._jsonb = JsonbConditionCollector(self)
        return self._jsonb

    json = jsonb

    @property
    def array(self) -> ArrayConditionCollector:
        if self._array is None:
            self._array = ArrayConditionCollector(self)
        return self._array

    @property
    def fulltext(self) -> FulltextConditionCollector:
        if self._fulltext is None:
            self._fulltext = FulltextConditionCollector(self)
        return self._fulltext

    @property
    def range(self) -> RangeConditionCollector:
        if self._range is None:
            self._range = RangeConditionCollector(self)
        return self._range

    @property
    def geometric(self) -> GeometricConditionCollector:
        if self._geometric is None:
            self._geometric = GeometricConditionCollector(self)
        return self._geometric

    @property
    def network(self) -> NetworkConditionCollector:
        if self._network is None:
            self._network = NetworkConditionCollector(self)
        return self._network

    @property
    def postgis(self) -> PostgisConditionCollector:
        if self._postgis is None:
            self._postgis = PostgisConditionCollector(self)
        return self._postgis

    # Comparisons --------------------------------------------------------
    def equal(self, column: Any, value: Any) -> "ConditionCollector":
        """A list value becomes ``IN``; ``None`` becomes ``IS NULL``."""
        return self.add(Condition("equal", column, value))

    def not_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("not_equal", column, value))

    def less_than(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("less_than", column, value))

    def less_than_or_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("less_than_equal", column, value))

    def greater_than(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("greater_than", column, value))

    def greater_than_or_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("greater_than_equal", column, value))

    eq = equal
    ne = not_equal
    lt = less_than
    lte = less_than_or_equal
    less_than_equal = less_than_or_equal
    gt = greater_than
    gte = greater_than_or_equal
    greater_than_equal = greater_than_or_equal

    def is_null(self, column: Any) -> "ConditionCollector":
        return self.add(Condition("is_null", column))

    def is_not_null(self, column: Any) -> "ConditionCollector":
        return self.add(Condition("is_not_null", column))

    not_null = is_not_null

    def is_true(self, column: Any) -> "ConditionCollector":
        return self.add(Condition("is_true", column))

    def is_false(self, column: Any) -> "ConditionCollector":
        return self.add(Condition("is_false", column))

    def between(self, column: Any, low: Any, high: Any) -> "ConditionCollector":
        return self.add(Condition("between", column, (low, high)))

    def not_between(self, column: Any, low: Any, high: Any) -> "ConditionCollector":
        return self.add(Condition("not_between", column, (low, high)))

    def distinct_from(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("distinct_from", column, value))

    def not_distinct_from(self, column: Any, value: Any) -> "ConditionCollector":
        return self.add(Condition("not_distinct_from", column, value))

    def in_(self, column: Any, values: Iterable[Any] | Raw) -> "ConditionCollector":
        return self.add(Condition("in", column, values if isinstance(values, Raw) else tuple(values)))

    def not_in(self, column: Any, values: Iterable[Any] | Raw) -> "ConditionCollector":
        return self.add(Condition("not_in", column, values if isinstance(values, Raw) else tuple(values)))

    def overlaps(self, start: Tuple[Any, Any], end: Tuple[Any, Any]) -> "ConditionCollector":
        """
        ``(start_column, end_column) OVERLAPS (start_value, end_value)``;
        each argument is a ``(column, value)`` pair.
        """

        return self.add(Condition("overlaps", None, {"start": tuple(start), "end": tuple(end)}))

    # Patterns -----------------------------------------------------------
    def like(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("like", column, pattern))

    def not_like(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("not_like", column, pattern))

    def ilike(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("ilike", column, pattern))

    def not_ilike(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("not_ilike", column, pattern))

    def _pattern(self, column: Any, pattern: str, case_insensitive: bool, negated: bool) -> "ConditionCollector":
        method = "ilike" if case_insensitive else "like"
        if negated:
            method = f"not_{method}"
        return self.add(Condition(method, column, pattern))

    def starts_with(self, column: Any, value: str, case_insensitive: bool = False) -> "ConditionCollector":
        return self._pattern(column, f"{value}%", case_insensitive, negated=False)

    def ends_with(self, column: Any, value: str, case_insensitive: bool = False) -> "ConditionCollector":
        return self._pattern(column, f"%{value}", case_insensitive, negated=False)

    def contains(self, column: Any, value: str, case_insensitive: bool = False) -> "ConditionCollector":
        return self._pattern(column, f"%{value}%", case_insensitive, negated=False)

    def not_starts_with(self, column: Any, value: str, case_insensitive: bool = False) -> "ConditionCollector":
        return self._pattern(column, f"{value}%", case_insensitive, negated=True)

    def not_ends_with(self, column: Any, value: str, case_insensitive: bool = False) -> "ConditionCollector":
        return self._pattern(column, f"%{value}", case_insensitive, negated=True)

    def not_contains(self, column: Any, value: str, case_insensitive: bool = False) -> "ConditionCollector":
        return self._pattern(column, f"%{value}%", case_insensitive, negated=True)

    def regex(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("regex", column, pattern))

    def iregex(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("iregex", column, pattern))

    def not_regex(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("not_regex", column, pattern))

    def not_iregex(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("not_iregex", column, pattern))

    def similar_to(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("similar_to", column, pattern))

    def not_similar_to(self, column: Any, pattern: str) -> "ConditionCollector":
        return self.add(Condition("not_similar_to", column, pattern))

    # Subqueries and search ------------------------------------------------
    def exists(self, subquery: Any) -> "ConditionCollector":
        return self.add(Condition("exists", None, subquery))

    def not_exists(self, subquery: Any) -> "ConditionCollector":
        return self.add(Condition("not_exists", None, subquery))

    def search(self, column: Any, value: str) -> "ConditionCollector":
        return self.add(Condition("search", column, value))

    def not_search(self, column: Any, value: str) -> "ConditionCollector":
        return self.add(Condition("not_search", column, value))

    def raw(self, sql: str) -> "ConditionCollector":
        """Trusted SQL appended verbatim."""
        return self.add(Condition("raw", None, sql))

    # Combinators ----------------------------------------------------------
    def _collect(self, group: Group) -> Tuple[Condition, ...]:
        if isinstance(group, ConditionCollector):
            return tuple(group.conditions)
        if not callable(group):
            raise InvalidArgumentError("Expected a callback or a ConditionCollector")
        nested = type(self)()
        group(nested)
        return tuple(nested.conditions)

    def or_(self, group: Group) -> "ConditionCollector":
        return self.add(Condition("or", None, self._collect(group)))

    def and_(self, group: Group) -> "ConditionCollector":
        return self.add(Condition("and", None, self._collect(group)))

    def not_(self, group: Group) -> "ConditionCollector":
        return self.add(Condition("not", None, self._collect(group)))

    def _grouped(self) -> Condition:
        if len(self.conditions) == 1:
            return self.conditions[0]
        return Condition("and", None, tuple(self.conditions))

    def __and__(self, other: "ConditionCollector") -> "ConditionCollector":
        return type(self)([*self.conditions, *other.conditions])

    def __or__(self, other: "ConditionCollector") -> "ConditionCollector":
        return type(self)([Condition("or", None, (self._grouped(), other._grouped()))])

    def __invert__(self) -> "ConditionCollector":
        return type(self)([Condition("not", None, tuple(self.conditions))])
