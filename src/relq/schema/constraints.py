"""
Table-level constraint records and partitioning specs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence, Tuple

from ..columns.builder import normalize_action
from ..columns.defaults import expression_text
from ..errors import InvalidArgumentError
from ..formatting import POSTGRES_FORMATTER, literal

PARTITION_STRATEGIES = frozenset({"RANGE", "LIST", "HASH"})


@dataclass
class UniqueConstraint:
    columns: Tuple[str, ...]
    name: Optional[str] = None
    nulls_not_distinct: bool = False


@dataclass
class CheckConstraint:
    expression: str
    name: Optional[str] = None


@dataclass
class ForeignKeyConstraint:
    columns: Tuple[str, ...]
    ref_table: str
    ref_columns: Tuple[str, ...]
    name: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None
    deferrable: bool = False
    initially_deferred: bool = False
    match: Optional[str] = None


@dataclass
class PartitionSpec:
    strategy: str
    columns: Tuple[str, ...]


@dataclass
class Partition:
    """
    A child partition. ``bound`` is the text after ``FOR VALUES`` (or
    ``DEFAULT``).
    """

    name: str
    bound: str


@dataclass
class ExclusionConstraint:
    """
    ``EXCLUDE USING <method> (<element> WITH <operator>, ...)``; kept so the
    compatibility validators can flag engines without support.
    """

    elements: Tuple[Tuple[str, str], ...]
    method: str = "gist"
    name: Optional[str] = None
    where: Optional[str] = None


def _columns(columns: Iterable[str], what: str) -> Tuple[str, ...]:
    cols = tuple(columns)
    if not cols:
        raise InvalidArgumentError(f"{what} needs at least one column.")
    return cols


def unique(*columns: str, name: Optional[str] = None, nulls_not_distinct: bool = False) -> UniqueConstraint:
    return UniqueConstraint(columns=_columns(columns, "UNIQUE"), name=name, nulls_not_distinct=nulls_not_distinct)


def check(expression: Any, name: Optional[str] = None) -> CheckConstraint:
    text = expression_text(expression)
    if not text.strip():
        raise InvalidArgumentError("CHECK needs an expression.")
    return CheckConstraint(expression=text, name=name)


def foreign_key(
    columns: Sequence[str] | str,
    ref_table: str,
    ref_columns: Sequence[str] | str = ("id",),
    *,
    name: Optional[str] = None,
    on_delete: Optional[str] = None,
    on_update: Optional[str] = None,
    deferrable: bool = False,
    initially_deferred: bool = False,
    match: Optional[str] = None,
) -> ForeignKeyConstraint:
    local = (columns,) if isinstance(columns, str) else tuple(columns)
    remote = (ref_columns,) if isinstance(ref_columns, str) else tuple(ref_columns)
    _columns(local, "FOREIGN KEY")
    if len(local) != len(remote):
        raise InvalidArgumentError(
            f"Foreign key to {ref_table!r} has {len(local)} local column(s) but {len(remote)} referenced column(s)."
        )
    if match is not None and match.upper() not in ("FULL", "PARTIAL", "SIMPLE"):
        raise InvalidArgumentError(f"Unknown MATCH type {match!r}")
    return ForeignKeyConstraint(
        columns=local,
        ref_table=ref_table,
        ref_columns=remote,
        name=name,
        on_delete=normalize_action(on_delete),
        on_update=normalize_action(on_update),
        deferrable=deferrable or initially_deferred,
        initially_deferred=initially_deferred,
        match=match.upper() if match else None,
    )


def exclude(*elements: Tuple[str, str], method: str = "gist", name: Optional[str] = None, where: Optional[Any] = None) -> ExclusionConstraint:
    if not elements:
        raise InvalidArgumentError("EXCLUDE needs at least one (element, operator) pair.")
    return ExclusionConstraint(
        elements=tuple(elements),
        method=method,
        name=name,
        where=expression_text(where) if where is not None else None,
    )


def partition_by(strategy: str, *columns: str) -> PartitionSpec:
    normalized = strategy.upper()
    if normalized not in PARTITION_STRATEGIES:
        raise InvalidArgumentError(f"Unknown partition strategy {strategy!r}")
    return PartitionSpec(strategy=normalized, columns=_columns(columns, "PARTITION BY"))


def range_partition(name: str, start: Any, end: Any) -> Partition:
    return Partition(name=name, bound=f"FOR VALUES FROM ({literal(start)}) TO ({literal(end)})")


def list_partition(name: str, values: Iterable[Any]) -> Partition:
    return Partition(name=name, bound=f"FOR VALUES IN ({POSTGRES_FORMATTER.literal_list(values)})")


def hash_partition(name: str, modulus: int, remainder: int) -> Partition:
    if modulus <= 0 or not 0 <= remainder < modulus:
        raise InvalidArgumentError(f"Invalid hash partition bounds modulus={modulus} remainder={remainder}")
    return Partition(name=name, bound=f"FOR VALUES WITH (MODULUS {modulus}, REMAINDER {remainder})")


def default_partition(name: str) -> Partition:
    return Partition(name=name, bound="DEFAULT")


@dataclass
class TableOptions:
    schema: Optional[str] = None
    if_not_exists: bool = False
    temporary: bool = False
    unlogged: bool = False
    strict: bool = False
    without_rowid: bool = False
    comment: Optional[str] = None
    inherits: Tuple[str, ...] = ()
    tablespace: Optional[str] = None
    with_options: dict = field(default_factory=dict)
    tracking_id: Optional[str] = None
