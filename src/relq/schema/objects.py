"""
User-defined schema objects: domains, composite types, sequences and enums.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from ..columns.builder import ColumnBuilder, ensure_config
from ..columns.config import NO_DEFAULT
from ..columns.defaults import expression_text
from ..columns.types import custom_type
from ..errors import InvalidArgumentError
from ..expressions import Expr
from .ddl import DDLBuilder

if TYPE_CHECKING:  # pragma: no cover
    from ..dialects.base import Dialect


@dataclass
class DomainCheck:
    name: str
    expression: str


@dataclass
class Domain:
    """
    ``CREATE DOMAIN``: a base type plus nullability, default and named checks.
    """

    name: str
    base_type: str
    not_null: bool = False
    default: Any = NO_DEFAULT
    collation: Optional[str] = None
    checks: List[DomainCheck] = field(default_factory=list)
    tracking_id: Optional[str] = None

    def check(self, name: str, predicate: Any) -> "Domain":
        """
        ``predicate`` is SQL text, an expression, or a callable receiving the
        ``VALUE`` placeholder and returning an expression.
        """

        if callable(predicate) and not hasattr(predicate, "to_sql"):
            predicate = predicate(Expr("VALUE"))
        self.checks.append(DomainCheck(name=name, expression=expression_text(predicate)))
        return self

    def column(self, name: Optional[str] = None) -> ColumnBuilder:
        return custom_type(self.name, name)

    def to_sql(self, dialect: "str | Dialect" = "postgres") -> str:
        return DDLBuilder(dialect).create_domain_sql(self)


@dataclass
class CompositeType:
    name: str
    attributes: Dict[str, str]
    tracking_id: Optional[str] = None

    def column(self, name: Optional[str] = None) -> ColumnBuilder:
        return custom_type(self.name, name)

    def to_sql(self, dialect: "str | Dialect" = "postgres") -> str:
        return DDLBuilder(dialect).create_type_sql(self)


@dataclass
class Sequence:
    name: str
    data_type: Optional[str] = None
    start: Optional[int] = None
    increment: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    cache: Optional[int] = None
    cycle: bool = False
    owned_by: Optional[str] = None

    def to_sql(self, dialect: "str | Dialect" = "postgres") -> str:
        return DDLBuilder(dialect).create_sequence_sql(self)


@dataclass
class PgEnum:
    name: str
    values: Tuple[str, ...]
    tracking_id: Optional[str] = None

    def column(self, name: Optional[str] = None) -> ColumnBuilder:
        return custom_type(self.name, name, enum_values=self.values)

    def to_sql(self, dialect: "str | Dialect" = "postgres") -> str:
        return DDLBuilder(dialect).create_enum_sql(self)


def domain(
    name: str,
    base_type: ColumnBuilder | str,
    *,
    not_null: bool = False,
    default: Any = NO_DEFAULT,
    collation: Optional[str] = None,
    checks: Mapping[str, Any] | None = None,
    tracking_id: Optional[str] = None,
) -> Domain:
    base = base_type if isinstance(base_type, str) else ensure_config(base_type).full_sql_type
    result = Domain(
        name=name,
        base_type=base,
        not_null=not_null,
        default=default,
        collation=collation,
        tracking_id=tracking_id,
    )
    for check_name, predicate in (checks or {}).items():
        result.check(check_name, predicate)
    return result


def composite_type(name: str, attributes: Mapping[str, ColumnBuilder | str], *, tracking_id: Optional[str] = None) -> CompositeType:
    if not attributes:
        raise InvalidArgumentError(f"Composite type {name!r} needs at least one attribute.")
    resolved = {
        attr: value if isinstance(value, str) else ensure_config(value).full_sql_type
        for attr, value in attributes.items()
    }
    return CompositeType(name=name, attributes=resolved, tracking_id=tracking_id)


def sequence(name: str, **options: Any) -> Sequence:
    try:
        seq = Sequence(name=name, **options)
    except TypeError as exc:
        raise InvalidArgumentError(f"Unknown sequence option for {name!r}: {exc}") from exc
    if seq.increment == 0:
        raise InvalidArgumentError(f"Sequence {name!r} increment cannot be zero.")
    if seq.min_value is not None and seq.max_value is not None and seq.min_value > seq.max_value:
        raise InvalidArgumentError(f"Sequence {name!r} MINVALUE exceeds MAXVALUE.")
    return seq


def pg_enum(name: str, values: Tuple[str, ...] | List[str], *, tracking_id: Optional[str] = None) -> PgEnum:
    labels = tuple(values)
    if not labels:
        raise InvalidArgumentError(f"Enum {name!r} needs at least one value.")
    if len(set(labels)) != len(labels):
        raise InvalidArgumentError(f"Enum {name!r} has duplicate values.")
    return PgEnum(name=name, values=labels, tracking_id=tracking_id)

