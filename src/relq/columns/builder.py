"""
Chainable column builder shared by every type factory.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Optional

from ..errors import InvalidArgumentError
from ..formatting import Raw
from .config import (
    NO_DEFAULT,
    REFERENTIAL_ACTIONS,
    ColumnCheck,
    ColumnConfig,
    ColumnReference,
    GeneratedExpression,
    IdentityOptions,
)
from .defaults import expression_text


def normalize_action(action: Optional[str]) -> Optional[str]:
    if action is None:
        return None
    normalized = " ".join(action.replace("_", " ").upper().split())
    if normalized not in REFERENTIAL_ACTIONS:
        raise InvalidArgumentError(
            f"Unknown referential action {action!r}; expected one of {sorted(REFERENTIAL_ACTIONS)}"
        )
    return normalized


def _positive(value: int, what: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise InvalidArgumentError(f"{what} must be a positive integer, got {value!r}")
    return value


class ColumnBuilder:
    """
    Wraps a :class:`ColumnConfig`; every decorator mutates it and returns
    the builder so calls can be chained.
    """

    def __init__(self, config: ColumnConfig) -> None:
        self.config = config

    def __repr__(self) -> str:
        return f"ColumnBuilder({self.config.full_sql_type}, name={self.config.name!r})"

    # Naming --------------------------------------------------------------
    def named(self, sql_name: str) -> "ColumnBuilder":
        self.config.sql_name = sql_name
        return self

    def track(self, tracking_id: str) -> "ColumnBuilder":
        self.config.tracking_id = tracking_id
        return self

    # Nullability / keys --------------------------------------------------
    def not_null(self) -> "ColumnBuilder":
        self.config.nullable = False
        return self

    def nullable(self) -> "ColumnBuilder":
        if self.config.primary_key:
            raise InvalidArgumentError("A primary key column cannot be nullable.")
        self.config.nullable = True
        return self

    def primary_key(self) -> "ColumnBuilder":
        self.config.primary_key = True
        self.config.nullable = False
        return self

    def unique(self) -> "ColumnBuilder":
        self.config.unique = True
        return self

    def default(self, value: Any) -> "ColumnBuilder":
        if self.config.generated is not None:
            raise InvalidArgumentError("A generated column cannot have an explicit default.")
        if self.config.identity is not None:
            raise InvalidArgumentError("An identity column cannot have an explicit default.")
        self.config.default = value
        return self

    def references(
        self,
        table: str,
        column: str = "id",
        *,
        on_delete: Optional[str] = None,
        on_update: Optional[str] = None,
        deferrable: bool = False,
        initially_deferred: bool = False,
    ) -> "ColumnBuilder":
        self.config.references = ColumnReference(
            table=table,
            column=column,
            on_delete=normalize_action(on_delete),
            on_update=normalize_action(on_update),
            deferrable=deferrable or initially_deferred,
            initially_deferred=initially_deferred,
        )
        return self

    # Checks --------------------------------------------------------------
    def check(self, name: str, values: Any) -> "ColumnBuilder":
        """
        ``values`` is either an iterable of allowed values (rendered as an
        IN-list) or a predicate given as SQL text or an expression object.
        """

        if isinstance(values, (str, Raw)) or hasattr(values, "to_sql"):
            self.config.checks.append(ColumnCheck(name=name, expression=expression_text(values)))
        else:
            allowed = tuple(values)
            if not allowed:
                raise InvalidArgumentError(f"Check {name!r} needs at least one allowed value.")
            self.config.checks.append(ColumnCheck(name=name, values=allowed))
        return self

    def check_not(self, name: str, values: Iterable[Any]) -> "ColumnBuilder":
        forbidden = tuple(values)
        if not forbidden:
            raise InvalidArgumentError(f"Check {name!r} needs at least one forbidden value.")
        self.config.checks.append(ColumnCheck(name=name, values=forbidden, negate=True))
        return self

    # Type parameters -----------------------------------------------------
    def array(self, dimensions: int = 1) -> "ColumnBuilder":
        self.config.array_dimensions = _positive(dimensions, "Array dimensions")
        return self

    def length(self, n: int) -> "ColumnBuilder":
        self.config.length = _positive(n, "Length")
        return self

    def precision(self, p: int) -> "ColumnBuilder":
        if self.config.family in ("time", "timestamp", "interval"):
            if not isinstance(p, int) or not 0 <= p <= 6:
                raise InvalidArgumentError(f"Fractional seconds precision must be 0..6, got {p!r}")
        else:
            _positive(p, "Precision")
        self.config.precision = p
        return self

    def scale(self, s: int) -> "ColumnBuilder":
        if not isinstance(s, int) or s < 0:
            raise InvalidArgumentError(f"Scale must be a non-negative integer, got {s!r}")
        if self.config.precision is not None and s > self.config.precision:
            raise InvalidArgumentError(
                f"Scale {s} cannot exceed precision {self.config.precision}."
            )
        self.config.scale = s
        return self

    def with_timezone(self) -> "ColumnBuilder":
        if self.config.family not in ("time", "timestamp"):
            raise InvalidArgumentError("with_timezone() applies to TIME and TIMESTAMP columns only.")
        self.config.with_timezone = True
        return self

    def collate(self, collation: str) -> "ColumnBuilder":
        self.config.collation = collation
        return self

    def comment(self, text: str) -> "ColumnBuilder":
        self.config.comment = text
        return self

    # Generated values ----------------------------------------------------
    def autoincrement(self) -> "ColumnBuilder":
        if not self.config.is_integer:
            raise InvalidArgumentError(
                f"AUTOINCREMENT requires an integer column, got {self.config.sql_type}."
            )
        self.config.autoincrement = True
        return self

    def generated_always_as_identity(self, **options: Any) -> "ColumnBuilder":
        return self._identity(always=True, **options)

    def generated_by_default_as_identity(self, **options: Any) -> "ColumnBuilder":
        return self._identity(always=False, **options)

    def generated_always_as(self, expression: Any, *, stored: bool = True) -> "ColumnBuilder":
        """
        ``expression`` may be raw text, an :class:`SqlExpression` or any
        expression object exposing ``to_sql()``.
        """

        if self.config.has_default:
            raise InvalidArgumentError("A generated column cannot have an explicit default.")
        self.config.generated = GeneratedExpression(expression=expression_text(expression), stored=stored)
        return self

    def _identity(self, *, always: bool, **options: Any) -> "ColumnBuilder":
        if not self.config.is_integer or self.config.is_serial:
            raise InvalidArgumentError(
                f"Identity columns require SMALLINT, INTEGER or BIGINT, got {self.config.sql_type}."
            )
        if self.config.has_default:
            raise InvalidArgumentError("An identity column cannot have an explicit default.")
        try:
            self.config.identity = IdentityOptions(always=always, **options)
        except TypeError as exc:
            raise InvalidArgumentError(f"Unknown identity option: {exc}") from exc
        self.config.nullable = False
        return self

    def copy(self) -> "ColumnBuilder":
        config = replace(self.config, checks=list(self.config.checks))
        return ColumnBuilder(config)


def ensure_config(column: ColumnBuilder | ColumnConfig) -> ColumnConfig:
    if isinstance(column, ColumnBuilder):
        return column.config
    if isinstance(column, ColumnConfig):
        return column
    raise InvalidArgumentError(f"Expected a column builder, got {type(column).__name__}")


__all__ = ["ColumnBuilder", "NO_DEFAULT", "ensure_config", "normalize_action"]
