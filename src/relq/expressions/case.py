"""
CASE expression builder.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ..errors import InvalidArgumentError
from .core import Expr, to_sql

_UNSET = object()


class CaseBuilder:
    """
    Searched ``CASE WHEN cond THEN result ... END``, or the simple form
    ``CASE subject WHEN value THEN result ... END`` when a subject is given.
    """

    def __init__(self, subject: Any = None) -> None:
        self.subject = subject
        self.whens: List[Tuple[str, str]] = []
        self.otherwise: Any = _UNSET

    def when(self, condition: Any, result: Any) -> "CaseBuilder":
        if self.subject is None and isinstance(condition, str):
            # A bare string in the searched form is a SQL predicate.
            condition_sql = condition
        else:
            condition_sql = to_sql(condition)
        self.whens.append((condition_sql, to_sql(result)))
        return self

    def else_(self, result: Any) -> Expr:
        self.otherwise = result
        return self.end()

    def end(self) -> Expr:
        if not self.whens:
            raise InvalidArgumentError("CASE needs at least one WHEN branch.")
        parts = ["CASE"]
        if self.subject is not None:
            parts.append(to_sql(self.subject))
        for condition, result in self.whens:
            parts.append(f"WHEN {condition} THEN {result}")
        if self.otherwise is not _UNSET:
            parts.append(f"ELSE {to_sql(self.otherwise)}")
        parts.append("END")
        return Expr(" ".join(parts))

    def to_sql(self) -> str:
        return self.end().sql


def case(subject: Optional[Any] = None) -> CaseBuilder:
    return CaseBuilder(subject)
