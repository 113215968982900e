"""
Predicate nodes and the helpers family renderers share.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from ..errors import InvalidArgumentError
from ..formatting import Raw, SqlFormatter

if TYPE_CHECKING:
    from ..dialects.base import Dialect

# characters that force a text-array element into double quotes
_ARRAY_SPECIAL = re.compile(r'[{},"\\\s]')


@dataclass(frozen=True)
class Condition:
    """
    One predicate. ``method`` carries the family prefix (``jsonb_``,
    ``array_``, ...) or a bare operator name; ``values`` is shaped by the
    method.
    """

    method: str
    column: Any = None
    values: Any = None


class RenderContext:
    """
    Dialect handed to renderers, with column and value formatting bound to
    its quoting rules.
    """

    def __init__(self, dialect: "Dialect") -> None:
        self.dialect = dialect
        self.formatter: SqlFormatter = dialect.formatter

    @property
    def family(self) -> str:
        return self.dialect.family

    @property
    def is_postgres(self) -> bool:
        return self.dialect.family == "postgres"

    def require_postgres(self, feature: str) -> None:
        if not self.is_postgres:
            raise InvalidArgumentError(
                f"{feature} conditions need a PostgreSQL-family dialect, not {self.dialect.name!r}"
            )

    def column(self, column: Any) -> str:
        return render_column(column, self.formatter)

    def value(self, value: Any) -> str:
        return render_value(value, self.formatter)

    def values(self, values: Iterable[Any]) -> str:
        return ", ".join(self.value(item) for item in values)

    def text(self, value: Any) -> str:
        return self.formatter.quote_string(str(value))

    def json(self, value: Any) -> str:
        return self.formatter.quote_string(json.dumps(value, default=str))

    def number(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise InvalidArgumentError(f"Expected a number, got {value!r}")
        return str(value)

    def array(self, values: Iterable[Any]) -> str:
        return f"ARRAY[{self.values(values)}]"

    def path(self, path: Any) -> str:
        return self.text(json_path(path))


def render_column(column: Any, formatter: SqlFormatter) -> str:
    """
    Column references render themselves; raw fragments pass through;
    strings are quoted per dot-separated part.
    """

    if column is None:
        raise InvalidArgumentError("Condition is missing its column")
    render = getattr(column, "render", None)
    if callable(render):
        return render(formatter)
    if isinstance(column, Raw):
        return column.sql
    if not isinstance(column, str):
        raise InvalidArgumentError(f"Cannot use {column!r} as a column reference")
    return formatter.quote_qualified(column)


def render_value(value: Any, formatter: SqlFormatter) -> str:
    render = getattr(value, "render", None)
    if callable(render):
        return render(formatter)
    return formatter.literal(value)


def _array_element(part: str) -> str:
    if _ARRAY_SPECIAL.search(part) or part.upper() == "NULL":
        return '"' + part.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return part


def json_path(path: Any) -> str:
    """
    ``"a.b"`` or ``["a", "b"]`` to the Postgres text-array path ``{a,b}``.
    Keys a bare array element cannot hold are double-quoted; pass a list
    for keys that contain dots.
    """

    if isinstance(path, str):
        parts: List[str] = [part.strip() for part in path.split(".")]
    else:
        parts = [str(part) for part in path]
    if not parts or any(part == "" for part in parts):
        raise InvalidArgumentError(f"Invalid JSON path {path!r}")
    return "{" + ",".join(_array_element(part) for part in parts) + "}"


def like_pattern(pattern: str, match: str) -> Optional[str]:
    """
    ``None`` means exact comparison.
    """

    if match == "prefix":
        return f"{pattern}%"
    if match == "suffix":
        return f"%{pattern}"
    if match == "contains":
        return f"%{pattern}%"
    if match == "exact":
        return None
    raise InvalidArgumentError(f"Unknown match type {match!r}")
