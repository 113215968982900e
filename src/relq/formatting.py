"""
Dialect-aware quoting of identifiers and escaping of literals.
"""

from __future__ import annotations

import json
import math
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Final, Iterable

from .errors import InvalidArgumentError

_SAFE_IDENT_RE = re.compile(r"^[a-z_][a-z0-9_]*$")
_FORMAT_TOKEN_RE = re.compile(r"%([ILs%])")

RESERVED_WORDS: Final[frozenset[str]] = frozenset(
    {
        "all", "analyse", "analyze", "and", "any", "array", "as", "asc", "asymmetric",
        "authorization", "binary", "both", "case", "cast", "check", "collate", "collation",
        "column", "concurrently", "constraint", "create", "cross", "current_catalog",
        "current_date", "current_role", "current_schema", "current_time",
        "current_timestamp", "current_user", "default", "deferrable", "desc", "distinct",
        "do", "else", "end", "except", "false", "fetch", "for", "foreign", "freeze", "from",
        "full", "grant", "group", "having", "ilike", "in", "initially", "inner", "intersect",
        "into", "is", "isnull", "join", "key", "lateral", "leading", "left", "like", "limit",
        "localtime", "localtimestamp", "natural", "not", "notnull", "null", "offset", "on",
        "only", "or", "order", "outer", "overlaps", "placing", "primary", "references",
        "returning", "right", "select", "session_user", "similar", "some", "symmetric",
        "table", "tablesample", "then", "to", "trailing", "true", "union", "unique", "user",
        "using", "variadic", "verbose", "when", "where", "window", "with",
    }
)


class Raw:
    """
    A trusted SQL fragment that literal formatting passes through untouched.
    """

    __slots__ = ("sql",)

    def __init__(self, sql: str) -> None:
        self.sql = sql

    def __str__(self) -> str:
        return self.sql

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.sql!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Raw) and other.sql == self.sql

    def __hash__(self) -> int:
        return hash(self.sql)


@dataclass(frozen=True)
class SqlFormatter:
    """
    Quoting rules for one dialect.

    ``backslash_style`` is ``"escape_string"`` for Postgres (``E'...'`` when a
    backslash is present), ``"double"`` for MySQL (backslashes are escape
    characters) and ``"none"`` for SQLite.
    """

    quote_char: str = '"'
    backslash_style: str = "escape_string"
    true_token: str = "TRUE"
    false_token: str = "FALSE"
    array_constructor: bool = True
    reserved_words: frozenset[str] = RESERVED_WORDS

    # Identifiers -------------------------------------------------------
    def quote_ident(self, name: str) -> str:
        if not isinstance(name, str) or name == "":
            raise InvalidArgumentError(f"Identifier must be a non-empty string, got {name!r}")
        q = self.quote_char
        return f"{q}{name.replace(q, q + q)}{q}"

    def ident(self, name: str) -> str:
        """
        Quote ``name`` only when it is not a plain lower-case identifier or
        collides with a reserved word.
        """

        if not isinstance(name, str) or name == "":
            raise InvalidArgumentError(f"Identifier must be a non-empty string, got {name!r}")
        if _SAFE_IDENT_RE.match(name) and name not in self.reserved_words:
            return name
        return self.quote_ident(name)

    def quote_qualified(self, name: str) -> str:
        """
        Quote a possibly dotted name (``schema.table`` or ``alias.column``).
        """

        return ".".join(self.quote_ident(part) for part in name.split("."))

    # Literals ----------------------------------------------------------
    def quote_string(self, value: str) -> str:
        escaped = value.replace("'", "''")
        if "\\" in escaped:
            if self.backslash_style == "escape_string":
                return "E'" + escaped.replace("\\", "\\\\") + "'"
            if self.backslash_style == "double":
                return "'" + escaped.replace("\\", "\\\\") + "'"
        return f"'{escaped}'"

    def literal(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, Raw):
            return value.sql
        if isinstance(value, bool):
            return self.true_token if value else self.false_token
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if math.isnan(value):
                return "'NaN'"
            if math.isinf(value):
                return "'Infinity'" if value > 0 else "'-Infinity'"
            return repr(value)
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, str):
            return self.quote_string(value)
        if isinstance(value, (datetime, date, time)):
            return self.quote_string(value.isoformat())
        if isinstance(value, timedelta):
            return self.quote_string(f"{value.total_seconds()} seconds")
        if isinstance(value, uuid.UUID):
            return self.quote_string(str(value))
        if isinstance(value, (bytes, bytearray, memoryview)):
            hexed = bytes(value).hex()
            if self.backslash_style == "escape_string":
                return f"'\\x{hexed}'::bytea"
            return f"X'{hexed}'"
        if isinstance(value, (list, tuple)):
            if not value:
                if self.array_constructor:
                    # ARRAY[] needs an explicit element type; '{}' is cast from context
                    return "'{}'"
                raise InvalidArgumentError("Cannot format an empty sequence as a literal for this dialect")
            items = ", ".join(self.literal(item) for item in value)
            if self.array_constructor:
                return f"ARRAY[{items}]"
            return f"({items})"
        if isinstance(value, dict):
            return self.quote_string(json.dumps(value, default=str))
        raise InvalidArgumentError(f"Cannot format value of type {type(value).__name__} as a literal")

    def literal_list(self, values: Iterable[Any]) -> str:
        return ", ".join(self.literal(item) for item in values)

    def json_literal(self, value: Any) -> str:
        return self.quote_string(json.dumps(value, default=str, separators=(",", ":")))

    # Templates ---------------------------------------------------------
    def format(self, template: str, *args: Any) -> str:
        """
        ``%I`` identifier, ``%L`` literal, ``%s`` raw text, ``%%`` percent sign.
        Sequences passed to ``%I``/``%L``/``%s`` are comma-joined.
        """

        remaining = list(args)

        def take() -> Any:
            if not remaining:
                raise InvalidArgumentError(f"Too few arguments for format template {template!r}")
            return remaining.pop(0)

        def render(match: re.Match[str]) -> str:
            token = match.group(1)
            if token == "%":
                return "%"
            value = take()
            if token == "I":
                if isinstance(value, (list, tuple)):
                    return ", ".join(self.ident(str(item)) for item in value)
                return self.ident(str(value))
            if token == "L":
                if isinstance(value, (list, tuple)):
                    return self.literal_list(value)
                return self.literal(value)
            if value is None:
                return ""
            if isinstance(value, (list, tuple)):
                return ", ".join(str(item) for item in value)
            return str(value)

        return _FORMAT_TOKEN_RE.sub(render, template)


POSTGRES_FORMATTER: Final[SqlFormatter] = SqlFormatter()
MYSQL_FORMATTER: Final[SqlFormatter] = SqlFormatter(
    quote_char="`",
    backslash_style="double",
    array_constructor=False,
)
SQLITE_FORMATTER: Final[SqlFormatter] = SqlFormatter(
    backslash_style="none",
    true_token="1",
    false_token="0",
    array_constructor=False,
)


def ident(name: str) -> str:
    return POSTGRES_FORMATTER.ident(name)


def quote_ident(name: str) -> str:
    return POSTGRES_FORMATTER.quote_ident(name)


def quote_qualified(name: str) -> str:
    return POSTGRES_FORMATTER.quote_qualified(name)


def literal(value: Any) -> str:
    return POSTGRES_FORMATTER.literal(value)


def format_sql(template: str, *args: Any) -> str:
    return POSTGRES_FORMATTER.format(template, *args)
