"""
SQL expression markers usable as column defaults.
"""

from __future__ import annotations

import re
from typing import Any

from ..formatting import Raw

_SIMPLE_EXPRESSION_RE = re.compile(
    r"^(?:[A-Za-z_][\w.]*(?:\([^()]*\))?|'[^']*')(?:::[A-Za-z_][\w ]*(?:\[\])*)?$"
)


class SqlExpression(Raw):
    """
    Marks a default (or other value) as raw SQL rather than a literal.
    """

    @property
    def is_simple(self) -> bool:
        """
        True for single function calls, keywords, identifiers and casts,
        which can follow ``DEFAULT`` without parentheses.
        """

        return bool(_SIMPLE_EXPRESSION_RE.match(self.sql.strip()))


def sql(expression: str) -> SqlExpression:
    return SqlExpression(expression)


def gen_random_uuid() -> SqlExpression:
    return SqlExpression("gen_random_uuid()")


def uuid_generate_v4() -> SqlExpression:
    return SqlExpression("uuid_generate_v4()")


def now() -> SqlExpression:
    return SqlExpression("now()")


def current_timestamp() -> SqlExpression:
    return SqlExpression("CURRENT_TIMESTAMP")


def current_date() -> SqlExpression:
    return SqlExpression("CURRENT_DATE")


def current_time() -> SqlExpression:
    return SqlExpression("CURRENT_TIME")


def empty_object() -> SqlExpression:
    return SqlExpression("'{}'::jsonb")


def empty_array() -> SqlExpression:
    return SqlExpression("'[]'::jsonb")


def nextval(sequence_name: str) -> SqlExpression:
    escaped = sequence_name.replace("'", "''")
    return SqlExpression(f"nextval('{escaped}')")


class DEFAULT:
    """Namespace mirroring the default helpers for fluent use."""

    sql = staticmethod(sql)
    gen_random_uuid = staticmethod(gen_random_uuid)
    uuid_generate_v4 = staticmethod(uuid_generate_v4)
    now = staticmethod(now)
    current_timestamp = staticmethod(current_timestamp)
    current_date = staticmethod(current_date)
    current_time = staticmethod(current_time)
    empty_object = staticmethod(empty_object)
    empty_array = staticmethod(empty_array)
    nextval = staticmethod(nextval)


def expression_text(expression: Any) -> str:
    """
    SQL text of raw strings, :class:`Raw` markers and expression objects
    exposing ``to_sql()``.
    """

    if isinstance(expression, Raw):
        return expression.sql
    if hasattr(expression, "to_sql"):
        return expression.to_sql()
    return str(expression)
