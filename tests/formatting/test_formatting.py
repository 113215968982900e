from datetime import date
from decimal import Decimal

import pytest

from relq.errors import InvalidArgumentError
from relq.formatting import (
    MYSQL_FORMATTER,
    SQLITE_FORMATTER,
    Raw,
    format_sql,
    ident,
    literal,
    quote_ident,
    quote_qualified,
)


def test_ident_quotes_only_when_needed():
    assert ident("users") == "users"
    assert ident("User") == '"User"'
    assert ident("select") == '"select"'
    assert ident("has space") == '"has space"'


def test_quote_ident_doubles_embedded_quotes():
    assert quote_ident('we"ird') == '"we""ird"'
    assert quote_qualified("public.users") == '"public"."users"'


def test_quote_ident_rejects_empty_name():
    with pytest.raises(InvalidArgumentError):
        quote_ident("")


def test_literal_escaping():
    assert literal(None) == "NULL"
    assert literal(True) == "TRUE"
    assert literal(42) == "42"
    assert literal(Decimal("1.50")) == "1.50"
    assert literal("it's") == "'it''s'"
    assert literal("a\\b") == "E'a\\\\b'"
    assert literal(date(2024, 1, 2)) == "'2024-01-02'"
    assert literal([1, 2]) == "ARRAY[1, 2]"
    assert literal({"a": 1}) == "'{\"a\": 1}'"
    assert literal(Raw("now()")) == "now()"


def test_literal_float_specials():
    assert literal(float("nan")) == "'NaN'"
    assert literal(float("-inf")) == "'-Infinity'"


def test_literal_rejects_unknown_types():
    with pytest.raises(InvalidArgumentError):
        literal(object())


def test_empty_sequences():
    assert literal([]) == "'{}'"
    assert literal(()) == "'{}'"
    with pytest.raises(InvalidArgumentError, match="empty sequence"):
        MYSQL_FORMATTER.literal([])
    with pytest.raises(InvalidArgumentError):
        SQLITE_FORMATTER.literal(())


def test_mysql_and_sqlite_formatters():
    assert MYSQL_FORMATTER.quote_ident("order") == "`order`"
    assert MYSQL_FORMATTER.literal("a\\b") == "'a\\\\b'"
    assert MYSQL_FORMATTER.literal([1, 2]) == "(1, 2)"
    assert SQLITE_FORMATTER.literal((1,)) == "(1)"
    assert SQLITE_FORMATTER.literal(False) == "0"
    assert SQLITE_FORMATTER.literal(b"\x01\xff") == "X'01ff'"


def test_format_sql_tokens():
    sql = format_sql("SELECT %I FROM %I WHERE name = %L AND pct > 5%%", ["id", "Name"], "users", "o'neil")
    assert sql == "SELECT id, \"Name\" FROM users WHERE name = 'o''neil' AND pct > 5%"


def test_format_sql_with_too_few_arguments():
    with pytest.raises(InvalidArgumentError):
        format_sql("SELECT %I FROM %I", "id")
