import pytest

from relq import columns as c
from relq.columns import DEFAULT, ensure_config
from relq.dialects import SQLiteDialect, TursoDialect
from relq.errors import InvalidArgumentError


def test_sqlite_identifier_quoting():
    dialect = SQLiteDialect()
    assert dialect.quote_identifier("table") == '"table"'
    assert dialect.quote_identifier('bad"name') == '"bad""name"'
    assert dialect.format_table("main.users") == '"main.users"'


def test_sqlite_limit_clause():
    dialect = SQLiteDialect()
    assert dialect.limit_clause(10, None) == "LIMIT 10"
    assert dialect.limit_clause(10, 5) == "LIMIT 10 OFFSET 5"
    assert dialect.limit_clause(None, 5) == "LIMIT -1 OFFSET 5"


def test_sqlite_column_definition():
    dialect = SQLiteDialect()
    rendered = dialect.render_column_definition(ensure_config(c.text("name").not_null()))
    assert rendered == '"name" TEXT NOT NULL'


def test_sqlite_affinities_and_rewrites():
    dialect = SQLiteDialect()
    assert dialect.render_type(ensure_config(c.bigint())) == "INTEGER"
    assert dialect.render_type(ensure_config(c.numeric(precision=10, scale=2))) == "NUMERIC"
    assert dialect.render_type(ensure_config(c.jsonb())) == "TEXT"
    assert dialect.render_type(ensure_config(c.integer().array())) == "TEXT"
    uuid_pk = ensure_config(c.uuid("id").primary_key().default(DEFAULT.gen_random_uuid()))
    assert dialect.render_column_definition(uuid_pk) == (
        '"id" TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16))))'
    )
    created = ensure_config(c.timestamptz("created").default(DEFAULT.now()))
    assert dialect.render_column_definition(created) == '"created" TEXT DEFAULT CURRENT_TIMESTAMP'


def test_sqlite_autoincrement_requires_integer_primary_key():
    dialect = SQLiteDialect()
    pk = ensure_config(c.integer("id").primary_key().autoincrement())
    assert dialect.render_column_definition(pk) == '"id" INTEGER PRIMARY KEY AUTOINCREMENT'
    with pytest.raises(InvalidArgumentError):
        dialect.render_column_definition(ensure_config(c.integer("n").autoincrement()))


def test_sqlite_table_options():
    dialect = SQLiteDialect()
    assert dialect.table_suffix({"strict": True, "without_rowid": True}) == "STRICT, WITHOUT ROWID"
    assert dialect.table_suffix({}) == ""
    assert dialect.render_collation("NOCASE") == "COLLATE NOCASE"


def test_turso_shares_the_sqlite_grammar():
    dialect = TursoDialect()
    assert (dialect.name, dialect.family, dialect.display_name) == ("turso", "sqlite", "Turso")
    assert dialect.parameter_placeholder(4) == "?"
    assert dialect.default_port is None
