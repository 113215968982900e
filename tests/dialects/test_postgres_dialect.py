from relq import columns as c
from relq.columns import DEFAULT, ensure_config
from relq.dialects import CockroachDialect, DsqlDialect, NileDialect, PostgresDialect


def test_postgres_dialect_quotes_identifiers():
    dialect = PostgresDialect()
    assert dialect.quote_identifier('table"name') == '"table""name"'
    assert dialect.format_table("public.users") == '"public"."users"'


def test_postgres_dialect_limit_clause():
    dialect = PostgresDialect()
    assert dialect.limit_clause(10, None) == "LIMIT 10"
    assert dialect.limit_clause(None, 5) == "OFFSET 5"
    assert dialect.limit_clause(10, 5) == "LIMIT 10 OFFSET 5"


def test_postgres_dialect_placeholder():
    dialect = PostgresDialect()
    assert dialect.parameter_placeholder() == "$1"
    assert dialect.parameter_placeholder(3) == "$3"


def test_postgres_column_definitions():
    dialect = PostgresDialect()
    uuid_pk = ensure_config(c.uuid("id").primary_key().default(DEFAULT.gen_random_uuid()))
    assert dialect.render_column_definition(uuid_pk) == '"id" UUID PRIMARY KEY DEFAULT gen_random_uuid()'
    name = ensure_config(c.text("name").not_null().default("anon"))
    assert dialect.render_column_definition(name) == "\"name\" TEXT NOT NULL DEFAULT 'anon'"
    author = ensure_config(c.uuid("author_id").references("users", on_delete="cascade"))
    assert dialect.render_column_definition(author) == (
        '"author_id" UUID REFERENCES "users"("id") ON DELETE CASCADE'
    )


def test_deferrable_references_depend_on_capabilities():
    tail = dict(on_delete="CASCADE", on_update="NO ACTION", deferrable=True, initially_deferred=True)
    assert PostgresDialect().render_referential_tail(**tail) == " ON DELETE CASCADE DEFERRABLE INITIALLY DEFERRED"
    assert NileDialect().render_referential_tail(**tail) == " ON DELETE CASCADE DEFERRABLE INITIALLY DEFERRED"
    assert CockroachDialect().render_referential_tail(**tail) == " ON DELETE CASCADE"
    assert DsqlDialect().render_referential_tail(None, None) == ""


def test_postgres_family_identity():
    crdb = CockroachDialect()
    assert (crdb.family, crdb.default_port, crdb.default_user) == ("postgres", 26257, "root")
    dsql = DsqlDialect()
    assert dsql.display_name == "AWS Aurora DSQL"
    assert dsql.capabilities.supports_sequences is False
    assert dsql.capabilities.supports_foreign_keys is False


def test_postgres_type_mapping():
    dialect = PostgresDialect()
    assert dialect.map_type_to_friendly("int4") == "integer"
    assert dialect.map_type_to_friendly("citext") == "citext"
    assert dialect.map_type_to_internal("timestamp with time zone") == "timestamptz"
    assert dialect.get_python_type("numeric(10,2)[]") == "list[Decimal]"
    assert dialect.get_python_type("integer array") == "list[int]"
    assert dialect.get_python_type("mood") == "str"
    assert dialect.get_python_type("geometry(point, 4326)") == "Any"
