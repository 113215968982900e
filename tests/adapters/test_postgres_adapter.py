import logging

import pytest

from relq import columns as c
from relq.adapters import (
    CockroachAdapter,
    DsqlAdapter,
    NileAdapter,
    PostgresAdapter,
    get_adapter,
)
from relq.errors import InvalidArgumentError
from relq.introspection import TableInfo, ColumnInfo
from relq.schema import define_table


class ScriptedDriver:
    def __init__(self, rows=None, error=None):
        self.rows = rows or {}
        self.error = error
        self.closed = False
        self.config = None

    def connect(self, config):
        self.config = config
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True

    def fetch_all(self, sql, params=None):
        return [dict(row) for row in self.rows.get(sql.strip(), [])]


def adapter_with(cls, driver):
    return cls(driver_factory=lambda dialect: driver)


def test_registry_resolves_aliases():
    assert isinstance(get_adapter("postgresql"), PostgresAdapter)
    assert isinstance(get_adapter("crdb"), CockroachAdapter)
    assert repr(get_adapter("aurora-dsql")) == "DsqlAdapter(dialect='dsql')"
    with pytest.raises(InvalidArgumentError):
        get_adapter("oracle")


def test_identity_and_quoting():
    adapter = PostgresAdapter()
    assert (adapter.family, adapter.display_name, adapter.default_port) == ("postgres", "PostgreSQL", 5432)
    assert adapter.quote_char == '"'
    assert adapter.quote_identifier("order") == '"order"'
    assert adapter.param_placeholder(2) == "$2"
    assert adapter.escape_string("it's") == "'it''s'"
    assert CockroachAdapter().default_user == "root"


def test_type_support_probes():
    dsql = DsqlAdapter()
    assert dsql.is_type_supported("SERIAL") is False
    assert dsql.get_alternative_type("SERIAL") == "uuid() + gen_random_uuid()"
    assert dsql.is_type_supported("uuid") is True
    assert dsql.get_alternative_type("uuid") is None
    assert dsql.get_alternative("jsonb_column") == "text()"
    assert PostgresAdapter().is_type_supported("jsonb") is True


def test_generate_ddl():
    adapter = PostgresAdapter()
    users = define_table("users", {"id": c.uuid().primary_key(), "email": c.text().not_null()})
    sql = adapter.generate_create_table(users)
    assert sql.startswith('CREATE TABLE "users" (')
    assert adapter.generate_create_index(users) == []
    assert adapter.generate_drop_table("users", cascade=True) == 'DROP TABLE IF EXISTS "users" CASCADE;'


def test_generate_alter_table_warns_on_destructive_changes(caplog):
    adapter = PostgresAdapter()
    before = define_table("users", {"id": c.uuid().primary_key(), "legacy": c.text()})
    after = define_table("users", {"id": c.uuid().primary_key()})
    with caplog.at_level(logging.WARNING, logger="relq.adapters.postgres"):
        statements = adapter.generate_alter_table(before, after)
    assert [statement.destructive for statement in statements] == [True]
    assert "contains 1 destructive statement(s)" in caplog.text


def test_migration_table_ddl():
    postgres = PostgresAdapter().get_migration_table_ddl("_relq_migrations")
    assert postgres.startswith('CREATE TABLE IF NOT EXISTS "_relq_migrations" (')
    assert "id UUID PRIMARY KEY DEFAULT gen_random_uuid()" in postgres
    assert "metadata JSONB" in postgres
    assert "metadata TEXT" in DsqlAdapter().get_migration_table_ddl("_relq_migrations")


def test_connection_probe_and_versions(caplog):
    driver = ScriptedDriver({"SELECT 1": [{"?column?": 1}], "SHOW server_version": [{"server_version": "16.3"}]})
    adapter = adapter_with(PostgresAdapter, driver)
    assert adapter.test_connection("postgresql://localhost/app") is True
    assert driver.closed is True
    assert adapter.get_database_version("postgresql://localhost/app") == "16.3"
    assert adapter_with(DsqlAdapter, driver).get_database_version("postgresql://localhost/app") == (
        "Aurora DSQL (PostgreSQL 16.3)"
    )

    crdb_driver = ScriptedDriver(
        {"SELECT version() AS version": [{"version": "CockroachDB CCL v23.1.11 (x86_64-pc-linux-gnu)"}]}
    )
    assert adapter_with(CockroachAdapter, crdb_driver).get_database_version("postgresql://h/app") == "v23.1.11"
    assert adapter_with(PostgresAdapter, ScriptedDriver()).get_database_version("postgresql://h/app") == "unknown"

    failing = adapter_with(PostgresAdapter, ScriptedDriver(error=OSError("connection refused")))
    with caplog.at_level(logging.WARNING, logger="relq.adapters.postgres"):
        assert failing.test_connection("postgresql://localhost/app") is False
    assert "Connection test against PostgreSQL failed: connection refused" in caplog.text


def test_listing_through_the_adapter():
    from relq.introspection.postgres import LIST_SCHEMAS_SQL, LIST_TABLES_SQL

    driver = ScriptedDriver(
        {
            LIST_TABLES_SQL.strip(): [{"table_name": "users"}, {"table_name": "_relq_migrations"}],
            LIST_SCHEMAS_SQL.strip(): [{"schema_name": "public"}],
        }
    )
    adapter = adapter_with(NileAdapter, driver)
    assert adapter.list_tables("postgresql://localhost/app") == ["users"]
    assert adapter.list_schemas("postgresql://localhost/app") == ["public"]
    assert driver.closed is True


def test_validation_entry_points():
    dsql = DsqlAdapter()
    assert dsql.validate_sql("CREATE TABLE t (id SERIAL PRIMARY KEY)").valid is False
    table = define_table("t", {"id": c.uuid().primary_key()})
    assert dsql.validate_table(table).valid is True


def test_nile_tenant_tables():
    adapter = NileAdapter()
    tenant = TableInfo(name="todos", columns=[ColumnInfo(name="tenant_id", data_type="uuid")])
    assert adapter.is_tenant_table(tenant) is True
    assert adapter.is_tenant_table(TableInfo(name="plans")) is False
