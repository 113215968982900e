import os
import uuid

import pytest

from relq import columns as c
from relq.adapters import PostgresAdapter
from relq.drivers import ConnectionConfig, DriverError, create_driver
from relq.schema import define_table


def _require_postgres():
    pytest.importorskip("psycopg")
    dsn = os.getenv("RELQ_TEST_POSTGRES_DSN")
    if not dsn:
        pytest.skip("RELQ_TEST_POSTGRES_DSN not set; skipping Postgres integration test")
    driver = create_driver("postgres")
    try:
        driver.connect(ConnectionConfig.from_dsn(dsn, autocommit=True))
    except DriverError as exc:  # pragma: no cover - environment dependent
        pytest.skip(f"Cannot connect to Postgres for integration test: {exc}")
    return dsn, driver


def test_postgres_introspects_generated_table():
    dsn, driver = _require_postgres()
    adapter = PostgresAdapter()
    name = f"relq_pg_integration_{uuid.uuid4().hex[:8]}"
    table = define_table(
        name,
        {
            "id": c.uuid().primary_key().default(c.DEFAULT.gen_random_uuid()),
            "email": c.varchar(255).not_null().unique(),
            "visits": c.integer().default(0),
        },
    )
    try:
        driver.execute(adapter.generate_create_table(table))
        assert adapter.test_connection(dsn) is True
        info = adapter.introspect_table(dsn, name)
        assert info is not None
        assert [column.name for column in info.columns] == ["id", "email", "visits"]
        assert info.column("email").nullable is False
        assert name in adapter.list_tables(dsn)
    finally:
        driver.execute(adapter.generate_drop_table(name))
        driver.close()
