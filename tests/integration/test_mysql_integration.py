import os
import uuid

import pytest

from relq import columns as c
from relq.adapters import MySQLAdapter
from relq.drivers import ConnectionConfig, DriverError, create_driver
from relq.schema import define_table


def _require_mysql():
    pytest.importorskip("pymysql")
    dsn = os.getenv("RELQ_TEST_MYSQL_DSN")
    if not dsn:
        pytest.skip("RELQ_TEST_MYSQL_DSN not set; skipping MySQL integration test")
    driver = create_driver("mysql")
    try:
        driver.connect(ConnectionConfig.from_dsn(dsn, autocommit=True))
    except DriverError as exc:  # pragma: no cover - environment dependent
        pytest.skip(f"Cannot connect to MySQL for integration test: {exc}")
    return dsn, driver


def test_mysql_introspects_generated_table():
    dsn, driver = _require_mysql()
    adapter = MySQLAdapter()
    name = f"relq_mysql_integration_{uuid.uuid4().hex[:8]}"
    table = define_table(
        name,
        {
            "id": c.serial().primary_key(),
            "title": c.varchar(200).not_null(),
        },
    )
    try:
        driver.execute(adapter.generate_create_table(table))
        assert adapter.get_database_version(dsn)
        info = adapter.introspect_table(dsn, name)
        assert info is not None
        assert info.column("id").is_autoincrement is True
        assert info.column("title").nullable is False
    finally:
        driver.execute(adapter.generate_drop_table(name))
        driver.close()
