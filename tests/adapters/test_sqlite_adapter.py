import sqlite3

import pytest

from relq import columns as c
from relq.adapters import SQLiteAdapter, TursoAdapter, get_adapter
from relq.schema import define_table


@pytest.fixture
def database_url(tmp_path):
    path = tmp_path / "app.db"
    connection = sqlite3.connect(path)
    connection.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY AUTOINCREMENT, body TEXT NOT NULL)")
    connection.close()
    return f"sqlite:///{path}"


def test_sqlite_identity():
    adapter = SQLiteAdapter()
    assert (adapter.family, adapter.default_port, adapter.default_user) == ("sqlite", None, None)
    assert adapter.param_placeholder() == "?"
    assert isinstance(get_adapter("libsql"), TursoAdapter)


def test_connection_probe_and_version(database_url):
    adapter = SQLiteAdapter()
    assert adapter.test_connection(database_url) is True
    assert adapter.get_database_version(database_url) == sqlite3.sqlite_version
    assert TursoAdapter().test_connection("libsql://db-acme.turso.io") is False


def test_introspection_through_the_adapter(database_url):
    adapter = SQLiteAdapter()
    events = []
    bundle = adapter.introspect(database_url, lambda step, count, status: events.append(step))
    assert bundle.table_names() == ["notes"]
    assert events[:2] == ["tables", "tables"]
    notes = adapter.introspect_table(database_url, "notes")
    assert notes.column("id").is_autoincrement is True
    assert adapter.list_tables(database_url) == ["notes"]
    assert adapter.list_schemas(database_url) == ["main"]


def test_generated_ddl_runs_on_sqlite(tmp_path):
    adapter = SQLiteAdapter()
    table = define_table(
        "tasks",
        {
            "id": c.integer().primary_key().autoincrement(),
            "title": c.text().not_null(),
            "done": c.boolean().not_null().default(False),
        },
    )
    connection = sqlite3.connect(":memory:")
    connection.executescript(adapter.generate_create_table(table))
    connection.executescript(adapter.get_migration_table_ddl("_relq_migrations"))
    names = [row[0] for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")]
    connection.close()
    assert "tasks" in names
    assert "_relq_migrations" in names


def test_sqlite_migration_table_ddl():
    ddl = SQLiteAdapter().get_migration_table_ddl("_relq_migrations")
    assert "id INTEGER PRIMARY KEY AUTOINCREMENT" in ddl
    assert "applied_at TEXT DEFAULT (datetime('now'))" in ddl
