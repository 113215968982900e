import sqlite3

import pytest

from relq.introspection import IntrospectionOptions, introspect, introspect_table, list_schemas, list_tables

SCHEMA = """
CREATE TABLE authors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    name TEXT DEFAULT 'anon'
);
CREATE TABLE posts (
    id INTEGER PRIMARY KEY,
    author_id INTEGER REFERENCES authors(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    score INTEGER,
    CONSTRAINT score_positive CHECK (score > 0)
);
CREATE INDEX idx_posts_title ON posts (title DESC) WHERE score > 10;
CREATE TABLE _relq_migrations (id INTEGER PRIMARY KEY);
CREATE VIEW popular_posts AS SELECT * FROM posts WHERE score > 100;
CREATE TRIGGER posts_touch AFTER UPDATE ON posts BEGIN SELECT 1; END;
"""


@pytest.fixture
def database_url(tmp_path):
    path = tmp_path / "blog.db"
    connection = sqlite3.connect(path)
    connection.executescript(SCHEMA)
    connection.close()
    return f"sqlite:///{path}"


def test_full_introspection(database_url):
    events = []
    bundle = introspect(
        "sqlite",
        database_url,
        lambda step, count, status: events.append((step, count, status)),
        options=IntrospectionOptions(include_triggers=True),
    )
    assert bundle.table_names() == ["authors", "posts"]
    assert [event for event in events if event[2] == "completed"] == [
        ("tables", 2, "completed"),
        ("columns", 7, "completed"),
        ("constraints", 3, "completed"),
        ("indexes", 1, "completed"),
        ("checks", 1, "completed"),
        ("triggers", 1, "completed"),
    ]
    assert bundle.version == sqlite3.sqlite_version


def test_columns_and_keys(database_url):
    bundle = introspect("sqlite", database_url)
    authors = bundle.table("authors")
    assert authors.schema == "main"
    assert authors.primary_key == ["id"]
    id_column = authors.column("id")
    assert (id_column.is_primary_key, id_column.is_autoincrement, id_column.nullable) == (True, True, False)
    assert authors.column("email").nullable is False
    assert authors.column("email").is_unique is True
    assert authors.column("name").default == "'anon'"
    assert [c.type for c in authors.constraints] == ["PRIMARY KEY", "UNIQUE"]

    posts = bundle.table("posts")
    assert posts.column("id").is_autoincrement is False
    fk = posts.foreign_keys[0]
    assert (fk.name, fk.columns, fk.ref_table, fk.ref_columns) == ("fk_posts_0", ["author_id"], "authors", ["id"])
    assert (fk.on_delete, fk.on_update) == ("CASCADE", "NO ACTION")
    assert posts.column("author_id").references.table == "authors"
    check = posts.constraints[-1]
    assert (check.name, check.definition) == ("score_positive", "CHECK (score > 0)")


def test_partial_index(database_url):
    posts = introspect_table("sqlite", database_url, "posts")
    index = posts.indexes[0]
    assert index.name == "idx_posts_title"
    assert index.column_names == ["title"]
    assert index.columns[0].direction == "DESC"
    assert index.predicate == "score > 10"
    assert index.unique is False


def test_views_only_when_requested(database_url):
    bundle = introspect("sqlite", database_url, options=IntrospectionOptions(include_views=True))
    assert bundle.table("popular_posts").kind == "view"


def test_listing(database_url):
    assert list_tables("turso", database_url) == ["authors", "posts"]
    assert list_schemas("sqlite", database_url) == ["main"]
