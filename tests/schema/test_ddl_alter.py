import logging
import sqlite3

import pytest

from relq import columns as c
from relq.columns import DEFAULT
from relq.errors import InvalidArgumentError
from relq.schema import DDLBuilder, composite_type, define_table, domain, index, pg_enum, sequence
from relq.schema.ddl import REBUILD_PREFIX


def users_v1():
    return define_table(
        "users",
        {
            "id": c.integer().primary_key(),
            "email": c.varchar(100),
            "nickname": c.text(),
        },
    )


def users_v2():
    return define_table(
        "users",
        {
            "id": c.integer().primary_key(),
            "email": c.varchar(255).not_null(),
            "status": c.text().default("active"),
        },
    )


def test_alter_table_adds_drops_and_modifies_on_postgres(caplog):
    with caplog.at_level(logging.WARNING, logger="relq.schema.ddl"):
        statements = DDLBuilder("postgres").alter_table_statements(users_v1(), users_v2())
    sql = [stmt.sql for stmt in statements]
    assert sql == [
        "ALTER TABLE \"users\" ADD COLUMN \"status\" TEXT DEFAULT 'active';",
        'ALTER TABLE "users" DROP COLUMN "nickname";',
        'ALTER TABLE "users" ALTER COLUMN "email" TYPE VARCHAR(255);',
        'ALTER TABLE "users" ALTER COLUMN "email" SET NOT NULL;',
    ]
    assert [stmt.destructive for stmt in statements] == [False, True, True, True]
    assert all(stmt.type == "ALTER" for stmt in statements)
    assert all(stmt.affects == ("users",) for stmt in statements)
    assert "DROP COLUMN generated for users.nickname" in caplog.text


def test_unchanged_tables_produce_no_statements():
    assert DDLBuilder().alter_table_statements(users_v1(), users_v1()) == []


def test_default_changes_set_and_drop():
    before = define_table("t", {"id": c.integer().primary_key(), "n": c.integer().default(1)})
    after = define_table("t", {"id": c.integer().primary_key(), "n": c.integer()})
    statements = DDLBuilder().alter_table_statements(before, after)
    assert [stmt.sql for stmt in statements] == ['ALTER TABLE "t" ALTER COLUMN "n" DROP DEFAULT;']
    statements = DDLBuilder().alter_table_statements(after, before)
    assert [stmt.sql for stmt in statements] == ['ALTER TABLE "t" ALTER COLUMN "n" SET DEFAULT 1;']


def test_mysql_uses_modify_column():
    statements = DDLBuilder("mysql").alter_table_statements(users_v1(), users_v2())
    sql = [stmt.sql for stmt in statements]
    assert "ALTER TABLE `users` MODIFY COLUMN `email` VARCHAR(255) NOT NULL;" in sql
    assert "ALTER TABLE `users` DROP COLUMN `nickname`;" in sql


def test_sqlite_rebuilds_table_for_column_changes(caplog):
    with caplog.at_level(logging.WARNING, logger="relq.schema.ddl"):
        statements = DDLBuilder("sqlite").alter_table_statements(users_v1(), users_v2())
    temp = f'"{REBUILD_PREFIX}users"'
    assert [stmt.type for stmt in statements] == ["CREATE", "ALTER", "DROP", "ALTER"]
    assert statements[0].sql.startswith(f"CREATE TABLE {temp} (")
    assert statements[1].sql == f'INSERT INTO {temp} ("id", "email") SELECT "id", "email" FROM "users";'
    assert statements[2].sql == 'DROP TABLE "users";'
    assert statements[2].destructive is True
    assert statements[3].sql == f'ALTER TABLE {temp} RENAME TO "users";'
    assert "Rebuilding table" in caplog.text


def test_sqlite_adding_a_column_does_not_rebuild():
    before = define_table("t", {"id": c.integer().primary_key()})
    after = define_table("t", {"id": c.integer().primary_key(), "note": c.text()})
    statements = DDLBuilder("sqlite").alter_table_statements(before, after)
    assert [stmt.sql for stmt in statements] == ['ALTER TABLE "t" ADD COLUMN "note" TEXT;']


def test_drop_table_and_index(caplog):
    builder = DDLBuilder()
    with caplog.at_level(logging.WARNING, logger="relq.schema.ddl"):
        assert builder.drop_table_sql("users", cascade=True) == 'DROP TABLE IF EXISTS "users" CASCADE;'
    assert "confirm destructive migration" in caplog.text
    assert DDLBuilder("sqlite").drop_table_sql("users", cascade=True) == 'DROP TABLE IF EXISTS "users";'
    assert builder.drop_index_sql("idx_users_email") == 'DROP INDEX IF EXISTS "idx_users_email";'
    assert DDLBuilder("mysql").drop_index_sql("idx", table="users") == "DROP INDEX `idx` ON `users`;"
    with pytest.raises(InvalidArgumentError):
        DDLBuilder("mysql").drop_index_sql("idx")


def test_domain_sql_with_checks():
    email = domain(
        "email_address",
        c.text(),
        not_null=True,
        checks={"email_format": "VALUE ~* '^.+@.+$'"},
    )
    assert email.to_sql() == (
        "CREATE DOMAIN \"email_address\" AS TEXT NOT NULL CONSTRAINT \"email_format\" CHECK (VALUE ~* '^.+@.+$');"
    )
    positive = domain("positive_int", "INTEGER", default=1).check("positive", lambda value: value.gt(0))
    assert positive.to_sql() == (
        'CREATE DOMAIN "positive_int" AS INTEGER DEFAULT 1 CONSTRAINT "positive" CHECK ((VALUE > 0));'
    )
    assert positive.column().config.sql_type == "positive_int"
    with pytest.raises(InvalidArgumentError):
        email.to_sql("mysql")


def test_enum_composite_and_sequence_sql():
    mood = pg_enum("mood", ["sad", "ok", "happy"])
    assert mood.to_sql() == "CREATE TYPE \"mood\" AS ENUM ('sad', 'ok', 'happy');"
    with pytest.raises(InvalidArgumentError):
        pg_enum("mood", ["sad", "sad"])

    address = composite_type("address", {"street": c.text(), "zip": "VARCHAR(10)"})
    assert address.to_sql() == 'CREATE TYPE "address" AS (\n  "street" TEXT,\n  "zip" VARCHAR(10)\n);'

    seq = sequence("order_seq", start=100, increment=5, cycle=True)
    assert seq.to_sql() == 'CREATE SEQUENCE "order_seq" INCREMENT BY 5 START WITH 100 CYCLE;'
    assert seq.to_sql("mariadb") == "CREATE SEQUENCE `order_seq` INCREMENT BY 5 START WITH 100 CYCLE;"
    with pytest.raises(InvalidArgumentError):
        seq.to_sql("sqlite")
    with pytest.raises(InvalidArgumentError):
        sequence("bad", increment=0)
    with pytest.raises(InvalidArgumentError):
        sequence("bad", unknown=1)


def test_add_column_with_reference_on_mysql():
    table = define_table("posts", {"id": c.serial().primary_key()})
    author = define_table(
        "posts", {"author_id": c.integer().references("users", on_delete="cascade")}
    ).column("author_id")
    assert DDLBuilder("mysql").add_column_sql(table, author) == (
        "ALTER TABLE `posts` ADD COLUMN `author_id` INT, "
        "ADD FOREIGN KEY (`author_id`) REFERENCES `users`(`id`) ON DELETE CASCADE;"
    )


def test_uuid_default_rewrites_per_dialect():
    table = define_table("t", {"id": c.uuid().primary_key().default(DEFAULT.gen_random_uuid())})
    assert "`id` CHAR(36) NOT NULL PRIMARY KEY DEFAULT (UUID())" in table.to_sql("mysql")
    assert '"id" TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16))))' in table.to_sql("sqlite")


def test_sqlite_rebuild_restores_indexes(tmp_path):
    before = define_table(
        "users",
        {"id": c.integer().primary_key(), "email": c.integer()},
        indexes=[index("email", name="users_email_idx")],
    )
    after = define_table(
        "users",
        {"id": c.integer().primary_key(), "email": c.text()},
        indexes=[index("email", name="users_email_idx")],
    )
    builder = DDLBuilder("sqlite")
    statements = builder.alter_table_statements(before, after)
    assert statements[-1].sql == 'CREATE INDEX "users_email_idx" ON "users" ("email");'

    connection = sqlite3.connect(tmp_path / "app.db")
    connection.execute(builder.create_table_sql(before))
    for idx in before.indexes:
        connection.execute(builder.create_index_sql(before, idx))
    connection.execute("INSERT INTO users (id, email) VALUES (1, 42)")
    for statement in statements:
        connection.execute(statement.sql)
    index_names = [row[1] for row in connection.execute("PRAGMA index_list('users')")]
    email_type = [row[2] for row in connection.execute("PRAGMA table_info('users')") if row[1] == "email"]
    rows = connection.execute("SELECT id FROM users").fetchall()
    connection.close()
    assert index_names == ["users_email_idx"]
    assert email_type == ["TEXT"]
    assert rows == [(1,)]
