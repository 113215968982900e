import logging

import pytest

from relq import columns as c
from relq.columns import DEFAULT
from relq.errors import InvalidArgumentError
from relq.schema import (
    check,
    define_table,
    foreign_key,
    index,
    partition_by,
    range_partition,
    unique,
)


def make_users(**options):
    return define_table(
        "users",
        {
            "id": c.uuid().primary_key().default(DEFAULT.gen_random_uuid()),
            "email": c.varchar(255).not_null().unique(),
        },
        **options,
    )


def test_create_table_renders_inline_primary_key_and_unique():
    sql = make_users().to_sql()
    assert sql.startswith('CREATE TABLE "users" (')
    assert '"id" UUID PRIMARY KEY DEFAULT gen_random_uuid()' in sql
    assert '"email" VARCHAR(255) NOT NULL UNIQUE' in sql
    assert sql.endswith(");")


def test_columns_keep_declaration_order_and_sql_names():
    table = define_table(
        "accounts",
        {
            "id": c.serial().primary_key(),
            "display_name": c.text("name"),
            "created": c.timestamptz().default(DEFAULT.now()),
        },
    )
    assert table.column_names() == ["id", "name", "created"]
    assert table.sql_column("display_name") == "name"
    assert table.column("name").name == "display_name"
    assert table.has_column("missing") is False
    sql = table.to_sql()
    assert sql.index('"id"') < sql.index('"name"') < sql.index('"created"')


def test_declared_columns_are_copied_into_the_table():
    email = c.varchar(255)
    table = define_table("users", {"email": email})
    table.column("email").nullable = False
    assert email.config.nullable is True


def test_primary_key_columns_shared_between_tables_stay_nullable_in_the_builder():
    user_id = c.uuid("uid")
    memberships = define_table(
        "memberships", {"user_id": user_id, "group_id": c.uuid()}, primary_key=["uid", "group_id"]
    )
    audit = define_table("audit", {"id": c.serial().primary_key(), "user_id": user_id})
    assert memberships.column("user_id").nullable is False
    assert audit.column("uid").nullable is True
    assert user_id.config.nullable is True
    assert list(memberships.columns) == ["user_id", "group_id"]


def test_composite_primary_key_becomes_table_constraint():
    table = define_table(
        "memberships",
        {"user_id": c.uuid(), "group_id": c.uuid(), "role": c.text()},
        primary_key=["user_id", "group_id"],
    )
    sql = table.to_sql()
    assert 'PRIMARY KEY ("user_id", "group_id")' in sql
    assert '"user_id" UUID NOT NULL' in sql
    assert table.inline_primary_key is False


def test_constraints_render_after_columns():
    table = define_table(
        "orders",
        {
            "id": c.bigserial().primary_key(),
            "user_id": c.uuid().not_null(),
            "status": c.varchar(20).check("orders_status_check", ["pending", "paid"]),
            "total": c.numeric(precision=10, scale=2),
        },
        unique_constraints=[unique("user_id", "status", name="orders_user_status_key")],
        check_constraints=[check("total >= 0", name="orders_total_positive")],
        foreign_keys=[foreign_key("user_id", "users", on_delete="cascade")],
    )
    sql = table.to_sql()
    assert 'CONSTRAINT "orders_user_status_key" UNIQUE ("user_id", "status")' in sql
    assert "CONSTRAINT \"orders_status_check\" CHECK (\"status\" IN ('pending', 'paid'))" in sql
    assert 'CONSTRAINT "orders_total_positive" CHECK (total >= 0)' in sql
    assert 'FOREIGN KEY ("user_id") REFERENCES "users"("id") ON DELETE CASCADE' in sql
    assert sql.index('"total" NUMERIC(10, 2)') < sql.index("orders_user_status_key")


def test_inline_reference_on_postgres():
    table = define_table(
        "posts",
        {
            "id": c.uuid().primary_key(),
            "author_id": c.uuid().references("users", on_delete="set null", initially_deferred=True),
        },
    )
    assert (
        '"author_id" UUID REFERENCES "users"("id") ON DELETE SET NULL DEFERRABLE INITIALLY DEFERRED'
        in table.to_sql()
    )


def test_schema_qualified_table_and_comments():
    table = define_table(
        "users",
        {"id": c.uuid().primary_key(), "email": c.text().comment("login")},
        schema="app",
        comment="People who sign in",
        if_not_exists=True,
    )
    statements = table.to_sql().split("\n\n")
    assert statements[0].startswith('CREATE TABLE IF NOT EXISTS "app"."users" (')
    assert statements[1] == "COMMENT ON TABLE \"app\".\"users\" IS 'People who sign in';"
    assert statements[2] == "COMMENT ON COLUMN \"app\".\"users\".\"email\" IS 'login';"
    assert table.qualified_name == "app.users"


def test_identity_and_generated_columns():
    table = define_table(
        "items",
        {
            "id": c.bigint().generated_always_as_identity(start=100),
            "price": c.numeric(precision=10, scale=2),
            "qty": c.integer(),
            "total": c.numeric().generated_always_as("price * qty"),
        },
    )
    sql = table.to_sql()
    assert '"id" BIGINT GENERATED ALWAYS AS IDENTITY (START WITH 100) NOT NULL' in sql
    assert '"total" NUMERIC GENERATED ALWAYS AS (price * qty) STORED' in sql


def test_partitioned_table_emits_children():
    table = define_table(
        "events",
        {"id": c.uuid(), "created_at": c.timestamptz().not_null()},
        primary_key=["id", "created_at"],
        partition_by=partition_by("range", "created_at"),
        partitions=[range_partition("events_2024", "2024-01-01", "2025-01-01")],
    )
    statements = table.to_sql().split("\n\n")
    assert statements[0].endswith(') PARTITION BY RANGE ("created_at");')
    assert statements[1] == (
        "CREATE TABLE \"events_2024\" PARTITION OF \"events\" FOR VALUES FROM ('2024-01-01') TO ('2025-01-01');"
    )
    with pytest.raises(InvalidArgumentError):
        table.to_sql("sqlite")


def test_mysql_rendering():
    table = define_table(
        "orders",
        {
            "id": c.serial().primary_key(),
            "user_id": c.integer().not_null().references("users", on_delete="cascade"),
            "paid": c.boolean().default(False),
            "created_at": c.timestamptz().default(DEFAULT.now()),
        },
    )
    sql = table.to_sql("mysql")
    assert sql.startswith("CREATE TABLE `orders` (")
    assert "`id` INT NOT NULL AUTO_INCREMENT PRIMARY KEY" in sql
    assert "`paid` TINYINT(1) DEFAULT FALSE" in sql
    assert "`created_at` TIMESTAMP DEFAULT CURRENT_TIMESTAMP" in sql
    assert "FOREIGN KEY (`user_id`) REFERENCES `users`(`id`) ON DELETE CASCADE" in sql
    assert sql.endswith(") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;")


def test_sqlite_rendering_with_strict_and_without_rowid():
    table = define_table(
        "kv",
        {"key": c.text().primary_key(), "value": c.jsonb().not_null()},
        strict=True,
        without_rowid=True,
    )
    sql = table.to_sql("sqlite")
    assert '"key" TEXT PRIMARY KEY' in sql
    assert '"value" TEXT NOT NULL' in sql
    assert sql.endswith(") STRICT, WITHOUT ROWID;")


def test_sqlite_autoincrement_primary_key():
    table = define_table("logs", {"id": c.integer().primary_key().autoincrement(), "line": c.text()})
    assert '"id" INTEGER PRIMARY KEY AUTOINCREMENT' in table.to_sql("sqlite")


def test_sqlite_rowid_constraints_are_validated():
    with pytest.raises(InvalidArgumentError):
        define_table("kv", {"key": c.text()}, without_rowid=True)
    with pytest.raises(InvalidArgumentError):
        define_table("kv", {"id": c.integer().primary_key().autoincrement()}, without_rowid=True)


def test_indexes_get_default_names_and_render_per_dialect(caplog):
    table = define_table(
        "users",
        {"id": c.uuid().primary_key(), "email": c.text(), "created_at": c.timestamptz()},
        indexes=[
            index("email", unique=True, where="deleted_at IS NULL"),
            index("created_at DESC NULLS LAST"),
        ],
    )
    assert [idx.name for idx in table.indexes] == ["idx_users_email", "idx_users_created_at"]
    postgres = table.to_create_index_sql()
    assert postgres[0] == 'CREATE UNIQUE INDEX "idx_users_email" ON "users" ("email") WHERE deleted_at IS NULL;'
    assert postgres[1] == 'CREATE INDEX "idx_users_created_at" ON "users" ("created_at" DESC NULLS LAST);'

    with caplog.at_level(logging.WARNING, logger="relq.schema.ddl"):
        mysql = table.to_create_index_sql("mysql")
    assert mysql[0] == "CREATE UNIQUE INDEX `idx_users_email` ON `users` (`email`);"
    assert mysql[1] == "CREATE INDEX `idx_users_created_at` ON `users` (`created_at` DESC);"
    assert "does not support WHERE" in caplog.text


def test_index_method_and_include():
    table = define_table(
        "docs",
        {"id": c.uuid().primary_key(), "body": c.jsonb(), "title": c.text()},
        indexes=[index("body", using="gin", name="docs_body_gin", include=("title",))],
    )
    assert table.to_create_index_sql()[0] == (
        'CREATE INDEX "docs_body_gin" ON "docs" USING gin ("body") INCLUDE ("title");'
    )


def test_invalid_definitions_raise():
    with pytest.raises(InvalidArgumentError):
        define_table("", {"id": c.uuid()})
    with pytest.raises(InvalidArgumentError):
        define_table("empty", {})
    with pytest.raises(InvalidArgumentError):
        define_table("dupes", {"a": c.text("x"), "b": c.text("x")})
    with pytest.raises(InvalidArgumentError):
        define_table("users", {"id": c.uuid()}, not_an_option=True)
    with pytest.raises(InvalidArgumentError):
        define_table("users", {"id": c.uuid()}, indexes=[index("missing")])


def test_to_ast_describes_columns_and_indexes():
    table = make_users(indexes=[index("email")])
    ast = table.to_ast()
    assert ast["name"] == "users"
    assert [col["name"] for col in ast["columns"]] == ["id", "email"]
    assert ast["columns"][0]["default"] == {"kind": "expression", "sql": "gen_random_uuid()"}
    assert ast["columns"][1]["unique"] is True
    assert ast["primary_key"] == ["id"]
    assert ast["indexes"][0]["columns"][0]["name"] == "email"
