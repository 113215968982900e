import pytest

from relq.drivers import CatalogError
from relq.introspection import (
    CockroachIntrospector,
    DsqlIntrospector,
    IntrospectionOptions,
    PostgresIntrospector,
    introspect,
    introspect_table,
)
from relq.introspection import postgres as pg
from relq.introspection.postgres import decode_trigger_type, split_formatted_type

CATALOG = {
    pg.TABLES_SQL: [
        {
            "table_name": "events",
            "table_schema": "public",
            "is_partitioned": True,
            "is_unlogged": False,
            "is_temporary": False,
            "row_count": -1,
            "reloptions": "{fillfactor=70}",
            "tablespace": None,
            "partition_by": "RANGE (created_at)",
            "inherits": [],
            "table_comment": "audit trail",
        },
        {"table_name": "users", "table_schema": "public", "row_count": 42, "inherits": []},
        {"table_name": "_relq_migrations", "table_schema": "public", "inherits": []},
    ],
    pg.COLUMNS_SQL: [
        {"table_name": "events", "column_name": "id", "formatted_type": "bigint", "is_nullable": False,
         "column_default": "nextval('events_id_seq'::regclass)"},
        {"table_name": "events", "column_name": "user_id", "formatted_type": "uuid", "is_nullable": True},
        {"table_name": "events", "column_name": "tags", "formatted_type": "character varying(40)[]",
         "is_nullable": True},
        {"table_name": "events", "column_name": "total", "formatted_type": "numeric(10,2)", "is_nullable": True,
         "column_default": "(amount * 2)", "is_generated": True},
        {"table_name": "users", "column_name": "id", "formatted_type": "uuid", "is_nullable": False,
         "column_default": "gen_random_uuid()"},
        {"table_name": "users", "column_name": "email", "formatted_type": "text", "is_nullable": False,
         "collation_name": "C"},
        {"table_name": "_relq_migrations", "column_name": "id", "formatted_type": "uuid"},
    ],
    pg.CONSTRAINTS_SQL: [
        {"name": "events_user_fk", "table_name": "events", "type_code": "f", "columns": "{user_id}",
         "ref_table": "users", "ref_columns": ["id"], "on_delete": "c", "on_update": "a", "match_type": "s",
         "definition": "FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE"},
        {"name": "users_email_key", "table_name": "users", "type_code": "u", "columns": ["email"]},
        {"name": "users_pkey", "table_name": "users", "type_code": "p", "columns": ["id"]},
        {"name": "no_overlap", "table_name": "events", "type_code": "x", "columns": ["user_id"],
         "definition": "EXCLUDE USING gist (user_id WITH =)"},
    ],
    pg.INDEXES_SQL: [
        {"table_name": "events", "index_name": "events_lookup", "is_unique": False, "method": "btree",
         "seq_in_index": 2, "column_name": None, "expression": "lower(kind)", "is_desc": False,
         "predicate": "(user_id IS NOT NULL)", "reloptions": ["fillfactor=90"]},
        {"table_name": "events", "index_name": "events_lookup", "is_unique": False, "method": "btree",
         "seq_in_index": 1, "column_name": "user_id", "is_desc": True, "nulls_first": True,
         "predicate": "(user_id IS NOT NULL)", "reloptions": ["fillfactor=90"]},
        {"table_name": "events", "index_name": "events_lookup", "is_unique": False, "method": "btree",
         "seq_in_index": 3, "is_included": True, "column_name": "total"},
        {"table_name": "users", "index_name": "users_email_trgm", "method": "gin", "seq_in_index": 1,
         "column_name": "email", "opclass": "gin_trgm_ops"},
        {"table_name": "_relq_migrations", "index_name": "pk", "seq_in_index": 1, "column_name": "id"},
    ],
    pg.CHECKS_SQL: [
        {"name": "total_positive", "table_name": "events", "columns": ["total"],
         "definition": "CHECK ((total > (0)::numeric))"},
    ],
    pg.ENUMS_SQL: [
        {"name": "mood", "value": "sad"},
        {"name": "mood", "value": "ok"},
        {"name": "mood", "value": "happy"},
    ],
    pg.DOMAINS_SQL: [
        {"name": "email", "base_type": "text", "is_nullable": False, "check_definition": "CHECK (VALUE ~ '@')"},
        {"name": "email", "base_type": "text", "is_nullable": False, "check_definition": "CHECK (length(VALUE) < 255)"},
    ],
    pg.SEQUENCES_SQL: [
        {"name": "events_id_seq", "data_type": "bigint", "start_value": 1, "increment_by": 1,
         "owned_by": "events.id", "cycle": False},
    ],
    pg.COMPOSITE_TYPES_SQL: [
        {"name": "address", "attribute_name": "street", "attribute_type": "text"},
        {"name": "address", "attribute_name": "zip", "attribute_type": "character(5)"},
    ],
    pg.EXTENSIONS_SQL: [{"extname": "pg_trgm"}, {"extname": "pgcrypto"}],
    pg.FUNCTIONS_SQL: [
        {"name": "touch", "function_schema": "public", "language": "plpgsql", "return_type": "trigger",
         "arguments": "", "body": "BEGIN NEW.updated_at := now(); RETURN NEW; END;", "kind": "f"},
        {"name": "archive", "function_schema": "public", "language": "sql", "kind": "p"},
    ],
    pg.TRIGGERS_SQL: [
        {"name": "events_touch", "table_name": "events", "tgtype": 2 | 4 | 16 | 1, "function_name": "touch",
         "columns": None, "definition": "CREATE TRIGGER events_touch ..."},
    ],
    pg.COLLATIONS_SQL: [
        {"name": "german", "provider": "i", "locale": "de-DE", "is_deterministic": False},
    ],
    "SHOW server_version": [{"server_version": "16.3"}],
    pg.LIST_TABLES_SQL: [{"table_name": "events"}, {"table_name": "_relq_migrations"}],
    pg.LIST_SCHEMAS_SQL: [{"schema_name": "public"}, {"schema_name": "tenant_a"}],
}


class CatalogDriver:
    name = "postgres"
    placeholder = "%s"

    def __init__(self, catalog=None, failing=None):
        self.catalog = CATALOG if catalog is None else catalog
        self.failing = failing
        self.params = []
        self.closed = False

    def connect(self, config):
        self.config = config

    def close(self):
        self.closed = True

    def fetch_all(self, sql, params=None):
        if sql == self.failing:
            raise RuntimeError("relation does not exist")
        self.params.append(params)
        return [dict(row) for row in self.catalog.get(sql, [])]


ALL_OPTIONS = IntrospectionOptions(include_functions=True, include_triggers=True, include_collations=True)


@pytest.fixture
def bundle():
    return PostgresIntrospector(CatalogDriver(), options=ALL_OPTIONS).run()


def test_tables_skip_internal_and_keep_storage_details(bundle):
    assert bundle.table_names() == ["events", "users"]
    events = bundle.table("events")
    assert events.kind == "partitioned"
    assert events.partition_by == "RANGE (created_at)"
    assert events.storage_params == {"fillfactor": "70"}
    assert events.row_count == 0
    assert events.comment == "audit trail"
    assert bundle.table("users").row_count == 42
    assert bundle.version == "16.3"


def test_columns_decode_formatted_types(bundle):
    events = bundle.table("events")
    assert events.column("id").is_autoincrement is True
    tags = events.column("tags")
    assert (tags.data_type, tags.array_dimensions, tags.max_length) == ("character varying(40)", 1, 40)
    assert tags.full_type == "character varying(40)[]"
    total = events.column("total")
    assert (total.precision, total.scale) == (10, 2)
    assert total.generated == "(amount * 2)"
    assert total.default is None
    assert bundle.table("users").column("email").collation == "C"
    assert bundle.table("users").column("id").is_autoincrement is False


def test_constraints_link_columns(bundle):
    users = bundle.table("users")
    assert users.primary_key == ["id"]
    assert users.column("id").is_primary_key is True
    assert users.column("email").is_unique is True

    events = bundle.table("events")
    fk = events.foreign_keys[0]
    assert (fk.columns, fk.ref_table, fk.ref_columns) == (["user_id"], "users", ["id"])
    assert (fk.on_delete, fk.on_update, fk.match_type) == ("CASCADE", "NO ACTION", "SIMPLE")
    reference = events.column("user_id").references
    assert (reference.table, reference.column, reference.on_delete) == ("users", "id", "CASCADE")
    exclude = [c for c in events.constraints if c.type == "EXCLUDE"][0]
    assert exclude.method == "gist"
    check = [c for c in events.constraints if c.type == "CHECK"][0]
    assert check.name == "total_positive"


def test_indexes_group_columns_and_included(bundle):
    lookup = bundle.table("events").indexes[0]
    assert lookup.column_names == ["user_id", "lower(kind)"]
    assert lookup.include == ("total",)
    assert lookup.predicate == "(user_id IS NOT NULL)"
    assert lookup.storage_params == {"fillfactor": "90"}
    first = lookup.columns[0]
    assert (first.direction, first.nulls) == ("DESC", "FIRST")
    trgm = bundle.table("users").indexes[0]
    assert (trgm.method, trgm.columns[0].opclass) == ("gin", "gin_trgm_ops")
    assert len(bundle.indexes) == 2


def test_schema_objects(bundle):
    assert bundle.enums[0].values == ["sad", "ok", "happy"]
    assert bundle.domains[0].checks == ["CHECK (VALUE ~ '@')", "CHECK (length(VALUE) < 255)"]
    assert bundle.domains[0].nullable is False
    assert bundle.sequences[0].owned_by == "events.id"
    assert bundle.composite_types[0].attributes == [("street", "text"), ("zip", "character(5)")]
    assert bundle.extensions == ["pg_trgm", "pgcrypto"]
    assert [(f.name, f.kind) for f in bundle.functions] == [("touch", "function"), ("archive", "procedure")]
    trigger = bundle.triggers[0]
    assert (trigger.timing, trigger.event, trigger.for_each) == ("BEFORE", "INSERT OR UPDATE", "ROW")
    assert trigger.columns == []
    assert (bundle.collations[0].provider, bundle.collations[0].deterministic) == ("icu", False)


def test_optional_steps_are_skipped_by_default():
    bundle = PostgresIntrospector(CatalogDriver()).run()
    assert bundle.functions == []
    assert bundle.triggers == []
    assert bundle.collations == []
    assert bundle.enums[0].name == "mood"


def test_schema_option_is_bound():
    driver = CatalogDriver()
    PostgresIntrospector(driver, options=IntrospectionOptions(schema="tenant_a")).run(["tables"])
    assert driver.params == [("tenant_a",)]


def test_dialect_subsets():
    assert "domains" not in CockroachIntrospector.steps
    assert "collations" not in CockroachIntrospector.steps
    bundle = DsqlIntrospector(CatalogDriver(), options=ALL_OPTIONS).run()
    assert bundle.sequences == []
    assert bundle.enums == []
    assert bundle.functions[0].language == "plpgsql"


def test_progress_and_failures_through_introspect():
    events = []
    driver = CatalogDriver()
    introspect(
        "postgres",
        "postgresql://localhost/app",
        lambda step, count, status: events.append((step, count, status)),
        driver_factory=lambda dialect: driver,
    )
    assert events[:4] == [
        ("tables", 0, "started"),
        ("tables", 2, "completed"),
        ("columns", 0, "started"),
        ("columns", 6, "completed"),
    ]
    assert driver.closed is True

    failing = CatalogDriver(failing=pg.CHECKS_SQL)
    with pytest.raises(CatalogError) as excinfo:
        introspect("crdb", "postgresql://localhost/app", driver_factory=lambda dialect: failing)
    assert excinfo.value.step == "checks"
    assert failing.closed is True


def test_introspect_table_and_listing():
    users = introspect_table("postgres", "postgresql://localhost/app", "users",
                             driver_factory=lambda dialect: CatalogDriver())
    assert users.primary_key == ["id"]
    introspector = PostgresIntrospector(CatalogDriver())
    assert introspector.list_tables() == ["events"]
    assert introspector.list_schemas() == ["public", "tenant_a"]


@pytest.mark.parametrize(
    "formatted, expected",
    [
        ("integer", ("integer", 0, None, None, None)),
        ("numeric(10,2)[]", ("numeric(10,2)", 1, None, 10, 2)),
        ("numeric(8)", ("numeric(8)", 0, None, 8, 0)),
        ("character(5)", ("character(5)", 0, 5, None, None)),
        ("timestamp(3) with time zone", ("timestamp(3) with time zone", 0, None, 3, None)),
        ("text[][]", ("text", 2, None, None, None)),
    ],
)
def test_split_formatted_type(formatted, expected):
    assert split_formatted_type(formatted) == expected


def test_decode_trigger_type():
    assert decode_trigger_type(64 | 8 | 1) == ("INSTEAD OF", "DELETE", "ROW")
    assert decode_trigger_type(32) == ("AFTER", "TRUNCATE", "STATEMENT")
