import logging

import pytest

from relq import columns as c
from relq.compat import (
    MariaDBValidator,
    PlanetScaleValidator,
    TursoValidator,
    get_validator,
    validate_schema,
    validate_sql,
    validate_table,
)
from relq.compat.validators import mask_sql, normalize_type
from relq.errors import InvalidArgumentError
from relq.introspection.models import (
    ColumnInfo,
    FunctionInfo,
    IndexColumnInfo,
    IndexInfo,
    SchemaBundle,
    SequenceInfo,
    TableInfo,
    TriggerInfo,
)
from relq.schema import define_table, foreign_key, index


def test_dsql_rejects_serial_and_jsonb_columns():
    result = validate_sql("CREATE TABLE t (id SERIAL PRIMARY KEY, data JSONB)", "dsql")
    assert result.codes() == ["SERIAL", "JSONB_COLUMN"]
    assert [d.severity for d in result.errors] == ["error", "error"]
    assert [d.alternative for d in result.errors] == ["uuid() + gen_random_uuid()", "text()"]
    serial = result.by_code("SERIAL")[0]
    assert serial.rule_code == "DSQL-TYPE-001"
    assert serial.location == {"line": 1}
    assert serial.auto_fix.replacement_type == "uuid"
    assert result.has_code("DSQL-TYPE-002")
    assert result.valid is False


def test_casts_literals_and_comments_are_not_scanned():
    sql = "SELECT data::jsonb, 'LISTEN here' FROM t -- NOTIFY later\n"
    assert validate_sql(sql, "dsql").diagnostics == []
    assert validate_sql("SELECT 'CREATE SEQUENCE s'", "mysql").valid is True


def test_cast_call_targets_are_not_scanned():
    sql = "SELECT CAST(data AS jsonb), cast(coalesce(x, y) as json)\nFROM t WHERE CAST(n AS INTEGER) > 0"
    assert validate_sql(sql, "dsql").diagnostics == []
    flagged = validate_sql("SELECT CAST(data AS text) FROM t;\nCREATE TABLE u (payload JSON)", "dsql")
    assert flagged.codes() == ["JSON_COLUMN"]
    assert flagged.diagnostics[0].location == {"line": 2}


def test_findings_carry_line_numbers_and_location():
    sql = "CREATE TABLE a (id INT);\nCREATE TABLE b (price MONEY);"
    result = validate_sql(sql, "dsql", "migrations/0001.sql")
    (diag,) = result.diagnostics
    assert diag.code == "MONEY"
    assert diag.location == {"object": "migrations/0001.sql", "line": 2}
    assert diag.detected == "MONEY"


def test_dsql_structural_checks_on_table_definitions():
    posts = define_table(
        "posts",
        {
            "id": c.uuid().primary_key(),
            "author_id": c.uuid().references("users"),
            "body": c.varchar(70000),
        },
        indexes=[index("body", using="gin", name="posts_body_gin")],
    )
    result = validate_schema(posts, "dsql")
    assert sorted(result.codes()) == ["DSQL-CONS-002", "DSQL-IDX-001", "DSQL-LIMIT-001"]
    assert [d.code for d in result.warnings] == ["DSQL-LIMIT-001", "DSQL-CONS-002"]
    assert result.by_code("DSQL-IDX-001")[0].location == {"table": "posts", "index": "posts_body_gin"}


def test_dsql_schema_objects():
    bundle = SchemaBundle(
        sequences=[SequenceInfo("order_seq")],
        functions=[FunctionInfo("touch", language="plpgsql", definition="BEGIN NEW.at := now(); END")],
        triggers=[TriggerInfo("touch_orders", "orders", "UPDATE", function_name="touch")],
        extensions=["plpgsql", "pg_trgm"],
    )
    result = validate_schema(bundle, "dsql")
    assert result.codes() == ["DSQL-TRIG-001", "DSQL-SEQ-001", "DSQL-EXT-001", "DSQL-FN-001"]
    assert result.by_code("DSQL-EXT-001")[0].detected == "CREATE EXTENSION pg_trgm"


def test_dsql_serial_column_from_definition_reports_once():
    table = define_table("t", {"id": c.serial().primary_key()})
    result = validate_table(table, "dsql")
    assert result.codes() == ["SERIAL"]
    assert result.errors[0].location == {"table": "t", "column": "id"}


def test_cockroach_deferrable_fk_and_spgist_index():
    accounts = define_table("accounts", {"id": c.uuid().primary_key()})
    transfers = define_table(
        "transfers",
        {"id": c.uuid().primary_key(), "accountId": c.uuid("account_id"), "location": c.text()},
        foreign_keys=[foreign_key("account_id", "accounts", deferrable=True, initially_deferred=True)],
        indexes=[index("location", using="spgist", name="transfers_location")],
    )
    result = validate_schema([accounts, transfers], "cockroachdb")
    assert result.has_code("CRDB_E101")
    assert result.has_code("CRDB_E200")
    assert result.has_code("CRDB_E102")
    assert result.codes()[-1] == "CRDB_I001"
    assert result.by_code("CRDB_I001")[0].severity == "info"


def test_cockroach_sql_scan_links_features_to_catalog_codes():
    sql = (
        "CREATE TABLE transfers (\n"
        "  id UUID PRIMARY KEY,\n"
        "  account_id UUID REFERENCES accounts(id) DEFERRABLE INITIALLY DEFERRED\n"
        ");\n"
        "CREATE INDEX transfers_loc ON transfers USING spgist (location);"
    )
    result = validate_sql(sql, "crdb")
    assert result.has_code("CRDB_E101")
    assert result.has_code("CRDB_E200")
    spgist = result.by_code("CRDB_E200")[0]
    assert spgist.code == "SPGIST_INDEX"
    assert spgist.location["line"] == 5
    assert validate_sql("ALTER TABLE t ADD CONSTRAINT u UNIQUE (a) NOT DEFERRABLE", "crdb").diagnostics == []


def test_cockroach_function_bodies_downgrade_non_plpgsql_findings():
    fn = FunctionInfo(
        "notify_all",
        language="plpgsql",
        definition="BEGIN PERFORM pg_notify('jobs', 'x'); LISTEN jobs; END",
    )
    result = validate_schema(SchemaBundle(functions=[fn]), "cockroachdb")
    assert result.by_code("CRDB_I600")[0].severity == "info"
    assert result.by_code("PLPGSQL_PERFORM")[0].severity == "error"
    assert result.by_code("LISTEN")[0].severity == "warning"
    sql_fn = FunctionInfo("add_one", language="sql", definition="SELECT $1 + 1")
    assert validate_schema(SchemaBundle(functions=[sql_fn]), "cockroachdb").codes() == ["CRDB_I001"]


def test_cockroach_custom_opclass_and_missing_primary_key():
    logs = TableInfo(
        "logs",
        columns=[ColumnInfo("msg", "text"), ColumnInfo("ratio", "double precision")],
        indexes=[
            IndexInfo("logs_msg", "logs", columns=[IndexColumnInfo(name="msg", opclass="my_custom_ops")], method="gin"),
            IndexInfo("logs_trgm", "logs", columns=[IndexColumnInfo(name="msg", opclass="gin_trgm_ops")], method="gin"),
        ],
    )
    result = validate_table(logs, "cockroachdb")
    assert result.codes() == ["CRDB_W020", "CRDB_E204", "CRDB_E730"]
    assert result.by_code("CRDB_E204")[0].location == {"table": "logs", "index": "logs_msg", "column": "msg"}


def nile_orders(**overrides):
    columns = {
        "id": c.uuid().primary_key(),
        "tenantId": c.uuid("tenant_id").not_null(),
        "amount": c.numeric(),
    }
    columns.update(overrides)
    return define_table("orders", columns)


def test_nile_tenant_table_without_tenant_primary_key():
    result = validate_schema(nile_orders(), "nile")
    assert result.has_code("NILE-PK-001")
    assert result.has_code("NILE-TC-001")
    assert result.by_code("NILE-TC-001")[0].severity == "info"
    assert [d.code for d in result.errors] == ["NILE-PK-001"]
    assert result.by_code("NILE-TX-001")[0].severity == "warning"


def test_nile_tenant_scoped_primary_key_is_valid():
    table = define_table(
        "orders",
        {"tenantId": c.uuid("tenant_id").not_null(), "id": c.uuid(), "amount": c.numeric()},
        primary_key=["tenant_id", "id"],
    )
    result = validate_schema(table, "nile")
    assert result.valid is True
    assert result.has_code("NILE-PK-003")


def test_nile_tenant_column_type_and_nullability():
    table = define_table("notes", {"tenant_id": c.text(), "id": c.uuid()}, primary_key=["tenant_id", "id"])
    result = validate_table(table, "nile")
    assert result.has_code("NILE-TC-003")
    assert not result.has_code("NILE-TC-004")
    loose = define_table("notes", {"id": c.uuid().primary_key(), "tenant_id": c.uuid()})
    assert validate_table(loose, "nile").has_code("NILE-TC-004")


def test_nile_foreign_keys_between_tenant_and_shared_tables():
    products = define_table("products", {"id": c.uuid().primary_key()})
    orders = define_table(
        "orders",
        {
            "tenantId": c.uuid("tenant_id").not_null(),
            "id": c.uuid(),
            "productId": c.uuid("product_id").references("products"),
        },
        primary_key=["tenant_id", "id"],
    )
    result = validate_schema([products, orders], "nile")
    assert result.has_code("NILE-FK-001")
    assert result.has_code("NILE-TC-002")
    assert result.has_code("NILE-TX-002")

    catalog = define_table("catalog", {"id": c.uuid().primary_key(), "orderId": c.uuid("order_id").references("orders")})
    assert validate_schema([orders, catalog], "nile").has_code("NILE-FK-002")


def test_nile_builtin_tables_and_serial_ids():
    result = validate_table(define_table("users", {"id": c.uuid().primary_key()}), "nile")
    assert result.codes() == ["NILE-BT-001"]
    serial = define_table(
        "jobs", {"tenant_id": c.uuid().not_null(), "id": c.serial()}, primary_key=["tenant_id", "id"]
    )
    assert validate_table(serial, "nile").has_code("NILE-CT-001")


def test_mysql_family_validators():
    assert get_validator("mariadb").__class__ is MariaDBValidator
    assert get_validator("ps").__class__ is PlanetScaleValidator
    assert get_validator("libsql").__class__ is TursoValidator

    sql = "CREATE SEQUENCE order_seq;"
    assert validate_sql(sql, "mysql").has_code("MYSQL-SEQ-001")
    assert validate_sql(sql, "mariadb").diagnostics == []

    fk_sql = "CREATE TABLE a (b_id INT, FOREIGN KEY (b_id) REFERENCES b (id));"
    assert validate_sql(fk_sql, "mysql").valid is True
    planetscale = validate_sql(fk_sql, "planetscale")
    assert planetscale.has_code("MYSQL-PS-001")
    assert planetscale.has_code("MYSQL-PS-002")


def test_mysql_table_checks():
    table = define_table(
        "docs",
        {"id": c.integer().primary_key(), "tags": c.text().array(), "body": c.text()},
        indexes=[
            index("body", using="gin", name="docs_body"),
            index("id", where="body IS NOT NULL", name="docs_live"),
        ],
    )
    result = validate_table(table, "mysql")
    assert result.by_code("ARRAY_TYPE")[0].rule_code == "MYSQL-TYPE-001"
    assert result.by_code("MYSQL-IDX-001")[0].detected == "USING gin"
    assert result.by_code("MYSQL-IDX-002")[0].severity == "warning"


def test_sqlite_checks():
    logs = TableInfo("logs", columns=[ColumnInfo("msg", "text")], unlogged=True, tablespace="fast")
    result = validate_schema(SchemaBundle(tables=[logs], sequences=[SequenceInfo("s")]), "sqlite")
    assert [d.detected for d in result.by_code("SQLITE-TBL-001")] == ["UNLOGGED", "TABLESPACE fast"]
    assert result.has_code("SQLITE-SEQ-001")
    assert result.codes()[-1] == "SQLITE-TYPE-001"
    gist = define_table("areas", {"id": c.integer().primary_key(), "shape": c.text()}, indexes=[index("shape", using="gist")])
    assert validate_table(gist, "turso").has_code("SQLITE-IDX-001")


def test_postgres_reports_nothing():
    assert validate_sql("CREATE TABLE t (id SERIAL, data JSONB)", "postgres").diagnostics == []
    assert validate_table(define_table("t", {"id": c.serial().primary_key()}), "pg").valid is True


def test_unknown_validator_name():
    with pytest.raises(InvalidArgumentError):
        get_validator("oracle")


def test_define_table_validates_for_a_dialect(caplog):
    with pytest.raises(InvalidArgumentError) as excinfo:
        define_table("t", {"id": c.serial().primary_key()}, dialect="dsql", dialect_strict=True)
    assert "SERIAL" in str(excinfo.value)
    with caplog.at_level(logging.WARNING, logger="relq.schema.table"):
        table = define_table("t", {"id": c.serial().primary_key()}, dialect="dsql")
    assert table.name == "t"
    assert "Dialect validation findings" in caplog.text


def test_masking_and_type_normalization_helpers():
    masked = mask_sql("SELECT 'a''b' -- note\nFROM t")
    assert len(masked) == len("SELECT 'a''b' -- note\nFROM t")
    assert "a''b" not in masked and "note" not in masked
    assert masked.endswith("\nFROM t")
    assert normalize_type("VARCHAR(255)[]") == "varchar"
    assert normalize_type("Double  Precision") == "double precision"
    assert normalize_type(None) == ""
