import logging

import pytest

from relq.drivers import CatalogError
from relq.introspection import (
    CatalogIntrospector,
    ConstraintInfo,
    IndexColumnInfo,
    IntrospectionOptions,
    SchemaBundle,
    TableInfo,
    aggregate_constraints,
    aggregate_indexes,
    introspect,
    list_tables,
    map_referential_action,
)
from relq.introspection.base import parse_storage_params


class StubDriver:
    name = "stub"
    placeholder = "?"

    def __init__(self, error=None, rows=None):
        self.error = error
        self.rows = rows or []
        self.connected_with = None
        self.closed = False
        self.queries = []

    def connect(self, config):
        self.connected_with = config

    def close(self):
        self.closed = True

    def fetch_all(self, sql, params=None):
        self.queries.append(sql)
        if self.error is not None:
            raise self.error
        return list(self.rows)


class TwoStepIntrospector(CatalogIntrospector):
    dialect = "stub"
    steps = ("functions", "columns", "tables")

    def step_tables(self, bundle):
        self.register_table(bundle, TableInfo(name="users"))
        self.register_table(bundle, TableInfo(name="orders"))
        return 2

    def step_columns(self, bundle):
        return 5

    def step_functions(self, bundle):
        return 1

    def fetch_version(self):
        return "16.2"


def test_steps_run_in_fixed_order_with_progress():
    events = []
    introspector = TwoStepIntrospector(StubDriver(), on_progress=lambda *event: events.append(event))
    bundle = introspector.run()
    assert events == [
        ("tables", 0, "started"),
        ("tables", 2, "completed"),
        ("columns", 0, "started"),
        ("columns", 5, "completed"),
    ]
    assert bundle.table_names() == ["users", "orders"]
    assert bundle.version == "16.2"
    assert introspector.table_for("orders") is bundle.table("orders")


def test_optional_steps_and_subsets():
    introspector = TwoStepIntrospector(StubDriver(), options=IntrospectionOptions(include_functions=True))
    assert introspector.planned_steps() == ["tables", "columns", "functions"]
    assert introspector.planned_steps(["columns"]) == ["columns"]
    bundle = introspector.run(["tables"])
    assert bundle.version is None


def test_failing_step_raises_catalog_error_and_closes_connection(caplog):
    driver = StubDriver(error=RuntimeError("permission denied for pg_catalog"))
    with caplog.at_level(logging.ERROR, logger="relq.introspection.sqlite"):
        with pytest.raises(CatalogError) as excinfo:
            introspect("sqlite", "sqlite:///app.db", driver_factory=lambda dialect: driver)
    assert excinfo.value.step == "tables"
    assert "permission denied" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert driver.closed is True
    assert "Introspection step tables failed" in caplog.text


def test_list_tables_uses_its_own_connection():
    driver = StubDriver(
        rows=[
            {"name": "users", "type": "table", "sql": "CREATE TABLE users (id INTEGER)"},
            {"name": "_relq_migrations", "type": "table", "sql": None},
            {"name": "recent_users", "type": "view", "sql": None},
        ]
    )
    assert list_tables("sqlite", "sqlite:///app.db", driver_factory=lambda dialect: driver) == ["users"]
    assert driver.connected_with.url == "sqlite:///app.db"
    assert driver.closed is True


def test_unknown_adapter_is_rejected():
    with pytest.raises(ValueError):
        introspect(object(), "sqlite:///app.db", driver_factory=lambda dialect: StubDriver())


@pytest.mark.parametrize(
    "code, expected",
    [
        ("a", "NO ACTION"),
        ("r", "RESTRICT"),
        ("c", "CASCADE"),
        ("n", "SET NULL"),
        ("d", "SET DEFAULT"),
        ("set  null", "SET NULL"),
        ("x", None),
        ("", None),
        (None, None),
    ],
)
def test_map_referential_action(code, expected):
    assert map_referential_action(code) == expected


def test_aggregate_indexes_orders_columns_by_position():
    rows = [
        {"table": "t", "name": "idx_ab", "seq": 2, "column": IndexColumnInfo(name="b")},
        {"table": "t", "name": "idx_ab", "seq": 3, "include": "c"},
        {"table": "t", "name": "idx_ab", "seq": 1, "column": IndexColumnInfo(name="a"), "unique": True},
        {"table": "u", "name": "idx_ab", "seq": 1, "column": IndexColumnInfo(name="z")},
    ]
    indexes = aggregate_indexes(rows, lambda row: row)
    assert [(index.table, index.column_names) for index in indexes] == [("t", ["a", "b"]), ("u", ["z"])]
    assert indexes[0].include == ("c",)
    assert indexes[0].unique is False


def test_aggregate_constraints_merges_columns():
    rows = [
        {"table": "line_items", "name": "fk_order", "type": "FOREIGN KEY", "column": "order_id",
         "ref_table": "orders", "ref_column": "id", "on_delete": "CASCADE"},
        {"table": "line_items", "name": "fk_order", "type": "FOREIGN KEY", "column": "order_rev",
         "ref_table": "orders", "ref_column": "rev", "on_delete": "CASCADE"},
        {"table": "line_items", "name": "pk", "type": "PRIMARY KEY", "column": "id"},
    ]
    constraints = aggregate_constraints(rows)
    assert constraints[0] == ConstraintInfo(
        name="fk_order",
        table="line_items",
        type="FOREIGN KEY",
        columns=["order_id", "order_rev"],
        ref_table="orders",
        ref_columns=["id", "rev"],
        on_delete="CASCADE",
    )
    assert constraints[1].columns == ["id"]


def test_bundle_helpers():
    table = TableInfo(name="t", constraints=[ConstraintInfo(name="fk", table="t", type="FOREIGN KEY")])
    bundle = SchemaBundle(tables=[table])
    assert bundle.constraints == table.constraints
    assert table.foreign_keys == table.constraints
    assert bundle.table("missing") is None
    assert parse_storage_params(["fillfactor=70", "=x"]) == {"fillfactor": "70"}
