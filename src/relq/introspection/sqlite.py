"""
SQLite / Turso introspection via sqlite_master and the pragma table-valued
functions.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .base import CatalogIntrospector, aggregate_indexes, map_referential_action
from .models import (
    ColumnInfo,
    ColumnReferenceInfo,
    ConstraintInfo,
    IndexColumnInfo,
    SchemaBundle,
    TableInfo,
    TriggerInfo,
)

TABLES_SQL = """
SELECT name, type, sql
FROM sqlite_master
WHERE type IN ('table', 'view')
    AND substr(name, 1, 7) <> 'sqlite_'
ORDER BY name
"""

TRIGGERS_SQL = """
SELECT name, tbl_name, sql
FROM sqlite_master
WHERE type = 'trigger'
ORDER BY name
"""

_CHECK_START = re.compile(r"(?:CONSTRAINT\s+(\"[^\"]+\"|`[^`]+`|\w+)\s+)?CHECK\s*\(", re.IGNORECASE)
_PARTIAL_WHERE = re.compile(r"\bWHERE\b(.*)$", re.IGNORECASE | re.DOTALL)


def extract_checks(table_sql: Optional[str]) -> List[tuple]:
    """
    Pull ``(name, expression)`` pairs for CHECK clauses out of a
    ``CREATE TABLE`` statement, balancing parentheses.
    """

    if not table_sql:
        return []
    checks = []
    position = 0
    while True:
        match = _CHECK_START.search(table_sql, position)
        if match is None:
            break
        depth = 1
        index = match.end()
        while index < len(table_sql) and depth:
            char = table_sql[index]
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            index += 1
        name = match.group(1).strip('"`') if match.group(1) else None
        checks.append((name, table_sql[match.end():index - 1].strip()))
        position = index
    return checks


def parse_trigger(row: Dict[str, Any]) -> TriggerInfo:
    sql = (row.get("sql") or "").upper()
    if "INSTEAD OF" in sql:
        timing = "INSTEAD OF"
    elif "BEFORE" in sql:
        timing = "BEFORE"
    else:
        timing = "AFTER"
    events = [event for event in ("INSERT", "UPDATE", "DELETE") if event in sql.split(" ON ")[0]]
    return TriggerInfo(
        name=row["name"],
        table=row["tbl_name"],
        event=" OR ".join(events) or "INSERT",
        timing=timing,
        for_each="ROW",
        definition=row.get("sql"),
    )


class SQLiteIntrospector(CatalogIntrospector):
    dialect = "sqlite"
    steps = ("tables", "columns", "constraints", "indexes", "checks", "triggers")

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._table_sql: Dict[str, Optional[str]] = {}

    def step_tables(self, bundle: SchemaBundle) -> int:
        self._table_sql = {}
        for row in self.query(TABLES_SQL):
            name = row["name"]
            is_view = row["type"] == "view"
            if self.is_internal(name) or (is_view and not self.options.include_views):
                continue
            self._table_sql[name] = row.get("sql")
            self.register_table(bundle, TableInfo(name=name, schema="main", kind="view" if is_view else "table"))
        return len(bundle.tables)

    def step_columns(self, bundle: SchemaBundle) -> int:
        count = 0
        for table in bundle.tables:
            table_sql = (self._table_sql.get(table.name) or "").lower()
            pk_columns = []
            for row in self.query("SELECT * FROM pragma_table_info(?)", (table.name,)):
                declared = row.get("type") or ""
                pk_position = int(row.get("pk") or 0)
                autoincrement = pk_position == 1 and declared.lower() == "integer" and "autoincrement" in table_sql
                table.columns.append(
                    ColumnInfo(
                        name=row["name"],
                        data_type=declared or "BLOB",
                        nullable=not row.get("notnull") and not pk_position,
                        default=row.get("dflt_value"),
                        is_primary_key=pk_position > 0,
                        is_autoincrement=autoincrement,
                    )
                )
                if pk_position:
                    pk_columns.append((pk_position, row["name"]))
                count += 1
            table.primary_key = [name for _, name in sorted(pk_columns)]
        return count

    def step_constraints(self, bundle: SchemaBundle) -> int:
        count = 0
        for table in bundle.tables:
            if table.primary_key:
                table.constraints.append(
                    ConstraintInfo(name=None, table=table.name, type="PRIMARY KEY", columns=list(table.primary_key))
                )
                count += 1
            foreign_keys: Dict[int, ConstraintInfo] = {}
            for row in self.query("SELECT * FROM pragma_foreign_key_list(?)", (table.name,)):
                fk_id = int(row["id"])
                constraint = foreign_keys.get(fk_id)
                if constraint is None:
                    constraint = ConstraintInfo(
                        name=f"fk_{table.name}_{fk_id}",
                        table=table.name,
                        type="FOREIGN KEY",
                        ref_table=row["table"],
                        on_delete=map_referential_action(row.get("on_delete")),
                        on_update=map_referential_action(row.get("on_update")),
                        match_type=None if row.get("match") in (None, "NONE") else row.get("match"),
                    )
                    foreign_keys[fk_id] = constraint
                constraint.columns.append(row["from"])
                if row.get("to"):
                    constraint.ref_columns.append(row["to"])
            for constraint in sorted(foreign_keys.values(), key=lambda item: item.name or ""):
                if len(constraint.columns) == 1:
                    column = table.column(constraint.columns[0])
                    if column is not None:
                        column.references = ColumnReferenceInfo(
                            table=constraint.ref_table or "",
                            column=constraint.ref_columns[0] if constraint.ref_columns else "",
                            on_delete=constraint.on_delete,
                            on_update=constraint.on_update,
                        )
                table.constraints.append(constraint)
                count += 1
        return count

    def step_indexes(self, bundle: SchemaBundle) -> int:
        count = 0
        for table in bundle.tables:
            rows: List[Dict[str, Any]] = []
            for index_row in self.query("SELECT * FROM pragma_index_list(?)", (table.name,)):
                origin = index_row.get("origin")
                if origin == "pk":
                    continue
                if origin == "u":
                    columns = [
                        row["name"] for row in self.query("SELECT * FROM pragma_index_info(?)", (index_row["name"],))
                    ]
                    table.constraints.append(
                        ConstraintInfo(name=None, table=table.name, type="UNIQUE", columns=columns, inline=True)
                    )
                    if len(columns) == 1 and table.column(columns[0]) is not None:
                        table.column(columns[0]).is_unique = True
                    continue
                definition = self._index_sql(index_row["name"])
                for info in self.query("SELECT * FROM pragma_index_xinfo(?)", (index_row["name"],)):
                    if not info.get("key"):
                        continue
                    rows.append(
                        {
                            "table": table.name,
                            "name": index_row["name"],
                            "seq": int(info["seqno"]),
                            "unique": bool(index_row.get("unique")),
                            "method": "btree",
                            "predicate": self._predicate(definition) if index_row.get("partial") else None,
                            "definition": definition,
                            "column": IndexColumnInfo(
                                name=info.get("name"),
                                expression=None if info.get("name") else "(expression)",
                                direction="DESC" if info.get("desc") else "ASC",
                            ),
                        }
                    )
            indexes = aggregate_indexes(rows, lambda item: item)
            table.indexes.extend(indexes)
            count += len(indexes)
        return count

    def _index_sql(self, name: str) -> Optional[str]:
        rows = self.query("SELECT sql FROM sqlite_master WHERE type = 'index' AND name = ?", (name,))
        return rows[0]["sql"] if rows else None

    @staticmethod
    def _predicate(definition: Optional[str]) -> Optional[str]:
        if not definition:
            return None
        match = _PARTIAL_WHERE.search(definition)
        return match.group(1).strip() if match else None

    def step_checks(self, bundle: SchemaBundle) -> int:
        count = 0
        for table in bundle.tables:
            for position, (name, expression) in enumerate(extract_checks(self._table_sql.get(table.name)), start=1):
                table.constraints.append(
                    ConstraintInfo(
                        name=name or f"{table.name}_check_{position}",
                        table=table.name,
                        type="CHECK",
                        definition=f"CHECK ({expression})",
                    )
                )
                count += 1
        return count

    def step_triggers(self, bundle: SchemaBundle) -> int:
        bundle.triggers.extend(parse_trigger(row) for row in self.query(TRIGGERS_SQL))
        return len(bundle.triggers)

    def fetch_version(self) -> Optional[str]:
        rows = self.query("SELECT sqlite_version() AS version")
        return str(rows[0]["version"]) if rows else None

    def list_tables(self) -> List[str]:
        return [
            row["name"]
            for row in self.query(TABLES_SQL)
            if row["type"] == "table" and not self.is_internal(row["name"])
        ]

    def list_schemas(self) -> List[str]:
        return [row["name"] for row in self.query("SELECT name FROM pragma_database_list")]


class TursoIntrospector(SQLiteIntrospector):
    dialect = "turso"
