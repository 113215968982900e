"""
MySQL / MariaDB introspection over information_schema.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import CatalogIntrospector, aggregate_constraints, aggregate_indexes
from .models import (
    ColumnInfo,
    ColumnReferenceInfo,
    ConstraintInfo,
    FunctionInfo,
    IndexColumnInfo,
    SchemaBundle,
    TableInfo,
    TriggerInfo,
)

TABLES_SQL = """
SELECT
    TABLE_NAME AS table_name,
    TABLE_SCHEMA AS table_schema,
    TABLE_TYPE AS table_type,
    TABLE_COMMENT AS table_comment,
    ENGINE AS engine,
    TABLE_ROWS AS row_estimate
FROM information_schema.TABLES
WHERE TABLE_SCHEMA = DATABASE()
    AND TABLE_TYPE IN ('BASE TABLE', 'VIEW')
ORDER BY TABLE_NAME
"""

COLUMNS_SQL = """
SELECT
    TABLE_NAME AS table_name,
    COLUMN_NAME AS column_name,
    DATA_TYPE AS data_type,
    COLUMN_TYPE AS column_type,
    IS_NULLABLE AS is_nullable,
    COLUMN_DEFAULT AS column_default,
    EXTRA AS extra,
    CHARACTER_MAXIMUM_LENGTH AS max_length,
    NUMERIC_PRECISION AS numeric_precision,
    NUMERIC_SCALE AS numeric_scale,
    COLUMN_KEY AS column_key,
    COLUMN_COMMENT AS column_comment,
    COLLATION_NAME AS collation_name,
    GENERATION_EXPRESSION AS generation_expression
FROM information_schema.COLUMNS
WHERE TABLE_SCHEMA = DATABASE()
ORDER BY TABLE_NAME, ORDINAL_POSITION
"""

CONSTRAINTS_SQL = """
SELECT
    tc.CONSTRAINT_NAME AS name,
    tc.TABLE_NAME AS table_name,
    tc.CONSTRAINT_TYPE AS constraint_type,
    kcu.COLUMN_NAME AS column_name,
    kcu.REFERENCED_TABLE_NAME AS ref_table,
    kcu.REFERENCED_COLUMN_NAME AS ref_column,
    rc.UPDATE_RULE AS on_update,
    rc.DELETE_RULE AS on_delete
FROM information_schema.TABLE_CONSTRAINTS tc
LEFT JOIN information_schema.KEY_COLUMN_USAGE kcu
    ON tc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
    AND tc.TABLE_SCHEMA = kcu.TABLE_SCHEMA
    AND tc.TABLE_NAME = kcu.TABLE_NAME
LEFT JOIN information_schema.REFERENTIAL_CONSTRAINTS rc
    ON tc.CONSTRAINT_NAME = rc.CONSTRAINT_NAME
    AND tc.TABLE_SCHEMA = rc.CONSTRAINT_SCHEMA
WHERE tc.TABLE_SCHEMA = DATABASE()
    AND tc.CONSTRAINT_TYPE IN ('PRIMARY KEY', 'UNIQUE', 'FOREIGN KEY')
ORDER BY tc.TABLE_NAME, tc.CONSTRAINT_NAME, kcu.ORDINAL_POSITION
"""

INDEXES_SQL = """
SELECT
    TABLE_NAME AS table_name,
    INDEX_NAME AS index_name,
    NON_UNIQUE AS non_unique,
    INDEX_TYPE AS index_type,
    COLUMN_NAME AS column_name,
    SEQ_IN_INDEX AS seq_in_index,
    COLLATION AS collation,
    SUB_PART AS sub_part
FROM information_schema.STATISTICS
WHERE TABLE_SCHEMA = DATABASE()
ORDER BY TABLE_NAME, INDEX_NAME, SEQ_IN_INDEX
"""

CHECKS_SQL = """
SELECT
    tc.TABLE_NAME AS table_name,
    cc.CONSTRAINT_NAME AS name,
    cc.CHECK_CLAUSE AS check_clause
FROM information_schema.TABLE_CONSTRAINTS tc
JOIN information_schema.CHECK_CONSTRAINTS cc
    ON cc.CONSTRAINT_SCHEMA = tc.CONSTRAINT_SCHEMA
    AND cc.CONSTRAINT_NAME = tc.CONSTRAINT_NAME
WHERE tc.TABLE_SCHEMA = DATABASE()
    AND tc.CONSTRAINT_TYPE = 'CHECK'
ORDER BY tc.TABLE_NAME, cc.CONSTRAINT_NAME
"""

TRIGGERS_SQL = """
SELECT
    TRIGGER_NAME AS name,
    EVENT_OBJECT_TABLE AS table_name,
    ACTION_TIMING AS timing,
    EVENT_MANIPULATION AS event,
    ACTION_STATEMENT AS statement,
    ACTION_ORIENTATION AS orientation
FROM information_schema.TRIGGERS
WHERE TRIGGER_SCHEMA = DATABASE()
ORDER BY EVENT_OBJECT_TABLE, TRIGGER_NAME
"""

ROUTINES_SQL = """
SELECT
    ROUTINE_NAME AS name,
    ROUTINE_TYPE AS routine_type,
    DATA_TYPE AS return_type,
    ROUTINE_DEFINITION AS definition
FROM information_schema.ROUTINES
WHERE ROUTINE_SCHEMA = DATABASE()
ORDER BY ROUTINE_NAME
"""


def normalize_mysql_type(column_type: str) -> str:
    """
    Array-like declarations (``int[]``) have no MySQL equivalent and are
    stored as JSON.
    """

    stripped = column_type.strip()
    if stripped.endswith("[]"):
        return "json"
    return stripped


class MySQLIntrospector(CatalogIntrospector):
    dialect = "mysql"
    steps = ("tables", "columns", "constraints", "indexes", "checks", "functions", "triggers")

    def step_tables(self, bundle: SchemaBundle) -> int:
        for row in self.query(TABLES_SQL):
            name = row["table_name"]
            is_view = row.get("table_type") == "VIEW"
            if self.is_internal(name) or (is_view and not self.options.include_views):
                continue
            estimate = row.get("row_estimate")
            self.register_table(
                bundle,
                TableInfo(
                    name=name,
                    schema=row.get("table_schema"),
                    kind="view" if is_view else "table",
                    comment=row.get("table_comment") or None,
                    storage_params={"engine": row["engine"]} if row.get("engine") else {},
                    row_count=int(estimate) if estimate is not None else None,
                ),
            )
        return len(bundle.tables)

    def step_columns(self, bundle: SchemaBundle) -> int:
        count = 0
        for row in self.query(COLUMNS_SQL):
            table = self.table_for(row["table_name"])
            if table is None:
                continue
            extra = (row.get("extra") or "").lower()
            generated = row.get("generation_expression") or None
            column = ColumnInfo(
                name=row["column_name"],
                data_type=normalize_mysql_type(row.get("column_type") or row["data_type"]),
                nullable=row.get("is_nullable") == "YES",
                default=row.get("column_default"),
                is_primary_key=row.get("column_key") == "PRI",
                is_unique=row.get("column_key") == "UNI",
                is_autoincrement="auto_increment" in extra,
                max_length=row.get("max_length"),
                precision=row.get("numeric_precision"),
                scale=row.get("numeric_scale"),
                comment=row.get("column_comment") or None,
                generated=generated,
                collation=row.get("collation_name"),
            )
            table.columns.append(column)
            if column.is_primary_key:
                table.primary_key.append(column.name)
            count += 1
        return count

    def step_constraints(self, bundle: SchemaBundle) -> int:
        rows = [
            {
                "table": row["table_name"],
                "name": row["name"],
                "type": row["constraint_type"],
                "column": row.get("column_name"),
                "ref_table": row.get("ref_table"),
                "ref_column": row.get("ref_column"),
                "on_delete": row.get("on_delete"),
                "on_update": row.get("on_update"),
            }
            for row in self.query(CONSTRAINTS_SQL)
            if self.table_for(row["table_name"])
        ]
        constraints = aggregate_constraints(rows)
        for constraint in constraints:
            table = self.table_for(constraint.table)
            if constraint.type == "PRIMARY KEY":
                table.primary_key = list(constraint.columns)
            elif constraint.type == "FOREIGN KEY" and len(constraint.columns) == 1:
                column = table.column(constraint.columns[0])
                if column is not None:
                    column.references = ColumnReferenceInfo(
                        table=constraint.ref_table or "",
                        column=constraint.ref_columns[0] if constraint.ref_columns else "",
                        on_delete=constraint.on_delete,
                        on_update=constraint.on_update,
                    )
            table.constraints.append(constraint)
        return len(constraints)

    def step_indexes(self, bundle: SchemaBundle) -> int:
        rows = [row for row in self.query(INDEXES_SQL) if self.table_for(row["table_name"])]
        indexes = aggregate_indexes(rows, self._parse_index_row)
        for index in indexes:
            self.table_for(index.table).indexes.append(index)
        return len(indexes)

    @staticmethod
    def _parse_index_row(row: Dict[str, Any]) -> Dict[str, Any]:
        name = row.get("column_name")
        return {
            "table": row["table_name"],
            "name": row["index_name"],
            "seq": int(row["seq_in_index"]),
            "unique": int(row.get("non_unique") or 0) == 0,
            "primary": row["index_name"] == "PRIMARY",
            "method": (row.get("index_type") or "btree").lower(),
            "column": IndexColumnInfo(
                name=name,
                expression=None if name else "(expression)",
                direction="DESC" if row.get("collation") == "D" else "ASC",
            ),
        }

    def step_checks(self, bundle: SchemaBundle) -> int:
        count = 0
        for row in self.query(CHECKS_SQL):
            table = self.table_for(row["table_name"])
            if table is None:
                continue
            table.constraints.append(
                ConstraintInfo(
                    name=row["name"],
                    table=table.name,
                    type="CHECK",
                    definition=f"CHECK ({row['check_clause']})",
                )
            )
            count += 1
        return count

    def step_functions(self, bundle: SchemaBundle) -> int:
        for row in self.query(ROUTINES_SQL):
            kind = (row.get("routine_type") or "FUNCTION").lower()
            bundle.functions.append(
                FunctionInfo(
                    name=row["name"],
                    language="sql",
                    definition=row.get("definition"),
                    return_type=row.get("return_type") or None,
                    kind="procedure" if kind == "procedure" else "function",
                )
            )
        return len(bundle.functions)

    def step_triggers(self, bundle: SchemaBundle) -> int:
        for row in self.query(TRIGGERS_SQL):
            bundle.triggers.append(
                TriggerInfo(
                    name=row["name"],
                    table=row["table_name"],
                    event=row["event"],
                    timing=row.get("timing") or "AFTER",
                    for_each="ROW" if row.get("orientation") == "ROW" else "STATEMENT",
                    definition=row.get("statement"),
                )
            )
        return len(bundle.triggers)

    def fetch_version(self) -> Optional[str]:
        rows = self.query("SELECT VERSION() AS version")
        return str(rows[0]["version"]) if rows else None

    def list_tables(self) -> List[str]:
        return [
            row["table_name"]
            for row in self.query(TABLES_SQL)
            if row.get("table_type") == "BASE TABLE" and not self.is_internal(row["table_name"])
        ]

    def list_schemas(self) -> List[str]:
        rows = self.query("SELECT SCHEMA_NAME AS schema_name FROM information_schema.SCHEMATA ORDER BY SCHEMA_NAME")
        return [row["schema_name"] for row in rows]


class MariaDBIntrospector(MySQLIntrospector):
    dialect = "mariadb"
