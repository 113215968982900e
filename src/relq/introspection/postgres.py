"""
PostgreSQL catalog introspection (also used for CockroachDB, Aurora DSQL
and Nile, which expose a Postgres-compatible pg_catalog).
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from .base import (
    CatalogIntrospector,
    aggregate_indexes,
    map_referential_action,
    parse_storage_params,
)
from .models import (
    CollationInfo,
    ColumnInfo,
    ColumnReferenceInfo,
    CompositeTypeInfo,
    ConstraintInfo,
    DomainInfo,
    EnumInfo,
    FunctionInfo,
    IndexColumnInfo,
    SchemaBundle,
    SequenceInfo,
    TableInfo,
    TriggerInfo,
)

TABLES_SQL = """
SELECT
    c.relname AS table_name,
    n.nspname AS table_schema,
    c.relkind = 'p' AS is_partitioned,
    c.relpersistence = 'u' AS is_unlogged,
    c.relpersistence = 't' AS is_temporary,
    c.reltuples::bigint AS row_count,
    c.reloptions AS reloptions,
    ts.spcname AS tablespace,
    CASE WHEN c.relkind = 'p' THEN pg_get_partkeydef(c.oid) END AS partition_by,
    ARRAY(
        SELECT parent.relname
        FROM pg_inherits i
        JOIN pg_class parent ON parent.oid = i.inhparent
        WHERE i.inhrelid = c.oid
        ORDER BY i.inhseqno
    ) AS inherits,
    obj_description(c.oid, 'pg_class') AS table_comment
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
LEFT JOIN pg_tablespace ts ON ts.oid = c.reltablespace
WHERE n.nspname = %s
    AND c.relkind IN ('r', 'p')
    AND NOT c.relispartition
ORDER BY c.relname
"""

COLUMNS_SQL = """
SELECT
    c.relname AS table_name,
    a.attname AS column_name,
    a.attnum AS ordinal_position,
    format_type(a.atttypid, a.atttypmod) AS formatted_type,
    NOT a.attnotnull AS is_nullable,
    pg_get_expr(d.adbin, d.adrelid) AS column_default,
    a.attidentity <> '' AS is_identity,
    a.attgenerated <> '' AS is_generated,
    coll.collname AS collation_name,
    col_description(c.oid, a.attnum) AS column_comment
FROM pg_attribute a
JOIN pg_class c ON c.oid = a.attrelid
JOIN pg_namespace n ON n.oid = c.relnamespace
LEFT JOIN pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
LEFT JOIN pg_type t ON t.oid = a.atttypid
LEFT JOIN pg_collation coll ON coll.oid = a.attcollation AND a.attcollation <> t.typcollation
WHERE n.nspname = %s
    AND c.relkind IN ('r', 'p')
    AND a.attnum > 0
    AND NOT a.attisdropped
ORDER BY c.relname, a.attnum
"""

CONSTRAINTS_SQL = """
SELECT
    con.conname AS name,
    cl.relname AS table_name,
    con.contype AS type_code,
    ARRAY(
        SELECT a.attname
        FROM unnest(con.conkey) WITH ORDINALITY AS u(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = u.attnum
        ORDER BY u.ord
    ) AS columns,
    ref.relname AS ref_table,
    ARRAY(
        SELECT a.attname
        FROM unnest(con.confkey) WITH ORDINALITY AS u(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = con.confrelid AND a.attnum = u.attnum
        ORDER BY u.ord
    ) AS ref_columns,
    con.confdeltype AS on_delete,
    con.confupdtype AS on_update,
    con.confmatchtype AS match_type,
    con.condeferrable AS is_deferrable,
    con.condeferred AS is_deferred,
    pg_get_constraintdef(con.oid) AS definition
FROM pg_constraint con
JOIN pg_class cl ON cl.oid = con.conrelid
JOIN pg_namespace n ON n.oid = cl.relnamespace
LEFT JOIN pg_class ref ON ref.oid = con.confrelid
WHERE n.nspname = %s
    AND con.contype IN ('p', 'u', 'f', 'x')
ORDER BY cl.relname, con.conname
"""

CHECKS_SQL = """
SELECT
    con.conname AS name,
    cl.relname AS table_name,
    ARRAY(
        SELECT a.attname
        FROM unnest(con.conkey) WITH ORDINALITY AS u(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = u.attnum
        ORDER BY u.ord
    ) AS columns,
    pg_get_constraintdef(con.oid) AS definition
FROM pg_constraint con
JOIN pg_class cl ON cl.oid = con.conrelid
JOIN pg_namespace n ON n.oid = cl.relnamespace
WHERE n.nspname = %s
    AND con.contype = 'c'
ORDER BY cl.relname, con.conname
"""

INDEXES_SQL = """
SELECT
    t.relname AS table_name,
    i.relname AS index_name,
    ix.indisunique AS is_unique,
    ix.indisprimary AS is_primary,
    am.amname AS method,
    k.ord AS seq_in_index,
    k.ord > ix.indnkeyatts AS is_included,
    CASE WHEN k.attnum <> 0 THEN a.attname END AS column_name,
    CASE WHEN k.attnum = 0 THEN pg_get_indexdef(ix.indexrelid, k.ord::int, true) END AS expression,
    pg_index_column_has_property(ix.indexrelid, k.ord::int, 'desc') AS is_desc,
    pg_index_column_has_property(ix.indexrelid, k.ord::int, 'nulls_first') AS nulls_first,
    opc.opcname AS opclass,
    pg_get_expr(ix.indpred, ix.indrelid) AS predicate,
    i.reloptions AS reloptions,
    pg_get_indexdef(ix.indexrelid) AS definition
FROM pg_index ix
JOIN pg_class t ON t.oid = ix.indrelid
JOIN pg_class i ON i.oid = ix.indexrelid
JOIN pg_namespace n ON n.oid = t.relnamespace
JOIN pg_am am ON am.oid = i.relam
CROSS JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord)
LEFT JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
LEFT JOIN pg_opclass opc ON opc.oid = ix.indclass[k.ord - 1] AND NOT opc.opcdefault
WHERE n.nspname = %s
ORDER BY t.relname, i.relname, k.ord
"""

ENUMS_SQL = """
SELECT t.typname AS name, e.enumlabel AS value
FROM pg_type t
JOIN pg_enum e ON e.enumtypid = t.oid
JOIN pg_namespace n ON n.oid = t.typnamespace
WHERE n.nspname = %s
ORDER BY t.typname, e.enumsortorder
"""

DOMAINS_SQL = """
SELECT
    t.typname AS name,
    format_type(t.typbasetype, t.typtypmod) AS base_type,
    NOT t.typnotnull AS is_nullable,
    t.typdefault AS default_value,
    coll.collname AS collation_name,
    pg_get_constraintdef(con.oid) AS check_definition
FROM pg_type t
JOIN pg_namespace n ON n.oid = t.typnamespace
LEFT JOIN pg_constraint con ON con.contypid = t.oid AND con.contype = 'c'
LEFT JOIN pg_collation coll ON coll.oid = t.typcollation AND coll.collname <> 'default'
WHERE t.typtype = 'd' AND n.nspname = %s
ORDER BY t.typname, con.conname
"""

SEQUENCES_SQL = """
SELECT
    s.sequencename AS name,
    s.data_type::text AS data_type,
    s.start_value,
    s.increment_by,
    s.min_value,
    s.max_value,
    s.cache_size,
    s.cycle,
    (
        SELECT tc.relname || '.' || a.attname
        FROM pg_class sc
        JOIN pg_namespace sn ON sn.oid = sc.relnamespace
        JOIN pg_depend d ON d.objid = sc.oid AND d.deptype IN ('a', 'i')
        JOIN pg_class tc ON tc.oid = d.refobjid
        JOIN pg_attribute a ON a.attrelid = d.refobjid AND a.attnum = d.refobjsubid
        WHERE sc.relname = s.sequencename AND sn.nspname = s.schemaname AND sc.relkind = 'S'
        LIMIT 1
    ) AS owned_by
FROM pg_sequences s
WHERE s.schemaname = %s
ORDER BY s.sequencename
"""

COMPOSITE_TYPES_SQL = """
SELECT
    t.typname AS name,
    a.attname AS attribute_name,
    format_type(a.atttypid, a.atttypmod) AS attribute_type
FROM pg_type t
JOIN pg_namespace n ON n.oid = t.typnamespace
JOIN pg_class c ON c.oid = t.typrelid
JOIN pg_attribute a ON a.attrelid = c.oid
WHERE t.typtype = 'c'
    AND c.relkind = 'c'
    AND n.nspname = %s
    AND a.attnum > 0
    AND NOT a.attisdropped
ORDER BY t.typname, a.attnum
"""

EXTENSIONS_SQL = """
SELECT extname FROM pg_extension WHERE extname <> 'plpgsql' ORDER BY extname
"""

FUNCTIONS_SQL = """
SELECT
    p.proname AS name,
    n.nspname AS function_schema,
    l.lanname AS language,
    pg_get_function_result(p.oid) AS return_type,
    pg_get_function_arguments(p.oid) AS arguments,
    p.prosrc AS body,
    p.prokind AS kind
FROM pg_proc p
JOIN pg_namespace n ON n.oid = p.pronamespace
JOIN pg_language l ON l.oid = p.prolang
WHERE n.nspname = %s
    AND p.prokind IN ('f', 'p')
    AND l.lanname NOT IN ('c', 'internal')
    AND NOT EXISTS (
        SELECT 1 FROM pg_depend d
        WHERE d.objid = p.oid AND d.deptype = 'e'
    )
ORDER BY p.proname
"""

TRIGGERS_SQL = """
SELECT
    t.tgname AS name,
    c.relname AS table_name,
    t.tgtype::int AS tgtype,
    p.proname AS function_name,
    ARRAY(
        SELECT a.attname
        FROM unnest(t.tgattr) AS u(attnum)
        JOIN pg_attribute a ON a.attrelid = t.tgrelid AND a.attnum = u.attnum
    ) AS columns,
    pg_get_triggerdef(t.oid) AS definition
FROM pg_trigger t
JOIN pg_class c ON c.oid = t.tgrelid
JOIN pg_namespace n ON n.oid = c.relnamespace
JOIN pg_proc p ON p.oid = t.tgfoid
WHERE n.nspname = %s
    AND NOT t.tgisinternal
    AND NOT c.relispartition
ORDER BY c.relname, t.tgname
"""

COLLATIONS_SQL = """
SELECT
    c.collname AS name,
    c.collprovider AS provider,
    c.collcollate AS locale,
    c.collisdeterministic AS is_deterministic
FROM pg_collation c
JOIN pg_namespace n ON n.oid = c.collnamespace
WHERE n.nspname = %s
ORDER BY c.collname
"""

LIST_TABLES_SQL = """
SELECT c.relname AS table_name
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = %s AND c.relkind IN ('r', 'p') AND NOT c.relispartition
ORDER BY c.relname
"""

LIST_SCHEMAS_SQL = """
SELECT nspname AS schema_name
FROM pg_namespace
WHERE nspname <> 'information_schema' AND left(nspname, 3) <> 'pg_'
ORDER BY nspname
"""

CONSTRAINT_TYPES = {"p": "PRIMARY KEY", "u": "UNIQUE", "f": "FOREIGN KEY", "c": "CHECK", "x": "EXCLUDE"}
MATCH_TYPES = {"f": "FULL", "p": "PARTIAL", "s": "SIMPLE"}
COLLATION_PROVIDERS = {"c": "libc", "i": "icu", "d": "default"}

_TYPE_PARAMS = re.compile(r"\(([^)]*)\)")
_EXCLUDE_METHOD = re.compile(r"EXCLUDE\s+USING\s+(\w+)", re.IGNORECASE)


def split_formatted_type(formatted: str) -> Tuple[str, int, Optional[int], Optional[int], Optional[int]]:
    """
    Split ``format_type`` output into ``(type, array dims, length, precision,
    scale)``. ``numeric(10,2)[]`` -> ``("numeric(10,2)", 1, None, 10, 2)``.
    """

    base = formatted.strip()
    dims = 0
    while base.endswith("[]"):
        base = base[:-2].rstrip()
        dims += 1
    length = precision = scale = None
    match = _TYPE_PARAMS.search(base)
    if match:
        parts = [part.strip() for part in match.group(1).split(",")]
        if all(part.isdigit() for part in parts):
            lowered = base.lower()
            if lowered.startswith(("numeric", "decimal")):
                precision = int(parts[0])
                scale = int(parts[1]) if len(parts) > 1 else 0
            elif lowered.startswith(("character", "varchar", "char", "bit")):
                length = int(parts[0])
            else:
                precision = int(parts[0])
    return base, dims, length, precision, scale


def decode_trigger_type(tgtype: int) -> Tuple[str, str, str]:
    """``pg_trigger.tgtype`` bitmask -> ``(timing, events, for_each)``."""

    if tgtype & 2:
        timing = "BEFORE"
    elif tgtype & 64:
        timing = "INSTEAD OF"
    else:
        timing = "AFTER"
    events = [name for bit, name in ((4, "INSERT"), (16, "UPDATE"), (8, "DELETE"), (32, "TRUNCATE")) if tgtype & bit]
    for_each = "ROW" if tgtype & 1 else "STATEMENT"
    return timing, " OR ".join(events), for_each


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        # text[] arriving unparsed, e.g. '{a,b}'
        inner = value.strip("{}")
        return [item.strip('"') for item in inner.split(",")] if inner else []
    return list(value)


class PostgresIntrospector(CatalogIntrospector):
    dialect = "postgres"
    steps = (
        "tables",
        "columns",
        "constraints",
        "indexes",
        "checks",
        "enums",
        "domains",
        "sequences",
        "composite_types",
        "extensions",
        "functions",
        "triggers",
        "collations",
    )

    @property
    def schema(self) -> str:
        return self.options.schema or "public"

    def step_tables(self, bundle: SchemaBundle) -> int:
        for row in self.query(TABLES_SQL, (self.schema,)):
            name = row["table_name"]
            if self.is_internal(name):
                continue
            self.register_table(
                bundle,
                TableInfo(
                    name=name,
                    schema=row.get("table_schema"),
                    kind="partitioned" if row.get("is_partitioned") else "table",
                    temporary=bool(row.get("is_temporary")),
                    unlogged=bool(row.get("is_unlogged")),
                    inherits=tuple(_as_list(row.get("inherits"))),
                    tablespace=row.get("tablespace"),
                    partition_by=row.get("partition_by"),
                    storage_params=parse_storage_params(_as_list(row.get("reloptions"))),
                    row_count=max(int(row.get("row_count") or 0), 0),
                    comment=row.get("table_comment"),
                ),
            )
        return len(bundle.tables)

    def step_columns(self, bundle: SchemaBundle) -> int:
        count = 0
        for row in self.query(COLUMNS_SQL, (self.schema,)):
            table = self.table_for(row["table_name"])
            if table is None:
                continue
            data_type, dims, length, precision, scale = split_formatted_type(row["formatted_type"])
            default = row.get("column_default")
            identity = bool(row.get("is_identity"))
            generated = bool(row.get("is_generated"))
            table.columns.append(
                ColumnInfo(
                    name=row["column_name"],
                    data_type=data_type,
                    nullable=bool(row.get("is_nullable")),
                    default=None if generated else default,
                    is_autoincrement=identity or bool(default and default.startswith("nextval(")),
                    identity=identity,
                    array_dimensions=dims,
                    max_length=length,
                    precision=precision,
                    scale=scale,
                    generated=default if generated else None,
                    collation=row.get("collation_name"),
                    comment=row.get("column_comment"),
                )
            )
            count += 1
        return count

    def step_constraints(self, bundle: SchemaBundle) -> int:
        count = 0
        for row in self.query(CONSTRAINTS_SQL, (self.schema,)):
            table = self.table_for(row["table_name"])
            if table is None:
                continue
            kind = CONSTRAINT_TYPES[row["type_code"]]
            definition = row.get("definition") or ""
            method = None
            if kind == "EXCLUDE":
                match = _EXCLUDE_METHOD.search(definition)
                method = match.group(1).lower() if match else None
            constraint = ConstraintInfo(
                name=row["name"],
                table=table.name,
                type=kind,
                columns=_as_list(row.get("columns")),
                definition=definition,
                deferrable=bool(row.get("is_deferrable")),
                initially_deferred=bool(row.get("is_deferred")),
                method=method,
            )
            if kind == "FOREIGN KEY":
                constraint.ref_table = row.get("ref_table")
                constraint.ref_columns = _as_list(row.get("ref_columns"))
                constraint.on_delete = map_referential_action(row.get("on_delete"))
                constraint.on_update = map_referential_action(row.get("on_update"))
                constraint.match_type = MATCH_TYPES.get(row.get("match_type") or "")
                self._link_reference(table, constraint)
            elif kind == "PRIMARY KEY":
                table.primary_key = list(constraint.columns)
                for name in constraint.columns:
                    column = table.column(name)
                    if column is not None:
                        column.is_primary_key = True
            elif kind == "UNIQUE" and len(constraint.columns) == 1:
                column = table.column(constraint.columns[0])
                if column is not None:
                    column.is_unique = True
            table.constraints.append(constraint)
            count += 1
        return count

    @staticmethod
    def _link_reference(table: TableInfo, constraint: ConstraintInfo) -> None:
        if len(constraint.columns) != 1 or not constraint.ref_table:
            return
        column = table.column(constraint.columns[0])
        if column is None:
            return
        column.references = ColumnReferenceInfo(
            table=constraint.ref_table,
            column=constraint.ref_columns[0] if constraint.ref_columns else "",
            on_delete=constraint.on_delete,
            on_update=constraint.on_update,
        )

    def step_indexes(self, bundle: SchemaBundle) -> int:
        rows = [row for row in self.query(INDEXES_SQL, (self.schema,)) if self.table_for(row["table_name"])]
        indexes = aggregate_indexes(rows, self._parse_index_row)
        for index in indexes:
            self.table_for(index.table).indexes.append(index)
        return len(indexes)

    @staticmethod
    def _parse_index_row(row: Dict[str, Any]) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "table": row["table_name"],
            "name": row["index_name"],
            "seq": int(row["seq_in_index"]),
            "unique": row.get("is_unique"),
            "primary": row.get("is_primary"),
            "method": row.get("method"),
            "predicate": row.get("predicate"),
            "storage_params": parse_storage_params(_as_list(row.get("reloptions"))),
            "definition": row.get("definition"),
        }
        if row.get("is_included"):
            item["include"] = row.get("column_name")
        else:
            item["column"] = IndexColumnInfo(
                name=row.get("column_name"),
                expression=row.get("expression"),
                direction="DESC" if row.get("is_desc") else "ASC",
                nulls="FIRST" if row.get("nulls_first") else "LAST",
                opclass=row.get("opclass"),
            )
        return item

    def step_checks(self, bundle: SchemaBundle) -> int:
        count = 0
        for row in self.query(CHECKS_SQL, (self.schema,)):
            table = self.table_for(row["table_name"])
            if table is None:
                continue
            table.constraints.append(
                ConstraintInfo(
                    name=row["name"],
                    table=table.name,
                    type="CHECK",
                    columns=_as_list(row.get("columns")),
                    definition=row.get("definition"),
                )
            )
            count += 1
        return count

    def step_enums(self, bundle: SchemaBundle) -> int:
        enums: Dict[str, EnumInfo] = {}
        for row in self.query(ENUMS_SQL, (self.schema,)):
            enum = enums.setdefault(row["name"], EnumInfo(name=row["name"], schema=self.schema))
            enum.values.append(row["value"])
        bundle.enums.extend(enums.values())
        return len(enums)

    def step_domains(self, bundle: SchemaBundle) -> int:
        domains: Dict[str, DomainInfo] = {}
        for row in self.query(DOMAINS_SQL, (self.schema,)):
            domain = domains.get(row["name"])
            if domain is None:
                domain = DomainInfo(
                    name=row["name"],
                    base_type=row["base_type"],
                    nullable=bool(row.get("is_nullable")),
                    default=row.get("default_value"),
                    collation=row.get("collation_name"),
                    schema=self.schema,
                )
                domains[row["name"]] = domain
            if row.get("check_definition"):
                domain.checks.append(row["check_definition"])
        bundle.domains.extend(domains.values())
        return len(domains)

    def step_sequences(self, bundle: SchemaBundle) -> int:
        for row in self.query(SEQUENCES_SQL, (self.schema,)):
            bundle.sequences.append(
                SequenceInfo(
                    name=row["name"],
                    data_type=row.get("data_type"),
                    start=row.get("start_value"),
                    increment=row.get("increment_by"),
                    min_value=row.get("min_value"),
                    max_value=row.get("max_value"),
                    cache=row.get("cache_size"),
                    cycle=bool(row.get("cycle")),
                    owned_by=row.get("owned_by"),
                    schema=self.schema,
                )
            )
        return len(bundle.sequences)

    def step_composite_types(self, bundle: SchemaBundle) -> int:
        types: Dict[str, CompositeTypeInfo] = {}
        for row in self.query(COMPOSITE_TYPES_SQL, (self.schema,)):
            info = types.setdefault(row["name"], CompositeTypeInfo(name=row["name"], schema=self.schema))
            info.attributes.append((row["attribute_name"], row["attribute_type"]))
        bundle.composite_types.extend(types.values())
        return len(types)

    def step_extensions(self, bundle: SchemaBundle) -> int:
        bundle.extensions = [row["extname"] for row in self.query(EXTENSIONS_SQL)]
        return len(bundle.extensions)

    def step_functions(self, bundle: SchemaBundle) -> int:
        for row in self.query(FUNCTIONS_SQL, (self.schema,)):
            bundle.functions.append(
                FunctionInfo(
                    name=row["name"],
                    language=row.get("language") or "sql",
                    definition=row.get("body"),
                    return_type=row.get("return_type"),
                    arguments=row.get("arguments"),
                    kind="procedure" if row.get("kind") == "p" else "function",
                    schema=row.get("function_schema"),
                )
            )
        return len(bundle.functions)

    def step_triggers(self, bundle: SchemaBundle) -> int:
        for row in self.query(TRIGGERS_SQL, (self.schema,)):
            timing, event, for_each = decode_trigger_type(int(row["tgtype"]))
            bundle.triggers.append(
                TriggerInfo(
                    name=row["name"],
                    table=row["table_name"],
                    event=event,
                    timing=timing,
                    function_name=row.get("function_name"),
                    columns=_as_list(row.get("columns")),
                    for_each=for_each,
                    definition=row.get("definition"),
                )
            )
        return len(bundle.triggers)

    def step_collations(self, bundle: SchemaBundle) -> int:
        for row in self.query(COLLATIONS_SQL, (self.schema,)):
            bundle.collations.append(
                CollationInfo(
                    name=row["name"],
                    provider=COLLATION_PROVIDERS.get(row.get("provider") or "", row.get("provider")),
                    locale=row.get("locale"),
                    deterministic=bool(row.get("is_deterministic", True)),
                )
            )
        return len(bundle.collations)

    def fetch_version(self) -> Optional[str]:
        rows = self.query("SHOW server_version")
        return str(rows[0]["server_version"]) if rows else None

    def list_tables(self) -> List[str]:
        return [row["table_name"] for row in self.query(LIST_TABLES_SQL, (self.schema,))
                if not self.is_internal(row["table_name"])]

    def list_schemas(self) -> List[str]:
        return [row["schema_name"] for row in self.query(LIST_SCHEMAS_SQL)]


class CockroachIntrospector(PostgresIntrospector):
    """
    CockroachDB has no domains or collations catalogued per schema.
    """

    dialect = "cockroachdb"
    steps = tuple(step for step in PostgresIntrospector.steps if step not in ("domains", "collations"))


class DsqlIntrospector(PostgresIntrospector):
    """
    Aurora DSQL supports neither sequences nor user-defined types.
    """

    dialect = "dsql"
    steps = ("tables", "columns", "constraints", "indexes", "checks", "extensions", "functions", "triggers")


class NileIntrospector(PostgresIntrospector):
    dialect = "nile"
