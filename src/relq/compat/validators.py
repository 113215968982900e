"""
Per-dialect compatibility validators.

A validator walks a :class:`SchemaBundle` (tables converted from
definitions, or an introspected schema) and scans raw SQL with its
dialect's regex tables. Findings are returned as :class:`Diagnostic`
values and never raised; the input schema is left untouched.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..introspection.models import (
    ColumnInfo,
    ConstraintInfo,
    FunctionInfo,
    IndexInfo,
    SchemaBundle,
    TableInfo,
    TriggerInfo,
)
from ..utils import get_logger
from . import rules_crdb, rules_dsql, rules_mysql, rules_nile, rules_sqlite
from .catalog import RuleCatalog, SqlRule
from .diagnostics import Diagnostic, ValidationResult
from .model import as_bundle, as_table_info

# single-quoted literals and line comments are blanked before scanning
_MASKED = re.compile(r"'(?:[^']|'')*'|--[^\n]*")
_CAST = re.compile(r"::\s*\"?[A-Za-z_][\w.\"]*(?:\s*\([^)]*\))?(?:\s*\[\s*\d*\s*\])*")
_CAST_CALL = re.compile(r"\b(?:TRY_)?CAST\s*\(", re.IGNORECASE)
_AS_KEYWORD = re.compile(r"\bAS\b", re.IGNORECASE)
_TYPE_PARAMS = re.compile(r"\s*\([^)]*\)")
_SERIAL_TYPES = frozenset({"serial", "bigserial", "smallserial", "serial2", "serial4", "serial8"})
# installed in every Postgres database; never user-requested
_IMPLICIT_EXTENSIONS = frozenset({"plpgsql"})


def _blank(match: "re.Match[str]") -> str:
    return re.sub(r"[^\n]", " ", match.group(0))


def mask_sql(sql: str) -> str:
    """Blank out literals and comments, keeping offsets and line numbers."""

    return _MASKED.sub(_blank, sql)


def _cast_target_span(text: str, start: int) -> Optional[Tuple[int, int]]:
    # from the top-level AS of a CAST( ... ) call up to its closing paren
    depth = 1
    target = None
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return (target, pos) if target is not None else None
        elif depth == 1 and target is None and _AS_KEYWORD.match(text, pos):
            target = pos
        pos += 1
    return None


def strip_casts(sql: str) -> str:
    """Blank ``::type`` suffixes and ``CAST(expr AS type)`` targets."""

    text = _CAST.sub(_blank, sql)
    spans = [_cast_target_span(text, call.end()) for call in _CAST_CALL.finditer(text)]
    for span in spans:
        if span is not None:
            begin, end = span
            text = text[:begin] + re.sub(r"[^\n]", " ", text[begin:end]) + text[end:]
    return text


def normalize_type(data_type: Optional[str]) -> str:
    """``VARCHAR(255)[]`` -> ``varchar``; ``Double  Precision`` -> ``double precision``."""

    if not data_type:
        return ""
    text = _TYPE_PARAMS.sub("", data_type.lower())
    text = text.replace("[]", "").strip().strip('"')
    return " ".join(text.split())


def _is_nextval(default: Optional[str]) -> bool:
    return bool(default) and "nextval(" in default.lower().replace(" ", "")


def _bare_name(name: Optional[str]) -> str:
    return (name or "").split(".")[-1].strip('"')


def _constraint_location(table: TableInfo, constraint: ConstraintInfo) -> dict:
    loc: dict = {"table": table.name}
    if constraint.name:
        loc["constraint"] = constraint.name
    elif constraint.columns:
        loc["column"] = ", ".join(constraint.columns)
    return loc


def _index_location(table: TableInfo, index: IndexInfo) -> dict:
    loc: dict = {"table": table.name}
    if index.name:
        loc["index"] = index.name
    return loc


def _user_extensions(bundle: SchemaBundle) -> List[str]:
    return [ext for ext in bundle.extensions if ext.lower() not in _IMPLICIT_EXTENSIONS]


class CompatibilityValidator:
    """
    Base validator: regex scanning plus empty structural hooks. Subclasses
    set the class attributes and override the ``check_*`` hooks.
    """

    dialect: str = "postgres"
    display_name: str = "PostgreSQL"
    catalog: RuleCatalog = RuleCatalog("PostgreSQL", ())
    type_rules: Tuple[SqlRule, ...] = ()
    sql_rules: Tuple[SqlRule, ...] = ()

    def __init__(
        self,
        *,
        type_rules: Optional[Iterable[SqlRule]] = None,
        sql_rules: Optional[Iterable[SqlRule]] = None,
    ) -> None:
        if type_rules is not None:
            self.type_rules = tuple(type_rules)
        if sql_rules is not None:
            self.sql_rules = tuple(sql_rules)
        self.logger = get_logger(f"compat.{self.dialect}")

    # public API -----------------------------------------------------------
    def validate_schema(self, schema: Any) -> ValidationResult:
        bundle = as_bundle(schema)
        result = ValidationResult(self.dialect)
        for table in bundle.tables:
            self._collect(result, self.check_table(table, bundle))
        self._collect(result, self.check_schema_objects(bundle))
        self._collect(result, self.finish(bundle))
        self.logger.debug(
            "Validated %d tables for %s: %s", len(bundle.tables), self.display_name, result.summary
        )
        return result

    validate = validate_schema

    def validate_table(self, table: Any, schema: Any = None) -> ValidationResult:
        info = as_table_info(table)
        bundle = as_bundle(schema) if schema is not None else SchemaBundle(tables=[info])
        result = ValidationResult(self.dialect)
        self._collect(result, self.check_table(info, bundle))
        return result

    def validate_sql(self, sql: str, location: Mapping[str, Any] | str | None = None) -> ValidationResult:
        if isinstance(location, str):
            location = {"object": location}
        result = ValidationResult(self.dialect)
        self._collect(result, self.scan_sql(sql, location))
        self.logger.debug("Scanned %d characters of SQL for %s: %s", len(sql), self.display_name, result.summary)
        return result

    def accept(self, diagnostic: Diagnostic) -> bool:
        return True

    # regex scanning -------------------------------------------------------
    def scan_sql(self, sql: str, location: Optional[Mapping[str, Any]] = None) -> List[Diagnostic]:
        """
        Run the type rules (with cast target types removed) and then the
        statement rules. Each rule reports at most once, at its longest match.
        """

        masked = mask_sql(sql)
        uncast = strip_casts(masked)
        found: List[Diagnostic] = []
        for rules, text in ((self.type_rules, uncast), (self.sql_rules, masked)):
            for rule in rules:
                best = None
                for match in rule.finditer(text):
                    if best is None or len(match.group(0)) > len(best.group(0)):
                        best = match
                if best is None:
                    continue
                loc = dict(location or {})
                loc["line"] = text.count("\n", 0, best.start()) + 1
                detected = " ".join(sql[best.start():best.end()].split())
                found.append(self._rule_diagnostic(rule, detected, loc))
        return found

    def scan_type(self, table: TableInfo, column: ColumnInfo) -> Iterator[Diagnostic]:
        full_type = column.full_type
        for rule in self.type_rules:
            if rule.search(full_type):
                yield self._rule_diagnostic(rule, full_type, {"table": table.name, "column": column.name})

    def _rule_diagnostic(self, rule: SqlRule, detected: Optional[str], location: Mapping[str, Any]) -> Diagnostic:
        entry = self.catalog.lookup(rule.rule_code) if rule.rule_code else None
        return Diagnostic(
            code=rule.feature,
            severity=rule.severity,
            category=rule.category,
            feature=rule.feature,
            message=rule.message,
            alternative=rule.alternative,
            location=dict(location) if location else None,
            detected=detected,
            docs_url=(entry.docs_url if entry is not None and entry.docs_url else rule.docs_url),
            auto_fix=entry.auto_fix if entry is not None else None,
            rule_code=rule.rule_code,
        )

    # structural hooks -----------------------------------------------------
    def check_table(self, table: TableInfo, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        for column in table.columns:
            yield from self.check_column(table, column)
        for constraint in table.constraints:
            yield from self.check_constraint(table, constraint)
        for index in table.indexes:
            yield from self.check_index(table, index)
        yield from self.check_table_options(table)

    def check_column(self, table: TableInfo, column: ColumnInfo) -> Iterable[Diagnostic]:
        return self.scan_type(table, column)

    def check_constraint(self, table: TableInfo, constraint: ConstraintInfo) -> Iterable[Diagnostic]:
        return ()

    def check_index(self, table: TableInfo, index: IndexInfo) -> Iterable[Diagnostic]:
        return ()

    def check_table_options(self, table: TableInfo) -> Iterable[Diagnostic]:
        return ()

    def check_schema_objects(self, bundle: SchemaBundle) -> Iterable[Diagnostic]:
        return ()

    def finish(self, bundle: SchemaBundle) -> Iterable[Diagnostic]:
        return ()

    def _collect(self, result: ValidationResult, diagnostics: Iterable[Diagnostic]) -> None:
        result.extend(diag for diag in diagnostics if self.accept(diag))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self.dialect!r})"


class PostgresValidator(CompatibilityValidator):
    """PostgreSQL is the reference dialect; nothing is reported."""

    def check_column(self, table: TableInfo, column: ColumnInfo) -> Iterable[Diagnostic]:
        return ()


class DsqlValidator(CompatibilityValidator):
    dialect = "dsql"
    display_name = "AWS Aurora DSQL"
    catalog = rules_dsql.DSQL_RULES
    type_rules = rules_dsql.UNSUPPORTED_DATA_TYPES
    sql_rules = rules_dsql.UNSUPPORTED_SQL

    def check_column(self, table: TableInfo, column: ColumnInfo) -> Iterator[Diagnostic]:
        yield from self.scan_type(table, column)
        create = self.catalog.create
        loc = {"table": table.name, "column": column.name}
        base = normalize_type(column.data_type)
        if column.identity:
            yield create("DSQL-MOD-001", detected="GENERATED AS IDENTITY", **loc)
        elif column.is_autoincrement and base not in _SERIAL_TYPES:
            yield create("DSQL-TYPE-001", detected=f"{column.data_type} autoincrement", **loc)
        if _is_nextval(column.default):
            yield create("DSQL-MOD-002", detected=f"DEFAULT {column.default}", **loc)
        if column.max_length is not None:
            if base in ("varchar", "character varying") and column.max_length > rules_dsql.MAX_VARCHAR_LENGTH:
                yield create("DSQL-LIMIT-001", detected=column.data_type, **loc)
            elif base in ("char", "character", "bpchar") and column.max_length > rules_dsql.MAX_CHAR_LENGTH:
                yield create("DSQL-LIMIT-002", detected=column.data_type, **loc)
        if base in ("numeric", "decimal"):
            if column.precision is not None and column.precision > rules_dsql.MAX_NUMERIC_PRECISION:
                yield create("DSQL-LIMIT-003", detected=column.data_type, **loc)
            if column.scale is not None and column.scale > rules_dsql.MAX_NUMERIC_SCALE:
                yield create("DSQL-LIMIT-004", detected=column.data_type, **loc)
        if column.collation and column.collation.strip('"').lower() not in rules_dsql.ALLOWED_COLLATIONS:
            yield create("DSQL-MOD-003", detected=f"COLLATE {column.collation}", **loc)

    def check_constraint(self, table: TableInfo, constraint: ConstraintInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        loc = _constraint_location(table, constraint)
        if constraint.type == "FOREIGN KEY":
            code = "DSQL-CONS-002" if constraint.inline else "DSQL-CONS-001"
            yield create(code, detected=f"REFERENCES {constraint.ref_table}", **loc)
            if constraint.on_delete and constraint.on_delete.upper() != "NO ACTION":
                yield create("DSQL-CONS-003", detected=f"ON DELETE {constraint.on_delete}", **loc)
            if constraint.on_update and constraint.on_update.upper() != "NO ACTION":
                yield create("DSQL-CONS-004", detected=f"ON UPDATE {constraint.on_update}", **loc)
            if constraint.match_type and constraint.match_type.upper() != "SIMPLE":
                yield create("DSQL-CONS-007", detected=f"MATCH {constraint.match_type}", **loc)
        elif constraint.type == "EXCLUDE":
            yield create("DSQL-CONS-005", detected=constraint.definition, **loc)
        if constraint.deferrable or constraint.initially_deferred:
            detected = "INITIALLY DEFERRED" if constraint.initially_deferred else "DEFERRABLE"
            yield create("DSQL-CONS-006", detected=detected, **loc)

    def check_index(self, table: TableInfo, index: IndexInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        loc = _index_location(table, index)
        method = (index.method or "btree").lower()
        code = rules_dsql.BLOCKED_INDEX_METHODS.get(method)
        if code:
            yield create(code, detected=f"USING {method}", **loc)
        if index.concurrently:
            yield create("DSQL-IDX-006", detected="CONCURRENTLY", **loc)
        if len(index.columns) > rules_dsql.MAX_COLUMNS_PER_INDEX:
            yield create("DSQL-IDX-LIMIT-002", detected=f"{len(index.columns)} columns", **loc)
        for col in index.columns:
            if col.opclass:
                yield create("DSQL-IDX-007", detected=col.opclass, column=col.name, **loc)
            data_type = col.data_type
            if data_type is None and col.name and table.has_column(col.name):
                data_type = table.column(col.name).data_type
            code = rules_dsql.NON_INDEXABLE_TYPES.get(normalize_type(data_type))
            if code:
                yield create(code, detected=data_type, column=col.name, **loc)

    def check_table_options(self, table: TableInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        name = table.name
        if len(table.indexes) > rules_dsql.MAX_INDEXES_PER_TABLE:
            yield create("DSQL-IDX-LIMIT-001", detected=f"{len(table.indexes)} indexes", table=name)
        if len(table.columns) > rules_dsql.MAX_COLUMNS_PER_TABLE:
            yield create("DSQL-DB-004", detected=f"{len(table.columns)} columns", table=name)
        if len(table.primary_key) > rules_dsql.MAX_COLUMNS_PER_INDEX:
            yield create("DSQL-IDX-LIMIT-002", detected=f"PRIMARY KEY ({', '.join(table.primary_key)})", table=name)
        if table.temporary:
            yield create("DSQL-TBL-001", detected="TEMPORARY", table=name)
        if table.unlogged:
            yield create("DSQL-TBL-002", detected="UNLOGGED", table=name)
        if table.inherits:
            yield create("DSQL-TBL-003", detected=f"INHERITS ({', '.join(table.inherits)})", table=name)
        if table.tablespace:
            yield create("DSQL-TBL-004", detected=f"TABLESPACE {table.tablespace}", table=name)
        if table.partition_by:
            yield create("DSQL-TBL-005", detected=f"PARTITION BY {table.partition_by}", table=name)
        if table.storage_params:
            yield create("DSQL-TBL-006", detected=", ".join(table.storage_params), table=name)

    def check_schema_objects(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        create = self.catalog.create
        if len(bundle.tables) > rules_dsql.MAX_TABLES:
            yield create("DSQL-DB-003", detected=f"{len(bundle.tables)} tables")
        for trigger in bundle.triggers:
            yield create("DSQL-TRIG-001", detected=f"{trigger.timing} {trigger.event}",
                         table=trigger.table, trigger=trigger.name)
        for seq in bundle.sequences:
            yield create("DSQL-SEQ-001", detected=f"CREATE SEQUENCE {seq.name}", sequence=seq.name)
        for ext in _user_extensions(bundle):
            yield create("DSQL-EXT-001", detected=f"CREATE EXTENSION {ext}", object=ext)
        for fn in bundle.functions:
            yield from self.check_function(fn)

    def check_function(self, fn: FunctionInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        language = (fn.language or "sql").lower()
        code = rules_dsql.FUNCTION_LANGUAGES.get(language)
        if code:
            yield create(code, detected=f"LANGUAGE {fn.language}", function=fn.name)
        elif fn.kind == "procedure" and language != "sql":
            yield create("DSQL-FN-006", detected=f"LANGUAGE {fn.language}", function=fn.name)
        if fn.return_type and fn.return_type.lower() == "trigger":
            yield create("DSQL-TRIG-003", detected="RETURNS trigger", function=fn.name)
        if fn.definition:
            yield from self.scan_sql(fn.definition, {"function": fn.name})


class CockroachValidator(CompatibilityValidator):
    dialect = "cockroachdb"
    display_name = "CockroachDB"
    catalog = rules_crdb.CRDB_RULES
    type_rules = rules_crdb.UNSUPPORTED_DATA_TYPES
    sql_rules = rules_crdb.UNSUPPORTED_SQL

    def check_column(self, table: TableInfo, column: ColumnInfo) -> Iterator[Diagnostic]:
        code = rules_crdb.TYPE_DISPOSITIONS.get(normalize_type(column.data_type))
        if code:
            yield self.catalog.create(code, detected=column.full_type, table=table.name, column=column.name)

    def check_constraint(self, table: TableInfo, constraint: ConstraintInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        loc = _constraint_location(table, constraint)
        if constraint.type == "EXCLUDE":
            yield create("CRDB_E100", detected=constraint.definition, **loc)
        if constraint.deferrable:
            yield create("CRDB_E101", detected="DEFERRABLE", **loc)
        if constraint.initially_deferred:
            yield create("CRDB_E102", detected="INITIALLY DEFERRED", **loc)
        if constraint.match_type and constraint.match_type.upper() == "PARTIAL":
            yield create("CRDB_E103", detected="MATCH PARTIAL", **loc)

    def check_index(self, table: TableInfo, index: IndexInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        loc = _index_location(table, index)
        method = (index.method or "btree").lower()
        code = rules_crdb.BLOCKED_INDEX_METHODS.get(method)
        if code:
            yield create(code, detected=f"USING {method}", **loc)
        for col in index.columns:
            if not col.opclass:
                continue
            opclass = col.opclass.lower()
            code = rules_crdb.BLOCKED_OPCLASSES.get(opclass)
            if code is None and opclass not in rules_crdb.BUILTIN_OPCLASSES:
                code = "CRDB_E204"
            if code:
                yield create(code, detected=col.opclass, column=col.name, **loc)
        if any(col.direction and not col.nulls for col in index.columns):
            yield create("CRDB_W011", **loc)
        if index.concurrently:
            yield create("CRDB_W040", detected="CONCURRENTLY", **loc)

    def check_table_options(self, table: TableInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        name = table.name
        if table.inherits:
            yield create("CRDB_E300", detected=f"INHERITS ({', '.join(table.inherits)})", table=name)
        if table.unlogged:
            yield create("CRDB_E301", detected="UNLOGGED", table=name)
        if table.tablespace:
            yield create("CRDB_E302", detected=f"TABLESPACE {table.tablespace}", table=name)
        if table.temporary:
            yield create("CRDB_E303", detected="TEMPORARY", table=name)
        for param in table.storage_params:
            code = rules_crdb.storage_param_code(param)
            if code:
                yield create(code, detected=param, table=name)
        if table.kind == "table" and not table.primary_key:
            yield create("CRDB_E730", table=name)

    def check_schema_objects(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        create = self.catalog.create
        for domain in bundle.domains:
            yield create("CRDB_E400", detected=f"CREATE DOMAIN {domain.name}", object=domain.name)
        for composite in bundle.composite_types:
            yield create("CRDB_E401", detected=f"CREATE TYPE {composite.name} AS (...)", object=composite.name)
        for trigger in bundle.triggers:
            yield from self.check_trigger(trigger)
        for fn in bundle.functions:
            yield from self.check_function(fn)
        for seq in bundle.sequences:
            if seq.cache is not None and seq.cache > 1:
                yield create("CRDB_W030", detected=f"CACHE {seq.cache}", sequence=seq.name)

    def check_trigger(self, trigger: TriggerInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        loc = {"table": trigger.table, "trigger": trigger.name}
        reported = set()
        if trigger.columns:
            reported.add("CRDB_E500")
            yield create("CRDB_E500", detected=f"UPDATE OF {', '.join(trigger.columns)}", **loc)
        if "TRUNCATE" in trigger.event.upper():
            reported.add("CRDB_E501")
            yield create("CRDB_E501", detected="TRUNCATE", **loc)
        if trigger.definition:
            for diag in self.scan_sql(trigger.definition, loc):
                if diag.rule_code and diag.rule_code not in reported:
                    yield diag

    def check_function(self, fn: FunctionInfo) -> Iterator[Diagnostic]:
        if (fn.language or "").lower() != "plpgsql":
            return
        yield self.catalog.create("CRDB_I600", detected="LANGUAGE plpgsql", function=fn.name)
        if not fn.definition:
            return
        for diag in self.scan_sql(fn.definition, {"function": fn.name}):
            # statements inside a body only fail when the function runs
            if diag.category != rules_crdb.PLPGSQL_CATEGORY and diag.severity == "error":
                diag = replace(diag, severity="warning")
            yield diag

    def finish(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        yield self.catalog.create("CRDB_I001")


class NileValidator(CompatibilityValidator):
    """
    Tables are classified as built-in (``tenants``, ``users``,
    ``tenant_users``), tenant-aware (has a ``tenant_id`` column) or shared.
    """

    dialect = "nile"
    display_name = "Nile"
    catalog = rules_nile.NILE_RULES
    sql_rules = rules_nile.UNSUPPORTED_SQL

    def table_kind(self, table: TableInfo) -> str:
        if table.name.lower() in rules_nile.BUILTIN_TABLES:
            return "builtin"
        if table.has_column(rules_nile.TENANT_COLUMN):
            return "tenant"
        return "shared"

    def check_table(self, table: TableInfo, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        kind = self.table_kind(table)
        if kind == "builtin":
            yield self.catalog.create("NILE-BT-001", detected=f"CREATE TABLE {table.name}", table=table.name)
            return
        if kind == "tenant":
            yield from self._check_tenant_table(table)
        else:
            yield self.catalog.create("NILE-TC-002", table=table.name)
        yield from self._check_foreign_keys(table, kind, bundle)
        for column in table.columns:
            if normalize_type(column.data_type) in rules_nile.EXTENSION_TYPES:
                yield self.catalog.create("NILE-CT-005", detected=column.data_type, table=table.name,
                                          column=column.name)

    def _check_tenant_table(self, table: TableInfo) -> Iterator[Diagnostic]:
        create = self.catalog.create
        name = table.name
        tenant_col = rules_nile.TENANT_COLUMN
        yield create("NILE-TC-001", table=name)

        tenant = table.column(tenant_col)
        if normalize_type(tenant.data_type) != "uuid":
            yield create("NILE-TC-003", detected=tenant.data_type, table=name, column=tenant_col)
        if tenant.nullable and not tenant.is_primary_key and tenant_col not in table.primary_key:
            yield create("NILE-TC-004", detected="NULL", table=name, column=tenant_col)

        pk = list(table.primary_key)
        detected = f"PRIMARY KEY ({', '.join(pk)})"
        if not pk:
            yield create("NILE-PK-004", table=name)
        elif tenant_col not in pk:
            yield create("NILE-PK-001", detected=detected, table=name)
        elif pk[0] != tenant_col:
            yield create("NILE-PK-002", detected=detected, table=name)
        elif len(pk) > 1:
            yield create("NILE-PK-003", detected=detected, table=name)

        unique_sets: List[Tuple[Sequence[str], dict]] = []
        for constraint in table.constraints:
            if constraint.type == "UNIQUE":
                unique_sets.append((constraint.columns, _constraint_location(table, constraint)))
            elif constraint.type == "EXCLUDE":
                yield create("NILE-UQ-003", detected=constraint.definition, **_constraint_location(table, constraint))
        for index in table.indexes:
            if index.unique and not index.primary:
                unique_sets.append((index.column_names, _index_location(table, index)))
        for columns, loc in unique_sets:
            detected = f"UNIQUE ({', '.join(columns)})"
            if tenant_col not in columns:
                yield create("NILE-UQ-001", detected=detected, **loc)
            elif columns[0] != tenant_col:
                yield create("NILE-UQ-002", detected=detected, **loc)

        for column in table.columns:
            loc = {"table": name, "column": column.name}
            if normalize_type(column.data_type) in rules_nile.SERIAL_TYPES:
                yield create("NILE-CT-001", detected=column.data_type, **loc)
            elif column.identity:
                yield create("NILE-CT-002", detected="GENERATED AS IDENTITY", **loc)
            elif _is_nextval(column.default):
                yield create("NILE-CT-003", detected=f"DEFAULT {column.default}", **loc)

    def _check_foreign_keys(self, table: TableInfo, kind: str, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        create = self.catalog.create
        tenant_col = rules_nile.TENANT_COLUMN
        for fk in table.foreign_keys:
            target_name = _bare_name(fk.ref_table)
            if target_name.lower() in rules_nile.BUILTIN_TABLES:
                continue
            target = bundle.table(target_name)
            if target is None:
                continue
            loc = _constraint_location(table, fk)
            detected = f"REFERENCES {target_name}"
            target_kind = self.table_kind(target)
            if kind == "tenant" and target_kind == "shared":
                yield create("NILE-FK-001", detected=detected, **loc)
            elif kind == "shared" and target_kind == "tenant":
                yield create("NILE-FK-002", detected=detected, **loc)
            elif kind == "tenant" and (tenant_col not in fk.columns or tenant_col not in fk.ref_columns):
                yield create("NILE-FK-003", detected=detected, **loc)
            if kind == "tenant" and (fk.on_delete or "").upper() == "CASCADE":
                yield create("NILE-FK-004", detected="ON DELETE CASCADE", **loc)

    def check_schema_objects(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        create = self.catalog.create
        for trigger in bundle.triggers:
            yield create("NILE-TF-001", detected=f"{trigger.timing} {trigger.event}",
                         table=trigger.table, trigger=trigger.name)
        for fn in bundle.functions:
            language = (fn.language or "sql").lower()
            if fn.kind == "procedure":
                yield create("NILE-TF-003", detected=f"CREATE PROCEDURE {fn.name}", function=fn.name)
            else:
                yield create("NILE-TF-002", detected=f"CREATE FUNCTION {fn.name}", function=fn.name)
            if language == "plpgsql":
                yield create("NILE-TF-005", detected="LANGUAGE plpgsql", function=fn.name)
        for ext in _user_extensions(bundle):
            code = "NILE-EXT-001" if ext.lower() in rules_nile.PREINSTALLED_EXTENSIONS else "NILE-EXT-003"
            yield create(code, detected=f"CREATE EXTENSION {ext}", object=ext)
        for seq in bundle.sequences:
            owner = None
            if seq.owned_by and "." in seq.owned_by:
                owner = bundle.table(_bare_name(seq.owned_by.rsplit(".", 1)[0]))
            if owner is None:
                yield create("NILE-SEQ-002", sequence=seq.name)
            elif self.table_kind(owner) == "tenant":
                yield create("NILE-SEQ-001", detected=f"OWNED BY {seq.owned_by}", sequence=seq.name)
            else:
                yield create("NILE-SEQ-003", detected=f"OWNED BY {seq.owned_by}", sequence=seq.name)

    def finish(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        kinds = {self.table_kind(table) for table in bundle.tables}
        if "tenant" in kinds:
            yield self.catalog.create("NILE-TX-001")
            if "shared" in kinds:
                yield self.catalog.create("NILE-TX-002")


class MySQLValidator(CompatibilityValidator):
    dialect = "mysql"
    display_name = "MySQL"
    catalog = rules_mysql.MYSQL_RULES
    type_rules = rules_mysql.UNSUPPORTED_DATA_TYPES
    sql_rules = rules_mysql.UNSUPPORTED_SQL

    def check_column(self, table: TableInfo, column: ColumnInfo) -> Iterator[Diagnostic]:
        yield from self.scan_type(table, column)
        if column.identity:
            yield self.catalog.create("MYSQL-SEQ-002", detected="GENERATED AS IDENTITY", table=table.name,
                                      column=column.name)

    def check_constraint(self, table: TableInfo, constraint: ConstraintInfo) -> Iterator[Diagnostic]:
        loc = _constraint_location(table, constraint)
        if constraint.type == "EXCLUDE":
            yield self.catalog.create("MYSQL-CONS-001", detected=constraint.definition, **loc)
        if constraint.deferrable or constraint.initially_deferred:
            yield self.catalog.create("MYSQL-CONS-002", detected="DEFERRABLE", **loc)

    def check_index(self, table: TableInfo, index: IndexInfo) -> Iterator[Diagnostic]:
        loc = _index_location(table, index)
        method = (index.method or "btree").lower()
        if method not in rules_mysql.SUPPORTED_INDEX_METHODS:
            yield self.catalog.create("MYSQL-IDX-001", detected=f"USING {method}", **loc)
        if index.predicate:
            yield self.catalog.create("MYSQL-IDX-002", detected=f"WHERE {index.predicate}", **loc)

    def check_schema_objects(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        create = self.catalog.create
        for seq in bundle.sequences:
            yield create("MYSQL-SEQ-001", detected=f"CREATE SEQUENCE {seq.name}", sequence=seq.name)
        for ext in _user_extensions(bundle):
            yield create("MYSQL-EXT-001", detected=f"CREATE EXTENSION {ext}", object=ext)
        for fn in bundle.functions:
            if (fn.language or "").lower() == "plpgsql":
                yield create("MYSQL-FN-001", detected="LANGUAGE plpgsql", function=fn.name)
                if fn.definition:
                    yield from self.scan_sql(fn.definition, {"function": fn.name})


class MariaDBValidator(MySQLValidator):
    """MariaDB 10.3+ has sequences, so sequence findings are dropped."""

    dialect = "mariadb"
    display_name = "MariaDB"

    def accept(self, diagnostic: Diagnostic) -> bool:
        return not set(diagnostic.codes) & rules_mysql.SEQUENCE_FEATURES


class PlanetScaleValidator(MySQLValidator):
    dialect = "planetscale"
    display_name = "PlanetScale"
    sql_rules = rules_mysql.UNSUPPORTED_SQL + rules_mysql.PLANETSCALE_SQL

    def check_constraint(self, table: TableInfo, constraint: ConstraintInfo) -> Iterator[Diagnostic]:
        yield from super().check_constraint(table, constraint)
        if constraint.type == "FOREIGN KEY":
            code = "MYSQL-PS-002" if constraint.inline else "MYSQL-PS-001"
            yield self.catalog.create(code, detected=f"REFERENCES {constraint.ref_table}",
                                      **_constraint_location(table, constraint))


class SQLiteValidator(CompatibilityValidator):
    dialect = "sqlite"
    display_name = "SQLite"
    catalog = rules_sqlite.SQLITE_RULES
    type_rules = rules_sqlite.UNSUPPORTED_DATA_TYPES
    sql_rules = rules_sqlite.UNSUPPORTED_SQL

    def check_column(self, table: TableInfo, column: ColumnInfo) -> Iterator[Diagnostic]:
        yield from self.scan_type(table, column)
        if column.identity:
            yield self.catalog.create("SQLITE-SEQ-002", detected="GENERATED AS IDENTITY", table=table.name,
                                      column=column.name)

    def check_constraint(self, table: TableInfo, constraint: ConstraintInfo) -> Iterator[Diagnostic]:
        if constraint.type == "EXCLUDE":
            yield self.catalog.create("SQLITE-CONS-001", detected=constraint.definition,
                                      **_constraint_location(table, constraint))

    def check_index(self, table: TableInfo, index: IndexInfo) -> Iterator[Diagnostic]:
        method = (index.method or "btree").lower()
        if method != "btree":
            yield self.catalog.create("SQLITE-IDX-001", detected=f"USING {method}", **_index_location(table, index))

    def check_table_options(self, table: TableInfo) -> Iterator[Diagnostic]:
        ignored = []
        if table.unlogged:
            ignored.append("UNLOGGED")
        if table.tablespace:
            ignored.append(f"TABLESPACE {table.tablespace}")
        if table.inherits:
            ignored.append(f"INHERITS ({', '.join(table.inherits)})")
        if table.partition_by:
            ignored.append(f"PARTITION BY {table.partition_by}")
        if table.storage_params:
            ignored.append(f"WITH ({', '.join(table.storage_params)})")
        for option in ignored:
            yield self.catalog.create("SQLITE-TBL-001", detected=option, table=table.name)

    def check_schema_objects(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        create = self.catalog.create
        for seq in bundle.sequences:
            yield create("SQLITE-SEQ-001", detected=f"CREATE SEQUENCE {seq.name}", sequence=seq.name)
        for fn in bundle.functions:
            yield create("SQLITE-FN-001", detected=f"CREATE {fn.kind.upper()} {fn.name}", function=fn.name)
        for ext in _user_extensions(bundle):
            yield create("SQLITE-EXT-001", detected=f"CREATE EXTENSION {ext}", object=ext)

    def finish(self, bundle: SchemaBundle) -> Iterator[Diagnostic]:
        if bundle.tables:
            yield self.catalog.create("SQLITE-TYPE-001")


class TursoValidator(SQLiteValidator):
    dialect = "turso"
    display_name = "Turso"
