"""
CockroachDB rule catalog, type dispositions and regex tables.
"""

from __future__ import annotations

from typing import Dict, Final, Tuple

from .catalog import AutoFix, RuleCatalog, RuleEntry, SqlRule

DOCS_COMPAT: Final = "https://www.cockroachlabs.com/docs/stable/postgresql-compatibility"
DOCS_TYPES: Final = "https://www.cockroachlabs.com/docs/stable/data-types"
DOCS_INDEXES: Final = "https://www.cockroachlabs.com/docs/stable/indexes"
DOCS_TRIGGERS: Final = "https://www.cockroachlabs.com/docs/stable/triggers"
DOCS_PLPGSQL: Final = "https://www.cockroachlabs.com/docs/stable/plpgsql"
DOCS_RETRY: Final = "https://www.cockroachlabs.com/docs/stable/transaction-retry-error-reference"
DOCS_MULTI_REGION: Final = "https://www.cockroachlabs.com/docs/stable/multiregion-overview"
DOCS_TTL: Final = "https://www.cockroachlabs.com/docs/stable/row-level-ttl"

MAX_HASH_BUCKETS: Final = 256

_SERIAL_ALT = "Use uuid().default(sql('gen_random_uuid()')) for distributed primary keys."
_DEFER_ALT = "Restructure INSERT order to satisfy foreign keys, or use nullable FK columns."
_REGION_ALT = "Configure database regions first with ALTER DATABASE ADD REGION."
_MULTIRANGE_ALT = "Use multiple rows or a JSONB array."


def _err(code: str, message: str, alternative: str, category: str, docs: str = DOCS_COMPAT,
         fix: AutoFix | None = None) -> RuleEntry:
    return RuleEntry(code, "error", message, category, alternative, docs, fix)


def _warn(code: str, message: str, alternative: str, category: str, docs: str = DOCS_COMPAT,
          fix: AutoFix | None = None) -> RuleEntry:
    return RuleEntry(code, "warning", message, category, alternative, docs, fix)


def _unsupported_type(code: str, name: str, alternative: str, category: str,
                      replacement: str | None = None) -> RuleEntry:
    fix = None
    if replacement is not None:
        fix = AutoFix(f"Replace {name} with {replacement.upper()}", name.lower(), replacement)
    return _err(code, f"{name} type is not supported in CockroachDB.", alternative, category, DOCS_TYPES, fix)


def _serial(code: str, name: str) -> RuleEntry:
    return _warn(
        code,
        f"{name} columns in CockroachDB use unique_rowid() instead of PostgreSQL sequences.",
        _SERIAL_ALT,
        "Numeric",
        DOCS_TYPES,
        AutoFix(
            f"Replace {name} with UUID + gen_random_uuid()",
            name.lower(),
            "uuid",
            ("Add DEFAULT gen_random_uuid()",),
        ),
    )


_ENTRIES: Tuple[RuleEntry, ...] = (
    # Types
    _unsupported_type("CRDB_E001", "MONEY", "Use numeric(19, 4).", "Numeric", "numeric(19,4)"),
    _unsupported_type("CRDB_E002", "XML", "Use text() to store XML data.", "Document", "text"),
    _unsupported_type("CRDB_E003", "POINT", "Use GEOMETRY(Point, 4326) or jsonb() for coordinate data.", "Geometric"),
    _unsupported_type("CRDB_E004", "LINE", "Use GEOMETRY(LineString, 4326).", "Geometric"),
    _unsupported_type("CRDB_E005", "LSEG", "Use GEOMETRY(LineString, 4326).", "Geometric"),
    _unsupported_type("CRDB_E006", "BOX", "Use GEOMETRY(Polygon, 4326).", "Geometric"),
    _unsupported_type("CRDB_E007", "PATH", "Use GEOMETRY(LineString, 4326).", "Geometric"),
    _unsupported_type("CRDB_E008", "POLYGON", "Use GEOMETRY(Polygon, 4326).", "Geometric"),
    _unsupported_type("CRDB_E009", "CIRCLE", "Use GEOMETRY(Point, 4326) with a separate radius column.", "Geometric"),
    _unsupported_type("CRDB_E010", "CIDR", "Use text() or varchar().", "Network", "text"),
    _unsupported_type("CRDB_E011", "MACADDR", "Use varchar(17).", "Network", "varchar(17)"),
    _unsupported_type("CRDB_E012", "MACADDR8", "Use varchar(23).", "Network", "varchar(23)"),
    _unsupported_type("CRDB_E013", "INT4RANGE", "Use two integer() columns (lower, upper).", "Range"),
    _unsupported_type("CRDB_E014", "INT8RANGE", "Use two bigint() columns (lower, upper).", "Range"),
    _unsupported_type("CRDB_E015", "NUMRANGE", "Use two numeric() columns (lower, upper).", "Range"),
    _unsupported_type("CRDB_E016", "TSRANGE", "Use two timestamp() columns (lower, upper).", "Range"),
    _unsupported_type("CRDB_E017", "TSTZRANGE", "Use two timestamptz() columns (lower, upper).", "Range"),
    _unsupported_type("CRDB_E018", "DATERANGE", "Use two date() columns (lower, upper).", "Range"),
    _unsupported_type("CRDB_E019", "INT4MULTIRANGE", _MULTIRANGE_ALT, "Multirange"),
    _unsupported_type("CRDB_E020", "INT8MULTIRANGE", _MULTIRANGE_ALT, "Multirange"),
    _unsupported_type("CRDB_E021", "NUMMULTIRANGE", _MULTIRANGE_ALT, "Multirange"),
    _unsupported_type("CRDB_E022", "TSMULTIRANGE", _MULTIRANGE_ALT, "Multirange"),
    _unsupported_type("CRDB_E023", "TSTZMULTIRANGE", _MULTIRANGE_ALT, "Multirange"),
    _unsupported_type("CRDB_E024", "DATEMULTIRANGE", _MULTIRANGE_ALT, "Multirange"),
    _unsupported_type("CRDB_E025", "TSVECTOR", "Use inverted indexes on text or JSONB columns.", "TextSearch"),
    _unsupported_type("CRDB_E026", "TSQUERY", "Use application-layer search (Elasticsearch, Meilisearch).",
                      "TextSearch"),
    _unsupported_type("CRDB_E027", "OID", "Use integer() or bigint().", "Internal", "bigint"),
    _unsupported_type("CRDB_E028", "REGCLASS", "Use text().", "Internal", "text"),
    _unsupported_type("CRDB_E029", "REGPROC", "Use text().", "Internal", "text"),
    _unsupported_type("CRDB_E030", "REGTYPE", "Use text().", "Internal", "text"),
    _unsupported_type("CRDB_E031", "PG_LSN", "Not applicable in CockroachDB (no WAL).", "Internal"),
    _unsupported_type("CRDB_E032", "PG_SNAPSHOT", "Not applicable in CockroachDB.", "Internal"),
    # Constraints
    _err("CRDB_E100", "EXCLUSION constraints are not supported in CockroachDB.",
         "Use a BEFORE INSERT trigger or application-level check.", "Constraint"),
    _err("CRDB_E101", "DEFERRABLE constraints are not supported in CockroachDB.", _DEFER_ALT, "Constraint"),
    _err("CRDB_E102", "INITIALLY DEFERRED constraints are not supported in CockroachDB.", _DEFER_ALT, "Constraint"),
    _err("CRDB_E103", "MATCH PARTIAL is not supported in CockroachDB.",
         "Use MATCH SIMPLE (default) or MATCH FULL.", "Constraint"),
    _err("CRDB_E104", "NOT ENFORCED constraints are not supported in CockroachDB.",
         "Remove the constraint or keep it enforced.", "Constraint"),
    # Indexes
    _err("CRDB_E200", "SP-GiST indexes are not supported in CockroachDB.",
         "Use BTREE for general-purpose indexing or GiST for spatial data.", "Index", DOCS_INDEXES),
    _err("CRDB_E201", "BRIN indexes are not supported in CockroachDB.",
         "Use BTREE indexes. For sequential data, consider hash-sharded indexes.", "Index", DOCS_INDEXES),
    _err("CRDB_E202", "tsvector_ops operator class is not supported in CockroachDB.",
         "Use inverted indexes on text or JSONB columns.", "Index", DOCS_INDEXES),
    _err("CRDB_E203", "range_ops operator class is not supported in CockroachDB.",
         "Use BTREE indexes on separate bound columns.", "Index", DOCS_INDEXES),
    _err("CRDB_E204", "Custom operator class is not supported in CockroachDB.",
         "Use built-in operator classes.", "Index", DOCS_INDEXES),
    # Tables
    _err("CRDB_E300", "Table inheritance (INHERITS) is not supported in CockroachDB.",
         "Use partitioning or define shared columns across tables.", "Table"),
    _err("CRDB_E301", "UNLOGGED tables are not supported in CockroachDB.",
         "Use regular tables. CockroachDB replicates all data across nodes.", "Table"),
    _err("CRDB_E302", "TABLESPACE is not supported in CockroachDB.",
         "Use zone configurations for data placement.", "Table"),
    _err("CRDB_E303", "TEMPORARY tables are experimental in CockroachDB.",
         "Use regular tables with row-level TTL, or use CTEs.", "Table"),
    _err("CRDB_E310", "toast_tuple_target storage parameter is not supported in CockroachDB.",
         "CockroachDB does not use TOAST. Remove this parameter.", "Table"),
    _err("CRDB_E311", "autovacuum storage parameters are not supported in CockroachDB.",
         "CockroachDB uses automatic garbage collection (no VACUUM).", "Table"),
    _err("CRDB_E312", "parallel_workers storage parameter is not supported in CockroachDB.",
         "CockroachDB uses DistSQL for parallel execution.", "Table"),
    # Schema objects
    _err("CRDB_E400", "CREATE DOMAIN is not supported in CockroachDB.",
         "Use the base column type with a CHECK constraint.", "Domain"),
    _err("CRDB_E401", "Composite types (CREATE TYPE ... AS) are not supported in CockroachDB.",
         "Use a JSONB column or separate columns.", "Composite"),
    # Triggers
    _err("CRDB_E500", "UPDATE OF <column_list> is not supported in CockroachDB triggers.",
         "Use a WHEN clause with IS DISTINCT FROM to check specific columns.", "Trigger", DOCS_TRIGGERS),
    _err("CRDB_E501", "TRUNCATE event is not supported in CockroachDB triggers.",
         "Use application-level event handling for TRUNCATE operations.", "Trigger", DOCS_TRIGGERS),
    _err("CRDB_E502", "REFERENCING OLD TABLE AS is not supported in CockroachDB triggers.",
         "Use row-level triggers with OLD row variable.", "Trigger", DOCS_TRIGGERS),
    _err("CRDB_E503", "REFERENCING NEW TABLE AS is not supported in CockroachDB triggers.",
         "Use row-level triggers with NEW row variable.", "Trigger", DOCS_TRIGGERS),
    _err("CRDB_E504", "CREATE CONSTRAINT TRIGGER is not supported in CockroachDB.",
         "Use a regular trigger.", "Trigger", DOCS_TRIGGERS),
    _err("CRDB_E505", "DROP TRIGGER CASCADE is not supported in CockroachDB.",
         "Drop triggers individually.", "Trigger", DOCS_TRIGGERS),
    # PL/pgSQL
    _err("CRDB_E600", "%TYPE variable declaration is not supported in CockroachDB PL/pgSQL.",
         "Declare the explicit type instead of using %TYPE.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E601", "%ROWTYPE variable declaration is not supported in CockroachDB PL/pgSQL.",
         "Declare explicit record types.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E602", "Ordinal parameters ($1, $2, ...) are not supported in CockroachDB PL/pgSQL.",
         "Use named parameters.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E603", "PERFORM statement is not supported in CockroachDB PL/pgSQL.",
         "Use SELECT INTO _dummy FROM ... to discard the result.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E604", "EXECUTE ... INTO is not supported in CockroachDB PL/pgSQL.",
         "Use static SQL statements.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E605", "GET DIAGNOSTICS is not supported in CockroachDB PL/pgSQL.",
         "Check return values manually.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E606", "CASE statement (PL/pgSQL control flow) is not supported in CockroachDB.",
         "Use IF/ELSIF chain.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E607", "RETURN QUERY is not supported in CockroachDB PL/pgSQL.",
         "Use RETURN NEXT in a loop.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E608", "Nested BEGIN/EXCEPTION blocks are not supported in CockroachDB PL/pgSQL.",
         "Flatten to a single exception block.", "Function", DOCS_PLPGSQL),
    _err("CRDB_E609", "FOR/FOREACH loops over queries are not supported in CockroachDB PL/pgSQL.",
         "Use cursors or refactor to set-returning SQL.", "Function", DOCS_PLPGSQL),
    # Multi-region, TTL, sharding
    _err("CRDB_E700", "REGIONAL BY ROW requires a multi-region database.", _REGION_ALT, "MultiRegion",
         DOCS_MULTI_REGION),
    _err("CRDB_E701", "GLOBAL locality requires a multi-region database.", _REGION_ALT, "MultiRegion",
         DOCS_MULTI_REGION),
    _err("CRDB_E702", "Region survival goal requires at least 3 regions.",
         "Add more regions or use zone survival goal.", "MultiRegion", DOCS_MULTI_REGION),
    _err("CRDB_E703", "Super region contains regions not in the database region list.",
         "Ensure all specified regions are added to the database first.", "MultiRegion", DOCS_MULTI_REGION),
    _err("CRDB_E710", "Row-level TTL requires an expiration expression.",
         "Specify an expiration expression, e.g. \"created_at + INTERVAL '30 days'\".", "TTL", DOCS_TTL),
    _err("CRDB_E711", "Invalid cron expression for TTL job schedule.",
         'Use valid cron syntax, e.g. "0 * * * *" for hourly.', "TTL", DOCS_TTL),
    _err("CRDB_E720", "Hash-sharded index bucket count must be at least 2.",
         "Set the bucket count to 2 or higher.", "Index", DOCS_INDEXES),
    _err("CRDB_E730", "CockroachDB requires an explicit primary key on every table.",
         "Add a primary key column (uuid() recommended for distributed systems).", "Table"),
    # Warnings
    _serial("CRDB_W001", "SERIAL"),
    _serial("CRDB_W002", "SMALLSERIAL"),
    _serial("CRDB_W003", "BIGSERIAL"),
    _warn("CRDB_W010", "CockroachDB defaults to NULLS FIRST for ASC ordering (PostgreSQL defaults to NULLS LAST).",
          "Specify NULLS FIRST or NULLS LAST explicitly for cross-dialect consistency.", "Ordering"),
    _warn("CRDB_W011", "Index ordering without explicit NULLS differs between CockroachDB and PostgreSQL.",
          "Specify NULLS FIRST or NULLS LAST explicitly on index columns.", "Index", DOCS_INDEXES),
    _warn("CRDB_W020", "Float overflow returns Infinity in CockroachDB instead of an error (PostgreSQL behavior).",
          "Add application-level overflow checks if error-on-overflow is expected.", "Numeric", DOCS_TYPES),
    _warn("CRDB_W021", "Integer division returns DECIMAL in CockroachDB instead of INTEGER (PostgreSQL behavior).",
          "Cast the result to INT if integer division is expected: (a / b)::INT.", "Numeric", DOCS_TYPES),
    _warn("CRDB_W030", "Sequence CACHE is per-node in CockroachDB; expect gaps in allocated values.",
          "Set CACHE to 1 for no gaps, or accept gaps for better distributed performance.", "Sequence"),
    _warn("CRDB_W040", "CONCURRENTLY is accepted but unnecessary in CockroachDB.",
          "All index creation in CockroachDB is online. Remove CONCURRENTLY keyword.", "Index", DOCS_INDEXES),
    _warn("CRDB_W500", "TG_ARGV is 1-based in CockroachDB (0-based in PostgreSQL).",
          "Update TG_ARGV indices: TG_ARGV[0] in PostgreSQL becomes TG_ARGV[1] in CockroachDB.", "Trigger",
          DOCS_TRIGGERS),
    _warn("CRDB_W710", "TTL on REGIONAL BY ROW tables may be slow; TTL jobs run per-range.",
          "Monitor TTL job performance and adjust the delete batch size and rate limit.", "TTL", DOCS_TTL),
    _warn("CRDB_W720", "Hash-sharded index on non-sequential column may not improve performance.",
          "Hash-sharding is only useful for sequential keys (timestamps, auto-IDs).", "Index", DOCS_INDEXES),
    _warn("CRDB_W721", "Hash-sharded index bucket count exceeds 256, which may reduce scan performance.",
          "Use 8-64 buckets for most workloads.", "Index", DOCS_INDEXES),
    # Info
    RuleEntry("CRDB_I001", "info",
              "CockroachDB may require transaction retries (error 40001). Implement retry logic.",
              "Transaction", "Wrap transactions in a retry loop catching SQLSTATE 40001.", DOCS_RETRY),
    RuleEntry("CRDB_I600", "info", "For CockroachDB, prefer LANGUAGE SQL over LANGUAGE plpgsql where possible.",
              "Function", "SQL functions have full support; PL/pgSQL has limitations.", DOCS_PLPGSQL),
)

CRDB_RULES: Final = RuleCatalog("CockroachDB", _ENTRIES)

# lower-cased column type -> rule code
TYPE_DISPOSITIONS: Final[Dict[str, str]] = {
    "money": "CRDB_E001",
    "xml": "CRDB_E002",
    "point": "CRDB_E003",
    "line": "CRDB_E004",
    "lseg": "CRDB_E005",
    "box": "CRDB_E006",
    "path": "CRDB_E007",
    "polygon": "CRDB_E008",
    "circle": "CRDB_E009",
    "cidr": "CRDB_E010",
    "macaddr": "CRDB_E011",
    "macaddr8": "CRDB_E012",
    "int4range": "CRDB_E013",
    "int8range": "CRDB_E014",
    "numrange": "CRDB_E015",
    "tsrange": "CRDB_E016",
    "tstzrange": "CRDB_E017",
    "daterange": "CRDB_E018",
    "int4multirange": "CRDB_E019",
    "int8multirange": "CRDB_E020",
    "nummultirange": "CRDB_E021",
    "tsmultirange": "CRDB_E022",
    "tstzmultirange": "CRDB_E023",
    "datemultirange": "CRDB_E024",
    "tsvector": "CRDB_E025",
    "tsquery": "CRDB_E026",
    "oid": "CRDB_E027",
    "regclass": "CRDB_E028",
    "regproc": "CRDB_E029",
    "regtype": "CRDB_E030",
    "regnamespace": "CRDB_E030",
    "regrole": "CRDB_E030",
    "pg_lsn": "CRDB_E031",
    "pg_snapshot": "CRDB_E032",
    "serial": "CRDB_W001",
    "serial4": "CRDB_W001",
    "smallserial": "CRDB_W002",
    "serial2": "CRDB_W002",
    "bigserial": "CRDB_W003",
    "serial8": "CRDB_W003",
    "real": "CRDB_W020",
    "float4": "CRDB_W020",
    "double precision": "CRDB_W020",
    "float8": "CRDB_W020",
}

BLOCKED_INDEX_METHODS: Final[Dict[str, str]] = {
    "spgist": "CRDB_E200",
    "brin": "CRDB_E201",
}

BLOCKED_OPCLASSES: Final[Dict[str, str]] = {
    "tsvector_ops": "CRDB_E202",
    "range_ops": "CRDB_E203",
}

# opclasses CockroachDB ships; anything else is reported as custom
BUILTIN_OPCLASSES: Final = frozenset(
    {
        "gin_trgm_ops",
        "gist_trgm_ops",
        "jsonb_ops",
        "jsonb_path_ops",
        "array_ops",
        "text_pattern_ops",
        "varchar_pattern_ops",
        "bpchar_pattern_ops",
        "vector_l2_ops",
        "vector_cosine_ops",
        "vector_ip_ops",
    }
)

STORAGE_PARAMS: Final[Dict[str, str]] = {
    "toast_tuple_target": "CRDB_E310",
    "autovacuum": "CRDB_E311",
    "parallel_workers": "CRDB_E312",
}


def storage_param_code(name: str) -> str | None:
    """Rule code for an unsupported storage parameter (prefix match for ``autovacuum_*``)."""

    key = name.lower()
    if key.startswith("autovacuum") or key.startswith("toast.autovacuum"):
        return STORAGE_PARAMS["autovacuum"]
    return STORAGE_PARAMS.get(key)


def _type(feature: str, pattern: str, message: str, alternative: str, rule_code: str) -> SqlRule:
    return SqlRule(
        feature,
        pattern,
        message,
        alternative,
        "DATA_TYPE",
        "error",
        rule_code,
        "https://www.cockroachlabs.com/docs/stable/postgresql-compatibility#data-types",
    )


_GEO_TEXT = "Use PostGIS GEOMETRY or store as TEXT"

UNSUPPORTED_DATA_TYPES: Final[Tuple[SqlRule, ...]] = (
    _type("MONEY", r"\bMONEY\b", "MONEY type not supported in CockroachDB",
          "Use DECIMAL(precision, scale) for monetary values", "CRDB_E001"),
    _type("XML", r"\bXML\b", "XML type not supported in CockroachDB", "Store XML as TEXT or JSONB", "CRDB_E002"),
    _type("POINT", r"\bPOINT\b(?!\s*\()", "Native POINT type not supported - use PostGIS GEOMETRY or separate columns",
          "Use GEOMETRY type from PostGIS extension or store as two FLOAT columns", "CRDB_E003"),
    _type("LINE", r"\bLINE\b", "Native LINE type not supported", _GEO_TEXT, "CRDB_E004"),
    _type("LSEG", r"\bLSEG\b", "Native LSEG type not supported", _GEO_TEXT, "CRDB_E005"),
    _type("BOX", r"\bBOX\b", "Native BOX type not supported", "Use PostGIS GEOMETRY or four FLOAT columns",
          "CRDB_E006"),
    _type("PATH", r"\bPATH\b", "Native PATH type not supported", "Use PostGIS GEOMETRY or store as TEXT/JSONB",
          "CRDB_E007"),
    _type("POLYGON", r"\bPOLYGON\b(?!\s*\()", "Native POLYGON type not supported - use PostGIS GEOMETRY",
          "Use PostGIS GEOMETRY or store as TEXT/JSONB", "CRDB_E008"),
    _type("CIRCLE", r"\bCIRCLE\b", "Native CIRCLE type not supported",
          "Use PostGIS GEOMETRY or three FLOAT columns (x, y, radius)", "CRDB_E009"),
    _type("INT4RANGE", r"\bINT4RANGE\b", "Range type INT4RANGE not supported in CockroachDB",
          "Use two INTEGER columns (range_start, range_end)", "CRDB_E013"),
    _type("INT8RANGE", r"\bINT8RANGE\b", "Range type INT8RANGE not supported in CockroachDB",
          "Use two BIGINT columns (range_start, range_end)", "CRDB_E014"),
    _type("NUMRANGE", r"\bNUMRANGE\b", "Range type NUMRANGE not supported in CockroachDB",
          "Use two DECIMAL columns (range_start, range_end)", "CRDB_E015"),
    _type("TSRANGE", r"\bTSRANGE\b", "Range type TSRANGE not supported in CockroachDB",
          "Use two TIMESTAMP columns (range_start, range_end)", "CRDB_E016"),
    _type("TSTZRANGE", r"\bTSTZRANGE\b", "Range type TSTZRANGE not supported in CockroachDB",
          "Use two TIMESTAMPTZ columns (range_start, range_end)", "CRDB_E017"),
    _type("DATERANGE", r"\bDATERANGE\b", "Range type DATERANGE not supported in CockroachDB",
          "Use two DATE columns (range_start, range_end)", "CRDB_E018"),
    _type("TSVECTOR", r"\bTSVECTOR\b", "TSVECTOR type not supported - full-text search not available natively",
          "Use full-text search service (Elasticsearch, Typesense) or TEXT with trigram index", "CRDB_E025"),
    _type("TSQUERY", r"\bTSQUERY\b", "TSQUERY type not supported - full-text search not available natively",
          "Implement search logic in application layer", "CRDB_E026"),
    _type("OID", r"\bOID\b", "OID type not fully supported in CockroachDB", "Use INTEGER or BIGINT", "CRDB_E027"),
    _type("REGPROC", r"\bREGPROC\b", "REGPROC type not supported", "Use TEXT to store function names", "CRDB_E029"),
    _type("REGCLASS", r"\bREGCLASS\b", "REGCLASS type not supported", "Use TEXT to store table names", "CRDB_E028"),
    _type("REGTYPE", r"\bREGTYPE\b", "REGTYPE type not supported", "Use TEXT to store type names", "CRDB_E030"),
    _type("CIDR", r"\bCIDR\b", "CIDR type has limited support - consider INET or TEXT", "Use INET (supported) or TEXT",
          "CRDB_E010"),
    _type("MACADDR", r"\bMACADDR\b", "MACADDR type not supported", "Use TEXT or VARCHAR(17)", "CRDB_E011"),
    _type("MACADDR8", r"\bMACADDR8\b", "MACADDR8 type not supported", "Use TEXT or VARCHAR(23)", "CRDB_E012"),
)


def feature_category(feature: str) -> str:
    if "TRIGGER" in feature or "UPDATE_OF" in feature:
        return "TRIGGER"
    if "DOMAIN" in feature or "TYPE_AS" in feature:
        return "DDL"
    if "EXCLUSION" in feature or "DEFERRABLE" in feature or "DEFERRED" in feature:
        return "CONSTRAINT"
    if "PLPGSQL" in feature:
        return "PLPGSQL"
    if "LISTEN" in feature or "NOTIFY" in feature or "ADVISORY" in feature:
        return "DML"
    if "INDEX" in feature or "SPGIST" in feature or "BRIN" in feature:
        return "INDEX"
    if "VACUUM" in feature or "CLUSTER" in feature:
        return "DML"
    return "SYNTAX"


def _sql(
    feature: str,
    pattern: str,
    message: str,
    alternative: str,
    rule_code: str | None = None,
    severity: str = "error",
) -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, feature_category(feature), severity, rule_code, DOCS_COMPAT)


UNSUPPORTED_SQL: Final[Tuple[SqlRule, ...]] = (
    _sql("CREATE_TRIGGER", r"\bCREATE\s+(OR\s+REPLACE\s+)?TRIGGER\b", "Triggers have limited support in CockroachDB",
         "CockroachDB has limited trigger support. Use changefeeds, application logic, or check feature availability.",
         severity="warning"),
    _sql("CONSTRAINT_TRIGGER", r"\bCREATE\s+CONSTRAINT\s+TRIGGER\b", "CREATE CONSTRAINT TRIGGER not supported",
         "Use a regular trigger", "CRDB_E504"),
    _sql("DROP_TRIGGER_CASCADE", r"\bDROP\s+TRIGGER\b[^;]*\bCASCADE\b", "DROP TRIGGER CASCADE not supported",
         "Drop triggers individually", "CRDB_E505"),
    _sql("UPDATE_OF_COLUMNS", r"\bUPDATE\s+OF\s+\w+",
         "UPDATE OF <columns> not supported in triggers - use UPDATE without column list",
         "Use UPDATE trigger without column specification, handle column logic in function", "CRDB_E500"),
    _sql("TRUNCATE_TRIGGER", r"\bFOR\s+TRUNCATE\b|\bAFTER\s+TRUNCATE\b|\bBEFORE\s+TRUNCATE\b",
         "TRUNCATE event not supported in triggers", "Use DELETE trigger or application-level TRUNCATE handling",
         "CRDB_E501"),
    _sql("REFERENCING_OLD_TABLE_TRIGGER", r"\bREFERENCING\b[^;]*\bOLD\s+TABLE\b",
         "REFERENCING OLD TABLE not supported in triggers", "Use row-level triggers with OLD", "CRDB_E502"),
    _sql("REFERENCING_NEW_TABLE_TRIGGER", r"\bREFERENCING\b[^;]*\bNEW\s+TABLE\b",
         "REFERENCING NEW TABLE not supported in triggers", "Use row-level triggers with NEW", "CRDB_E503"),
    _sql("CREATE_DOMAIN", r"\bCREATE\s+DOMAIN\b", "CREATE DOMAIN not supported in CockroachDB",
         "Use CHECK constraints on columns directly", "CRDB_E400"),
    _sql("CREATE_TYPE_AS", r"\bCREATE\s+TYPE\s+\w+\s+AS\s*\(", "Composite types (CREATE TYPE AS) not supported",
         "Use JSONB or separate columns for composite data", "CRDB_E401"),
    _sql("EXCLUSION", r"\bEXCLUDE\s+(USING|WITH)", "EXCLUSION constraints not supported in CockroachDB",
         "Implement exclusion logic in application layer or use CHECK constraints", "CRDB_E100"),
    _sql("DEFERRABLE", r"(?<!NOT\s)\bDEFERRABLE\b",
         "DEFERRABLE constraints not supported - constraints are always immediate",
         "Remove DEFERRABLE - constraints are always immediate in CockroachDB", "CRDB_E101"),
    _sql("INITIALLY_DEFERRED", r"\bINITIALLY\s+DEFERRED\b", "INITIALLY DEFERRED not supported",
         "Remove INITIALLY DEFERRED - constraints are always immediate", "CRDB_E102"),
    _sql("MATCH_PARTIAL", r"\bMATCH\s+PARTIAL\b", "MATCH PARTIAL not supported",
         "Use MATCH SIMPLE or MATCH FULL", "CRDB_E103"),
    _sql("NOT_ENFORCED", r"\bNOT\s+ENFORCED\b", "NOT ENFORCED constraints not supported",
         "Remove the constraint or keep it enforced", "CRDB_E104"),
    _sql("PLPGSQL_TYPE", r"%TYPE\b", "%TYPE not supported in PL/pgSQL - use explicit types",
         "Use explicit type declaration instead of %TYPE", "CRDB_E600"),
    _sql("PLPGSQL_ROWTYPE", r"%ROWTYPE\b", "%ROWTYPE not supported in PL/pgSQL",
         "Use RECORD type or explicit column declarations", "CRDB_E601"),
    _sql("PLPGSQL_PERFORM", r"\bPERFORM\b", "PERFORM not supported in PL/pgSQL - use SELECT INTO",
         "Use SELECT INTO a variable (SELECT ... INTO _unused)", "CRDB_E603"),
    _sql("PLPGSQL_EXECUTE_INTO", r"\bEXECUTE\b[^;]*\bINTO\b", "EXECUTE ... INTO not supported in PL/pgSQL",
         "Use static SQL statements", "CRDB_E604"),
    _sql("PLPGSQL_GET_DIAGNOSTICS", r"\bGET\s+(STACKED\s+)?DIAGNOSTICS\b",
         "GET DIAGNOSTICS not fully supported in PL/pgSQL", "Use explicit error handling with SQLSTATE", "CRDB_E605"),
    _sql("PLPGSQL_RETURN_QUERY", r"\bRETURN\s+QUERY\b", "RETURN QUERY not supported in PL/pgSQL",
         "Use RETURN NEXT in a loop", "CRDB_E607"),
    _sql("PLPGSQL_FOREACH", r"\bFOREACH\b", "FOREACH not supported in PL/pgSQL - use FOR with UNNEST()",
         "Use regular FOR loop with UNNEST() function", "CRDB_E609"),
    _sql("PLPGSQL_FOR_QUERY", r"\bFOR\s+\w+\s+IN\s+(SELECT|EXECUTE)\b", "FOR loops over queries not supported",
         "Use cursors or refactor to set-returning SQL", "CRDB_E609"),
    _sql("PLPGSQL_TG_ARGV", r"\bTG_ARGV\s*\[", "TG_ARGV is 1-based in CockroachDB",
         "Shift TG_ARGV indices by one", "CRDB_W500", "warning"),
    _sql("LISTEN", r"\bLISTEN\b", "LISTEN not supported - use Changefeeds",
         "Use CockroachDB Changefeeds for change data capture"),
    _sql("NOTIFY", r"\bNOTIFY\b", "NOTIFY not supported - use Changefeeds",
         "Use CockroachDB Changefeeds or external message queue"),
    _sql("ADVISORY_LOCK", r"\bpg_advisory_lock",
         "Advisory locks not supported - use SELECT FOR UPDATE or external locks",
         "Use optimistic concurrency (SELECT FOR UPDATE) or external locking"),
    _sql("TRY_ADVISORY_LOCK", r"\bpg_try_advisory_lock", "Advisory locks not supported",
         "Use optimistic concurrency or external locking service"),
    _sql("SPGIST_INDEX", r"\bUSING\s+SPGIST\b", "SP-GiST indexes not supported - use GiST or GIN",
         "Use GiST or GIN index instead", "CRDB_E200"),
    _sql("BRIN_INDEX", r"\bUSING\s+BRIN\b", "BRIN indexes not supported - CockroachDB handles this differently",
         "CockroachDB uses automatic zone configuration for similar optimization", "CRDB_E201"),
    _sql("INDEX_CONCURRENTLY", r"\bCREATE\s+(UNIQUE\s+)?INDEX\s+CONCURRENTLY\b",
         "CONCURRENTLY is unnecessary - index creation is always online", "Remove CONCURRENTLY", "CRDB_W040",
         "warning"),
    _sql("TABLESPACE", r"\bTABLESPACE\b", "Tablespaces not supported - use zone configurations",
         "Use CockroachDB locality/zone configuration instead", "CRDB_E302", "warning"),
    _sql("TO_TSVECTOR", r"\bto_tsvector\s*\(", "Full-text search (to_tsvector) not supported",
         "Use external search service or trigram similarity (pg_trgm)"),
    _sql("TO_TSQUERY", r"\bto_tsquery\s*\(", "Full-text search (to_tsquery) not supported",
         "Use external search service"),
    _sql("PLAINTO_TSQUERY", r"\bplainto_tsquery\s*\(", "Full-text search not supported",
         "Use external search service"),
    _sql("ALTER_SYSTEM", r"\bALTER\s+SYSTEM\b", "ALTER SYSTEM not supported - use SET CLUSTER SETTING",
         "Use SET CLUSTER SETTING for CockroachDB configuration"),
    _sql("REFRESH_CONCURRENTLY", r"\bREFRESH\s+MATERIALIZED\s+VIEW\s+CONCURRENTLY\b",
         "REFRESH MATERIALIZED VIEW CONCURRENTLY not supported",
         "Use REFRESH MATERIALIZED VIEW without CONCURRENTLY"),
    _sql("VACUUM", r"\bVACUUM\b", "VACUUM not supported - CockroachDB handles this automatically",
         "Not needed - CockroachDB has automatic garbage collection", severity="warning"),
    _sql("CLUSTER", r"\bCLUSTER\b(?!\s+SETTING)", "CLUSTER command not supported",
         "Not needed - CockroachDB handles data distribution automatically", severity="warning"),
)

# SQL findings inside plpgsql bodies stay errors only for this category
PLPGSQL_CATEGORY: Final = "PLPGSQL"
