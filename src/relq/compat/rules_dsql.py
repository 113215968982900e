"""
Aurora DSQL rule catalog and regex tables.
"""

from __future__ import annotations

from typing import Dict, Final, FrozenSet, Tuple

from .catalog import AutoFix, RuleCatalog, RuleEntry, SqlRule

DOCS_TYPES: Final = (
    "https://docs.aws.amazon.com/aurora-dsql/latest/userguide/"
    "working-with-postgresql-compatibility-supported-data-types.html"
)
DOCS_UNSUPPORTED: Final = (
    "https://docs.aws.amazon.com/aurora-dsql/latest/userguide/"
    "working-with-postgresql-compatibility-unsupported-features.html"
)
DOCS_LIMITS: Final = "https://docs.aws.amazon.com/aurora-dsql/latest/userguide/quotas.html"

MAX_COLUMNS_PER_TABLE: Final = 255
MAX_INDEXES_PER_TABLE: Final = 24
MAX_COLUMNS_PER_INDEX: Final = 8
MAX_TABLES: Final = 1000
MAX_VARCHAR_LENGTH: Final = 65535
MAX_CHAR_LENGTH: Final = 4096
MAX_NUMERIC_PRECISION: Final = 38
MAX_NUMERIC_SCALE: Final = 37

# index column type -> rule code
NON_INDEXABLE_TYPES: Final[Dict[str, str]] = {
    "bytea": "DSQL-IDX-LIMIT-003",
    "interval": "DSQL-IDX-LIMIT-004",
    "timetz": "DSQL-IDX-LIMIT-005",
    "time with time zone": "DSQL-IDX-LIMIT-005",
}

BLOCKED_INDEX_METHODS: Final[Dict[str, str]] = {
    "gin": "DSQL-IDX-001",
    "gist": "DSQL-IDX-002",
    "spgist": "DSQL-IDX-003",
    "brin": "DSQL-IDX-004",
    "hash": "DSQL-IDX-005",
}

FUNCTION_LANGUAGES: Final[Dict[str, str]] = {
    "plpgsql": "DSQL-FN-001",
    "plpython3u": "DSQL-FN-002",
    "plpythonu": "DSQL-FN-002",
    "plperl": "DSQL-FN-003",
    "plperlu": "DSQL-FN-003",
    "pltcl": "DSQL-FN-004",
    "c": "DSQL-FN-005",
}


def _serial_fix(original: str) -> AutoFix:
    return AutoFix(
        description="Replace SERIAL with UUID + gen_random_uuid()",
        original_type=original,
        replacement_type="uuid",
        additional_changes=("Add DEFAULT gen_random_uuid()", "Add PRIMARY KEY"),
    )


_ENTRIES: Tuple[RuleEntry, ...] = (
    # Column types
    RuleEntry(
        "DSQL-TYPE-001", "error",
        "SERIAL/BIGSERIAL/SMALLSERIAL types are not supported in DSQL. Sequences are not available.",
        "column-type", "uuid() + gen_random_uuid()", DOCS_TYPES, _serial_fix("serial"),
    ),
    RuleEntry(
        "DSQL-TYPE-002", "error",
        "JSON/JSONB column types are not supported in DSQL. Use TEXT and cast to jsonb at query time.",
        "column-type", "text()", DOCS_TYPES,
        AutoFix(
            "Replace JSON/JSONB column with TEXT + CHECK constraint", "jsonb", "text",
            ("Add CHECK (col IS NULL OR (col::jsonb) IS NOT NULL)", "Cast with col::jsonb in queries"),
        ),
    ),
    RuleEntry(
        "DSQL-TYPE-003", "error", "XML column type is not supported in DSQL.",
        "column-type", "text() - store XML as text", DOCS_TYPES, AutoFix("Replace XML column with TEXT", "xml", "text"),
    ),
    RuleEntry(
        "DSQL-TYPE-004", "error", "MONEY type is not supported in DSQL.",
        "column-type", "numeric(19, 4)", DOCS_TYPES, AutoFix("Replace MONEY with NUMERIC(19,4)", "money", "numeric(19,4)"),
    ),
    RuleEntry(
        "DSQL-TYPE-005", "error",
        "Geometric types (POINT, LINE, LSEG, BOX, PATH, POLYGON, CIRCLE) are not supported in DSQL.",
        "column-type", "Store as separate numeric columns or text()", DOCS_TYPES,
    ),
    RuleEntry(
        "DSQL-TYPE-006", "error",
        "Range types (INT4RANGE, INT8RANGE, NUMRANGE, TSRANGE, TSTZRANGE, DATERANGE) are not supported in DSQL.",
        "column-type", "Use two columns for lower and upper bounds", DOCS_TYPES,
    ),
    RuleEntry(
        "DSQL-TYPE-007", "error", "Multirange types are not supported in DSQL.",
        "column-type", "Use a junction table with bound columns", DOCS_TYPES,
    ),
    RuleEntry(
        "DSQL-TYPE-008", "error", "Bit string types (BIT, VARBIT, BIT VARYING) are not supported in DSQL.",
        "column-type", "bytea() or text()", DOCS_TYPES, AutoFix("Replace BIT/VARBIT with BYTEA", "bit", "bytea"),
    ),
    RuleEntry(
        "DSQL-TYPE-009", "error", "Network types CIDR, MACADDR, MACADDR8 are not supported as column types in DSQL.",
        "column-type", "text() or varchar()", DOCS_TYPES,
        AutoFix("Replace network types with TEXT", "cidr/macaddr/macaddr8", "text"),
    ),
    RuleEntry(
        "DSQL-TYPE-010", "error", "INET is not supported as a column type in DSQL (runtime-only).",
        "column-type", "varchar(45) - fits both IPv4 and IPv6", DOCS_TYPES,
        AutoFix("Replace INET with VARCHAR(45)", "inet", "varchar(45)"),
    ),
    RuleEntry(
        "DSQL-TYPE-011", "error",
        "Text search types (TSVECTOR, TSQUERY) are not supported in DSQL. Full-text search is not available.",
        "column-type", "text() - use an external search service", DOCS_TYPES,
        AutoFix("Replace TSVECTOR/TSQUERY with TEXT", "tsvector/tsquery", "text"),
    ),
    RuleEntry(
        "DSQL-TYPE-012", "error", "OID and REG* types are not supported in DSQL.",
        "column-type", "text() or integer()", DOCS_TYPES, AutoFix("Replace OID/REG* with TEXT", "oid/reg*", "text"),
    ),
    RuleEntry(
        "DSQL-TYPE-013", "error", "Internal types (PG_LSN, PG_SNAPSHOT) are not supported in DSQL.",
        "column-type", "No direct alternative", DOCS_TYPES,
    ),
    RuleEntry(
        "DSQL-TYPE-014", "error", "Array column types are not supported in DSQL (runtime-only).",
        "column-type", "text() - store as JSON array string, or normalize into a separate table", DOCS_TYPES,
        AutoFix(
            "Replace array column with TEXT (JSON array string)", "type[]", "text",
            ("Store arrays as JSON strings", "Parse with col::jsonb in queries"),
        ),
    ),
    # Column limits
    RuleEntry("DSQL-LIMIT-001", "warning", "VARCHAR length exceeds DSQL maximum of 65,535 bytes.",
              "column-limit", "varchar(65535) or text()", DOCS_LIMITS),
    RuleEntry("DSQL-LIMIT-002", "warning", "CHAR length exceeds DSQL maximum of 4,096 bytes.",
              "column-limit", "char(4096) or varchar()", DOCS_LIMITS),
    RuleEntry("DSQL-LIMIT-003", "warning", "NUMERIC precision exceeds DSQL maximum of 38.",
              "column-limit", "numeric(38, scale)", DOCS_LIMITS),
    RuleEntry("DSQL-LIMIT-004", "warning", "NUMERIC scale exceeds DSQL maximum of 37.",
              "column-limit", "numeric(precision, 37)", DOCS_LIMITS),
    # Column modifiers
    RuleEntry(
        "DSQL-MOD-001", "error", "GENERATED AS IDENTITY is not supported in DSQL. Sequences are not available.",
        "column-modifier", "uuid() + gen_random_uuid()", DOCS_UNSUPPORTED,
        AutoFix(
            "Replace IDENTITY column with UUID + gen_random_uuid()", "GENERATED AS IDENTITY", "uuid",
            ("Remove identity modifier", "Add DEFAULT gen_random_uuid()"),
        ),
    ),
    RuleEntry(
        "DSQL-MOD-002", "error", "DEFAULT nextval() is not supported in DSQL. Sequences are not available.",
        "column-modifier", "uuid() + gen_random_uuid()", DOCS_UNSUPPORTED,
        AutoFix("Replace nextval() default with gen_random_uuid()", "DEFAULT nextval('...')", "DEFAULT gen_random_uuid()"),
    ),
    RuleEntry(
        "DSQL-MOD-003", "warning",
        "Only C collation is supported in DSQL. Locale-specific collations are not available.",
        "column-modifier", 'Remove the collation or use COLLATE "C"', DOCS_UNSUPPORTED,
    ),
    # Constraints
    RuleEntry("DSQL-CONS-001", "warning", "FOREIGN KEY constraints are accepted but NOT enforced in DSQL.",
              "constraint", "Implement referential integrity in application layer", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-CONS-002", "warning", "Column-level REFERENCES (inline FK) are accepted but NOT enforced in DSQL.",
              "constraint", "Implement referential integrity in application layer", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-CONS-003", "warning", "ON DELETE actions (CASCADE, SET NULL, etc.) are NOT enforced in DSQL.",
              "constraint", "Implement cascade/set-null logic in application layer", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-CONS-004", "warning", "ON UPDATE actions (CASCADE, etc.) are NOT enforced in DSQL.",
              "constraint", "Implement cascade logic in application layer", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-CONS-005", "error", "EXCLUSION constraints are not supported in DSQL.",
              "constraint", "Implement exclusion logic in application layer", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-CONS-006", "error", "DEFERRABLE / INITIALLY DEFERRED constraints are not supported in DSQL.",
              "constraint", "Remove the deferrable option; all constraints are immediate in DSQL", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-CONS-007", "warning",
              "MATCH FULL / MATCH PARTIAL for foreign keys may not behave as expected in DSQL.",
              "constraint", "Remove the match option; FKs are not enforced", DOCS_UNSUPPORTED),
    # Indexes
    RuleEntry("DSQL-IDX-001", "error", "GIN indexes are not supported in DSQL. Only B-tree indexes are allowed.",
              "index", "Use B-tree index or application-level search", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-002", "error", "GiST indexes are not supported in DSQL. Only B-tree indexes are allowed.",
              "index", "Use B-tree index", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-003", "error", "SP-GiST indexes are not supported in DSQL. Only B-tree indexes are allowed.",
              "index", "Use B-tree index", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-004", "error", "BRIN indexes are not supported in DSQL. Only B-tree indexes are allowed.",
              "index", "Use B-tree index", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-005", "error", "Hash indexes are not supported in DSQL. Only B-tree indexes are allowed.",
              "index", "Use B-tree index", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-006", "warning", "CONCURRENTLY index creation is not supported in DSQL.",
              "index", "Remove CONCURRENTLY; DSQL manages index creation automatically", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-007", "error", "Custom operator classes are not supported in DSQL indexes.",
              "index", "Remove operator class specification", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-IDX-LIMIT-001", "error", "DSQL allows a maximum of 24 indexes per table.",
              "index-limit", "Reduce the number of indexes", DOCS_LIMITS),
    RuleEntry("DSQL-IDX-LIMIT-002", "error", "DSQL allows a maximum of 8 columns per index or primary key.",
              "index-limit", "Reduce the number of columns in the index", DOCS_LIMITS),
    RuleEntry("DSQL-IDX-LIMIT-003", "error", "BYTEA columns cannot be indexed in DSQL.",
              "index-limit", "Remove bytea column from index, or use a hash column", DOCS_LIMITS),
    RuleEntry("DSQL-IDX-LIMIT-004", "error", "INTERVAL columns cannot be indexed in DSQL.",
              "index-limit", "Remove interval column from index, or store as integer (seconds)", DOCS_LIMITS),
    RuleEntry("DSQL-IDX-LIMIT-005", "error", "TIMETZ columns cannot be indexed in DSQL.",
              "index-limit", "Remove timetz column from index, or use timestamptz instead", DOCS_LIMITS),
    # Tables
    RuleEntry("DSQL-TBL-001", "error", "TEMPORARY tables are not supported in DSQL.",
              "table", "Use CTEs (WITH clause) or regular tables", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TBL-002", "error", "UNLOGGED tables are not supported in DSQL.",
              "table", "Use regular tables; DSQL manages durability automatically", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TBL-003", "error", "Table inheritance (INHERITS) is not supported in DSQL.",
              "table", "Use separate tables with shared column definitions", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TBL-004", "error", "TABLESPACE is not supported in DSQL.",
              "table", "Remove tablespace; DSQL manages storage automatically", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TBL-005", "error", "PARTITION BY is not supported in DSQL. DSQL automatically partitions data.",
              "table", "Remove partitioning; DSQL handles distribution automatically", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TBL-006", "warning", "WITH (storage_parameters) is not supported in DSQL.",
              "table", "Remove storage parameters; DSQL manages storage automatically", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TBL-007", "error", "ON COMMIT clause is not supported in DSQL (no temporary tables).",
              "table", "Remove ON COMMIT; temporary tables are not supported", DOCS_UNSUPPORTED),
    # Functions
    RuleEntry("DSQL-FN-001", "error",
              "LANGUAGE plpgsql is not supported in DSQL. Only SQL language functions are allowed.",
              "function", "Use LANGUAGE SQL or move logic to application/Lambda", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-002", "error", "LANGUAGE plpython3u is not supported in DSQL.",
              "function", "Use AWS Lambda for Python logic", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-003", "error", "LANGUAGE plperl is not supported in DSQL.",
              "function", "Use AWS Lambda", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-004", "error", "LANGUAGE pltcl is not supported in DSQL.",
              "function", "Use AWS Lambda", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-005", "error", "LANGUAGE c is not supported in DSQL.",
              "function", "Use LANGUAGE SQL or AWS Lambda", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-006", "error", "CREATE PROCEDURE with non-SQL language is not supported in DSQL.",
              "function", "Use SQL-language functions or application logic", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-007", "error", "DO $$ ... $$ anonymous code blocks are not supported in DSQL.",
              "function", "Execute statements separately or use SQL functions", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-FN-008", "warning", "CALL procedure_name() may not work if procedure uses non-SQL language.",
              "function", "Ensure the procedure uses LANGUAGE SQL", DOCS_UNSUPPORTED),
    # Triggers
    RuleEntry("DSQL-TRIG-001", "error", "CREATE TRIGGER is not supported in DSQL.",
              "trigger", "Move trigger logic to application code or AWS Lambda/EventBridge", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TRIG-002", "error", "DROP TRIGGER is not supported in DSQL.",
              "trigger", "N/A: triggers are not supported", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-TRIG-003", "error", "Functions that RETURN TRIGGER are not supported in DSQL.",
              "trigger", "Move trigger logic to application code or AWS Lambda/EventBridge", DOCS_UNSUPPORTED),
    # Views
    RuleEntry("DSQL-VIEW-001", "error", "MATERIALIZED VIEWS are not supported in DSQL.",
              "view", "Use regular views or cache results in application layer", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-VIEW-002", "error", "REFRESH MATERIALIZED VIEW is not supported in DSQL.",
              "view", "N/A: materialized views are not supported", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-VIEW-003", "error", "DSQL allows a maximum of 5,000 views per database.",
              "view", "Reduce the number of views", DOCS_LIMITS),
    RuleEntry("DSQL-VIEW-004", "error", "View definition must not exceed 2 MiB in DSQL.",
              "view", "Simplify the view definition", DOCS_LIMITS),
    # Extensions
    RuleEntry("DSQL-EXT-001", "error", "CREATE EXTENSION is not supported in DSQL. No extensions are available.",
              "extension", "Use built-in functions only", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-EXT-002", "error", "PostGIS types and functions are not available in DSQL.",
              "extension", "Use separate numeric/text columns for coordinates", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-EXT-003", "error", "pgvector types and functions are not available in DSQL.",
              "extension", "Use an external vector DB or store vectors as text/bytea", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-EXT-004", "error", "pg_trgm functions are not available in DSQL.",
              "extension", "Use LIKE/ILIKE for pattern matching or an external search service", DOCS_UNSUPPORTED),
    # Sequences
    RuleEntry("DSQL-SEQ-001", "error", "CREATE SEQUENCE is not supported in DSQL.",
              "sequence", "Use UUID with gen_random_uuid() for unique IDs", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-SEQ-002", "error", "nextval() is not supported in DSQL. Sequences are not available.",
              "sequence", "Use gen_random_uuid()", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-SEQ-003", "error", "currval() is not supported in DSQL. Sequences are not available.",
              "sequence", "Use RETURNING clause to get inserted IDs", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-SEQ-004", "error", "setval() is not supported in DSQL. Sequences are not available.",
              "sequence", "N/A: use UUID-based IDs", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-SEQ-005", "error", "lastval() is not supported in DSQL. Sequences are not available.",
              "sequence", "Use RETURNING clause", DOCS_UNSUPPORTED),
    # Database limits
    RuleEntry("DSQL-DB-001", "error", 'DSQL supports only 1 database per cluster (the "postgres" database).',
              "database", "Use schemas to separate data within the postgres database", DOCS_LIMITS),
    RuleEntry("DSQL-DB-002", "error", "DSQL allows a maximum of 10 schemas per database.",
              "database", "Consolidate schemas", DOCS_LIMITS),
    RuleEntry("DSQL-DB-003", "error", "DSQL allows a maximum of 1,000 tables per database.",
              "database", "Consolidate tables or use multiple clusters", DOCS_LIMITS),
    RuleEntry("DSQL-DB-004", "error", "DSQL allows a maximum of 255 columns per table.",
              "database", "Normalize the table into multiple related tables", DOCS_LIMITS),
    RuleEntry("DSQL-DB-005", "warning", "Combined primary key column size should not exceed 1 KiB in DSQL.",
              "database", "Use shorter PK columns or a single UUID primary key", DOCS_LIMITS),
    RuleEntry("DSQL-DB-006", "warning", "Row size should not exceed 2 MiB in DSQL.",
              "database", "Store large data in S3 and keep references in the table", DOCS_LIMITS),
    # Transactions
    RuleEntry("DSQL-TXN-001", "error", "DSQL allows a maximum of 3,000 mutated rows per transaction.",
              "transaction", "Batch operations into multiple transactions", DOCS_LIMITS),
    RuleEntry("DSQL-TXN-002", "error", "DSQL transactions must complete within 5 minutes.",
              "transaction", "Break long-running operations into smaller transactions", DOCS_LIMITS),
    RuleEntry("DSQL-TXN-003", "error", "DSQL allows only 1 DDL statement per transaction.",
              "transaction", "Execute DDL statements in separate transactions", DOCS_LIMITS),
    RuleEntry("DSQL-TXN-004", "error", "Cannot mix DDL and DML statements in the same DSQL transaction.",
              "transaction", "Separate DDL and DML into different transactions", DOCS_LIMITS),
    RuleEntry("DSQL-TXN-005", "warning", "DSQL write transactions should not exceed 10 MiB of data.",
              "transaction", "Batch large writes into smaller transactions", DOCS_LIMITS),
    # Miscellaneous
    RuleEntry("DSQL-MISC-001", "error", "LISTEN is not supported in DSQL.",
              "misc", "Use AWS SNS, SQS, or EventBridge for notifications", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-MISC-002", "error", "NOTIFY is not supported in DSQL.",
              "misc", "Use AWS SNS, SQS, or EventBridge for notifications", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-MISC-003", "error", "Advisory locks (pg_advisory_lock) are not supported in DSQL.",
              "misc", "Use optimistic concurrency (OCC is built-in) or external locking", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-MISC-004", "error", "TRUNCATE is not supported in DSQL.",
              "misc", "Use DELETE FROM table_name (batch in 3,000-row transactions)", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-MISC-005", "error", "CREATE RULE is not supported in DSQL.",
              "misc", "Implement rule logic in application layer or views", DOCS_UNSUPPORTED),
    RuleEntry("DSQL-MISC-006", "warning",
              "VACUUM, ANALYZE, and REINDEX are not needed in DSQL; maintenance is automatic.",
              "misc", "Remove; DSQL manages maintenance automatically", DOCS_UNSUPPORTED),
)

DSQL_RULES: Final = RuleCatalog("DSQL", _ENTRIES)


def _type(feature: str, pattern: str, message: str, alternative: str, rule_code: str) -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, "DATA_TYPE", "error", rule_code, DOCS_TYPES)


_SERIAL_ALT = "uuid() + gen_random_uuid()"
_RANGE_ALT = "Use two {} columns (range_start, range_end)"
_MULTIRANGE_ALT = "Use junction table with bound columns"

UNSUPPORTED_DATA_TYPES: Final[Tuple[SqlRule, ...]] = (
    _type("SERIAL", r"\bSERIAL\b", "SERIAL type not supported - sequences cause contention in distributed systems",
          _SERIAL_ALT, "DSQL-TYPE-001"),
    _type("BIGSERIAL", r"\bBIGSERIAL\b",
          "BIGSERIAL type not supported - sequences cause contention in distributed systems",
          _SERIAL_ALT, "DSQL-TYPE-001"),
    _type("SMALLSERIAL", r"\bSMALLSERIAL\b",
          "SMALLSERIAL type not supported - sequences cause contention in distributed systems",
          _SERIAL_ALT, "DSQL-TYPE-001"),
    _type("JSONB_COLUMN", r"\bJSONB\b", "JSONB not supported as column type - only as runtime query type",
          "text()", "DSQL-TYPE-002"),
    _type("JSON_COLUMN", r"\bJSON\b(?!\s*_)", "JSON not supported as column type - only as runtime query type",
          "text()", "DSQL-TYPE-002"),
    _type("XML", r"\bXML\b", "XML type not supported", "TEXT (store XML as text)", "DSQL-TYPE-003"),
    _type("POINT", r"\bPOINT\b", "Geometric POINT type not supported",
          "Store as two NUMERIC columns (x, y) or TEXT", "DSQL-TYPE-005"),
    _type("LINE", r"\bLINE\b", "Geometric LINE type not supported", "Store as TEXT or separate columns", "DSQL-TYPE-005"),
    _type("LSEG", r"\bLSEG\b", "Geometric LSEG type not supported", "Store as TEXT or separate columns", "DSQL-TYPE-005"),
    _type("BOX", r"\bBOX\b", "Geometric BOX type not supported", "Store as TEXT or four NUMERIC columns", "DSQL-TYPE-005"),
    _type("PATH", r"\bPATH\b", "Geometric PATH type not supported", "Store as TEXT", "DSQL-TYPE-005"),
    _type("POLYGON", r"\bPOLYGON\b", "Geometric POLYGON type not supported", "Store as TEXT", "DSQL-TYPE-005"),
    _type("CIRCLE", r"\bCIRCLE\b", "Geometric CIRCLE type not supported",
          "Store as TEXT or three NUMERIC columns (x, y, radius)", "DSQL-TYPE-005"),
    _type("INT4RANGE", r"\bINT4RANGE\b", "Range type INT4RANGE not supported", _RANGE_ALT.format("INTEGER"), "DSQL-TYPE-006"),
    _type("INT8RANGE", r"\bINT8RANGE\b", "Range type INT8RANGE not supported", _RANGE_ALT.format("BIGINT"), "DSQL-TYPE-006"),
    _type("NUMRANGE", r"\bNUMRANGE\b", "Range type NUMRANGE not supported", _RANGE_ALT.format("NUMERIC"), "DSQL-TYPE-006"),
    _type("TSRANGE", r"\bTSRANGE\b", "Range type TSRANGE not supported", _RANGE_ALT.format("TIMESTAMP"), "DSQL-TYPE-006"),
    _type("TSTZRANGE", r"\bTSTZRANGE\b", "Range type TSTZRANGE not supported",
          _RANGE_ALT.format("TIMESTAMPTZ"), "DSQL-TYPE-006"),
    _type("DATERANGE", r"\bDATERANGE\b", "Range type DATERANGE not supported", _RANGE_ALT.format("DATE"), "DSQL-TYPE-006"),
    _type("INT4MULTIRANGE", r"\bINT4MULTIRANGE\b", "Multirange type INT4MULTIRANGE not supported",
          _MULTIRANGE_ALT, "DSQL-TYPE-007"),
    _type("INT8MULTIRANGE", r"\bINT8MULTIRANGE\b", "Multirange type INT8MULTIRANGE not supported",
          _MULTIRANGE_ALT, "DSQL-TYPE-007"),
    _type("NUMMULTIRANGE", r"\bNUMMULTIRANGE\b", "Multirange type NUMMULTIRANGE not supported",
          _MULTIRANGE_ALT, "DSQL-TYPE-007"),
    _type("TSMULTIRANGE", r"\bTSMULTIRANGE\b", "Multirange type TSMULTIRANGE not supported",
          _MULTIRANGE_ALT, "DSQL-TYPE-007"),
    _type("TSTZMULTIRANGE", r"\bTSTZMULTIRANGE\b", "Multirange type TSTZMULTIRANGE not supported",
          _MULTIRANGE_ALT, "DSQL-TYPE-007"),
    _type("DATEMULTIRANGE", r"\bDATEMULTIRANGE\b", "Multirange type DATEMULTIRANGE not supported",
          _MULTIRANGE_ALT, "DSQL-TYPE-007"),
    _type("BIT", r"\bBIT\s*\(", "BIT string type not supported", "Use BYTEA or TEXT", "DSQL-TYPE-008"),
    _type("VARBIT", r"\bVARBIT\b", "BIT VARYING type not supported", "Use BYTEA or TEXT", "DSQL-TYPE-008"),
    _type("BIT_VARYING", r"\bBIT\s+VARYING\b", "BIT VARYING type not supported", "Use BYTEA or TEXT", "DSQL-TYPE-008"),
    _type("CIDR", r"\bCIDR\b", "CIDR type not supported as column type",
          "Use TEXT or VARCHAR to store network addresses", "DSQL-TYPE-009"),
    _type("MACADDR", r"\bMACADDR\b", "MACADDR type not supported as column type", "Use TEXT or VARCHAR(17)", "DSQL-TYPE-009"),
    _type("MACADDR8", r"\bMACADDR8\b", "MACADDR8 type not supported as column type",
          "Use TEXT or VARCHAR(23)", "DSQL-TYPE-009"),
    _type("INET", r"\bINET\b", "INET not supported as column type - runtime-only",
          "Use VARCHAR(45) for both IPv4 and IPv6", "DSQL-TYPE-010"),
    _type("TSVECTOR", r"\bTSVECTOR\b", "TSVECTOR type not supported - full-text search not available",
          "Use TEXT and implement search in application layer", "DSQL-TYPE-011"),
    _type("TSQUERY", r"\bTSQUERY\b", "TSQUERY type not supported - full-text search not available",
          "Implement search logic in application layer", "DSQL-TYPE-011"),
    _type("OID", r"\bOID\b", "OID type not supported", "Use INTEGER or BIGINT", "DSQL-TYPE-012"),
    _type("REGPROC", r"\bREGPROC\b", "REGPROC type not supported", "Use TEXT to store function names", "DSQL-TYPE-012"),
    _type("REGPROCEDURE", r"\bREGPROCEDURE\b", "REGPROCEDURE type not supported",
          "Use TEXT to store procedure signatures", "DSQL-TYPE-012"),
    _type("REGOPER", r"\bREGOPER\b", "REGOPER type not supported", "Use TEXT to store operator names", "DSQL-TYPE-012"),
    _type("REGOPERATOR", r"\bREGOPERATOR\b", "REGOPERATOR type not supported",
          "Use TEXT to store operator signatures", "DSQL-TYPE-012"),
    _type("REGCLASS", r"\bREGCLASS\b", "REGCLASS type not supported", "Use TEXT to store table names", "DSQL-TYPE-012"),
    _type("REGTYPE", r"\bREGTYPE\b", "REGTYPE type not supported", "Use TEXT to store type names", "DSQL-TYPE-012"),
    _type("REGROLE", r"\bREGROLE\b", "REGROLE type not supported", "Use TEXT to store role names", "DSQL-TYPE-012"),
    _type("REGNAMESPACE", r"\bREGNAMESPACE\b", "REGNAMESPACE type not supported",
          "Use TEXT to store schema names", "DSQL-TYPE-012"),
    _type("REGCONFIG", r"\bREGCONFIG\b", "REGCONFIG type not supported", "Use TEXT", "DSQL-TYPE-012"),
    _type("REGDICTIONARY", r"\bREGDICTIONARY\b", "REGDICTIONARY type not supported", "Use TEXT", "DSQL-TYPE-012"),
    _type("PG_LSN", r"\bPG_LSN\b", "PG_LSN type not supported", "No direct alternative", "DSQL-TYPE-013"),
    _type("PG_SNAPSHOT", r"\bPG_SNAPSHOT\b", "PG_SNAPSHOT type not supported", "No direct alternative", "DSQL-TYPE-013"),
    _type("MONEY", r"\bMONEY\b", "MONEY type not recommended - use NUMERIC for precision",
          "Use NUMERIC(precision, scale) for monetary values", "DSQL-TYPE-004"),
    _type("ARRAY_TYPE", r"\[\s*\]|\bARRAY\s*\[", "Array types not supported as column types - only as runtime query types",
          "Use TEXT to store array as JSON string, or normalize into separate table", "DSQL-TYPE-014"),
)


def feature_category(feature: str) -> str:
    """Category for an SQL feature finding, derived from its name."""

    if "TRIGGER" in feature:
        return "TRIGGER"
    if "SEQUENCE" in feature or "NEXTVAL" in feature or "SERIAL" in feature:
        return "SEQUENCE"
    if "FOREIGN" in feature or "REFERENCES" in feature or "CASCADE" in feature:
        return "CONSTRAINT"
    if "CREATE" in feature or "DROP" in feature or "ALTER" in feature:
        return "DDL"
    if "TRUNCATE" in feature or "VACUUM" in feature:
        return "DML"
    if "PL" in feature or "LANGUAGE" in feature or "DO_BLOCK" in feature:
        return "FUNCTION"
    if "INDEX" in feature:
        return "INDEX"
    return "SYNTAX"


def _sql(
    feature: str,
    pattern: str,
    message: str,
    alternative: str,
    rule_code: str | None = None,
    severity: str = "error",
) -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, feature_category(feature), severity, rule_code, DOCS_UNSUPPORTED)


UNSUPPORTED_SQL: Final[Tuple[SqlRule, ...]] = (
    _sql("CREATE_TRIGGER", r"\bCREATE\s+(OR\s+REPLACE\s+)?TRIGGER\b", "Triggers not supported in DSQL",
         "Move trigger logic to application code or AWS Lambda/EventBridge", "DSQL-TRIG-001"),
    _sql("DROP_TRIGGER", r"\bDROP\s+TRIGGER\b", "Triggers not supported in DSQL",
         "N/A - triggers not supported", "DSQL-TRIG-002"),
    _sql("PLPGSQL", r"\bLANGUAGE\s+plpgsql\b", "PL/pgSQL not supported - only SQL language functions allowed",
         "Use LANGUAGE SQL functions or move logic to application/Lambda", "DSQL-FN-001"),
    _sql("PLPYTHON", r"\bLANGUAGE\s+plpython", "PL/Python not supported", "Use AWS Lambda for Python logic", "DSQL-FN-002"),
    _sql("PLPERL", r"\bLANGUAGE\s+plperl", "PL/Perl not supported", "Use AWS Lambda", "DSQL-FN-003"),
    _sql("DO_BLOCK", r"\bDO\s+\$\$", "DO $$ blocks not supported - no anonymous code blocks",
         "Execute statements separately or use SQL functions", "DSQL-FN-007"),
    _sql("CREATE_SEQUENCE", r"\bCREATE\s+SEQUENCE\b",
         "Sequences not recommended - cause contention in distributed systems",
         "Use UUID with gen_random_uuid() instead of sequences", "DSQL-SEQ-001"),
    _sql("NEXTVAL", r"\bNEXTVAL\s*\(", "NEXTVAL not recommended - sequences cause contention",
         "Use gen_random_uuid() for unique IDs", "DSQL-SEQ-002"),
    _sql("CURRVAL", r"\bCURRVAL\s*\(", "CURRVAL not recommended - sequences cause contention",
         "Use UUID instead of sequences", "DSQL-SEQ-003"),
    _sql("SETVAL", r"\bSETVAL\s*\(", "SETVAL not supported - sequences not recommended",
         "N/A - use UUID instead of sequences", "DSQL-SEQ-004"),
    _sql("LASTVAL", r"\bLASTVAL\s*\(", "LASTVAL not supported - sequences not available",
         "Use RETURNING clause", "DSQL-SEQ-005"),
    _sql("TRUNCATE", r"\bTRUNCATE\b", "TRUNCATE not supported",
         "Use DELETE FROM table_name (or DROP TABLE + CREATE TABLE)", "DSQL-MISC-004"),
    _sql("TEMP_TABLE", r"\bCREATE\s+(GLOBAL\s+|LOCAL\s+)?TEMP(ORARY)?\s+TABLE\b", "Temporary tables not supported",
         "Use CTEs (WITH clause) or regular tables with session-specific names", "DSQL-TBL-001"),
    _sql("VACUUM", r"\bVACUUM\b", "VACUUM not supported - automatic storage management",
         "Not needed - DSQL automatically manages storage", "DSQL-MISC-006", "warning"),
    _sql("ALTER_SYSTEM", r"\bALTER\s+SYSTEM\b", "ALTER SYSTEM not supported - system is fully managed",
         "Not needed - DSQL is fully managed"),
    _sql("TABLESPACE", r"\bTABLESPACE\b", "Tablespaces not supported - automatic storage management",
         "Not needed - DSQL manages storage automatically", "DSQL-TBL-004"),
    _sql("CREATE_DATABASE", r"\bCREATE\s+DATABASE\b", "CREATE DATABASE not supported - only one database per cluster",
         "Use separate clusters or schemas within the single postgres database", "DSQL-DB-001"),
    _sql("IDENTITY", r"\bGENERATED\s+(ALWAYS|BY\s+DEFAULT)\s+AS\s+IDENTITY\b", "IDENTITY constraint not supported",
         _SERIAL_ALT, "DSQL-MOD-001"),
    _sql("REFERENCES", r"\bREFERENCES\s+\w+",
         "Foreign key constraints not enforced - relationships work but not validated",
         "Implement referential integrity in application layer (JOINs still work)", "DSQL-CONS-002", "warning"),
    _sql("FOREIGN_KEY", r"\bFOREIGN\s+KEY\b", "Foreign key constraints not enforced",
         "Implement referential integrity in application layer", "DSQL-CONS-001", "warning"),
    _sql("ON_DELETE_CASCADE", r"\bON\s+DELETE\s+CASCADE\b", "CASCADE not enforced - implement in application",
         "Implement cascade logic in application layer", "DSQL-CONS-003", "warning"),
    _sql("ON_UPDATE_CASCADE", r"\bON\s+UPDATE\s+CASCADE\b", "CASCADE not enforced - implement in application",
         "Implement cascade logic in application layer", "DSQL-CONS-004", "warning"),
    _sql("PARTITION_BY", r"\bPARTITION\s+BY\b", "Manual partitioning not supported - automatic partitioning",
         "Remove - DSQL automatically partitions data", "DSQL-TBL-005"),
    _sql("LISTEN", r"\bLISTEN\b", "LISTEN not supported",
         "Use AWS SNS, SQS, or EventBridge for notifications", "DSQL-MISC-001"),
    _sql("NOTIFY", r"\bNOTIFY\b", "NOTIFY not supported",
         "Use AWS SNS, SQS, or EventBridge for notifications", "DSQL-MISC-002"),
    _sql("CREATE_EXTENSION", r"\bCREATE\s+EXTENSION\b", "Extensions not supported in DSQL",
         "Extensions not supported - use built-in functions only", "DSQL-EXT-001"),
    _sql("CREATE_RULE", r"\bCREATE\s+(OR\s+REPLACE\s+)?RULE\b", "Rules not supported",
         "Implement rule logic in application layer or views", "DSQL-MISC-005"),
    _sql("WITH_HOLD", r"\bWITH\s+HOLD\b", "WITH HOLD cursors not supported", "Use application-side pagination"),
    _sql("ADVISORY_LOCK", r"\bpg_advisory_lock", "Advisory locks not supported - use optimistic concurrency",
         "Use optimistic concurrency or external locking (DynamoDB, Redis)", "DSQL-MISC-003"),
    _sql("TO_TSVECTOR", r"\bto_tsvector\s*\(", "Full-text search functions not supported",
         "Use external search service (OpenSearch, Elasticsearch)"),
    _sql("TO_TSQUERY", r"\bto_tsquery\s*\(", "Full-text search functions not supported", "Use external search service"),
    _sql("GIN_INDEX", r"\bUSING\s+gin\b", "GIN indexes not supported - only B-tree allowed",
         "Use B-tree index (USING btree)", "DSQL-IDX-001"),
    _sql("GIST_INDEX", r"\bUSING\s+gist\b", "GiST indexes not supported - only B-tree allowed",
         "Use B-tree index (USING btree)", "DSQL-IDX-002"),
    _sql("SPGIST_INDEX", r"\bUSING\s+spgist\b", "SP-GiST indexes not supported - only B-tree allowed",
         "Use B-tree index (USING btree)", "DSQL-IDX-003"),
    _sql("BRIN_INDEX", r"\bUSING\s+brin\b", "BRIN indexes not supported - only B-tree allowed",
         "Use B-tree index (USING btree)", "DSQL-IDX-004"),
    _sql("HASH_INDEX", r"\bUSING\s+hash\b", "Hash indexes not supported - only B-tree allowed",
         "Use B-tree index (USING btree)", "DSQL-IDX-005"),
    _sql("CREATE_MATERIALIZED_VIEW", r"\bCREATE\s+MATERIALIZED\s+VIEW\b", "Materialized views not supported",
         "Use regular views or cache results in application layer", "DSQL-VIEW-001"),
    _sql("REFRESH_MATERIALIZED_VIEW", r"\bREFRESH\s+MATERIALIZED\s+VIEW\b", "REFRESH MATERIALIZED VIEW not supported",
         "N/A - materialized views not supported", "DSQL-VIEW-002"),
    _sql("EXCLUSION_CONSTRAINT", r"\bEXCLUDE\s+(USING\s+\w+\s*)?\(", "EXCLUSION constraints not supported",
         "Implement exclusion logic in application layer", "DSQL-CONS-005"),
    _sql("DEFERRABLE_CONSTRAINT", r"(?<!NOT\s)\bDEFERRABLE\b", "DEFERRABLE constraints not supported",
         "Remove - all constraints are immediate in DSQL", "DSQL-CONS-006"),
    _sql("UNLOGGED_TABLE", r"\bCREATE\s+UNLOGGED\s+TABLE\b", "UNLOGGED tables not supported",
         "Use regular tables - DSQL manages durability", "DSQL-TBL-002"),
    _sql("TABLE_INHERITS", r"\bINHERITS\s*\(", "Table inheritance (INHERITS) not supported",
         "Use separate tables with shared column definitions", "DSQL-TBL-003"),
    _sql("INDEX_CONCURRENTLY", r"\b(?:CREATE|DROP)\s+(?:UNIQUE\s+)?INDEX\s+CONCURRENTLY\b",
         "CONCURRENTLY not supported for index operations",
         "Remove CONCURRENTLY - DSQL manages index creation", "DSQL-IDX-006", "warning"),
    _sql("CREATE_PROCEDURE", r"\bCREATE\s+(OR\s+REPLACE\s+)?PROCEDURE\b",
         "Procedures may not work if using non-SQL language",
         "Use SQL-language functions or application logic", "DSQL-FN-008", "warning"),
    _sql("CREATE_COLLATION", r"\bCREATE\s+COLLATION\b", "Custom collations not supported",
         "Only C collation supported in DSQL", "DSQL-MOD-003"),
)

ALLOWED_COLLATIONS: Final[FrozenSet[str]] = frozenset({"c", "posix", "ucs_basic"})
