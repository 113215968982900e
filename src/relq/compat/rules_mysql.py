"""
MySQL family (MySQL, MariaDB, PlanetScale) rules for Postgres-only
types and syntax.
"""

from __future__ import annotations

from typing import Final, FrozenSet, Tuple

from .catalog import AutoFix, RuleCatalog, RuleEntry, SqlRule

DOCS_TYPES: Final = "https://dev.mysql.com/doc/refman/8.0/en/data-types.html"
DOCS_SQL: Final = "https://dev.mysql.com/doc/refman/8.0/en/sql-statements.html"
DOCS_PROCEDURES: Final = "https://dev.mysql.com/doc/refman/8.0/en/create-procedure.html"
DOCS_PLANETSCALE_FK: Final = "https://planetscale.com/docs/learn/operating-without-foreign-key-constraints"

_ENTRIES: Tuple[RuleEntry, ...] = (
    RuleEntry("MYSQL-SEQ-001", "error", "Sequences not supported in MySQL - use AUTO_INCREMENT", "SEQUENCE",
              "Remove sequence and use AUTO_INCREMENT on the column", DOCS_SQL,
              AutoFix("Replace sequence with AUTO_INCREMENT", "sequence", "AUTO_INCREMENT")),
    RuleEntry("MYSQL-SEQ-002", "error", "IDENTITY not supported - use AUTO_INCREMENT", "SEQUENCE",
              "Use AUTO_INCREMENT instead of IDENTITY", DOCS_SQL,
              AutoFix("Replace IDENTITY with AUTO_INCREMENT", "GENERATED AS IDENTITY", "AUTO_INCREMENT")),
    RuleEntry("MYSQL-FN-001", "error", "PL/pgSQL functions must be converted to MySQL syntax", "FUNCTION",
              "Convert to MySQL stored procedure (BEGIN...END, DECLARE, etc.)", DOCS_PROCEDURES),
    RuleEntry("MYSQL-EXT-001", "warning", "PostgreSQL extension not applicable - MySQL uses plugins", "DDL",
              "Check MySQL plugin documentation for equivalent functionality", DOCS_SQL),
    RuleEntry("MYSQL-TYPE-001", "error", "Array types not supported in MySQL - use JSON or separate table",
              "DATA_TYPE", "Use JSON column to store arrays, or normalize into separate table", DOCS_TYPES,
              AutoFix("Replace array column with JSON", "type[]", "json")),
    RuleEntry("MYSQL-TYPE-002", "error", "JSONB not available - use JSON", "DATA_TYPE",
              "Use JSON (MySQL has JSON but not JSONB binary format)", DOCS_TYPES,
              AutoFix("Replace JSONB with JSON", "jsonb", "json")),
    RuleEntry("MYSQL-CONS-001", "error", "EXCLUSION constraints not supported in MySQL", "CONSTRAINT",
              "Implement exclusion logic in application layer or use triggers", DOCS_SQL),
    RuleEntry("MYSQL-CONS-002", "error", "DEFERRABLE constraints not supported", "CONSTRAINT",
              "Remove DEFERRABLE - MySQL constraints are immediate", DOCS_SQL),
    RuleEntry("MYSQL-IDX-001", "error", "Index method not supported in MySQL", "INDEX",
              "Use BTREE, FULLTEXT or SPATIAL indexes", DOCS_SQL),
    RuleEntry("MYSQL-IDX-002", "warning", "Partial indexes (WHERE) are not supported in MySQL", "INDEX",
              "Drop the predicate or use a generated column", DOCS_SQL),
    RuleEntry("MYSQL-PS-001", "error", "Foreign key constraints not supported in PlanetScale", "PLANETSCALE",
              "Remove FOREIGN KEY constraint - implement in application", DOCS_PLANETSCALE_FK),
    RuleEntry("MYSQL-PS-002", "warning", "Foreign key references not enforced in PlanetScale", "PLANETSCALE",
              "Implement referential integrity in application layer", DOCS_PLANETSCALE_FK),
)

MYSQL_RULES: Final = RuleCatalog("MySQL", _ENTRIES)

SUPPORTED_INDEX_METHODS: Final[FrozenSet[str]] = frozenset({"btree", "hash", "fulltext", "spatial"})


def _type(feature: str, pattern: str, message: str, alternative: str, rule_code: str | None = None) -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, "DATA_TYPE", "error", rule_code, DOCS_TYPES)


_RANGE = "Range types not supported in MySQL"

UNSUPPORTED_DATA_TYPES: Final[Tuple[SqlRule, ...]] = (
    _type("ARRAY_TYPE", r"\[\s*\]|\bARRAY\s*\[", "Array types not supported in MySQL - use JSON or separate table",
          "Use JSON column to store arrays, or normalize into separate table", "MYSQL-TYPE-001"),
    _type("INT4RANGE", r"\bINT4RANGE\b", _RANGE, "Use two INT columns (range_start, range_end)"),
    _type("INT8RANGE", r"\bINT8RANGE\b", _RANGE, "Use two BIGINT columns (range_start, range_end)"),
    _type("NUMRANGE", r"\bNUMRANGE\b", _RANGE, "Use two DECIMAL columns (range_start, range_end)"),
    _type("TSRANGE", r"\bTSRANGE\b", _RANGE, "Use two DATETIME columns (range_start, range_end)"),
    _type("TSTZRANGE", r"\bTSTZRANGE\b", _RANGE, "Use two TIMESTAMP columns (range_start, range_end)"),
    _type("DATERANGE", r"\bDATERANGE\b", _RANGE, "Use two DATE columns (range_start, range_end)"),
    _type("JSONB", r"\bJSONB\b", "JSONB not available - use JSON (slightly different performance characteristics)",
          "Use JSON (MySQL has JSON but not JSONB binary format)", "MYSQL-TYPE-002"),
    _type("TSVECTOR", r"\bTSVECTOR\b", "TSVECTOR not supported - use MySQL FULLTEXT indexes",
          "Use FULLTEXT index on TEXT/VARCHAR columns"),
    _type("TSQUERY", r"\bTSQUERY\b", "TSQUERY not supported - use FULLTEXT search syntax",
          "Use MATCH() AGAINST() syntax with FULLTEXT index"),
    _type("POINT_PG", r"\bPOINT\b(?!\s*\()", "PostgreSQL POINT type - MySQL has POINT but with different syntax",
          "Use MySQL POINT (different syntax) or two DOUBLE columns"),
    _type("LINE", r"\bLINE\b", "LINE type not available - use LINESTRING or TEXT", "Use LINESTRING geometry type or TEXT"),
    _type("LSEG", r"\bLSEG\b", "LSEG type not available in MySQL", "Store as TEXT or four DOUBLE columns"),
    _type("PATH", r"\bPATH\b", "PATH type not available - use MySQL spatial types",
          "Use LINESTRING/MULTILINESTRING or TEXT"),
    _type("CIRCLE", r"\bCIRCLE\b", "CIRCLE type not available in MySQL",
          "Store as three DOUBLE columns (x, y, radius) or GEOMETRY"),
    _type("BOX", r"\bBOX\b", "BOX type not available - use POLYGON or separate columns",
          "Use POLYGON geometry or four DOUBLE columns"),
    _type("INET", r"\bINET\b", "INET type not supported - use VARCHAR or VARBINARY",
          "Use VARCHAR(45) for IPv4/IPv6 or VARBINARY(16) for binary storage"),
    _type("CIDR", r"\bCIDR\b", "CIDR type not supported - use VARCHAR", "Use VARCHAR(45) to store CIDR notation"),
    _type("MACADDR", r"\bMACADDR\b", "MACADDR type not supported - use CHAR(17)", "Use CHAR(17) for MAC address storage"),
    _type("MACADDR8", r"\bMACADDR8\b", "MACADDR8 type not supported - use CHAR(23)",
          "Use CHAR(23) for MAC address storage"),
    _type("MONEY", r"\bMONEY\b", "MONEY type not supported - use DECIMAL", "Use DECIMAL(19,4) for monetary values"),
    _type("BIT_VARYING", r"\bBIT\s+VARYING\b", "BIT VARYING not supported - use BIT or VARBINARY",
          "Use BIT(n) with fixed length or VARBINARY"),
    _type("VARBIT", r"\bVARBIT\b", "VARBIT not supported - use BIT or VARBINARY", "Use BIT(n) or VARBINARY"),
    _type("XML", r"\bXML\b", "XML type not supported - use TEXT or JSON", "Store XML as TEXT or use JSON"),
    _type("OID", r"\bOID\b", "OID type not supported", "Use INT UNSIGNED or BIGINT UNSIGNED"),
    _type("REGPROC", r"\bREGPROC\b", "REGPROC type not supported", "Use VARCHAR to store function names"),
    _type("REGCLASS", r"\bREGCLASS\b", "REGCLASS type not supported", "Use VARCHAR to store table names"),
    _type("SERIAL", r"\b(SMALL|BIG)?SERIAL\b", "SERIAL is an alias for BIGINT UNSIGNED AUTO_INCREMENT UNIQUE in MySQL",
          "Use INT AUTO_INCREMENT PRIMARY KEY"),
)


def feature_category(feature: str) -> str:
    if "SEQUENCE" in feature or "IDENTITY" in feature:
        return "SEQUENCE"
    if "INDEX" in feature or "GIST" in feature or "GIN" in feature:
        return "INDEX"
    if "TRIGGER" in feature:
        return "TRIGGER"
    if "CONSTRAINT" in feature or "DEFERRABLE" in feature or "EXCLUSION" in feature:
        return "CONSTRAINT"
    if "PLPGSQL" in feature or "DO_BLOCK" in feature:
        return "FUNCTION"
    return "SYNTAX"


def _sql(feature: str, pattern: str, message: str, alternative: str, rule_code: str | None = None,
         severity: str = "error") -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, feature_category(feature), severity, rule_code, DOCS_SQL)


UNSUPPORTED_SQL: Final[Tuple[SqlRule, ...]] = (
    _sql("CREATE_SEQUENCE", r"\bCREATE\s+SEQUENCE\b", "CREATE SEQUENCE not supported in MySQL - use AUTO_INCREMENT",
         "Use AUTO_INCREMENT column instead", "MYSQL-SEQ-001"),
    _sql("IDENTITY", r"\bGENERATED\s+(ALWAYS|BY\s+DEFAULT)\s+AS\s+IDENTITY\b",
         "IDENTITY not supported - use AUTO_INCREMENT", "Use AUTO_INCREMENT instead of IDENTITY", "MYSQL-SEQ-002"),
    _sql("DOLLAR_QUOTE", r"\$\$[\s\S]*?\$\$", "Dollar-quoted strings not supported in MySQL",
         "Use single quotes with proper escaping"),
    _sql("RETURNING", r"\bRETURNING\b",
         "RETURNING clause not fully supported - use LAST_INSERT_ID() or separate query",
         "Use LAST_INSERT_ID() after INSERT or separate SELECT", severity="warning"),
    _sql("LISTEN", r"\bLISTEN\b", "LISTEN not supported in MySQL",
         "Use polling or external message queue (Redis, RabbitMQ)"),
    _sql("NOTIFY", r"\bNOTIFY\b", "NOTIFY not supported in MySQL",
         "Use external message queue or trigger with application notification"),
    _sql("CREATE_EXTENSION", r"\bCREATE\s+EXTENSION\b", "CREATE EXTENSION not applicable to MySQL",
         "MySQL uses plugins, not extensions. Check MySQL documentation."),
    _sql("EXCLUSION", r"\bEXCLUDE\s+(USING|WITH)", "EXCLUSION constraints not supported in MySQL",
         "Implement exclusion logic in application layer or use triggers", "MYSQL-CONS-001"),
    _sql("DEFERRABLE", r"(?<!NOT\s)\bDEFERRABLE\b", "DEFERRABLE constraints not supported",
         "Remove DEFERRABLE - MySQL constraints are immediate", "MYSQL-CONS-002"),
    _sql("GIST_INDEX", r"\bUSING\s+GIST\b", "GiST indexes not supported - use SPATIAL or BTREE",
         "Use SPATIAL index for geometry or BTREE for other cases", "MYSQL-IDX-001"),
    _sql("GIN_INDEX", r"\bUSING\s+GIN\b", "GIN indexes not supported - use FULLTEXT or BTREE",
         "Use FULLTEXT for text search or regular BTREE index", "MYSQL-IDX-001"),
    _sql("SPGIST_INDEX", r"\bUSING\s+SPGIST\b", "SP-GiST indexes not supported", "Use BTREE or SPATIAL index",
         "MYSQL-IDX-001"),
    _sql("BRIN_INDEX", r"\bUSING\s+BRIN\b", "BRIN indexes not supported", "Use partitioning for similar optimization",
         "MYSQL-IDX-001"),
    _sql("PG_ADVISORY_LOCK", r"\bpg_advisory_lock", "pg_advisory_lock not available - use GET_LOCK()",
         "Use GET_LOCK() and RELEASE_LOCK() functions"),
    _sql("PLPGSQL", r"\bLANGUAGE\s+plpgsql\b", "PL/pgSQL not supported - use MySQL procedure syntax",
         "Convert to MySQL stored procedure syntax (BEGIN...END)", "MYSQL-FN-001"),
    _sql("DO_BLOCK", r"\bDO\s+\$\$", "DO blocks not supported in MySQL",
         "Create a stored procedure or execute statements separately"),
    _sql("TRUNCATE_RESTART", r"\bTRUNCATE\b.*\bRESTART\s+IDENTITY\b",
         "RESTART IDENTITY syntax not needed - MySQL TRUNCATE resets AUTO_INCREMENT",
         "Use TRUNCATE TABLE (auto-resets AUTO_INCREMENT in InnoDB)", severity="warning"),
    _sql("GEN_RANDOM_UUID", r"\bgen_random_uuid\s*\(\s*\)", "gen_random_uuid() not available - use UUID()",
         "Use UUID() function in MySQL"),
    _sql("ILIKE", r"\bILIKE\b", "ILIKE not supported in MySQL",
         "Use LIKE with a case-insensitive collation or LOWER(col) LIKE LOWER(pattern)"),
    _sql("PG_CAST", r"(?<!:)::\s*[A-Za-z_]", "PostgreSQL :: casts not supported in MySQL",
         "Use CAST(expr AS type)"),
)

PLANETSCALE_SQL: Final[Tuple[SqlRule, ...]] = (
    SqlRule("FOREIGN_KEY", r"\bFOREIGN\s+KEY\b", "Foreign keys not supported in PlanetScale (Vitess limitation)",
            "Implement referential integrity in application layer", "PLANETSCALE", "error", "MYSQL-PS-001",
            DOCS_PLANETSCALE_FK),
    SqlRule("REFERENCES", r"\bREFERENCES\s+\w+", "Foreign key references not enforced in PlanetScale",
            "Remove REFERENCES - implement in application layer", "PLANETSCALE", "error", "MYSQL-PS-002",
            DOCS_PLANETSCALE_FK),
    SqlRule("UNIQUE_MULTI_COLUMN", r"\bUNIQUE\s*\([^)]+,\s*[^)]+\)",
            "Multi-column UNIQUE may not work as expected across shards",
            "Consider sharding implications for multi-column unique constraints", "PLANETSCALE", "warning",
            None, DOCS_PLANETSCALE_FK),
)

# MariaDB 10.3+ has sequences; these findings are dropped for it
SEQUENCE_FEATURES: Final[FrozenSet[str]] = frozenset({"CREATE_SEQUENCE", "SEQUENCE", "MYSQL-SEQ-001"})
