"""
SQLite / Turso rules for Postgres-only types and syntax.
"""

from __future__ import annotations

from typing import Final, Tuple

from .catalog import AutoFix, RuleCatalog, RuleEntry, SqlRule

DOCS_TYPES: Final = "https://sqlite.org/datatype3.html"
DOCS_LANG: Final = "https://sqlite.org/lang.html"

_ENTRIES: Tuple[RuleEntry, ...] = (
    RuleEntry("SQLITE-SEQ-001", "error", "Sequences not supported in SQLite", "DDL",
              "Use INTEGER PRIMARY KEY AUTOINCREMENT instead", DOCS_LANG,
              AutoFix("Replace sequence with INTEGER PRIMARY KEY AUTOINCREMENT", "sequence", "integer")),
    RuleEntry("SQLITE-SEQ-002", "error", "IDENTITY not supported - use AUTOINCREMENT", "DDL",
              "Use INTEGER PRIMARY KEY AUTOINCREMENT", DOCS_LANG),
    RuleEntry("SQLITE-FN-001", "error", "Stored functions not supported in SQLite", "FUNCTION",
              "Move function logic to application code", DOCS_LANG),
    RuleEntry("SQLITE-EXT-001", "warning", "PostgreSQL extensions not applicable to SQLite", "DDL",
              "Check for equivalent SQLite loadable extension", DOCS_LANG),
    RuleEntry("SQLITE-TYPE-001", "warning", "SQLite uses type affinity - types are suggestions, not enforced",
              "SYNTAX", "Add CHECK constraints if strict type enforcement is needed", DOCS_TYPES),
    RuleEntry("SQLITE-TYPE-002", "error", "Array types not supported in SQLite - use JSON or separate table",
              "DATA_TYPE", "Store as JSON text or use separate table with foreign key", DOCS_TYPES,
              AutoFix("Replace array column with TEXT holding JSON", "type[]", "text")),
    RuleEntry("SQLITE-IDX-001", "error", "Only B-tree indexes exist in SQLite", "INDEX",
              "Use a regular index, FTS5 for text or R*Tree for spatial data", DOCS_LANG),
    RuleEntry("SQLITE-CONS-001", "error", "EXCLUSION constraints not supported", "CONSTRAINT",
              "Implement in application layer or use trigger", DOCS_LANG),
    RuleEntry("SQLITE-TBL-001", "warning", "Table option has no SQLite equivalent and is ignored", "DDL",
              "Remove the option", DOCS_LANG),
)

SQLITE_RULES: Final = RuleCatalog("SQLite", _ENTRIES)


def _type(feature: str, pattern: str, message: str, alternative: str, rule_code: str | None = None) -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, "DATA_TYPE", "error", rule_code, DOCS_TYPES)


_RANGE = "Range types not supported in SQLite"

UNSUPPORTED_DATA_TYPES: Final[Tuple[SqlRule, ...]] = (
    _type("ARRAY_TYPE", r"\[\s*\]|\bARRAY\s*\[", "Array types not supported in SQLite - use JSON or separate table",
          "Store as JSON text or use separate table with foreign key", "SQLITE-TYPE-002"),
    _type("INT4RANGE", r"\bINT4RANGE\b", _RANGE, "Use two INTEGER columns (range_start, range_end)"),
    _type("INT8RANGE", r"\bINT8RANGE\b", _RANGE, "Use two INTEGER columns (range_start, range_end)"),
    _type("NUMRANGE", r"\bNUMRANGE\b", _RANGE, "Use two REAL columns (range_start, range_end)"),
    _type("TSRANGE", r"\bTSRANGE\b", _RANGE, "Use two TEXT columns with ISO timestamps"),
    _type("TSTZRANGE", r"\bTSTZRANGE\b", _RANGE, "Use two TEXT columns with ISO timestamps"),
    _type("DATERANGE", r"\bDATERANGE\b", _RANGE, "Use two TEXT columns with YYYY-MM-DD format"),
    _type("TSVECTOR", r"\bTSVECTOR\b", "TSVECTOR not supported - use SQLite FTS5",
          "Use FTS5 virtual table for full-text search"),
    _type("TSQUERY", r"\bTSQUERY\b", "TSQUERY not supported - use FTS5", "Use FTS5 MATCH syntax"),
    _type("POINT", r"\bPOINT\b", "Geometric POINT type not supported",
          "Use two REAL columns (x, y) or TEXT with WKT format"),
    _type("LINE", r"\bLINE\b", "Geometric LINE type not supported", "Store as TEXT with WKT format or use Spatialite"),
    _type("LSEG", r"\bLSEG\b", "LSEG type not supported", "Store as TEXT or four REAL columns"),
    _type("BOX", r"\bBOX\b", "BOX type not supported", "Store as TEXT or four REAL columns"),
    _type("PATH", r"\bPATH\b", "PATH type not supported", "Store as TEXT with coordinates"),
    _type("POLYGON", r"\bPOLYGON\b", "POLYGON type not supported natively",
          "Store as TEXT with WKT format or use Spatialite"),
    _type("CIRCLE", r"\bCIRCLE\b", "CIRCLE type not supported", "Store as three REAL columns (x, y, radius)"),
    _type("INET", r"\bINET\b", "INET type not supported", "Use TEXT to store IP addresses"),
    _type("CIDR", r"\bCIDR\b", "CIDR type not supported", "Use TEXT to store CIDR notation"),
    _type("MACADDR", r"\bMACADDR\b", "MACADDR type not supported", "Use TEXT to store MAC addresses"),
    _type("MACADDR8", r"\bMACADDR8\b", "MACADDR8 type not supported", "Use TEXT to store MAC addresses"),
    _type("MONEY", r"\bMONEY\b", "MONEY type not supported - use INTEGER for cents",
          "Use INTEGER (cents) or TEXT for monetary values"),
    _type("XML", r"\bXML\b", "XML type not supported", "Store as TEXT"),
    _type("OID", r"\bOID\b", "OID type not supported", "Use INTEGER"),
    _type("REGPROC", r"\bREGPROC\b", "REGPROC type not supported", "Use TEXT"),
    _type("REGCLASS", r"\bREGCLASS\b", "REGCLASS type not supported", "Use TEXT"),
    _type("REGTYPE", r"\bREGTYPE\b", "REGTYPE type not supported", "Use TEXT"),
    _type("BIT", r"\bBIT\s*\(", "BIT type not supported - use INTEGER or BLOB", "Use INTEGER or BLOB"),
    _type("VARBIT", r"\bVARBIT\b", "VARBIT not supported - use BLOB", "Use BLOB"),
    _type("BIT_VARYING", r"\bBIT\s+VARYING\b", "BIT VARYING not supported - use BLOB", "Use BLOB"),
)


def feature_category(feature: str) -> str:
    if "SEQUENCE" in feature or "IDENTITY" in feature:
        return "DDL"
    if "INDEX" in feature or "GIST" in feature or "GIN" in feature:
        return "INDEX"
    if "FUNCTION" in feature or "PROCEDURE" in feature or "PLPGSQL" in feature:
        return "FUNCTION"
    if "CONSTRAINT" in feature or "DEFERRABLE" in feature or "EXCLUSION" in feature:
        return "CONSTRAINT"
    if "TRIGGER" in feature:
        return "TRIGGER"
    if "ALTER" in feature:
        return "DDL"
    return "SYNTAX"


def _sql(feature: str, pattern: str, message: str, alternative: str, rule_code: str | None = None,
         severity: str = "error") -> SqlRule:
    return SqlRule(feature, pattern, message, alternative, feature_category(feature), severity, rule_code, DOCS_LANG)


UNSUPPORTED_SQL: Final[Tuple[SqlRule, ...]] = (
    _sql("CREATE_SEQUENCE", r"\bCREATE\s+SEQUENCE\b", "Sequences not supported - use AUTOINCREMENT",
         "Use INTEGER PRIMARY KEY AUTOINCREMENT", "SQLITE-SEQ-001"),
    _sql("IDENTITY", r"\bGENERATED\s+(ALWAYS|BY\s+DEFAULT)\s+AS\s+IDENTITY\b",
         "IDENTITY not supported - use AUTOINCREMENT", "Use INTEGER PRIMARY KEY AUTOINCREMENT", "SQLITE-SEQ-002"),
    _sql("CREATE_FUNCTION", r"\bCREATE\s+(OR\s+REPLACE\s+)?FUNCTION\b", "Stored functions not supported in SQLite",
         "Move logic to application code", "SQLITE-FN-001"),
    _sql("CREATE_PROCEDURE", r"\bCREATE\s+(OR\s+REPLACE\s+)?PROCEDURE\b", "Stored procedures not supported in SQLite",
         "Move logic to application code", "SQLITE-FN-001"),
    _sql("PLPGSQL", r"\bLANGUAGE\s+plpgsql\b", "PL/pgSQL not supported", "Implement logic in application code",
         "SQLITE-FN-001"),
    _sql("DO_BLOCK", r"\bDO\s+\$\$", "DO blocks not supported", "Execute statements separately"),
    _sql("DOLLAR_QUOTE", r"\$\$[\s\S]*?\$\$", "Dollar-quoted strings not supported", "Use single quotes with escaping"),
    _sql("LISTEN", r"\bLISTEN\b", "LISTEN not supported", "Use file system notifications or polling"),
    _sql("NOTIFY", r"\bNOTIFY\b", "NOTIFY not supported", "Use file system notifications or polling"),
    _sql("CREATE_EXTENSION", r"\bCREATE\s+EXTENSION\b", "CREATE EXTENSION not applicable",
         "SQLite uses loadable extensions - different mechanism", "SQLITE-EXT-001", "warning"),
    _sql("EXCLUSION", r"\bEXCLUDE\s+(USING|WITH)", "EXCLUSION constraints not supported",
         "Implement in application layer or use trigger", "SQLITE-CONS-001"),
    _sql("DEFERRABLE", r"(?<!NOT\s)\bDEFERRABLE\b", "DEFERRABLE constraints have limited support",
         "SQLite has DEFERRABLE for FK only, limited support", severity="warning"),
    _sql("GIST_INDEX", r"\bUSING\s+GIST\b", "GiST indexes not supported - use B-tree or R*Tree",
         "Use regular B-tree index or R*Tree for spatial", "SQLITE-IDX-001"),
    _sql("GIN_INDEX", r"\bUSING\s+GIN\b", "GIN indexes not supported - use FTS5 for text",
         "Use FTS5 for text search or regular index", "SQLITE-IDX-001"),
    _sql("SPGIST_INDEX", r"\bUSING\s+SPGIST\b", "SP-GiST indexes not supported", "Use B-tree or R*Tree",
         "SQLITE-IDX-001"),
    _sql("BRIN_INDEX", r"\bUSING\s+BRIN\b", "BRIN indexes not supported", "Use B-tree index", "SQLITE-IDX-001"),
    _sql("HASH_INDEX", r"\bUSING\s+HASH\b", "Hash indexes not supported - SQLite uses B-tree",
         "Use B-tree index (SQLite only has B-tree)", "SQLITE-IDX-001"),
    _sql("RETURNING", r"\bRETURNING\b", "RETURNING requires SQLite 3.35.0+",
         "RETURNING is supported in SQLite 3.35.0+ - check your version", severity="warning"),
    _sql("TRUNCATE", r"\bTRUNCATE\b", "TRUNCATE not supported - use DELETE FROM",
         "Use DELETE FROM table_name (no TRUNCATE in SQLite)"),
    _sql("ALTER_DROP_COLUMN", r"\bALTER\s+TABLE\s+\S+\s+DROP\s+COLUMN\b", "DROP COLUMN requires SQLite 3.35.0+",
         "DROP COLUMN supported in SQLite 3.35.0+. For older versions, recreate table.", severity="warning"),
    _sql("ALTER_RENAME_COLUMN", r"\bALTER\s+TABLE\s+\S+\s+RENAME\s+COLUMN\b", "RENAME COLUMN requires SQLite 3.25.0+",
         "RENAME COLUMN supported in SQLite 3.25.0+", severity="warning"),
    _sql("GEN_RANDOM_UUID", r"\bgen_random_uuid\s*\(\s*\)", "gen_random_uuid() not available",
         "Use hex(randomblob(16)) or application-generated UUID"),
    _sql("NOW_FUNCTION", r"\bNOW\s*\(\s*\)", "NOW() not available - use datetime('now')",
         "Use datetime('now') or strftime()"),
    _sql("CURRENT_TIMESTAMP_TZ", r"\bCURRENT_TIMESTAMP\s+AT\s+TIME\s+ZONE\b", "Timezone operations not supported natively",
         "Use datetime('now', 'localtime') or handle timezone in app"),
    _sql("ILIKE", r"\bILIKE\b", "ILIKE not supported in SQLite", "Use LIKE (case-insensitive for ASCII in SQLite)"),
    _sql("PG_CAST", r"(?<!:)::\s*[A-Za-z_]", "PostgreSQL :: casts not supported in SQLite", "Use CAST(expr AS type)"),
)
