"""
Nile rule catalog: tenant classification, tenant scoping and the SQL
features the serverless Postgres rejects.
"""

from __future__ import annotations

from typing import Dict, Final, FrozenSet, Tuple

from .catalog import AutoFix, RuleCatalog, RuleEntry, SqlRule

DOCS_COMPAT: Final = "https://www.thenile.dev/docs/postgres/postgres-compatibility"
DOCS_TENANTS: Final = "https://www.thenile.dev/docs/tenant-virtualization"

TENANT_COLUMN: Final = "tenant_id"

BUILTIN_TABLES: Final[FrozenSet[str]] = frozenset({"tenants", "users", "tenant_users"})

BUILTIN_COLUMNS: Final[Dict[str, Tuple[str, ...]]] = {
    "tenants": ("id", "name", "created", "updated", "deleted"),
    "users": ("id", "name", "email", "created", "updated", "picture", "given_name", "family_name"),
    "tenant_users": ("tenant_id", "user_id", "email", "created", "updated", "roles"),
}

PREINSTALLED_EXTENSIONS: Final[FrozenSet[str]] = frozenset(
    {
        "pgvector",
        "vector",
        "postgis",
        "postgis_raster",
        "postgis_topology",
        "pg_trgm",
        "citext",
        "uuid-ossp",
        "pgcrypto",
        "hstore",
        "ltree",
        "fuzzystrmatch",
        "tablefunc",
        "cube",
        "earthdistance",
    }
)

_TENANT_PK_FIX = AutoFix(
    "Prepend tenant_id to the primary key",
    additional_changes=("PRIMARY KEY (tenant_id, <existing columns>)",),
)
_UUID_FIX = AutoFix(
    "Replace sequence-backed key with UUID + gen_random_uuid()",
    "serial",
    "uuid",
    ("Add DEFAULT gen_random_uuid()",),
)
_CONSOLE = "Use the Nile Console or SDK"


def _rule(code: str, severity: str, message: str, category: str, alternative: str,
          docs: str = DOCS_COMPAT, fix: AutoFix | None = None) -> RuleEntry:
    return RuleEntry(code, severity, message, category, alternative, docs, fix)


_ENTRIES: Tuple[RuleEntry, ...] = (
    # Table classification
    _rule("NILE-TC-001", "info", "Tenant-aware table detected (has tenant_id column).", "tenant",
          "Rows are isolated per tenant; set nile.tenant_id before querying.", DOCS_TENANTS),
    _rule("NILE-TC-002", "info", "Shared table detected (no tenant_id column).", "tenant",
          "Rows are visible to every tenant.", DOCS_TENANTS),
    _rule("NILE-TC-003", "error", "tenant_id must be UUID type.", "tenant",
          "Change tenant_id column type to UUID to match tenants.id.", DOCS_TENANTS,
          AutoFix("Change tenant_id to UUID", replacement_type="uuid")),
    _rule("NILE-TC-004", "error", "tenant_id must be NOT NULL.", "tenant",
          "Add NOT NULL to the tenant_id column.", DOCS_TENANTS,
          AutoFix("Mark tenant_id NOT NULL", additional_changes=("ALTER COLUMN tenant_id SET NOT NULL",))),
    # Primary keys
    _rule("NILE-PK-001", "error", "PRIMARY KEY of a tenant-aware table must include tenant_id.", "primary-key",
          "Use PRIMARY KEY (tenant_id, id).", DOCS_TENANTS, _TENANT_PK_FIX),
    _rule("NILE-PK-002", "warning", "tenant_id should be the first column of the PRIMARY KEY.", "primary-key",
          "Reorder to PRIMARY KEY (tenant_id, ...).", DOCS_TENANTS, _TENANT_PK_FIX),
    _rule("NILE-PK-003", "info", "Composite PRIMARY KEY (tenant_id, id) is correctly tenant-scoped.", "primary-key",
          "No action required.", DOCS_TENANTS),
    _rule("NILE-PK-004", "error", "Tenant-aware table has no PRIMARY KEY.", "primary-key",
          "Add PRIMARY KEY (tenant_id, id).", DOCS_TENANTS, _TENANT_PK_FIX),
    # Unique constraints
    _rule("NILE-UQ-001", "error", "UNIQUE constraint on a tenant-aware table must include tenant_id.", "constraint",
          "Use UNIQUE (tenant_id, ...).", DOCS_TENANTS),
    _rule("NILE-UQ-002", "warning", "tenant_id should be the first column of the UNIQUE constraint.", "constraint",
          "Reorder to UNIQUE (tenant_id, ...).", DOCS_TENANTS),
    _rule("NILE-UQ-003", "error", "EXCLUSION constraints cannot be enforced across tenants in Nile.", "constraint",
          "Include tenant_id WITH = in the exclusion or enforce in the application.", DOCS_TENANTS),
    # Foreign keys
    _rule("NILE-FK-001", "error", "Foreign key from a tenant-aware table to a shared table is not supported.",
          "foreign-key",
          "Remove FK and implement referential integrity in application code, or make both tables the same type",
          DOCS_TENANTS),
    _rule("NILE-FK-002", "error", "Foreign key from a shared table to a tenant-aware table is not supported.",
          "foreign-key", "Remove FK and implement referential integrity in application code", DOCS_TENANTS),
    _rule("NILE-FK-003", "error", "Foreign key between tenant-aware tables must include tenant_id on both sides.",
          "foreign-key", "Use FOREIGN KEY (tenant_id, col) REFERENCES t (tenant_id, id).", DOCS_TENANTS),
    _rule("NILE-FK-004", "warning", "ON DELETE CASCADE on tenant-aware tables runs within one tenant only.",
          "foreign-key", "Verify cascade behaviour per tenant.", DOCS_TENANTS),
    # Column types on tenant tables
    _rule("NILE-CT-001", "error", "SERIAL on a tenant-aware table; sequences are not available for tenant tables.",
          "column-type", "uuid(...).default(gen_random_uuid())", DOCS_TENANTS, _UUID_FIX),
    _rule("NILE-CT-002", "error",
          "GENERATED AS IDENTITY on a tenant-aware table; identity columns use sequences internally.",
          "column-type", "Use UUID with gen_random_uuid() instead", DOCS_TENANTS, _UUID_FIX),
    _rule("NILE-CT-003", "error", "DEFAULT nextval() is not available on tenant-aware tables.",
          "column-type", "Use gen_random_uuid() instead", DOCS_TENANTS, _UUID_FIX),
    _rule("NILE-CT-004", "info", "Column type is supported on Nile.", "column-type", "No action required."),
    _rule("NILE-CT-005", "info", "Extension type is available without CREATE EXTENSION (pre-installed on Nile).",
          "column-type", "No action required."),
    # Sequences
    _rule("NILE-SEQ-001", "error",
          "Sequence is associated with a tenant table. Sequences are only available for shared tables in Nile.",
          "sequence", "Use UUID with gen_random_uuid() for tenant table primary keys", DOCS_TENANTS),
    _rule("NILE-SEQ-002", "warning", "Standalone sequence can only be used by shared tables.", "sequence",
          "Ensure this sequence is only referenced by shared (non-tenant) tables", DOCS_TENANTS),
    _rule("NILE-SEQ-003", "info", "Sequence on a shared table is supported.", "sequence",
          "No action required. Sequences work on shared tables.", DOCS_TENANTS),
    # Built-in tables
    _rule("NILE-BT-001", "error",
          "Table is a Nile built-in table and already exists. Use ALTER TABLE to add extension columns.",
          "built-in-table", "Use ALTER TABLE to add custom columns to the built-in table", DOCS_TENANTS),
    _rule("NILE-BT-002", "error", "Nile built-in tables cannot be dropped.", "built-in-table",
          "Remove the DROP TABLE statement for this built-in table", DOCS_TENANTS),
    _rule("NILE-BT-003", "warning", "Only user-added extension columns can be modified on built-in tables.",
          "built-in-table", "Ensure you are only modifying columns you added, not built-in columns", DOCS_TENANTS),
    _rule("NILE-BT-004", "error",
          "Cannot drop or rename the tenant_id column. It is required for tenant isolation in Nile.",
          "built-in-table", "Keep the tenant_id column as-is. It is managed by Nile.", DOCS_TENANTS),
    # Triggers and functions
    _rule("NILE-TF-001", "error", "Triggers are not supported on Nile.", "function",
          "Move trigger logic to application code or use webhooks"),
    _rule("NILE-TF-002", "error", "User-defined functions are not supported on Nile.", "function",
          "Move function logic to application code or serverless functions"),
    _rule("NILE-TF-003", "error", "Stored procedures are not supported on Nile.", "function",
          "Move procedure logic to application code"),
    _rule("NILE-TF-004", "error", "Anonymous code blocks (DO $$) are not supported on Nile.", "function",
          "Execute statements separately"),
    _rule("NILE-TF-005", "error", "PL/pgSQL is not available on Nile.", "function", "Move logic to application code"),
    # Extensions
    _rule("NILE-EXT-001", "info", "CREATE EXTENSION skipped: extensions are pre-installed in Nile.", "extension",
          "Remove CREATE EXTENSION statements. Use extension types and functions directly."),
    _rule("NILE-EXT-002", "warning", "DROP EXTENSION skipped. Pre-installed extensions cannot be removed in Nile.",
          "extension", "Remove DROP EXTENSION statements."),
    _rule("NILE-EXT-003", "error", "Extension is not available in Nile.", "extension",
          "Check Nile documentation for available extensions or use an alternative approach"),
    # Transactions
    _rule("NILE-TX-001", "warning", "Writes to tenant tables must be within a single tenant context at runtime.",
          "transaction", "Set nile.tenant_id before writing to tenant tables: SET nile.tenant_id = :tenantId",
          DOCS_TENANTS),
    _rule("NILE-TX-002", "warning",
          "Nile does not support writing to both tenant and shared tables in the same transaction.",
          "transaction", "Split tenant and shared table writes into separate transactions", DOCS_TENANTS),
    _rule("NILE-TX-003", "info", "DDL changes will be applied to all tenants atomically.", "transaction",
          "No action required. Schema changes propagate automatically.", DOCS_TENANTS),
    # Administration
    _rule("NILE-ADM-001", "error", "User/role management must be done through Nile Console.", "admin", _CONSOLE),
    _rule("NILE-ADM-002", "error", "Database creation must be done through Nile Console.", "admin", _CONSOLE),
    _rule("NILE-ADM-003", "error", "Permission management must be done through Nile Console.", "admin", _CONSOLE),
    _rule("NILE-ADM-004", "error",
          "Row-Level Security is not supported on Nile. Use SET nile.tenant_id for tenant isolation.", "admin",
          "Use Nile's built-in tenant isolation (tenant_id column)", DOCS_TENANTS),
    # Runtime features
    _rule("NILE-MISC-001", "error", "LISTEN/NOTIFY is not supported in serverless Nile.", "misc",
          "Use webhooks or application-layer pub/sub"),
    _rule("NILE-MISC-002", "error", "Logical replication is not supported in Nile.", "misc",
          "Use Nile's built-in replication or export/import for data sync"),
    _rule("NILE-MISC-003", "error", "ALTER SYSTEM is not supported; configuration is managed by Nile.", "misc",
          "Database configuration is managed by Nile"),
    _rule("NILE-MISC-004", "error", "Foreign tables are not supported in Nile.", "misc",
          "Use regular tables or views with appropriate data synchronization"),
)

NILE_RULES: Final = RuleCatalog("Nile", _ENTRIES)

BLOCKED_LANGUAGES: Final[FrozenSet[str]] = frozenset({"plpgsql", "plpython3u", "plpythonu", "plperl", "pltcl", "c"})

# rule group -> category of SQL findings
_CATEGORIES: Final[Dict[str, str]] = {
    "TF": "FUNCTION",
    "ADM": "admin",
    "EXT": "EXTENSION",
    "BT": "built-in-table",
    "MISC": "DML",
}


def _sql(feature: str, pattern: str, message: str, alternative: str, rule_code: str,
         severity: str = "error") -> SqlRule:
    group = rule_code.split("-")[1]
    return SqlRule(feature, pattern, message, alternative, _CATEGORIES.get(group, "SYNTAX"), severity, rule_code,
                   DOCS_COMPAT)


UNSUPPORTED_SQL: Final[Tuple[SqlRule, ...]] = (
    _sql("CREATE_TRIGGER", r"\bCREATE\s+(OR\s+REPLACE\s+)?TRIGGER\b", "Triggers not supported in Nile",
         "Move trigger logic to application code or use webhooks", "NILE-TF-001"),
    _sql("DROP_TRIGGER", r"\bDROP\s+TRIGGER\b", "Triggers not supported in Nile",
         "N/A - triggers not supported", "NILE-TF-001"),
    _sql("CREATE_FUNCTION", r"\bCREATE\s+(OR\s+REPLACE\s+)?FUNCTION\b", "User-defined functions not supported in Nile",
         "Move function logic to application code or serverless functions", "NILE-TF-002"),
    _sql("DROP_FUNCTION", r"\bDROP\s+FUNCTION\b", "User-defined functions not supported in Nile",
         "N/A - functions not supported", "NILE-TF-002"),
    _sql("CREATE_PROCEDURE", r"\bCREATE\s+(OR\s+REPLACE\s+)?PROCEDURE\b", "Stored procedures not supported in Nile",
         "Move procedure logic to application code", "NILE-TF-003"),
    _sql("DROP_PROCEDURE", r"\bDROP\s+PROCEDURE\b", "Stored procedures not supported in Nile",
         "N/A - procedures not supported", "NILE-TF-003"),
    _sql("DO_BLOCK", r"\bDO\s+\$\$", "DO $$ anonymous blocks not supported in Nile",
         "Execute statements separately", "NILE-TF-004"),
    _sql("PLPGSQL", r"\bLANGUAGE\s+plpgsql\b", "PL/pgSQL not supported in Nile - no UDFs allowed",
         "Move logic to application code", "NILE-TF-005"),
    _sql("PLPYTHON", r"\bLANGUAGE\s+plpython", "PL/Python not supported",
         "Use serverless functions (AWS Lambda, Vercel, etc.)", "NILE-TF-002"),
    _sql("PLPERL", r"\bLANGUAGE\s+plperl", "PL/Perl not supported", "Use serverless functions", "NILE-TF-002"),
    _sql("CREATE_USER", r"\bCREATE\s+(USER|ROLE)\b", "CREATE USER/ROLE not supported - use Nile Console",
         "Use Nile Console or SDK for user management", "NILE-ADM-001"),
    _sql("CREATE_DATABASE", r"\bCREATE\s+DATABASE\b", "CREATE DATABASE not supported - use Nile Console",
         "Use Nile Console to create databases", "NILE-ADM-002"),
    _sql("GRANT", r"\bGRANT\s+", "GRANT not supported - use Nile Console", _CONSOLE, "NILE-ADM-003"),
    _sql("REVOKE", r"\bREVOKE\s+", "REVOKE not supported - use Nile Console", _CONSOLE, "NILE-ADM-003"),
    _sql("CREATE_POLICY", r"\b(CREATE|ALTER|DROP)\s+POLICY\b",
         "RLS policies not supported - use Nile tenant isolation instead",
         "Use Nile's built-in tenant isolation (tenant_id column)", "NILE-ADM-004"),
    _sql("ENABLE_RLS", r"\bALTER\s+TABLE\s+\S+\s+ENABLE\s+ROW\s+LEVEL\s+SECURITY\b",
         "Row-Level Security not supported", "Use SET nile.tenant_id for tenant isolation", "NILE-ADM-004"),
    _sql("CREATE_EXTENSION", r"\bCREATE\s+EXTENSION\b",
         "CREATE EXTENSION not needed - extensions are pre-installed",
         "Skip - extensions are pre-installed in Nile. Just use the functions directly.", "NILE-EXT-001", "info"),
    _sql("DROP_EXTENSION", r"\bDROP\s+EXTENSION\b", "DROP EXTENSION skipped - pre-installed extensions",
         "Remove DROP EXTENSION statements.", "NILE-EXT-002", "warning"),
    _sql("DROP_BUILTIN_TABLE", r"\bDROP\s+TABLE\s+(IF\s+EXISTS\s+)?\"?(tenants|users|tenant_users)\"?(?=[\s;,]|$)",
         "Nile built-in tables cannot be dropped", "Remove the DROP TABLE statement for this built-in table",
         "NILE-BT-002"),
    _sql("DROP_TENANT_ID", r"\b(DROP|RENAME)\s+COLUMN\s+(IF\s+EXISTS\s+)?\"?tenant_id\"?",
         "tenant_id column cannot be dropped or renamed", "Keep the tenant_id column as-is. It is managed by Nile.",
         "NILE-BT-004"),
    _sql("LISTEN", r"\bLISTEN\b", "LISTEN not supported in serverless Nile",
         "Use webhooks or application-layer pub/sub (Pusher, Ably, etc.)", "NILE-MISC-001"),
    _sql("NOTIFY", r"\bNOTIFY\b", "NOTIFY not supported in serverless Nile",
         "Use webhooks or application-layer pub/sub", "NILE-MISC-001"),
    _sql("PG_NOTIFY", r"\bpg_notify\s*\(", "pg_notify() function is not supported in Nile",
         "Use webhooks or external message queues for notifications", "NILE-MISC-001"),
    _sql("LOGICAL_REPLICATION", r"\bCREATE\s+(PUBLICATION|SUBSCRIPTION)\b",
         "Logical replication is not supported in Nile",
         "Use Nile's built-in replication or export/import for data sync", "NILE-MISC-002"),
    _sql("ALTER_SYSTEM", r"\bALTER\s+SYSTEM\b", "ALTER SYSTEM is not supported in Nile",
         "Database configuration is managed by Nile", "NILE-MISC-003"),
    _sql("FOREIGN_TABLE", r"\bCREATE\s+FOREIGN\s+TABLE\b", "Foreign tables are not supported in Nile",
         "Use regular tables or views with appropriate data synchronization", "NILE-MISC-004"),
)

# sequence-backed column types
SERIAL_TYPES: Final[FrozenSet[str]] = frozenset(
    {"serial", "bigserial", "smallserial", "serial2", "serial4", "serial8"}
)

# column types served by a pre-installed extension
EXTENSION_TYPES: Final[FrozenSet[str]] = frozenset(
    {"vector", "halfvec", "sparsevec", "geometry", "geography", "box2d", "box3d", "citext", "hstore", "ltree",
     "cube"}
)
