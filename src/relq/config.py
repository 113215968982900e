"""
Project configuration: dataclasses plus a validating loader that migrates
legacy keys and collects problems instead of raising.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .dialects import normalize_dialect_name
from .drivers.base import ConnectionConfig
from .errors import ConfigurationError, InvalidArgumentError
from .security.dsns import build_dsn, parse_dsn
from .utils import get_logger

logger = get_logger("config")

ENV_DATABASE_URL = "RELQ_DATABASE_URL"

DIALECT_CHOICES = ("postgres", "dsql", "crdb", "nile", "mysql", "mariadb", "sqlite", "turso")

_URL_SCHEMES = {
    "postgres": "postgresql",
    "dsql": "postgresql",
    "cockroachdb": "postgresql",
    "nile": "postgresql",
    "mysql": "mysql",
    "mariadb": "mysql",
}

DEFAULT_PORTS = {
    "postgres": 5432,
    "dsql": 5432,
    "cockroachdb": 26257,
    "nile": 5432,
    "mysql": 3306,
    "mariadb": 3306,
}

# camelCase spellings accepted in pool/connection mappings
_KEY_ALIASES = {
    "idleTimeoutMillis": "idle_timeout_ms",
    "connectionTimeoutMillis": "connection_timeout_ms",
    "connectionString": "url",
}


@dataclass
class ConnectionSettings:
    """
    Either ``url`` or discrete fields. For SQLite/Turso ``database`` is the
    file path.
    """

    url: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    ssl: Any = None
    aws: Optional[Dict[str, Any]] = None

    def to_url(self, dialect: str) -> str:
        if self.url:
            return self.url
        canonical = normalize_dialect_name(dialect)
        if canonical in ("sqlite", "turso"):
            return f"sqlite:///{self.database or ':memory:'}"
        password = self.password
        if password is None and self.aws:
            password = self.aws.get("token")
        query: Dict[str, str] = {}
        if self.ssl:
            query["sslmode"] = self.ssl if isinstance(self.ssl, str) else "require"
        return build_dsn(
            _URL_SCHEMES[canonical],
            host=self.host,
            port=self.port or DEFAULT_PORTS.get(canonical),
            database=self.database,
            user=self.user,
            password=password,
            query=query or None,
        )

    def pool_key(self, dialect: str) -> str:
        if self.url:
            return self.url
        canonical = normalize_dialect_name(dialect)
        port = self.port or DEFAULT_PORTS.get(canonical, "")
        return f"{self.host or 'localhost'}:{port}/{self.database or ''}@{self.user or ''}"

    def redacted(self, dialect: str) -> str:
        return parse_dsn(self.to_url(dialect)).redacted()


@dataclass
class PoolSettings:
    min: int = 0
    max: int = 10
    idle_timeout_ms: int = 30_000
    connection_timeout_ms: int = 10_000


@dataclass
class MigrationSettings:
    directory: str = "./migrations"
    table_name: str = "_relq_migrations"


@dataclass
class StudioSettings:
    port: int = 4983


@dataclass
class RelqConfig:
    dialect: str = "postgres"
    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    pool: PoolSettings = field(default_factory=PoolSettings)
    migrations: MigrationSettings = field(default_factory=MigrationSettings)
    studio: StudioSettings = field(default_factory=StudioSettings)

    @property
    def canonical_dialect(self) -> str:
        return normalize_dialect_name(self.dialect)

    def connection_config(self, **kwargs: Any) -> ConnectionConfig:
        """
        Driver-level config; ``timeout`` comes from the pool settings unless
        given explicitly.
        """

        kwargs.setdefault("timeout", self.pool.connection_timeout_ms / 1000)
        kwargs.setdefault("key", self.connection.pool_key(self.dialect))
        return ConnectionConfig.from_dsn(self.connection.to_url(self.dialect), **kwargs)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "RelqConfig":
        result = validate_and_migrate_config(raw)
        result.raise_for_errors()
        assert result.config is not None
        return result.config

    @classmethod
    def from_env(cls, dialect: Optional[str] = None, env_var: str = ENV_DATABASE_URL) -> "RelqConfig":
        value = os.getenv(env_var)
        if not value:
            raise ConfigurationError([f"Environment variable {env_var} is not set"])
        if dialect is None:
            from .compat import detect_dialect_from_connection_string

            detected = detect_dialect_from_connection_string(value) or "postgres"
            dialect = {"planetscale": "mysql", "cockroachdb": "crdb"}.get(detected, detected)
        return cls.from_mapping({"dialect": dialect, "connection": {"url": value}})


@dataclass
class ConfigResult:
    config: Optional[RelqConfig]
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ConfigurationError(self.errors)


def _normalize_keys(section: Mapping[str, Any]) -> Dict[str, Any]:
    return {_KEY_ALIASES.get(key, key): value for key, value in section.items()}


def _as_int(value: Any, name: str, errors: List[str]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        errors.append(f"{name} must be an integer, got {value!r}")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"{name} must be an integer, got {value!r}")
        return None


def _check_port(port: Optional[int], name: str, errors: List[str]) -> None:
    if port is not None and not 1 <= port <= 65535:
        errors.append(f"{name} must be between 1 and 65535, got {port}")


def validate_and_migrate_config(raw: Mapping[str, Any]) -> ConfigResult:
    """
    Build a :class:`RelqConfig` from a plain mapping.

    Legacy spellings are migrated with a warning: a top-level
    ``connectionString`` becomes ``connection.url`` and
    ``dialect: "cockroachdb"`` becomes ``crdb``. Problems (unknown dialect,
    pool limits, port ranges, missing connection details) are collected in
    ``errors``; nothing is raised.
    """

    errors: List[str] = []
    warnings: List[str] = []
    data = dict(raw)

    if "connectionString" in data:
        legacy = data.pop("connectionString")
        connection = dict(data.get("connection") or {})
        connection.setdefault("url", legacy)
        data["connection"] = connection
        warnings.append("'connectionString' is deprecated; use 'connection.url'")

    dialect = str(data.get("dialect") or "postgres").strip().lower()
    if dialect == "cockroachdb":
        dialect = "crdb"
        warnings.append("dialect 'cockroachdb' is deprecated; use 'crdb'")
    if dialect not in DIALECT_CHOICES:
        errors.append(f"Unknown dialect {dialect!r}; expected one of {', '.join(DIALECT_CHOICES)}")

    conn_raw = _normalize_keys(data.get("connection") or {})
    if not conn_raw.get("url") and os.getenv(ENV_DATABASE_URL):
        conn_raw["url"] = os.environ[ENV_DATABASE_URL]
    connection = ConnectionSettings(
        url=conn_raw.get("url"),
        host=conn_raw.get("host"),
        port=_as_int(conn_raw.get("port"), "connection.port", errors),
        database=conn_raw.get("database"),
        user=conn_raw.get("user"),
        password=conn_raw.get("password"),
        ssl=conn_raw.get("ssl"),
        aws=conn_raw.get("aws"),
    )
    _check_port(connection.port, "connection.port", errors)
    if not connection.url:
        if dialect in ("sqlite", "turso"):
            if not connection.database:
                errors.append("connection requires 'url' or 'database' (file path)")
        elif not connection.host or not connection.database:
            errors.append("connection requires 'url' or both 'host' and 'database'")

    pool_raw = _normalize_keys(data.get("pool") or {})
    defaults = PoolSettings()
    pool = PoolSettings(
        min=_as_int(pool_raw.get("min"), "pool.min", errors) if "min" in pool_raw else defaults.min,
        max=_as_int(pool_raw.get("max"), "pool.max", errors) if "max" in pool_raw else defaults.max,
        idle_timeout_ms=_as_int(pool_raw.get("idle_timeout_ms"), "pool.idleTimeoutMillis", errors)
        or defaults.idle_timeout_ms,
        connection_timeout_ms=_as_int(pool_raw.get("connection_timeout_ms"), "pool.connectionTimeoutMillis", errors)
        or defaults.connection_timeout_ms,
    )
    if pool.min is not None and pool.min < 0:
        errors.append(f"pool.min must be >= 0, got {pool.min}")
    if pool.max is not None and pool.max < 1:
        errors.append(f"pool.max must be >= 1, got {pool.max}")
    if pool.min is not None and pool.max is not None and pool.min > pool.max:
        errors.append(f"pool.min ({pool.min}) must not exceed pool.max ({pool.max})")

    migrations_raw = data.get("migrations") or {}
    migrations = MigrationSettings(
        directory=migrations_raw.get("directory", MigrationSettings.directory),
        table_name=migrations_raw.get("table_name", migrations_raw.get("tableName", MigrationSettings.table_name)),
    )

    studio_raw = data.get("studio") or {}
    studio_port = _as_int(studio_raw.get("port"), "studio.port", errors)
    _check_port(studio_port, "studio.port", errors)
    studio = StudioSettings(port=studio_port if studio_port is not None else StudioSettings.port)

    for message in warnings:
        logger.warning("Configuration: %s", message)
    if errors:
        logger.debug("Configuration rejected with %d errors", len(errors))

    config = RelqConfig(
        dialect=dialect,
        connection=connection,
        pool=pool,
        migrations=migrations,
        studio=studio,
    )
    return ConfigResult(config=config, errors=errors, warnings=warnings)


def resolve_config(config: RelqConfig | Mapping[str, Any]) -> RelqConfig:
    """
    Accept a ready :class:`RelqConfig` or a raw mapping.
    """

    if isinstance(config, RelqConfig):
        return config
    if isinstance(config, Mapping):
        return RelqConfig.from_mapping(config)
    raise InvalidArgumentError(f"Expected RelqConfig or mapping, got {type(config).__name__}")


def to_connection_config(config: Any, **kwargs: Any) -> ConnectionConfig:
    """
    Accept a driver :class:`ConnectionConfig`, a URL, a :class:`RelqConfig` or
    a raw configuration mapping.
    """

    if isinstance(config, ConnectionConfig):
        return config
    if isinstance(config, str):
        return ConnectionConfig.from_dsn(config, **kwargs)
    return resolve_config(config).connection_config(**kwargs)


__all__ = [
    "ConfigResult",
    "ConnectionSettings",
    "DIALECT_CHOICES",
    "ENV_DATABASE_URL",
    "MigrationSettings",
    "PoolSettings",
    "RelqConfig",
    "StudioSettings",
    "resolve_config",
    "to_connection_config",
    "validate_and_migrate_config",
]
