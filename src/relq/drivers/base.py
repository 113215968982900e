"""
Driver protocol, connection configuration and error types.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence

from ..security.dsns import DSNConfig, parse_dsn
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call


class DriverError(RuntimeError):
    """Base error for driver-related failures."""


class DriverConfigurationError(DriverError):
    """Raised when configuration or required dependencies are invalid."""


class DriverNotFoundError(DriverConfigurationError):
    """
    Raised when the native client library for a dialect is not installed.
    The message carries the install command.
    """

    def __init__(self, package: str, dialect: str) -> None:
        self.package = package
        self.dialect = dialect
        super().__init__(
            f"The {package!r} package is required for {dialect} connections. "
            f"Install it with: pip install {package}"
        )


class DriverConnectionError(DriverError):
    """Raised when establishing or using a connection fails."""


class DriverExecutionError(DriverError):
    """Raised when SQL execution or parameter validation fails."""


class CatalogError(DriverError):
    """
    Raised when the server rejects a catalog query during introspection;
    the driver exception is chained as ``__cause__``.
    """

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"Introspection step {step!r} failed: {message}")


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    def postgres_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.mode:
            options["sslmode"] = self.mode
        if self.rootcert:
            options["sslrootcert"] = self.rootcert
        if self.cert:
            options["sslcert"] = self.cert
        if self.key:
            options["sslkey"] = self.key
        return options

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {}
        if self.ca:
            ssl["ca"] = self.ca
        if self.cert:
            ssl["cert"] = self.cert
        if self.key:
            ssl["key"] = self.key
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        if not ssl:
            return {}
        return {"ssl": ssl}


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise DriverConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_number(value: str, *, key: str, kind: type) -> Any:
    try:
        return kind(value)
    except ValueError as exc:
        raise DriverConfigurationError(f"Invalid {kind.__name__} value for '{key}': {value!r}") from exc


def _parse_ssl(query: dict[str, str]) -> SSLConfig | None:
    ssl = SSLConfig()
    if "sslmode" in query:
        ssl.mode = query.pop("sslmode")
    if "sslrootcert" in query:
        ssl.rootcert = query.pop("sslrootcert")
    if "sslcert" in query:
        ssl.cert = query.pop("sslcert")
    if "sslkey" in query:
        ssl.key = query.pop("sslkey")
    if "ssl_ca" in query:
        ssl.ca = query.pop("ssl_ca")
    if "ssl_cert" in query:
        ssl.cert = query.pop("ssl_cert")
    if "ssl_key" in query:
        ssl.key = query.pop("ssl_key")
    if "ssl_check_hostname" in query:
        ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
    if any([ssl.mode, ssl.rootcert, ssl.cert, ssl.key, ssl.ca, ssl.check_hostname is not None]):
        return ssl
    return None


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for drivers. ``key`` identifies the
    pool entry; it defaults to the URL.
    """

    url: str
    autocommit: bool = False
    timeout: float | None = None
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None
    key: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        autocommit = None
        if "autocommit" in query:
            autocommit = _parse_bool(query.pop("autocommit"), key="autocommit")
        timeout = None
        if "timeout" in query:
            timeout = _parse_number(query.pop("timeout"), key="timeout", kind=float)
        parsed_ssl = _parse_ssl(query)
        options: dict[str, Any] = {}
        for key, value in query.items():
            options[key] = _parse_number(value, key=key, kind=int) if key == "connect_timeout" else value
        options.update(kwargs.pop("options", None) or {})

        autocommit = kwargs.pop("autocommit", autocommit)
        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=bool(autocommit),
            timeout=kwargs.pop("timeout", timeout),
            options=options or None,
            ssl=kwargs.pop("ssl", parsed_ssl),
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise DriverConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def pool_key(self) -> str:
        return self.key or self.url

    def redacted_dsn(self) -> str:
        """
        Return a DSN safe for logging (credentials removed).
        """

        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class DatabaseDriver(Protocol):
    """
    The small surface introspection and the pool rely on.
    """

    name: str
    placeholder: str

    def connect(self, config: ConnectionConfig) -> Any: ...

    def close(self) -> None: ...

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any: ...

    def fetch_all(self, sql: str, params: Sequence[Any] | None = None) -> List[Dict[str, Any]]: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def rows_as_dicts(cursor: Any) -> List[Dict[str, Any]]:
    """Materialize a DB-API cursor's remaining rows as dicts keyed by column name."""

    if cursor.description is None:
        return []
    names = [col[0] for col in cursor.description]
    rows = cursor.fetchall()
    result: List[Dict[str, Any]] = []
    for row in rows:
        if isinstance(row, dict):
            result.append(dict(row))
        else:
            result.append(dict(zip(names, tuple(row))))
    return result


def count_format_placeholders(sql: str) -> int:
    count = 0
    idx = 0
    while idx < len(sql) - 1:
        if sql[idx] == "%" and sql[idx + 1] == "s":
            count += 1
            idx += 2
            continue
        if sql[idx] == "%" and sql[idx + 1] == "%":
            idx += 2
            continue
        idx += 1
    return count


def validate_format_params(sql: str, params: Sequence[Any]) -> None:
    placeholder_count = count_format_placeholders(sql)
    if placeholder_count == 0:
        if params:
            raise DriverExecutionError("Parameters provided but SQL statement has no placeholders.")
        return
    if placeholder_count != len(params):
        raise DriverExecutionError(
            f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
        )


class DBAPIDriver:
    """
    Connection handling shared by the DB-API wrappers. Subclasses open the
    native connection in ``_open`` and define the transaction statements;
    ``dialect`` only labels logs and error messages.
    """

    placeholder = "%s"

    def __init__(self, dialect: str, slow_query_ms: int | None = None) -> None:
        self.name = dialect
        self.connection: Any = None
        self.config: ConnectionConfig | None = None
        self.logger = get_logger(f"drivers.{dialect}")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    @property
    def connected(self) -> bool:
        return self.connection is not None

    def _open(self, config: ConnectionConfig) -> Any:
        raise NotImplementedError

    def connect(self, config: ConnectionConfig) -> Any:
        self.connection = self._open(config)
        self.config = config
        return self.connection

    def close(self) -> None:
        connection, self.connection = self.connection, None
        if connection is not None:
            connection.close()

    def _live_connection(self) -> Any:
        if self.connection is None:
            raise DriverConnectionError(f"{type(self).__name__} is not connected.")
        if getattr(self.connection, "closed", False) and self.config is not None:
            self.logger.warning("%s connection closed; reconnecting.", self.name)
            return self.connect(self.config)
        return self.connection

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        cursor = self._live_connection().cursor()
        params = tuple(params or ())
        if self.placeholder == "%s":
            validate_format_params(sql, params)
        with time_call(
            f"{self.name}.execute",
            self.logger,
            sql=sql,
            params=redact_params(params),
            threshold_ms=self.slow_query_ms,
        ):
            if params:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)
        return cursor

    def fetch_all(self, sql: str, params: Sequence[Any] | None = None) -> List[Dict[str, Any]]:
        return rows_as_dicts(self.execute(sql, params))

    def begin(self) -> None:
        self.execute("BEGIN")

    def commit(self) -> None:
        self._live_connection().commit()

    def rollback(self) -> None:
        self._live_connection().rollback()
