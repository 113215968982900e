"""
Schema introspection: catalog readers per dialect and the ``introspect``
entry point, which always runs on its own short-lived connection.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

from ..dialects import normalize_dialect_name
from ..drivers import DatabaseDriver, create_driver
from ..utils import get_logger
from .base import (
    STEP_ORDER,
    TABLE_STEPS,
    CatalogIntrospector,
    IntrospectionOptions,
    ProgressCallback,
    aggregate_constraints,
    aggregate_indexes,
    map_referential_action,
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
    IndexInfo,
    SchemaBundle,
    SequenceInfo,
    TableInfo,
    TriggerInfo,
)
from .mysql import MariaDBIntrospector, MySQLIntrospector
from .postgres import CockroachIntrospector, DsqlIntrospector, NileIntrospector, PostgresIntrospector
from .sqlite import SQLiteIntrospector, TursoIntrospector

logger = get_logger("introspection")

T = TypeVar("T")

INTROSPECTORS: Dict[str, Type[CatalogIntrospector]] = {
    "postgres": PostgresIntrospector,
    "cockroachdb": CockroachIntrospector,
    "dsql": DsqlIntrospector,
    "nile": NileIntrospector,
    "mysql": MySQLIntrospector,
    "mariadb": MariaDBIntrospector,
    "sqlite": SQLiteIntrospector,
    "turso": TursoIntrospector,
}


def _dialect_of(adapter: Any) -> str:
    name = adapter if isinstance(adapter, str) else getattr(adapter, "dialect", None)
    if not name:
        raise ValueError(f"Cannot determine dialect from {adapter!r}")
    return normalize_dialect_name(name)


def run_with_introspector(
    adapter: Any,
    config: Any,
    fn: Callable[[CatalogIntrospector], T],
    *,
    options: Optional[IntrospectionOptions] = None,
    on_progress: Optional[ProgressCallback] = None,
    driver_factory: Optional[Callable[[str], DatabaseDriver]] = None,
) -> T:
    """
    Open a dedicated connection, hand an introspector to ``fn`` and close
    the connection on every exit path.
    """

    from ..config import to_connection_config

    dialect = _dialect_of(adapter)
    connection_config = to_connection_config(config)
    driver = (driver_factory or create_driver)(dialect)
    driver.connect(connection_config)
    try:
        introspector = INTROSPECTORS[dialect](driver, options=options, on_progress=on_progress)
        return fn(introspector)
    finally:
        try:
            driver.close()
        finally:
            logger.debug("Closed introspection connection for %s", connection_config.descriptive_label())


def introspect(
    adapter: Any,
    config: Any,
    on_progress: Optional[ProgressCallback] = None,
    *,
    options: Optional[IntrospectionOptions] = None,
    only: Optional[Iterable[str]] = None,
    driver_factory: Optional[Callable[[str], DatabaseDriver]] = None,
) -> SchemaBundle:
    """
    Read the whole schema of the database described by ``config``.

    ``adapter`` is a dialect adapter or a dialect name. ``on_progress`` is
    called as ``(step, count, status)`` before and after each step. A
    failing step raises :class:`~relq.drivers.CatalogError` after the
    connection has been closed.
    """

    return run_with_introspector(
        adapter,
        config,
        lambda introspector: introspector.run(only),
        options=options,
        on_progress=on_progress,
        driver_factory=driver_factory,
    )


def introspect_table(adapter: Any, config: Any, table_name: str, **kwargs: Any) -> Optional[TableInfo]:
    bundle = introspect(adapter, config, only=TABLE_STEPS, **kwargs)
    return bundle.table(table_name)


def list_tables(adapter: Any, config: Any, **kwargs: Any) -> List[str]:
    return run_with_introspector(adapter, config, lambda introspector: introspector.list_tables(), **kwargs)


def list_schemas(adapter: Any, config: Any, **kwargs: Any) -> List[str]:
    return run_with_introspector(adapter, config, lambda introspector: introspector.list_schemas(), **kwargs)


__all__ = [
    "CatalogIntrospector",
    "CockroachIntrospector",
    "CollationInfo",
    "ColumnInfo",
    "ColumnReferenceInfo",
    "CompositeTypeInfo",
    "ConstraintInfo",
    "DomainInfo",
    "DsqlIntrospector",
    "EnumInfo",
    "FunctionInfo",
    "INTROSPECTORS",
    "IndexColumnInfo",
    "IndexInfo",
    "IntrospectionOptions",
    "MariaDBIntrospector",
    "MySQLIntrospector",
    "NileIntrospector",
    "PostgresIntrospector",
    "ProgressCallback",
    "SQLiteIntrospector",
    "STEP_ORDER",
    "SchemaBundle",
    "SequenceInfo",
    "TABLE_STEPS",
    "TableInfo",
    "TriggerInfo",
    "TursoIntrospector",
    "aggregate_constraints",
    "aggregate_indexes",
    "introspect",
    "introspect_table",
    "list_schemas",
    "list_tables",
    "map_referential_action",
    "run_with_introspector",
]
