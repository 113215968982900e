"""
Shared machinery for catalog introspection.

An introspector owns a connected driver, runs its steps in a fixed order and
accumulates the results in a :class:`SchemaBundle`. The first failing step
aborts the run; nothing partial is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..drivers.base import CatalogError, DatabaseDriver
from ..utils import get_logger
from .models import ConstraintInfo, IndexColumnInfo, IndexInfo, SchemaBundle, TableInfo

ProgressCallback = Callable[[str, int, str], None]

REFERENTIAL_ACTIONS: Dict[str, str] = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}

# Fixed step order; dialects run the subset they support.
STEP_ORDER: Tuple[str, ...] = (
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

TABLE_STEPS: Tuple[str, ...] = ("tables", "columns", "constraints", "indexes", "checks")

OPTIONAL_STEPS = {
    "functions": "include_functions",
    "triggers": "include_triggers",
    "collations": "include_collations",
}

INTERNAL_TABLE_PREFIXES = ("_relq",)


def map_referential_action(code: Optional[str]) -> Optional[str]:
    """
    Map a catalog action code (``a``/``r``/``c``/``n``/``d``) or an already
    spelled-out action to its ISO name. Unknown or blank values map to None.
    """

    if code is None:
        return None
    value = code.strip()
    if not value:
        return None
    if len(value) == 1:
        return REFERENTIAL_ACTIONS.get(value.lower())
    upper = " ".join(value.upper().split())
    return upper if upper in REFERENTIAL_ACTIONS.values() else None


@dataclass
class IntrospectionOptions:
    schema: str = "public"
    include_functions: bool = False
    include_triggers: bool = False
    include_collations: bool = False
    include_views: bool = False


class CatalogIntrospector:
    """
    Base class for dialect introspectors.

    Subclasses list their ``steps`` (a subsequence of :data:`STEP_ORDER`) and
    implement one ``step_<name>(bundle)`` method per step, returning the
    number of objects found.
    """

    dialect = "postgres"
    steps: Tuple[str, ...] = ()

    def __init__(
        self,
        driver: DatabaseDriver,
        options: Optional[IntrospectionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.driver = driver
        self.options = options or IntrospectionOptions()
        self.on_progress = on_progress
        self.logger = get_logger(f"introspection.{self.dialect}")
        self._tables: Dict[str, TableInfo] = {}

    # ------------------------------------------------------------------ #
    # Running
    # ------------------------------------------------------------------ #
    def planned_steps(self, only: Optional[Iterable[str]] = None) -> List[str]:
        wanted = set(only) if only is not None else None
        planned = []
        for step in STEP_ORDER:
            if step not in self.steps:
                continue
            if wanted is not None and step not in wanted:
                continue
            flag = OPTIONAL_STEPS.get(step)
            if flag and not getattr(self.options, flag):
                continue
            planned.append(step)
        return planned

    def run(self, only: Optional[Iterable[str]] = None) -> SchemaBundle:
        bundle = SchemaBundle()
        self._tables = {}
        for step in self.planned_steps(only):
            self._notify(step, 0, "started")
            count = self._run_step(step, bundle)
            self._notify(step, count, "completed")
        if only is None:
            self._run_step("version", bundle)
        return bundle

    def _run_step(self, step: str, bundle: SchemaBundle) -> Any:
        handler = getattr(self, f"step_{step}")
        self.logger.debug("Introspection step %s started", step)
        try:
            result = handler(bundle)
        except CatalogError:
            self.logger.error("Introspection step %s failed", step)
            raise
        except Exception as exc:
            self.logger.error("Introspection step %s failed: %s", step, exc)
            raise CatalogError(step, str(exc)) from exc
        self.logger.debug("Introspection step %s finished (%s)", step, result)
        return result

    def _notify(self, step: str, count: int, status: str) -> None:
        if self.on_progress is not None:
            self.on_progress(step, count, status)

    # ------------------------------------------------------------------ #
    # Helpers for subclasses
    # ------------------------------------------------------------------ #
    def query(self, sql: str, params: Sequence[Any] | None = None) -> List[Dict[str, Any]]:
        return self.driver.fetch_all(sql, params)

    def table_for(self, name: str) -> Optional[TableInfo]:
        return self._tables.get(name)

    def register_table(self, bundle: SchemaBundle, table: TableInfo) -> None:
        self._tables[table.name] = table
        bundle.tables.append(table)

    @staticmethod
    def is_internal(name: str) -> bool:
        return name.startswith(INTERNAL_TABLE_PREFIXES)

    def fetch_version(self) -> Optional[str]:
        return None

    def step_version(self, bundle: SchemaBundle) -> Optional[str]:
        bundle.version = self.fetch_version()
        return bundle.version

    def list_tables(self) -> List[str]:
        raise NotImplementedError

    def list_schemas(self) -> List[str]:
        raise NotImplementedError


def aggregate_indexes(rows: Iterable[Dict[str, Any]], parse: Callable[[Dict[str, Any]], Dict[str, Any]]) -> List[IndexInfo]:
    """
    Group per-column catalog rows into :class:`IndexInfo` records keyed by
    ``(table, index name)``; columns are ordered by ``seq_in_index``.

    ``parse`` turns a raw row into a dict with ``table``, ``name``, ``seq``,
    ``column`` (an :class:`IndexColumnInfo` or None for included columns),
    ``include`` and the index-level fields.
    """

    grouped: Dict[Tuple[str, str], Tuple[IndexInfo, List[Tuple[int, IndexColumnInfo]], List[Tuple[int, str]]]] = {}
    for row in rows:
        item = parse(row)
        key = (item["table"], item["name"])
        if key not in grouped:
            index = IndexInfo(
                name=item["name"],
                table=item["table"],
                unique=bool(item.get("unique")),
                primary=bool(item.get("primary")),
                method=item.get("method"),
                predicate=item.get("predicate"),
                storage_params=item.get("storage_params") or {},
                definition=item.get("definition"),
            )
            grouped[key] = (index, [], [])
        _, columns, included = grouped[key]
        if item.get("include"):
            included.append((item["seq"], item["include"]))
        elif item.get("column") is not None:
            columns.append((item["seq"], item["column"]))

    indexes = []
    for index, columns, included in grouped.values():
        index.columns = [col for _, col in sorted(columns, key=lambda pair: pair[0])]
        index.include = tuple(name for _, name in sorted(included, key=lambda pair: pair[0]))
        indexes.append(index)
    return indexes


def aggregate_constraints(rows: Iterable[Dict[str, Any]]) -> List[ConstraintInfo]:
    """
    Merge one-row-per-column constraint listings (``table``, ``name``,
    ``type``, ``column``, ``ref_table``, ``ref_column``, ``on_delete``,
    ``on_update``) into :class:`ConstraintInfo` records.
    """

    merged: Dict[Tuple[str, str], ConstraintInfo] = {}
    for row in rows:
        key = (row["table"], row["name"])
        constraint = merged.get(key)
        if constraint is None:
            constraint = ConstraintInfo(
                name=row["name"],
                table=row["table"],
                type=row["type"],
                ref_table=row.get("ref_table"),
                on_delete=map_referential_action(row.get("on_delete")),
                on_update=map_referential_action(row.get("on_update")),
            )
            merged[key] = constraint
        if row.get("column") and row["column"] not in constraint.columns:
            constraint.columns.append(row["column"])
        if row.get("ref_column"):
            constraint.ref_columns.append(row["ref_column"])
    return list(merged.values())


def parse_storage_params(options: Optional[Iterable[str]]) -> Dict[str, str]:
    """``['fillfactor=70']`` -> ``{'fillfactor': '70'}``."""

    params: Dict[str, str] = {}
    for option in options or ():
        key, _, value = option.partition("=")
        if key:
            params[key] = value
    return params
