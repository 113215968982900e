"""
Convert table definitions and schema objects into the introspection model
so that one set of validator checks serves both.
"""

from __future__ import annotations

from typing import Any, Iterable, List

from ..columns.config import ColumnConfig
from ..dialects import get_dialect
from ..introspection.models import (
    ColumnInfo,
    ColumnReferenceInfo,
    CompositeTypeInfo,
    ConstraintInfo,
    DomainInfo,
    EnumInfo,
    IndexColumnInfo,
    IndexInfo,
    SchemaBundle,
    SequenceInfo,
    TableInfo,
)
from ..schema.indexes import IndexDefinition
from ..schema.objects import CompositeType, Domain, PgEnum, Sequence
from ..schema.table import TableDefinition

_POSTGRES = get_dialect("postgres")


def column_info(config: ColumnConfig) -> ColumnInfo:
    ref = config.references
    return ColumnInfo(
        name=config.column_name,
        data_type=config.sql_type,
        nullable=config.nullable,
        default=_POSTGRES.render_default(config.default) if config.has_default else None,
        is_primary_key=config.primary_key,
        is_unique=config.unique,
        is_autoincrement=config.autoincrement or config.is_serial,
        array_dimensions=config.array_dimensions,
        max_length=config.length,
        precision=config.precision,
        scale=config.scale,
        comment=config.comment,
        generated=config.generated.expression if config.generated is not None else None,
        collation=config.collation,
        identity=config.identity is not None,
        references=(
            ColumnReferenceInfo(ref.table, ref.column, ref.on_delete, ref.on_update) if ref is not None else None
        ),
    )


def index_info(table: TableDefinition, idx: IndexDefinition) -> IndexInfo:
    columns = []
    for col in idx.columns:
        data_type = table.column(col.name).sql_type if col.name and table.has_column(col.name) else None
        columns.append(
            IndexColumnInfo(
                name=col.name,
                expression=col.expression,
                direction=col.direction,
                nulls=col.nulls,
                opclass=col.opclass,
                data_type=data_type,
            )
        )
    return IndexInfo(
        name=idx.name or "",
        table=table.name,
        columns=columns,
        unique=idx.unique,
        method=idx.method,
        predicate=idx.where,
        include=tuple(idx.include),
        concurrently=idx.concurrently,
        storage_params=dict(idx.with_options),
    )


def _constraints(table: TableDefinition) -> List[ConstraintInfo]:
    result: List[ConstraintInfo] = []
    for uc in table.unique_constraints:
        result.append(ConstraintInfo(name=uc.name, table=table.name, type="UNIQUE", columns=list(uc.columns)))
    for config in table.columns.values():
        if config.unique and not config.primary_key:
            result.append(
                ConstraintInfo(name=None, table=table.name, type="UNIQUE", columns=[config.column_name], inline=True)
            )
    for cc in table.check_constraints:
        result.append(ConstraintInfo(name=cc.name, table=table.name, type="CHECK", definition=cc.expression))
    for config in table.columns.values():
        ref = config.references
        if ref is None:
            continue
        result.append(
            ConstraintInfo(
                name=None,
                table=table.name,
                type="FOREIGN KEY",
                columns=[config.column_name],
                ref_table=ref.table,
                ref_columns=[ref.column],
                on_delete=ref.on_delete,
                on_update=ref.on_update,
                deferrable=ref.deferrable,
                initially_deferred=ref.initially_deferred,
                inline=True,
            )
        )
    for fk in table.foreign_keys:
        result.append(
            ConstraintInfo(
                name=fk.name,
                table=table.name,
                type="FOREIGN KEY",
                columns=list(fk.columns),
                ref_table=fk.ref_table,
                ref_columns=list(fk.ref_columns),
                on_delete=fk.on_delete,
                on_update=fk.on_update,
                deferrable=fk.deferrable,
                initially_deferred=fk.initially_deferred,
                match_type=fk.match,
            )
        )
    for ex in table.exclusions:
        elements = ", ".join(f"{element} WITH {op}" for element, op in ex.elements)
        result.append(
            ConstraintInfo(
                name=ex.name,
                table=table.name,
                type="EXCLUDE",
                columns=[element for element, _ in ex.elements],
                definition=f"EXCLUDE USING {ex.method} ({elements})",
                method=ex.method,
            )
        )
    return result


def table_info(table: TableDefinition) -> TableInfo:
    options = table.options
    partition = None
    if table.partition_by is not None:
        partition = f"{table.partition_by.strategy} ({', '.join(table.partition_by.columns)})"
    return TableInfo(
        name=table.name,
        schema=options.schema,
        columns=[column_info(config) for config in table.columns.values()],
        primary_key=list(table.primary_key),
        indexes=[index_info(table, idx) for idx in table.indexes],
        constraints=_constraints(table),
        comment=options.comment,
        temporary=options.temporary,
        unlogged=options.unlogged,
        inherits=tuple(options.inherits),
        tablespace=options.tablespace,
        partition_by=partition,
        storage_params=dict(options.with_options),
    )


def _add(bundle: SchemaBundle, obj: Any) -> None:
    if isinstance(obj, SchemaBundle):
        bundle.tables.extend(obj.tables)
        bundle.enums.extend(obj.enums)
        bundle.domains.extend(obj.domains)
        bundle.composite_types.extend(obj.composite_types)
        bundle.sequences.extend(obj.sequences)
        bundle.collations.extend(obj.collations)
        bundle.functions.extend(obj.functions)
        bundle.triggers.extend(obj.triggers)
        bundle.extensions.extend(obj.extensions)
    elif isinstance(obj, TableDefinition):
        bundle.tables.append(table_info(obj))
    elif isinstance(obj, TableInfo):
        bundle.tables.append(obj)
    elif isinstance(obj, Domain):
        bundle.domains.append(
            DomainInfo(
                name=obj.name,
                base_type=obj.base_type,
                nullable=not obj.not_null,
                checks=[chk.expression for chk in obj.checks],
                collation=obj.collation,
            )
        )
    elif isinstance(obj, CompositeType):
        bundle.composite_types.append(CompositeTypeInfo(obj.name, list(obj.attributes.items())))
    elif isinstance(obj, Sequence):
        bundle.sequences.append(
            SequenceInfo(
                name=obj.name,
                data_type=obj.data_type,
                start=obj.start,
                increment=obj.increment,
                min_value=obj.min_value,
                max_value=obj.max_value,
                cache=obj.cache,
                cycle=obj.cycle,
                owned_by=obj.owned_by,
            )
        )
    elif isinstance(obj, PgEnum):
        bundle.enums.append(EnumInfo(obj.name, list(obj.values)))
    else:
        raise TypeError(f"Cannot validate object of type {type(obj).__name__}")


def as_bundle(schema: Any) -> SchemaBundle:
    """
    Accepts a :class:`SchemaBundle`, a single table or schema object, or an
    iterable mixing them.
    """

    if isinstance(schema, SchemaBundle):
        return schema
    bundle = SchemaBundle()
    items: Iterable[Any] = schema if isinstance(schema, (list, tuple)) else (schema,)
    for item in items:
        _add(bundle, item)
    return bundle


def as_table_info(table: TableDefinition | TableInfo) -> TableInfo:
    if isinstance(table, TableInfo):
        return table
    return table_info(table)
