"""
Column-type factories and the chainable builder they return.
"""

from .builder import ColumnBuilder, ensure_config
from .config import ColumnCheck, ColumnConfig, ColumnReference, GeneratedExpression, IdentityOptions, NO_DEFAULT
from .defaults import DEFAULT, SqlExpression, expression_text, sql
from .types import (
    smallint,
    integer,
    bigint,
    serial,
    smallserial,
    bigserial,
    decimal,
    numeric,
    real,
    double_precision,
    money,
    varchar,
    char,
    text,
    bytea,
    date,
    time,
    timetz,
    timestamp,
    timestamptz,
    interval,
    boolean,
    uuid,
    json,
    jsonb,
    xml,
    point,
    line,
    lseg,
    box,
    path,
    polygon,
    circle,
    inet,
    cidr,
    macaddr,
    macaddr8,
    bit,
    varbit,
    tsvector,
    tsquery,
    int4range,
    int8range,
    numrange,
    tsrange,
    tstzrange,
    daterange,
    int4multirange,
    int8multirange,
    nummultirange,
    tsmultirange,
    tstzmultirange,
    datemultirange,
    oid,
    pg_lsn,
    vector,
    halfvec,
    sparsevec,
    geometry,
    geography,
    box2d,
    box3d,
    custom_type,
)

__all__ = [
    "ColumnBuilder",
    "ColumnCheck",
    "ColumnConfig",
    "ColumnReference",
    "DEFAULT",
    "GeneratedExpression",
    "IdentityOptions",
    "NO_DEFAULT",
    "SqlExpression",
    "ensure_config",
    "expression_text",
    "sql",
    "smallint",
    "integer",
    "bigint",
    "serial",
    "smallserial",
    "bigserial",
    "decimal",
    "numeric",
    "real",
    "double_precision",
    "money",
    "varchar",
    "char",
    "text",
    "bytea",
    "date",
    "time",
    "timetz",
    "timestamp",
    "timestamptz",
    "interval",
    "boolean",
    "uuid",
    "json",
    "jsonb",
    "xml",
    "point",
    "line",
    "lseg",
    "box",
    "path",
    "polygon",
    "circle",
    "inet",
    "cidr",
    "macaddr",
    "macaddr8",
    "bit",
    "varbit",
    "tsvector",
    "tsquery",
    "int4range",
    "int8range",
    "numrange",
    "tsrange",
    "tstzrange",
    "daterange",
    "int4multirange",
    "int8multirange",
    "nummultirange",
    "tsmultirange",
    "tstzmultirange",
    "datemultirange",
    "oid",
    "pg_lsn",
    "vector",
    "halfvec",
    "sparsevec",
    "geometry",
    "geography",
    "box2d",
    "box3d",
    "custom_type",
]
