"""
Column type factories, one per SQL type family.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..errors import InvalidArgumentError
from .builder import ColumnBuilder
from .config import ColumnConfig


def _column(family: str, type_name: str, name: Optional[str] = None, **params) -> ColumnBuilder:
    return ColumnBuilder(ColumnConfig(family=family, type_name=type_name, sql_name=name, **params))


def _require_positive(value: Optional[int], what: str) -> Optional[int]:
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise InvalidArgumentError(f"{what} must be a positive integer, got {value!r}")
    return value


# Numeric ----------------------------------------------------------------
def smallint(name: Optional[str] = None) -> ColumnBuilder:
    return _column("smallint", "SMALLINT", name)


def integer(name: Optional[str] = None) -> ColumnBuilder:
    return _column("integer", "INTEGER", name)


def bigint(name: Optional[str] = None) -> ColumnBuilder:
    return _column("bigint", "BIGINT", name)


def serial(name: Optional[str] = None) -> ColumnBuilder:
    return _column("serial", "SERIAL", name, nullable=False)


def smallserial(name: Optional[str] = None) -> ColumnBuilder:
    return _column("smallserial", "SMALLSERIAL", name, nullable=False)


def bigserial(name: Optional[str] = None) -> ColumnBuilder:
    return _column("bigserial", "BIGSERIAL", name, nullable=False)


def decimal(name: Optional[str] = None, *, precision: Optional[int] = None, scale: Optional[int] = None) -> ColumnBuilder:
    builder = _column("decimal", "DECIMAL", name)
    if precision is not None:
        builder.precision(precision)
    if scale is not None:
        if precision is None:
            raise InvalidArgumentError("DECIMAL scale requires a precision.")
        builder.scale(scale)
    return builder


def numeric(name: Optional[str] = None, *, precision: Optional[int] = None, scale: Optional[int] = None) -> ColumnBuilder:
    builder = decimal(name, precision=precision, scale=scale)
    builder.config.family = "numeric"
    builder.config.type_name = "NUMERIC"
    return builder


def real(name: Optional[str] = None) -> ColumnBuilder:
    return _column("real", "REAL", name)


def double_precision(name: Optional[str] = None) -> ColumnBuilder:
    return _column("double", "DOUBLE PRECISION", name)


def money(name: Optional[str] = None) -> ColumnBuilder:
    return _column("money", "MONEY", name)


# Character / binary -----------------------------------------------------
def varchar(length: Optional[int] = None, name: Optional[str] = None) -> ColumnBuilder:
    return _column("varchar", "VARCHAR", name, length=_require_positive(length, "VARCHAR length"))


def char(length: Optional[int] = None, name: Optional[str] = None) -> ColumnBuilder:
    return _column("char", "CHAR", name, length=_require_positive(length, "CHAR length"))


def text(name: Optional[str] = None) -> ColumnBuilder:
    return _column("text", "TEXT", name)


def bytea(name: Optional[str] = None) -> ColumnBuilder:
    return _column("bytea", "BYTEA", name)


# Temporal ---------------------------------------------------------------
def date(name: Optional[str] = None) -> ColumnBuilder:
    return _column("date", "DATE", name)


def time(name: Optional[str] = None, *, precision: Optional[int] = None, with_timezone: bool = False) -> ColumnBuilder:
    builder = _column("time", "TIME", name)
    if precision is not None:
        builder.precision(precision)
    if with_timezone:
        builder.with_timezone()
    return builder


def timetz(name: Optional[str] = None, *, precision: Optional[int] = None) -> ColumnBuilder:
    return time(name, precision=precision, with_timezone=True)


def timestamp(name: Optional[str] = None, *, precision: Optional[int] = None, with_timezone: bool = False) -> ColumnBuilder:
    builder = _column("timestamp", "TIMESTAMP", name)
    if precision is not None:
        builder.precision(precision)
    if with_timezone:
        builder.with_timezone()
    return builder


def timestamptz(name: Optional[str] = None, *, precision: Optional[int] = None) -> ColumnBuilder:
    return timestamp(name, precision=precision, with_timezone=True)


_INTERVAL_FIELDS = frozenset(
    {
        "YEAR", "MONTH", "DAY", "HOUR", "MINUTE", "SECOND", "YEAR TO MONTH",
        "DAY TO HOUR", "DAY TO MINUTE", "DAY TO SECOND", "HOUR TO MINUTE",
        "HOUR TO SECOND", "MINUTE TO SECOND",
    }
)


def interval(name: Optional[str] = None, *, fields: Optional[str] = None) -> ColumnBuilder:
    if fields is not None and fields.upper() not in _INTERVAL_FIELDS:
        raise InvalidArgumentError(f"Unknown INTERVAL fields {fields!r}")
    return _column("interval", "INTERVAL", name, interval_fields=fields.upper() if fields else None)


# Misc scalar ------------------------------------------------------------
def boolean(name: Optional[str] = None) -> ColumnBuilder:
    return _column("boolean", "BOOLEAN", name)


def uuid(name: Optional[str] = None) -> ColumnBuilder:
    return _column("uuid", "UUID", name)


def json(name: Optional[str] = None) -> ColumnBuilder:
    return _column("json", "JSON", name)


def jsonb(name: Optional[str] = None) -> ColumnBuilder:
    return _column("jsonb", "JSONB", name)


def xml(name: Optional[str] = None) -> ColumnBuilder:
    return _column("xml", "XML", name)


# Geometric --------------------------------------------------------------
def point(name: Optional[str] = None) -> ColumnBuilder:
    return _column("point", "POINT", name)


def line(name: Optional[str] = None) -> ColumnBuilder:
    return _column("line", "LINE", name)


def lseg(name: Optional[str] = None) -> ColumnBuilder:
    return _column("lseg", "LSEG", name)


def box(name: Optional[str] = None) -> ColumnBuilder:
    return _column("box", "BOX", name)


def path(name: Optional[str] = None) -> ColumnBuilder:
    return _column("path", "PATH", name)


def polygon(name: Optional[str] = None) -> ColumnBuilder:
    return _column("polygon", "POLYGON", name)


def circle(name: Optional[str] = None) -> ColumnBuilder:
    return _column("circle", "CIRCLE", name)


# Network ----------------------------------------------------------------
def inet(name: Optional[str] = None) -> ColumnBuilder:
    return _column("inet", "INET", name)


def cidr(name: Optional[str] = None) -> ColumnBuilder:
    return _column("cidr", "CIDR", name)


def macaddr(name: Optional[str] = None) -> ColumnBuilder:
    return _column("macaddr", "MACADDR", name)


def macaddr8(name: Optional[str] = None) -> ColumnBuilder:
    return _column("macaddr8", "MACADDR8", name)


# Bit strings ------------------------------------------------------------
def bit(length: Optional[int] = None, name: Optional[str] = None) -> ColumnBuilder:
    return _column("bit", "BIT", name, length=_require_positive(length, "BIT length"))


def varbit(length: Optional[int] = None, name: Optional[str] = None) -> ColumnBuilder:
    return _column("varbit", "VARBIT", name, length=_require_positive(length, "VARBIT length"))


# Text search ------------------------------------------------------------
def tsvector(name: Optional[str] = None) -> ColumnBuilder:
    return _column("tsvector", "TSVECTOR", name)


def tsquery(name: Optional[str] = None) -> ColumnBuilder:
    return _column("tsquery", "TSQUERY", name)


# Ranges -----------------------------------------------------------------
RANGE_TYPES = ("INT4RANGE", "INT8RANGE", "NUMRANGE", "TSRANGE", "TSTZRANGE", "DATERANGE")
MULTIRANGE_TYPES = (
    "INT4MULTIRANGE", "INT8MULTIRANGE", "NUMMULTIRANGE",
    "TSMULTIRANGE", "TSTZMULTIRANGE", "DATEMULTIRANGE",
)


def _range_factory(type_name: str, family: str):
    def factory(name: Optional[str] = None) -> ColumnBuilder:
        return _column(family, type_name, name)

    factory.__name__ = type_name.lower()
    factory.__doc__ = f"{type_name} column."
    return factory


int4range = _range_factory("INT4RANGE", "range")
int8range = _range_factory("INT8RANGE", "range")
numrange = _range_factory("NUMRANGE", "range")
tsrange = _range_factory("TSRANGE", "range")
tstzrange = _range_factory("TSTZRANGE", "range")
daterange = _range_factory("DATERANGE", "range")
int4multirange = _range_factory("INT4MULTIRANGE", "multirange")
int8multirange = _range_factory("INT8MULTIRANGE", "multirange")
nummultirange = _range_factory("NUMMULTIRANGE", "multirange")
tsmultirange = _range_factory("TSMULTIRANGE", "multirange")
tstzmultirange = _range_factory("TSTZMULTIRANGE", "multirange")
datemultirange = _range_factory("DATEMULTIRANGE", "multirange")


# Object identifiers -----------------------------------------------------
_OID_TYPES = frozenset(
    {"OID", "REGCLASS", "REGPROC", "REGPROCEDURE", "REGTYPE", "REGOPER", "REGCONFIG", "REGNAMESPACE", "REGROLE"}
)


def oid(name: Optional[str] = None, *, kind: str = "OID") -> ColumnBuilder:
    type_name = kind.upper()
    if type_name not in _OID_TYPES:
        raise InvalidArgumentError(f"Unknown object identifier type {kind!r}")
    return _column("oid", type_name, name)


def pg_lsn(name: Optional[str] = None) -> ColumnBuilder:
    return _column("pg_lsn", "PG_LSN", name)


# Vectors (pgvector) -----------------------------------------------------
def _vector_factory(type_name: str):
    family = type_name.lower()

    def factory(dimensions: int, name: Optional[str] = None) -> ColumnBuilder:
        if not isinstance(dimensions, int) or isinstance(dimensions, bool) or dimensions <= 0:
            raise InvalidArgumentError(
                f"{type_name} dimensions must be a positive integer, got {dimensions!r}"
            )
        return _column(family, type_name, name, dimensions=dimensions)

    factory.__name__ = family
    return factory


vector = _vector_factory("VECTOR")
halfvec = _vector_factory("HALFVEC")
sparsevec = _vector_factory("SPARSEVEC")


# PostGIS ----------------------------------------------------------------
GEOMETRY_SUBTYPES = frozenset(
    {
        "GEOMETRY", "POINT", "LINESTRING", "POLYGON", "MULTIPOINT", "MULTILINESTRING",
        "MULTIPOLYGON", "GEOMETRYCOLLECTION", "POINTZ", "POINTM", "POINTZM",
    }
)
_SUBTYPE_SPELLING = {
    "GEOMETRYCOLLECTION": "GeometryCollection",
    "LINESTRING": "LineString",
    "MULTILINESTRING": "MultiLineString",
    "MULTIPOINT": "MultiPoint",
    "MULTIPOLYGON": "MultiPolygon",
    "POINTZ": "PointZ",
    "POINTM": "PointM",
    "POINTZM": "PointZM",
}


def _spatial(type_name: str, geometry_type: Optional[str], srid: Optional[int], name: Optional[str]) -> ColumnBuilder:
    subtype = None
    if geometry_type is not None:
        upper = geometry_type.upper()
        if upper not in GEOMETRY_SUBTYPES:
            raise InvalidArgumentError(f"Unknown geometry type {geometry_type!r}")
        subtype = _SUBTYPE_SPELLING.get(upper, upper.capitalize())
    if srid is not None:
        if not isinstance(srid, int) or srid < 0:
            raise InvalidArgumentError(f"SRID must be a non-negative integer, got {srid!r}")
        if subtype is None:
            raise InvalidArgumentError("An SRID requires a geometry type.")
    return _column(type_name.lower(), type_name, name, geometry_type=subtype, srid=srid)


def geometry(geometry_type: Optional[str] = None, srid: Optional[int] = None, name: Optional[str] = None) -> ColumnBuilder:
    return _spatial("GEOMETRY", geometry_type, srid, name)


def geography(geometry_type: Optional[str] = None, srid: Optional[int] = 4326, name: Optional[str] = None) -> ColumnBuilder:
    if geometry_type is None:
        srid = None
    return _spatial("GEOGRAPHY", geometry_type, srid, name)


def box2d(name: Optional[str] = None) -> ColumnBuilder:
    return _column("box2d", "BOX2D", name)


def box3d(name: Optional[str] = None) -> ColumnBuilder:
    return _column("box3d", "BOX3D", name)


# User-defined -----------------------------------------------------------
def custom_type(type_name: str, name: Optional[str] = None, *, enum_values: Optional[Iterable[str]] = None) -> ColumnBuilder:
    """
    Column of a user type (enum, domain or composite) emitted verbatim.
    """

    if not type_name or not type_name.strip():
        raise InvalidArgumentError("custom_type() needs a type name.")
    values = tuple(enum_values) if enum_values is not None else None
    return _column("custom", type_name, name, enum_values=values)
