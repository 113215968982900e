"""
Type-name maps shared by the dialects: catalog spellings, friendly
spellings and the Python annotation a code generator would emit.
"""

from __future__ import annotations

import re
from typing import Dict, Final

INTERNAL_TO_FRIENDLY: Final[Dict[str, str]] = {
    "int2": "smallint",
    "int4": "integer",
    "int8": "bigint",
    "float4": "real",
    "float8": "double precision",
    "bool": "boolean",
    "timestamptz": "timestamp with time zone",
    "timetz": "time with time zone",
    "varchar": "character varying",
    "bpchar": "character",
    "varbit": "bit varying",
}

FRIENDLY_TO_INTERNAL: Final[Dict[str, str]] = {
    "smallint": "int2",
    "integer": "int4",
    "int": "int4",
    "bigint": "int8",
    "real": "float4",
    "double precision": "float8",
    "boolean": "bool",
    "timestamp with time zone": "timestamptz",
    "time with time zone": "timetz",
    "character varying": "varchar",
    "character": "bpchar",
    "bit varying": "varbit",
}

MYSQL_INTERNAL_TO_FRIENDLY: Final[Dict[str, str]] = {
    "tinyint(1)": "boolean",
    "int": "integer",
    "mediumint": "integer",
    "double": "double precision",
    "float": "real",
    "datetime": "timestamp",
    "longtext": "text",
    "mediumtext": "text",
    "tinytext": "text",
    "longblob": "bytea",
    "mediumblob": "bytea",
    "blob": "bytea",
    "char(36)": "uuid",
}

MYSQL_FRIENDLY_TO_INTERNAL: Final[Dict[str, str]] = {
    "boolean": "tinyint(1)",
    "integer": "int",
    "double precision": "double",
    "real": "float",
    "timestamp": "datetime",
    "bytea": "blob",
    "uuid": "char(36)",
}

SQL_TO_PYTHON: Final[Dict[str, str]] = {
    "smallint": "int",
    "int2": "int",
    "integer": "int",
    "int": "int",
    "int4": "int",
    "bigint": "int",
    "int8": "int",
    "serial": "int",
    "smallserial": "int",
    "bigserial": "int",
    "real": "float",
    "float4": "float",
    "double precision": "float",
    "float8": "float",
    "float": "float",
    "double": "float",
    "numeric": "Decimal",
    "decimal": "Decimal",
    "money": "Decimal",
    "boolean": "bool",
    "bool": "bool",
    "text": "str",
    "varchar": "str",
    "character varying": "str",
    "char": "str",
    "character": "str",
    "bpchar": "str",
    "name": "str",
    "citext": "str",
    "bytea": "bytes",
    "blob": "bytes",
    "date": "datetime.date",
    "time": "datetime.time",
    "time with time zone": "datetime.time",
    "timetz": "datetime.time",
    "time without time zone": "datetime.time",
    "timestamp": "datetime.datetime",
    "timestamp with time zone": "datetime.datetime",
    "timestamptz": "datetime.datetime",
    "timestamp without time zone": "datetime.datetime",
    "datetime": "datetime.datetime",
    "interval": "datetime.timedelta",
    "uuid": "uuid.UUID",
    "json": "Any",
    "jsonb": "Any",
    "inet": "str",
    "cidr": "str",
    "macaddr": "str",
    "bit": "str",
    "bit varying": "str",
    "varbit": "str",
    "oid": "int",
    "regclass": "str",
    "regproc": "str",
    "regtype": "str",
    "vector": "list[float]",
    "halfvec": "list[float]",
}

_MODIFIER_RE = re.compile(r"\([^)]*\)")
_SIMPLE_NAME_RE = re.compile(r"^[a-z_]+$")


def map_type_to_friendly(internal_type: str) -> str:
    return INTERNAL_TO_FRIENDLY.get(internal_type.lower(), internal_type)


def map_type_to_internal(friendly_type: str) -> str:
    return FRIENDLY_TO_INTERNAL.get(friendly_type.lower(), friendly_type)


def get_python_type(sql_type: str) -> str:
    """
    Python annotation for ``sql_type``; arrays become ``list[...]`` and
    unknown simple names (enums, domains) fall back to ``str``.
    """

    normalized = sql_type.lower().strip()
    if normalized.endswith("[]"):
        return f"list[{get_python_type(normalized[:-2])}]"
    if " array" in normalized:
        return f"list[{get_python_type(normalized.replace(' array', ''))}]"
    without_modifiers = _MODIFIER_RE.sub("", normalized).strip()
    if without_modifiers in SQL_TO_PYTHON:
        return SQL_TO_PYTHON[without_modifiers]
    if _SIMPLE_NAME_RE.match(normalized):
        return "str"
    return "Any"


def is_array_type(sql_type: str) -> bool:
    lower = sql_type.lower()
    return lower.endswith("[]") or " array" in lower


def array_base_type(sql_type: str) -> str:
    lower = sql_type.lower()
    if lower.endswith("[]"):
        return lower[:-2]
    if " array" in lower:
        return lower.replace(" array", "")
    return sql_type
