"""
Function names available on :data:`F` and on every expression.

``SIMPLE_FUNCTIONS`` maps a Python method name to the SQL function it calls
with plain comma-separated arguments. Functions with special syntax
(``SUBSTRING ... FROM``, ``EXTRACT``, casts, JSON operators) are methods
on :class:`~relq.expressions.core.Expr` and
:class:`~relq.expressions.functions.Functions` instead.
"""

from __future__ import annotations

from typing import Dict, Final

_SAME_NAME = (
    # strings
    "lower", "upper", "trim", "ltrim", "rtrim", "btrim", "concat", "concat_ws", "length",
    "octet_length", "bit_length", "replace", "lpad", "rpad", "left", "right", "reverse",
    "repeat", "initcap", "ascii", "chr", "strpos", "translate", "split_part",
    "regexp_replace", "regexp_match", "regexp_matches", "format", "quote_ident",
    "quote_literal", "quote_nullable", "encode", "decode", "md5", "sha256", "sha512", "digest",
    # numbers
    "abs", "ceil", "floor", "round", "trunc", "sign", "sqrt", "cbrt", "exp", "ln", "log",
    "log10", "power", "mod", "degrees", "radians", "pi", "sin", "cos", "tan", "asin", "acos",
    "atan", "atan2", "sinh", "cosh", "tanh", "asinh", "acosh", "atanh", "factorial", "gcd",
    "lcm", "width_bucket", "random", "setseed", "greatest", "least",
    # null handling
    "coalesce", "nullif",
    # json
    "json_typeof", "jsonb_typeof", "json_array_length", "jsonb_array_length", "jsonb_pretty",
    "jsonb_strip_nulls", "to_json", "to_jsonb", "row_to_json", "json_build_object",
    "jsonb_build_object", "json_build_array", "jsonb_build_array", "json_agg", "jsonb_agg",
    "json_object_agg", "jsonb_object_agg", "jsonb_set", "jsonb_insert", "jsonb_path_query",
    "jsonb_path_query_array", "jsonb_path_query_first", "jsonb_path_exists",
    # arrays
    "array_length", "array_position", "array_positions", "array_dims", "array_lower",
    "array_upper", "array_ndims", "array_to_string", "string_to_array", "array_append",
    "array_prepend", "array_cat", "array_remove", "array_replace", "unnest", "cardinality",
    "array_agg", "array_fill",
    # full text
    "to_tsvector", "to_tsquery", "plainto_tsquery", "phraseto_tsquery", "websearch_to_tsquery",
    "numnode", "querytree", "ts_rank", "ts_rank_cd", "ts_headline", "ts_rewrite",
    "tsvector_to_array", "setweight", "ts_filter", "ts_delete",
    # date / time
    "date_part", "date_trunc", "age", "isfinite", "make_date", "make_time", "make_timestamp",
    "make_timestamptz", "make_interval", "now", "clock_timestamp", "statement_timestamp",
    "transaction_timestamp", "timeofday", "to_char", "to_date", "to_timestamp", "date_bin",
    # uuid
    "gen_random_uuid", "uuid_generate_v4", "uuid_generate_v1",
    # aggregates
    "sum", "avg", "min", "max", "string_agg", "bool_and", "bool_or", "every", "bit_and",
    "bit_or",
    # network
    "inet_client_addr", "inet_server_addr", "host", "hostmask", "netmask", "network",
    "broadcast", "masklen", "family",
    # geometric
    "area", "center", "diameter", "height", "width", "isclosed", "isopen", "npoints", "pclose",
    "popen", "radius",
    # ranges
    "isempty", "lower_inc", "upper_inc", "lower_inf", "upper_inf", "range_merge",
    # trigram
    "similarity",
)

_RENAMED: Dict[str, str] = {
    "json_keys": "JSON_OBJECT_KEYS",
    "jsonb_keys": "JSONB_OBJECT_KEYS",
    "ts_strip": "STRIP",
    "ts_length": "LENGTH",
    "num_node": "NUMNODE",
    "query_tree": "QUERYTREE",
    "plain_to_tsquery": "PLAINTO_TSQUERY",
    "phrase_to_tsquery": "PHRASETO_TSQUERY",
    "lower_bound": "LOWER",
    "upper_bound": "UPPER",
    "set_weight": "SETWEIGHT",
}

SIMPLE_FUNCTIONS: Final[Dict[str, str]] = {
    **{name: name.upper() for name in _SAME_NAME},
    **_RENAMED,
}

# SQL keywords that behave as functions but take no parentheses.
KEYWORD_FUNCTIONS: Final[Dict[str, str]] = {
    "current_timestamp": "CURRENT_TIMESTAMP",
    "current_date": "CURRENT_DATE",
    "current_time": "CURRENT_TIME",
    "localtime": "LOCALTIME",
    "localtimestamp": "LOCALTIMESTAMP",
    "current_user": "CURRENT_USER",
    "session_user": "SESSION_USER",
}
