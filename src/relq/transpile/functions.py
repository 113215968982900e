"""
PostgreSQL function names the transpiler knows how to express with the
builder API, keyed by the catalog spelling.
"""

from __future__ import annotations

from typing import Dict, Final, FrozenSet, Optional

_SAME_NAME = (
    # strings
    "lower", "upper", "trim", "ltrim", "rtrim", "btrim", "concat", "concat_ws", "length",
    "octet_length", "bit_length", "substring", "replace", "lpad", "rpad", "left", "right",
    "reverse", "repeat", "initcap", "ascii", "chr", "position", "overlay", "translate",
    "split_part", "regexp_replace", "regexp_match", "regexp_matches", "format", "quote_ident",
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
    "array_agg",
    # full text
    "to_tsvector", "to_tsquery", "websearch_to_tsquery", "ts_rank", "ts_rank_cd",
    "ts_headline", "ts_rewrite", "ts_filter", "ts_delete", "tsvector_to_array",
    # date / time
    "extract", "date_part", "date_trunc", "age", "isfinite", "make_date", "make_time",
    "make_timestamp", "make_timestamptz", "make_interval", "now", "current_timestamp",
    "current_date", "current_time", "localtime", "localtimestamp", "clock_timestamp",
    "statement_timestamp", "transaction_timestamp", "timeofday", "to_char", "to_date",
    "to_timestamp",
    # uuid
    "gen_random_uuid", "uuid_generate_v4", "uuid_generate_v1",
    # aggregates
    "count", "sum", "avg", "min", "max", "string_agg", "bool_and", "bool_or", "every",
    "bit_and", "bit_or",
    # network
    "inet_client_addr", "inet_server_addr", "host", "hostmask", "netmask", "network",
    "broadcast", "masklen", "family",
    # geometric
    "area", "center", "diameter", "height", "width", "isclosed", "isopen", "npoints", "pclose",
    "popen", "radius",
    # ranges
    "lower_bound", "upper_bound", "isempty", "lower_inc", "upper_inc", "lower_inf",
    "upper_inf", "range_merge",
)

_RENAMED: Dict[str, str] = {
    "char_length": "length",
    "character_length": "length",
    "strpos": "position",
    "substr": "substring",
    "ceiling": "ceil",
    "truncate": "trunc",
    "pow": "power",
    "jsonb_object_keys": "jsonb_keys",
    "json_object_keys": "json_keys",
    "setweight": "set_weight",
    "plainto_tsquery": "plain_to_tsquery",
    "phraseto_tsquery": "phrase_to_tsquery",
    "strip": "ts_strip",
    "numnode": "num_node",
    "querytree": "query_tree",
}

KNOWN_BUILDER_FUNCTIONS: Final[Dict[str, str]] = {
    **{name: name for name in _SAME_NAME},
    **_RENAMED,
}

# Functions whose first argument becomes the receiver in chained output.
CHAINABLE_FUNCTIONS: Final[FrozenSet[str]] = frozenset(
    {
        "lower", "upper", "trim", "ltrim", "rtrim", "btrim",
        "length", "char_length", "character_length",
        "left", "right", "reverse", "repeat", "initcap",
        "substring", "substr", "replace", "translate",
        "lpad", "rpad", "ascii", "md5", "sha256", "sha512",
        "encode", "decode", "quote_ident", "quote_literal", "quote_nullable",
        "coalesce", "nullif",
        "json_typeof", "jsonb_typeof", "json_array_length", "jsonb_array_length",
        "jsonb_object_keys", "json_object_keys", "jsonb_pretty", "jsonb_strip_nulls",
        "to_json", "to_jsonb",
        "array_length", "array_position", "array_positions", "array_dims", "array_lower",
        "array_upper", "array_ndims", "array_to_string", "array_append", "array_prepend",
        "array_cat", "array_remove", "array_replace", "unnest", "cardinality",
        "to_tsvector", "setweight", "strip",
        "to_tsquery", "plainto_tsquery", "phraseto_tsquery", "websearch_to_tsquery",
        "ts_rank", "ts_rank_cd", "ts_headline",
        "numnode", "querytree", "ts_rewrite", "ts_filter", "ts_delete",
        "abs", "ceil", "ceiling", "floor", "round", "trunc", "truncate", "sign",
        "sqrt", "cbrt", "exp", "ln", "log", "log10",
        "sin", "cos", "tan", "asin", "acos", "atan",
        "sinh", "cosh", "tanh", "degrees", "radians",
        "factorial",
        "extract", "date_part", "date_trunc", "age", "isfinite",
    }
)

# Text-search functions whose optional leading argument is a configuration
# name; the document or query is the second argument.
CONFIG_FIRST_FUNCTIONS: Final[FrozenSet[str]] = frozenset(
    {"to_tsvector", "to_tsquery", "plainto_tsquery", "phraseto_tsquery", "websearch_to_tsquery", "setweight"}
)


def map_function_to_builder(name: str) -> Optional[str]:
    key = name.lower()
    if key.startswith("pg_catalog."):
        key = key[len("pg_catalog."):]
    return KNOWN_BUILDER_FUNCTIONS.get(key)


def is_chainable_function(name: str) -> bool:
    key = name.lower()
    if key.startswith("pg_catalog."):
        key = key[len("pg_catalog."):]
    return key in CHAINABLE_FUNCTIONS
