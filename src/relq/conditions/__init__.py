"""
Composable WHERE-clause predicates across Postgres type families.
"""

from .arrays import ArrayConditionCollector
from .base import Condition, RenderContext, json_path
from .collector import ConditionCollector
from .fulltext import FulltextConditionCollector
from .geometric import GeometricConditionCollector, geometric_literal
from .jsonb import JsonbArrayConditionCollector, JsonbConditionCollector
from .network import NetworkConditionCollector, network_literal
from .postgis import PostgisConditionCollector
from .ranges import RangeConditionCollector, range_literal
from .render import FAMILY_RENDERERS, build_condition_sql, build_conditions_sql, render_condition

__all__ = [
    "ArrayConditionCollector",
    "Condition",
    "ConditionCollector",
    "FAMILY_RENDERERS",
    "FulltextConditionCollector",
    "GeometricConditionCollector",
    "JsonbArrayConditionCollector",
    "JsonbConditionCollector",
    "NetworkConditionCollector",
    "PostgisConditionCollector",
    "RangeConditionCollector",
    "RenderContext",
    "build_condition_sql",
    "build_conditions_sql",
    "geometric_literal",
    "json_path",
    "network_literal",
    "range_literal",
    "render_condition",
]
