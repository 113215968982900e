"""
PostGIS spatial predicates. Geometries are WKT text or GeoJSON mappings.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Mapping

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext

if TYPE_CHECKING:
    from .collector import ConditionCollector

SPATIAL_FUNCTIONS = {
    "postgis_contains": "ST_Contains",
    "postgis_within": "ST_Within",
    "postgis_intersects": "ST_Intersects",
    "postgis_overlaps": "ST_Overlaps",
    "postgis_crosses": "ST_Crosses",
    "postgis_touches": "ST_Touches",
    "postgis_disjoint": "ST_Disjoint",
    "postgis_equals": "ST_Equals",
    "postgis_covered_by": "ST_CoveredBy",
    "postgis_covers": "ST_Covers",
}


def geometry_payload(geometry: Any) -> Dict[str, Any]:
    if isinstance(geometry, Mapping):
        if "type" not in geometry or "coordinates" not in geometry:
            raise InvalidArgumentError("GeoJSON geometry needs 'type' and 'coordinates'")
        return {"geometry": json.dumps(dict(geometry), separators=(",", ":")), "geojson": True}
    if isinstance(geometry, str):
        return {"geometry": geometry, "geojson": False}
    raise InvalidArgumentError(f"Cannot use {geometry!r} as a geometry")


class PostgisConditionCollector:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def _add(self, method: str, column: Any, geometry: Any, **extra: Any) -> "ConditionCollector":
        values = geometry_payload(geometry)
        values.update(extra)
        return self.parent.add(Condition(f"postgis_{method}", column, values))

    def contains(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("contains", column, geometry)

    def within(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("within", column, geometry)

    def intersects(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("intersects", column, geometry)

    def overlaps(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("overlaps", column, geometry)

    def crosses(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("crosses", column, geometry)

    def touches(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("touches", column, geometry)

    def disjoint(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("disjoint", column, geometry)

    def equals(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("equals", column, geometry)

    def covered_by(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("covered_by", column, geometry)

    def covers(self, column: Any, geometry: Any) -> "ConditionCollector":
        return self._add("covers", column, geometry)

    def dwithin(self, column: Any, geometry: Any, distance: float) -> "ConditionCollector":
        return self._add("dwithin", column, geometry, distance=distance)

    def distance_less_than(self, column: Any, geometry: Any, distance: float) -> "ConditionCollector":
        return self._add("distance_lt", column, geometry, distance=distance)

    def distance_greater_than(self, column: Any, geometry: Any, distance: float) -> "ConditionCollector":
        return self._add("distance_gt", column, geometry, distance=distance)


def build_postgis_sql(condition: Condition, ctx: RenderContext) -> str:
    ctx.require_postgres("PostGIS")
    method, values = condition.method, condition.values
    col = ctx.column(condition.column)
    constructor = "ST_GeomFromGeoJSON" if values["geojson"] else "ST_GeomFromText"
    geometry = f"{constructor}({ctx.text(values['geometry'])})"

    if method in SPATIAL_FUNCTIONS:
        return f"{SPATIAL_FUNCTIONS[method]}({col}, {geometry})"
    if method == "postgis_dwithin":
        return f"ST_DWithin({col}, {geometry}, {ctx.number(values['distance'])})"
    if method == "postgis_distance_lt":
        return f"ST_Distance({col}, {geometry}) < {ctx.number(values['distance'])}"
    if method == "postgis_distance_gt":
        return f"ST_Distance({col}, {geometry}) > {ctx.number(values['distance'])}"
    raise InvalidArgumentError(f"Unknown PostGIS condition {method!r}")
