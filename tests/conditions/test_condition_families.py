import ipaddress

import pytest

from relq.conditions import ConditionCollector, geometric_literal, json_path, network_literal, range_literal
from relq.errors import InvalidArgumentError


def render(build):
    collector = ConditionCollector()
    build(collector)
    return collector.to_sql()


def test_json_path_forms():
    assert json_path("a.b") == "{a,b}"
    assert json_path(["items", 0, "sku"]) == "{items,0,sku}"
    assert json_path(["a,b", 'say "hi"', "null", "x y", "c\\d"]) == '{"a,b","say \\"hi\\"","null","x y","c\\\\d"}'
    assert json_path(["a.b", "{c}"]) == '{a.b,"{c}"}'
    with pytest.raises(InvalidArgumentError):
        json_path("a..b")


def test_jsonb_containment_and_keys():
    assert render(lambda c: c.jsonb.contains("meta", {"tier": "gold"})) == "\"meta\" @> '{\"tier\": \"gold\"}'"
    assert render(lambda c: c.jsonb.has_key("meta", "tier")) == "\"meta\" ? 'tier'"
    assert render(lambda c: c.jsonb.has_any_keys("meta", ["a", "b"])) == "\"meta\" ?| ARRAY['a', 'b']"
    assert render(lambda c: c.jsonb.has_all_keys("meta", ["a"])) == "\"meta\" ?& ARRAY['a']"


def test_jsonb_path_extraction():
    assert render(lambda c: c.jsonb.extract_equal("meta", "address.city", "Oslo")) == (
        "\"meta\"#>>'{address,city}' = 'Oslo'"
    )
    assert render(lambda c: c.jsonb.extract_equal("meta", ["o'brien", "a,b"], "x")) == (
        "\"meta\"#>>'{o''brien,\"a,b\"}' = 'x'"
    )
    assert render(lambda c: c.jsonb.extract_greater_than("meta", "stats.score", 10)) == (
        "(\"meta\"#>>'{stats,score}')::numeric > 10"
    )
    assert render(lambda c: c.jsonb.extract_is_null("meta", "x")) == (
        "(\"meta\"#>'{x}' IS NULL OR \"meta\"#>'{x}' = 'null'::jsonb)"
    )
    assert render(lambda c: c.jsonb.type_of("meta", "tags", "array")) == (
        "jsonb_typeof(\"meta\"#>'{tags}') = 'array'"
    )


def test_jsonb_array_of_objects():
    assert render(lambda c: c.jsonb.array.any("items", "qty", ">", 2)) == (
        "EXISTS (SELECT 1 FROM jsonb_array_elements(COALESCE(\"items\", '[]'::jsonb)) elem "
        "WHERE (elem->>'qty')::numeric > 2)"
    )
    assert render(lambda c: c.jsonb.array.all("items", "status", "=", "ok")) == (
        "NOT EXISTS (SELECT 1 FROM jsonb_array_elements(COALESCE(\"items\", '[]'::jsonb)) elem "
        "WHERE NOT (elem->>'status' = 'ok'))"
    )
    assert render(lambda c: c.jsonb.array.is_empty("items")) == (
        "jsonb_array_length(COALESCE(\"items\", '[]'::jsonb)) = 0"
    )
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().jsonb.array.length("items", "~", 1)
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().jsonb.array.contains_any("items", [])


def test_family_conditions_require_postgres():
    collector = ConditionCollector().jsonb.has_key("meta", "a")
    with pytest.raises(InvalidArgumentError):
        collector.to_sql("mysql")
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().array.contains("tags", ["a"]).to_sql("sqlite")


def test_array_operators():
    assert render(lambda c: c.array.contains("tags", ["a", "b"])) == "\"tags\" @> ARRAY['a', 'b']"
    assert render(lambda c: c.array.overlaps("tags", ["a"])) == "\"tags\" && ARRAY['a']"
    assert render(lambda c: c.array.any("scores", ">", 90)) == '90 > ANY("scores")'
    assert render(lambda c: c.array.length("tags", 3)) == 'array_length("tags", 1) = 3'
    assert render(lambda c: c.array.contains_prefix("tags", "pg")) == (
        "EXISTS (SELECT 1 FROM unnest(\"tags\") AS elem WHERE elem LIKE 'pg%')"
    )
    assert render(lambda c: c.array.all_match_suffix("tags", "_x")) == (
        "NOT EXISTS (SELECT 1 FROM unnest(\"tags\") AS elem WHERE elem NOT LIKE '%_x')"
    )
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().array.contains_pattern("tags", "x", "fuzzy")


def test_typed_array_elements():
    assert render(lambda c: c.array.numeric.sum_greater_than("scores", 100)) == (
        '(SELECT SUM(elem) FROM unnest("scores") AS elem) > 100'
    )
    assert render(lambda c: c.array.numeric.has_even("scores")) == (
        'EXISTS (SELECT 1 FROM unnest("scores") AS elem WHERE elem % 2 = 0)'
    )
    assert render(lambda c: c.array.string.iequals("tags", "PG")) == (
        "EXISTS (SELECT 1 FROM unnest(\"tags\") AS elem WHERE LOWER(elem) = LOWER('PG'))"
    )
    assert render(lambda c: c.array.date.within_days("dates", -7)) == (
        "EXISTS (SELECT 1 FROM unnest(\"dates\") AS elem WHERE elem BETWEEN NOW() - INTERVAL '7 days' AND NOW())"
    )
    assert render(lambda c: c.array.uuid.has_version("ids", 4)) == (
        "EXISTS (SELECT 1 FROM unnest(\"ids\") AS elem WHERE substring(elem::text from 15 for 1) = '4')"
    )
    assert render(lambda c: c.array.jsonb.has_key("docs", "id")) == (
        "EXISTS (SELECT 1 FROM unnest(\"docs\") AS elem WHERE elem ? 'id')"
    )
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().array.uuid.has_version("ids", 9)
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().array.numeric.greater_than("scores", "10").to_sql()


def test_fulltext_search_and_rank():
    assert render(lambda c: c.fulltext.search("body", "fast db")) == (
        "to_tsvector('english', \"body\") @@ plainto_tsquery('english', 'fast db')"
    )
    assert render(lambda c: c.fulltext.search("search_vector", "db", mode="websearch")) == (
        "\"search_vector\" @@ websearch_to_tsquery('english', 'db')"
    )
    assert render(lambda c: c.fulltext.rank("body", "db", 0.1, config="simple")) == (
        "ts_rank(to_tsvector('simple', \"body\"), plainto_tsquery('simple', 'db')) > 0.1"
    )
    assert ConditionCollector().fulltext.search("body", "db").to_sql("mysql") == (
        "MATCH(`body`) AGAINST ('db' IN NATURAL LANGUAGE MODE)"
    )
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().fulltext.search("body", "db", mode="fuzzy")


def test_range_literals_and_operators():
    assert range_literal((1, 10)) == "[1,10)"
    assert range_literal({"start": 1, "end": None, "start_bound": "exclusive", "end_bound": "inclusive"}) == "(1,]"
    with pytest.raises(InvalidArgumentError):
        range_literal((1, 2, 3))
    assert render(lambda c: c.range.overlaps("during", (1, 5))) == "\"during\" && '[1,5)'"
    assert render(lambda c: c.range.contains("during", 3)) == '"during" @> 3'


def test_geometric_conditions():
    assert geometric_literal((1, 2)) == "(1,2)"
    assert geometric_literal(((0, 0), 5)) == "<(0,0),5>"
    assert geometric_literal(((0, 0), (1, 1))) == "((0,0),(1,1))"
    assert render(lambda c: c.geometric.contains("area", (1, 2))) == "\"area\" @> '(1,2)'"
    assert render(lambda c: c.geometric.distance_less_than("location", (0, 0), 10)) == (
        "(\"location\" <-> '(0,0)') < 10"
    )
    assert render(lambda c: c.geometric.is_horizontal("segment")) == '?- "segment"'
    with pytest.raises(InvalidArgumentError):
        geometric_literal(42)


def test_network_conditions():
    assert network_literal({"octets": [10, 0, 0, 0], "mask": 8}) == "10.0.0.0/8"
    assert network_literal(ipaddress.ip_network("192.168.0.0/16")) == "192.168.0.0/16"
    assert render(lambda c: c.network.contained_by_or_equal("ip", "10.0.0.0/8")) == (
        "\"ip\" <<= inet '10.0.0.0/8'"
    )
    assert render(lambda c: c.network.is_ipv6("ip")) == 'family("ip") = 6'
    assert render(lambda c: c.network.mask_length_greater_than("net", 16)) == 'masklen("net") > 16'
    with pytest.raises(InvalidArgumentError):
        network_literal(3.14)


def test_postgis_conditions():
    point = {"type": "Point", "coordinates": [10.0, 59.9]}
    assert render(lambda c: c.postgis.dwithin("geom", point, 1000)) == (
        "ST_DWithin(\"geom\", ST_GeomFromGeoJSON('{\"type\":\"Point\",\"coordinates\":[10.0,59.9]}'), 1000)"
    )
    assert render(lambda c: c.postgis.within("geom", "POLYGON((0 0,1 0,1 1,0 0))")) == (
        "ST_Within(\"geom\", ST_GeomFromText('POLYGON((0 0,1 0,1 1,0 0))'))"
    )
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().postgis.contains("geom", {"type": "Point"})
