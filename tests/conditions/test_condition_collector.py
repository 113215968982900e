import pytest

from relq.conditions import Condition, ConditionCollector, build_condition_sql, build_conditions_sql
from relq.errors import InvalidArgumentError
from relq.formatting import Raw


def test_nested_and_group_renders_in_parentheses():
    collector = ConditionCollector().eq("status", "active").and_(lambda c: c.in_("role", ["admin", "owner"]))
    assert collector.to_sql() == "\"status\" = 'active' AND (\"role\" IN ('admin', 'owner'))"


def test_conditions_keep_insertion_order():
    collector = ConditionCollector().gt("age", 18).lte("age", 65).ne("country", "XX")
    assert collector.to_sql() == "\"age\" > 18 AND \"age\" <= 65 AND \"country\" != 'XX'"
    assert [condition.method for condition in collector] == ["greater_than", "less_than_equal", "not_equal"]
    assert len(collector) == 3


def test_equal_with_none_and_lists():
    collector = ConditionCollector().equal("deleted_at", None).not_equal("id", [1, 2])
    assert collector.to_sql() == '"deleted_at" IS NULL AND "id" NOT IN (1, 2)'
    assert ConditionCollector().ne("x", None).to_sql() == '"x" IS NOT NULL'


def test_empty_in_lists():
    assert ConditionCollector().in_("id", []).to_sql() == "1 = 0"
    assert ConditionCollector().not_in("id", []).to_sql() == "1 = 1"
    assert ConditionCollector().in_("id", Raw("SELECT id FROM banned")).to_sql() == '"id" IN (SELECT id FROM banned)'


def test_qualified_columns_and_escaping():
    sql = ConditionCollector().eq("users.name", "O'Brien").to_sql()
    assert sql == "\"users\".\"name\" = 'O''Brien'"


def test_or_and_not_groups():
    collector = (
        ConditionCollector()
        .is_not_null("email")
        .or_(lambda c: c.eq("role", "admin").is_true("verified"))
        .not_(lambda c: c.eq("banned", True))
    )
    assert collector.to_sql() == (
        "\"email\" IS NOT NULL AND (\"role\" = 'admin' OR \"verified\" IS TRUE) AND NOT (\"banned\" = TRUE)"
    )


def test_empty_group_renders_nothing():
    collector = ConditionCollector().eq("a", 1).or_(lambda c: None)
    assert collector.to_sql() == '"a" = 1'


def test_operator_combinators():
    left = ConditionCollector().eq("a", 1)
    right = ConditionCollector().eq("b", 2).eq("c", 3)
    assert (left & right).to_sql() == '"a" = 1 AND "b" = 2 AND "c" = 3'
    assert (left | right).to_sql() == '("a" = 1 OR ("b" = 2 AND "c" = 3))'
    assert (~right).to_sql() == 'NOT ("b" = 2 AND "c" = 3)'


def test_between_and_patterns():
    collector = (
        ConditionCollector()
        .between("price", 10, 20)
        .starts_with("name", "Jo")
        .contains("bio", "rust", case_insensitive=True)
        .not_ends_with("email", ".test")
    )
    assert collector.to_sql() == (
        "\"price\" BETWEEN 10 AND 20 AND \"name\" LIKE 'Jo%' AND \"bio\" ILIKE '%rust%' "
        "AND \"email\" NOT LIKE '%.test'"
    )


def test_ilike_and_regex_fall_back_off_postgres():
    collector = ConditionCollector().ilike("name", "jo%").regex("code", "^A")
    assert collector.to_sql("mysql") == "LOWER(`name`) LIKE LOWER('jo%') AND `code` REGEXP '^A'"
    assert ConditionCollector().iregex("code", "^a").to_sql("mysql") == "REGEXP_LIKE(`code`, '^a', 'i')"
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().iregex("code", "^a").to_sql("sqlite")
    assert ConditionCollector().not_iregex("code", "^a").to_sql() == "\"code\" !~* '^a'"


def test_distinct_from_per_dialect():
    collector = ConditionCollector().distinct_from("a", 1)
    assert collector.to_sql() == '"a" IS DISTINCT FROM 1'
    assert collector.to_sql("mysql") == "NOT (`a` <=> 1)"
    assert collector.to_sql("sqlite") == '"a" IS NOT 1'
    assert ConditionCollector().not_distinct_from("a", 1).to_sql() == '"a" IS NOT DISTINCT FROM 1'


def test_exists_raw_and_search():
    collector = (
        ConditionCollector()
        .exists("SELECT 1 FROM orders o WHERE o.user_id = users.id")
        .raw("score > 10")
        .search("body", "postgres tips")
    )
    assert collector.to_sql() == (
        "EXISTS (SELECT 1 FROM orders o WHERE o.user_id = users.id) AND score > 10 "
        "AND to_tsvector(\"body\") @@ plainto_tsquery('postgres tips')"
    )
    assert ConditionCollector().search("body", "tips").to_sql("mysql") == (
        "MATCH(`body`) AGAINST ('tips' IN NATURAL LANGUAGE MODE)"
    )


def test_overlaps_requires_postgres():
    collector = ConditionCollector().overlaps(("starts_at", "2024-01-01"), ("ends_at", "2024-02-01"))
    assert collector.to_sql() == "(\"starts_at\", \"ends_at\") OVERLAPS ('2024-01-01', '2024-02-01')"
    with pytest.raises(InvalidArgumentError):
        collector.to_sql("sqlite")


def test_build_helpers_and_errors():
    assert build_condition_sql(Condition("is_null", "a")) == '"a" IS NULL'
    assert build_conditions_sql([Condition("is_true", "a"), Condition("is_false", "b")], "sqlite") == (
        '"a" IS TRUE AND "b" IS FALSE'
    )
    with pytest.raises(InvalidArgumentError):
        build_condition_sql(Condition("bogus", "a"))
    with pytest.raises(InvalidArgumentError):
        build_condition_sql(Condition("equal", None, 1))
    with pytest.raises(InvalidArgumentError):
        ConditionCollector().and_("not callable")
