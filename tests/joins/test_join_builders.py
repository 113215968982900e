from datetime import date

import pytest

from relq import columns as c
from relq.errors import InvalidArgumentError
from relq.formatting import POSTGRES_FORMATTER, Raw
from relq.joins import (
    JoinConditionBuilder,
    JoinManyBuilder,
    TableProxy,
    format_right_side,
    lateral_join_clause,
    left_ref,
    right_ref,
)
from relq.schema import define_table


def posts_table():
    return define_table(
        "posts",
        {
            "id": c.uuid().primary_key(),
            "authorId": c.uuid("author_id"),
            "tags": c.text().array(),
            "createdAt": c.timestamptz("created_at"),
        },
    )


def test_join_many_subquery_with_order_and_limit():
    builder = (
        JoinManyBuilder()
        .equal(left_ref("posts", "author_id"), right_ref("users", "id"))
        .order_by("created_at", "DESC")
        .limit(5)
    )
    sql = builder.to_subquery_sql("posts")
    assert sql == (
        'SELECT * FROM "posts" WHERE "posts"."author_id" = "users"."id" ORDER BY "created_at" DESC LIMIT 5'
    )
    assert builder.has_query_modifiers() is True


def test_refs_convert_camel_case_names():
    ref = left_ref("users", "createdAt", alias="u")
    assert ref.render() == '"u"."created_at"'
    assert ref.column == "createdAt"
    assert ref.lower().to_sql() == 'LOWER("u"."created_at")'


def test_table_proxy_resolves_declared_columns():
    proxy = posts_table().proxy("p")
    ref = proxy.authorId
    assert ref.render() == '"p"."author_id"'
    assert ref.type_tag == "uuid"
    assert proxy.tags.type_tag == "text[]"
    assert proxy["unknownField"].sql_column == "unknown_field"
    assert "authorId" in proxy
    assert [r.sql_column for r in proxy] == ["id", "author_id", "tags", "created_at"]


def test_condition_builder_mixes_predicates_raw_and_where():
    on = (
        JoinConditionBuilder()
        .equal(left_ref("users", "id"), right_ref("orders", "user_id"))
        .gte(right_ref("orders", "total"), 100)
        .raw('"orders"."archived" = FALSE')
        .where(lambda w: w.eq("orders.status", "paid"))
    )
    assert on.to_sql() == (
        '"users"."id" = "orders"."user_id" AND "orders"."total" >= 100 '
        "AND \"orders\".\"archived\" = FALSE AND \"orders\".\"status\" = 'paid'"
    )


def test_ilike_falls_back_to_lower_off_postgres():
    on = JoinConditionBuilder().ilike(left_ref("a", "name"), "jo%")
    assert on.to_sql() == "\"a\".\"name\" ILIKE 'jo%'"
    assert on.to_sql("mysql") == "LOWER(`a`.`name`) LIKE LOWER('jo%')"


def test_using_join():
    on = JoinConditionBuilder().using("tenant_id", "user_id")
    assert on.is_using_join is True
    assert on.to_using_sql() == 'USING ("tenant_id", "user_id")'
    on.equal(left_ref("a", "id"), right_ref("b", "id"))
    assert on.to_using_sql() is None


def test_right_side_formatting():
    assert format_right_side([1, 2], POSTGRES_FORMATTER) == "ARRAY[1, 2]"
    assert format_right_side(date(2024, 5, 1), POSTGRES_FORMATTER) == "'2024-05-01'"
    assert format_right_side({"a": 1}, POSTGRES_FORMATTER) == "'{\"a\": 1}'"
    assert format_right_side(Raw("now()"), POSTGRES_FORMATTER) == "now()"


def test_lateral_sql_aggregates_to_json_array():
    builder = JoinManyBuilder().equal(left_ref("users", "id"), right_ref("posts", "author_id")).select("id", "title")
    sql = builder.to_lateral_sql("posts", "recent_posts")
    assert sql == (
        "(SELECT COALESCE(json_agg(sub.*), '[]'::json) AS \"recent_posts\" FROM "
        '(SELECT "id", "title" FROM "posts" AS "recent_posts" '
        'WHERE "users"."id" = "posts"."author_id") sub)'
    )
    with pytest.raises(InvalidArgumentError):
        builder.to_lateral_sql("posts", dialect="sqlite")


def test_group_by_having_and_offset():
    builder = (
        JoinManyBuilder()
        .select("author_id", Raw("count(*) AS n"))
        .group_by("author_id")
        .having(lambda h: h.raw("count(*) > 1"))
        .order_by_nulls("author_id", "asc", "last")
        .offset(10)
    )
    assert builder.to_subquery_sql("posts") == (
        'SELECT "author_id", count(*) AS n FROM "posts" GROUP BY "author_id" '
        'HAVING count(*) > 1 ORDER BY "author_id" ASC NULLS LAST OFFSET 10'
    )


def test_inner_join_inside_subquery():
    builder = JoinManyBuilder().inner_join(
        "users",
        lambda on, users: on.equal(users.id, right_ref("posts", "author_id")),
        alias="u",
    )
    assert builder.to_subquery_sql("posts") == (
        'SELECT * FROM "posts" JOIN "users" AS "u" ON "u"."id" = "posts"."author_id"'
    )
    with pytest.raises(InvalidArgumentError):
        JoinManyBuilder().inner_join("users", lambda on, users: None)


def test_through_lateral_uses_junction_table():
    builder = JoinManyBuilder().select("name")
    sql = builder.to_through_lateral_sql(
        "post_tags",
        "tags",
        "p",
        ("id", "post_id"),
        ("tag_id", "id"),
    )
    assert sql == (
        "(SELECT COALESCE(json_agg(sub.*), '[]'::json) AS \"tags\" FROM "
        '(SELECT "tags"."name" FROM "post_tags" AS "post_tags" JOIN "tags" AS "tags" '
        'ON "post_tags"."tag_id" = "tags"."id" WHERE "post_tags"."post_id" = "p"."id") sub)'
    )


def test_invalid_modifiers_raise():
    builder = JoinManyBuilder()
    with pytest.raises(InvalidArgumentError):
        builder.order_by("id", "sideways")
    with pytest.raises(InvalidArgumentError):
        builder.order_by_nulls("id", "ASC", "middle")
    with pytest.raises(InvalidArgumentError):
        builder.limit(-1)
    with pytest.raises(InvalidArgumentError):
        builder.offset(-1)


def test_lateral_join_clause():
    assert lateral_join_clause("SELECT 1", "sub") == 'LEFT JOIN LATERAL (SELECT 1) AS "sub" ON TRUE'
    assert lateral_join_clause("SELECT 1", "sub", left=False).startswith("JOIN LATERAL")


def test_proxy_from_name_only():
    proxy = TableProxy("events")
    assert proxy.occurredAt.render() == '"events"."occurred_at"'
    assert list(proxy) == []
