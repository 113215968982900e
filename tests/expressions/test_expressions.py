import pytest

from relq import columns as c
from relq.errors import InvalidArgumentError
from relq.expressions import F, case, col, generated, raw
from relq.schema import define_table


def test_column_references_and_chained_functions():
    assert col("email").to_sql() == '"email"'
    assert col("email", "u").to_sql() == '"u"."email"'
    assert col("email").lower().concat("x").to_sql() == "CONCAT(LOWER(\"email\"), 'x')"
    assert F.coalesce(col("nickname"), col("name"), "anon").to_sql() == "COALESCE(\"nickname\", \"name\", 'anon')"


def test_unknown_functions_raise_attribute_error():
    with pytest.raises(AttributeError):
        F.not_a_function
    with pytest.raises(AttributeError):
        col("a").not_a_function()


def test_keyword_functions_have_no_parentheses():
    assert F.current_timestamp().to_sql() == "CURRENT_TIMESTAMP"
    assert F.count().to_sql() == "COUNT(*)"
    assert F.count(col("id"), distinct=True).to_sql() == 'COUNT(DISTINCT "id")'


def test_arithmetic_and_operators():
    price, qty = col("price"), col("qty")
    assert (price * qty).to_sql() == '("price" * "qty")'
    assert price.add(1).subtract(2).to_sql() == '(("price" + 1) - 2)'
    assert (10 - qty).to_sql() == '(10 - "qty")'
    assert F.multiply(price, 2).to_sql() == '("price" * 2)'
    assert price.mod(3).to_sql() == 'MOD("price", 3)'
    assert (-price).to_sql() == '(-"price")'
    assert F.negate(price.add(1)).to_sql() == '(-("price" + 1))'


def test_comparisons_and_boolean_logic():
    active = col("status").eq("active")
    adult = col("age").gte(18)
    assert (active & adult).to_sql() == "((\"status\" = 'active') AND (\"age\" >= 18))"
    assert (~active).to_sql() == "(NOT (\"status\" = 'active'))"
    assert F.or_(active, col("vip").is_not_null()).to_sql() == "((\"status\" = 'active') OR (\"vip\" IS NOT NULL))"
    assert col("id").in_([1, 2, 3]).to_sql() == '("id" IN (1, 2, 3))'
    assert F.compare(col("a"), "<>", 1).to_sql() == '("a" <> 1)'
    with pytest.raises(InvalidArgumentError):
        F.compare(col("a"), "LIKE", 1)
    with pytest.raises(InvalidArgumentError):
        F.and_()


def test_regex_and_pattern_matching():
    assert col("code").matches("^A", "i").to_sql() == "(\"code\" ~* '^A')"
    assert F.regex(col("code"), "!~", "^B").to_sql() == "(\"code\" !~ '^B')"
    assert col("name").ilike("jo%").to_sql() == "(\"name\" ILIKE 'jo%')"
    with pytest.raises(InvalidArgumentError):
        F.regex(col("code"), "=~", "x")


def test_casts_and_special_syntax():
    assert col("id").as_text().to_sql() == '("id")::TEXT'
    assert F.cast(col("amount"), "NUMERIC(10, 2)").to_sql() == '("amount")::NUMERIC(10, 2)'
    assert col("name").substring(2, 3).to_sql() == 'SUBSTRING("name" FROM 2 FOR 3)'
    assert col("name").position("a").to_sql() == "POSITION('a' IN \"name\")"
    assert col("created_at").extract("year").to_sql() == 'EXTRACT(YEAR FROM "created_at")'
    assert F.extract("epoch", col("t")).to_sql() == 'EXTRACT(EPOCH FROM "t")'
    assert col("created_at").date_trunc("month").to_sql() == "DATE_TRUNC('month', \"created_at\")"
    with pytest.raises(InvalidArgumentError):
        col("t").extract("year; drop")


def test_json_and_text_search():
    assert col("meta").jsonb_extract("tags").jsonb_extract(0).to_sql() == "\"meta\"->'tags'->0"
    assert F.jsonb_extract_text(col("meta"), "name").to_sql() == "\"meta\"->>'name'"
    assert col("meta").jsonb_path(["a", "b"]).to_sql() == "\"meta\"#>ARRAY['a', 'b']"
    vector = col("title").to_tsvector("english").set_weight("a")
    assert vector.to_sql() == "SETWEIGHT(TO_TSVECTOR('english', \"title\"), 'A')"
    assert vector.ts_match(F.plainto_tsquery("db")).to_sql() == (
        "(SETWEIGHT(TO_TSVECTOR('english', \"title\"), 'A') @@ PLAINTO_TSQUERY('db'))"
    )
    with pytest.raises(InvalidArgumentError):
        col("title").set_weight("E")


def test_case_expressions():
    searched = case().when(col("score").gte(90), "A").when("score >= 80", "B").else_("C")
    assert searched.to_sql() == (
        "CASE WHEN (\"score\" >= 90) THEN 'A' WHEN score >= 80 THEN 'B' ELSE 'C' END"
    )
    simple = case(col("status")).when("new", 1).when("done", 2).end()
    assert simple.to_sql() == "CASE \"status\" WHEN 'new' THEN 1 WHEN 'done' THEN 2 END"
    with pytest.raises(InvalidArgumentError):
        case().end()


def test_raw_and_alias():
    assert raw("now() - interval '1 day'").to_sql() == "now() - interval '1 day'"
    assert F.sum(col("total")).as_("revenue").to_sql() == 'SUM("total") AS "revenue"'
    assert F.func("my_func", col("a"), 1).to_sql() == 'MY_FUNC("a", 1)'
    assert F.op(col("a"), "<->", col("b")).to_sql() == '("a" <-> "b")'


def test_generated_builder_resolves_columns_before_functions():
    table = define_table(
        "people",
        {"first": c.text("first_name"), "last": c.text(), "lower": c.text()},
    )
    g = generated(table)
    assert g.first.to_sql() == '"first_name"'
    assert g.lower.to_sql() == '"lower"'
    assert g.concat_ws(" ", g.first, g.last).to_sql() == "CONCAT_WS(' ', \"first_name\", \"last\")"
    assert g.col("first").to_sql() == '"first_name"'
    full = c.text().generated_always_as(g.upper(g.last))
    assert full.config.generated.expression == 'UPPER("last")'


def test_generated_builder_from_mapping():
    g = generated({"email": c.text("email_address"), "alias": "nick"})
    assert g.email.to_sql() == '"email_address"'
    assert g.alias.to_sql() == '"nick"'
    assert "email" in dir(g)
