import pytest

from relq.errors import InvalidArgumentError, UnsupportedNodeError
from relq.transpile import (
    ast_to_builder,
    escape_string,
    format_generated_expression,
    is_chainable_function,
    is_chainable_node,
    map_function_to_builder,
    replace_concat_placeholders,
)


def col(*names):
    return {"ColumnRef": {"fields": [{"String": {"sval": name}} for name in names]}}


def fn(name, *args, **extra):
    return {"FuncCall": {"funcname": [{"String": {"sval": part}} for part in name.split(".")], "args": list(args), **extra}}


def op(symbol, left, right):
    return {"A_Expr": {"kind": "AEXPR_OP", "name": [{"String": {"sval": symbol}}], "lexpr": left, "rexpr": right}}


def unary(symbol, operand):
    return {"A_Expr": {"kind": "AEXPR_OP", "name": [{"String": {"sval": symbol}}], "rexpr": operand}}


def text(value):
    return {"A_Const": {"sval": {"sval": value}}}


def integer(value):
    return {"A_Const": {"ival": {"ival": value}}}


def cast(arg, *type_names):
    return {"TypeCast": {"arg": arg, "typeName": {"names": [{"String": {"sval": name}} for name in type_names]}}}


def test_function_calls():
    assert ast_to_builder(fn("lower", col("email"))) == "g.lower(g.email)"
    assert ast_to_builder(fn("lower", col("users", "email")), chainable=True) == "g.email.lower()"
    assert ast_to_builder(fn("pg_catalog.char_length", col("name"))) == "g.length(g.name)"
    assert ast_to_builder(fn("count", agg_star=True)) == "g.count()"
    assert ast_to_builder(fn("now"), prefix="t") == "t.now()"


def test_text_search_config_argument_stays_an_argument():
    node = fn("to_tsvector", text("english"), col("body"))
    assert ast_to_builder(node, chainable=True) == "g.body.to_tsvector('english')"
    assert ast_to_builder(node) == "g.to_tsvector('english', g.body)"


def test_unknown_function():
    with pytest.raises(UnsupportedNodeError) as excinfo:
        ast_to_builder(fn("frobnicate", col("a")))
    assert str(excinfo.value).startswith('Unsupported function in generated expression: "frobnicate".')
    assert excinfo.value.kind == "function"
    assert ast_to_builder(fn("frobnicate", col("a")), allow_raw=True) == "g.func('frobnicate', g.a)"


def test_comparisons_and_arithmetic():
    status = op("=", col("status"), text("active"))
    assert ast_to_builder(status) == "g.compare(g.status, '=', 'active')"
    assert ast_to_builder(status, use_table_ref=True) == "g.status.eq('active')"
    assert ast_to_builder(op("+", col("price"), integer(1))) == "g.add(g.price, 1)"
    assert ast_to_builder(op("+", col("price"), integer(1)), chainable=True) == "g.price.add(1)"
    assert ast_to_builder(op("->>", col("data"), text("name")), chainable=True) == "g.data.jsonb_extract_text('name')"


def test_regex_operators():
    assert ast_to_builder(op("~*", col("name"), text("^a")), chainable=True) == "g.name.matches('^a', 'i')"
    assert ast_to_builder(op("!~", col("name"), text("^a")), chainable=True) == "g.name.matches('^a').not_()"
    assert ast_to_builder(op("~", col("name"), text("^a"))) == "g.regex(g.name, '~', '^a')"


def test_unknown_operator():
    distance = op("<->", col("a"), col("b"))
    with pytest.raises(UnsupportedNodeError):
        ast_to_builder(distance)
    assert ast_to_builder(distance, allow_raw=True) == "g.op(g.a, '<->', g.b)"


def test_prefix_operators():
    assert ast_to_builder(unary("-", col("balance"))) == "g.negate(g.balance)"
    assert ast_to_builder(unary("-", col("balance")), chainable=True) == "g.balance.negate()"
    assert ast_to_builder(unary("+", col("balance"))) == "g.balance"
    assert ast_to_builder(op("*", unary("-", col("a")), integer(2))) == "g.multiply(g.negate(g.a), 2)"
    with pytest.raises(UnsupportedNodeError) as excinfo:
        ast_to_builder(unary("~", col("flags")))
    assert excinfo.value.kind == "unary operator"


def test_string_constants_with_control_characters_compile():
    generated = ast_to_builder(op("=", col("note"), text("line one\nline 'two'\r\n\ttab\x00")))
    assert "\n" not in generated
    compile(generated, "<generated>", "eval")
    assert escape_string("a\nb\tc") == "a\\nb\\tc"
    assert escape_string("\x1b") == "\\x1b"


def test_concatenation_placeholders():
    full_name = op("||", col("first"), op("||", text(" "), col("last")))
    raw = ast_to_builder(full_name)
    assert raw == "__CONCAT__[g.first, __CONCAT__[' ', g.last]]"

    formatted = format_generated_expression(raw)
    assert formatted.is_array is True
    assert formatted.items == ["g.first", "' '", "g.last"]
    assert formatted.source == "[g.first, ' ', g.last]"

    wrapped = format_generated_expression(ast_to_builder(fn("upper", op("||", col("a"), col("b")))))
    assert wrapped.is_array is False
    assert wrapped.source == "g.upper(F.concat(g.a, g.b))"

    assert ast_to_builder(op("||", col("a"), col("b")), chainable=True) == "g.a.concat(g.b)"


def test_placeholder_parsing_skips_quoted_brackets():
    assert replace_concat_placeholders("__CONCAT__['[x]', g.a]", prefix="g") == "g.concat('[x]', g.a)"
    with pytest.raises(InvalidArgumentError):
        replace_concat_placeholders("__CONCAT__[g.a, g.b")


def test_sql_value_functions_and_coalesce():
    assert ast_to_builder({"SQLValueFunction": {"op": "SVFOP_CURRENT_TIMESTAMP"}}) == "g.current_timestamp()"
    with pytest.raises(UnsupportedNodeError):
        ast_to_builder({"SQLValueFunction": {"op": "SVFOP_UNKNOWN"}})
    nickname = {"CoalesceExpr": {"args": [col("nickname"), text("")]}}
    assert ast_to_builder(nickname) == "g.coalesce(g.nickname, '')"
    assert ast_to_builder(nickname, chainable=True) == "g.nickname.coalesce('')"


def test_type_casts():
    assert ast_to_builder(cast(col("data"), "pg_catalog", "text")) == "g.as_text(g.data)"
    assert ast_to_builder(cast(col("data"), "text"), chainable=True) == "g.data.as_text()"
    assert ast_to_builder(cast(text("x"), "text")) == "'x'"
    assert ast_to_builder(cast(col("code"), "pg_catalog", "varchar")) == "g.code"
    assert ast_to_builder(cast(col("payload"), "jsonb")) == "g.cast(g.payload, 'jsonb')"


def test_boolean_and_null_tests():
    both = {"BoolExpr": {"boolop": "AND_EXPR", "args": [col("active"), col("verified")]}}
    assert ast_to_builder(both) == "g.and_(g.active, g.verified)"
    assert ast_to_builder(both, use_table_ref=True) == "g.active.and_(g.verified)"
    deleted = {"NullTest": {"arg": col("deleted_at"), "nulltesttype": "IS_NULL"}}
    assert ast_to_builder(deleted) == "g.is_null(g.deleted_at)"
    assert ast_to_builder(deleted, chainable=True) == "g.deleted_at.is_null()"


def test_column_references_and_constants():
    assert ast_to_builder(col("created_at"), use_camel_case=True) == "g.createdAt"
    assert ast_to_builder(col("class")) == "g.col('class')"
    assert ast_to_builder(col("first name")) == "g.col('first name')"
    assert ast_to_builder({"A_Const": {"isnull": True}}) == "None"
    assert ast_to_builder({"A_Const": {"ival": {}}}) == "0"
    assert ast_to_builder({"A_Const": {"fval": {"fval": "1.5"}}}) == "1.5"
    assert ast_to_builder({"A_Const": {"boolval": {"boolval": True}}}) == "True"
    assert ast_to_builder(text("it's")) == "'it\\'s'"
    with pytest.raises(UnsupportedNodeError):
        ast_to_builder({"ColumnRef": {"fields": [{"A_Star": {}}]}})


def test_case_expression():
    grade = {
        "CaseExpr": {
            "args": [{"CaseWhen": {"expr": op(">", col("score"), integer(90)), "result": text("A")}}],
            "defresult": text("B"),
        }
    }
    assert ast_to_builder(grade) == "g.case().when(g.compare(g.score, '>', 90), 'A').else_('B')"


def test_unknown_nodes_and_empty_input():
    with pytest.raises(UnsupportedNodeError) as excinfo:
        ast_to_builder({"SubLink": {}})
    assert excinfo.value.kind == "AST node type"
    assert ast_to_builder(None) == "''"


def test_helpers():
    assert escape_string("it's \\") == "it\\'s \\\\"
    assert is_chainable_node(cast(col("a"), "text")) is True
    assert is_chainable_node(text("a")) is False
    assert map_function_to_builder("PG_CATALOG.STRPOS") == "position"
    assert map_function_to_builder("frobnicate") is None
    assert is_chainable_function("lower") is True
    assert is_chainable_function("now") is False
