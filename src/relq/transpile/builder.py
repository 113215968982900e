"""
Turn a PostgreSQL expression parse tree into builder source code.

Nodes use the JSON shape produced by ``libpg_query`` (for example the
``pg_get_expr`` text of a generated column fed through a parser)::

    {"FuncCall": {"funcname": [{"String": {"sval": "lower"}}],
                  "args": [{"ColumnRef": {"fields": [{"String": {"sval": "email"}}]}}]}}

becomes ``g.lower(g.email)``, or ``g.email.lower()`` with ``chainable=True``.
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from ..errors import UnsupportedNodeError
from ..utils import get_logger, to_camel_case
from .functions import CONFIG_FIRST_FUNCTIONS, is_chainable_function, map_function_to_builder

logger = get_logger("transpile")

COMPARISON_METHODS = {"=": "eq", "<>": "ne", "!=": "ne", "<": "lt", ">": "gt", "<=": "lte", ">=": "gte"}
ARITHMETIC_METHODS = {"+": "add", "-": "subtract", "*": "multiply", "/": "divide", "%": "mod"}
JSON_METHODS = {"->": "jsonb_extract", "->>": "jsonb_extract_text", "@@": "ts_match"}
REGEX_OPERATORS = ("~", "~*", "!~", "!~*")

# Casts that change nothing worth expressing in builder code.
TRANSPARENT_CASTS = frozenset(
    {"regconfig", "varchar", "character varying", "char", "bpchar", "numeric", "int4", "integer"}
)

SQL_VALUE_FUNCTIONS = {
    "SVFOP_CURRENT_DATE": "current_date",
    "SVFOP_CURRENT_TIME": "current_time",
    "SVFOP_CURRENT_TIME_N": "current_time",
    "SVFOP_CURRENT_TIMESTAMP": "current_timestamp",
    "SVFOP_CURRENT_TIMESTAMP_N": "current_timestamp",
    "SVFOP_LOCALTIME": "localtime",
    "SVFOP_LOCALTIME_N": "localtime",
    "SVFOP_LOCALTIMESTAMP": "localtimestamp",
    "SVFOP_LOCALTIMESTAMP_N": "localtimestamp",
    "SVFOP_CURRENT_USER": "current_user",
    "SVFOP_SESSION_USER": "session_user",
}

CONCAT_PLACEHOLDER = "__CONCAT__["


_PYTHON_ESCAPES = {"\\": "\\\\", "'": "\\'", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _escape_char(char: str) -> str:
    escaped = _PYTHON_ESCAPES.get(char)
    if escaped is not None:
        return escaped
    if ord(char) < 0x20 or char == "\x7f":
        return f"\\x{ord(char):02x}"
    return char


def escape_string(value: str) -> str:
    """
    Escape ``value`` for a single-quoted Python literal in generated code.
    """

    return "".join(_escape_char(char) for char in value)


def _node_type(node: Mapping[str, Any]) -> str:
    return next(iter(node), "")


def _names(items: Optional[Sequence[Mapping[str, Any]]]) -> List[str]:
    names = []
    for item in items or ():
        value = item.get("String", {}).get("sval")
        if value:
            names.append(value)
    return names


def _scalar(value: Any, key: str) -> Any:
    # libpg_query nests scalars ({"ival": {"ival": 3}}) and omits zero values.
    if isinstance(value, Mapping):
        return value.get(key)
    return value


def is_chainable_node(node: Optional[Mapping[str, Any]]) -> bool:
    """
    Whether the code generated for ``node`` is an expression object that
    accepts method calls.
    """

    if not node:
        return False
    kind = _node_type(node)
    if kind in ("ColumnRef", "FuncCall", "CoalesceExpr", "CaseExpr"):
        return True
    if kind == "TypeCast":
        return is_chainable_node(node["TypeCast"].get("arg"))
    if kind == "A_Expr":
        expr = node["A_Expr"]
        return is_chainable_node(expr.get("lexpr")) or is_chainable_node(expr.get("rexpr"))
    return False


@dataclass(frozen=True)
class TranspileOptions:
    prefix: str = "g"
    chainable: bool = False
    use_table_ref: bool = False
    use_camel_case: bool = False
    allow_raw: bool = False


class BuilderTranspiler:
    """
    Recursive converter; one ``visit_<NodeType>`` method per supported node.
    """

    def __init__(self, options: TranspileOptions) -> None:
        self.options = options

    @property
    def prefix(self) -> str:
        return self.options.prefix

    def transpile(self, node: Optional[Mapping[str, Any]]) -> str:
        if not node:
            return "''"
        kind = _node_type(node)
        visitor = getattr(self, f"visit_{kind}", None)
        if visitor is None:
            raise UnsupportedNodeError(
                "AST node type",
                kind,
                "Add a visit_" + kind + " handler to BuilderTranspiler.",
            )
        return visitor(node[kind])

    def _args(self, nodes: Optional[Sequence[Mapping[str, Any]]]) -> List[str]:
        return [self.transpile(arg) for arg in nodes or ()]

    def _method(self, receiver: str, method: str, args: Sequence[str] = ()) -> str:
        return f"{receiver}.{method}({', '.join(args)})"

    # ------------------------------------------------------------------ #
    # Functions
    # ------------------------------------------------------------------ #
    def visit_FuncCall(self, func: Mapping[str, Any]) -> str:
        name = ".".join(_names(func.get("funcname")))
        raw_args = list(func.get("args") or ())
        args = self._args(raw_args)
        method = map_function_to_builder(name)
        if method is None:
            if self.options.allow_raw:
                logger.debug("Emitting generic call for unmapped function %s", name)
                return self._method(self.prefix, "func", [f"'{escape_string(name)}'", *args])
            raise UnsupportedNodeError(
                "function",
                name,
                "Add this function to KNOWN_BUILDER_FUNCTIONS in relq.transpile.functions.",
            )
        if func.get("agg_star") and not args:
            return self._method(self.prefix, method)

        if self.options.chainable and args and is_chainable_function(name):
            short_name = name.lower().rsplit(".", 1)[-1]
            if short_name in CONFIG_FIRST_FUNCTIONS and len(args) >= 2:
                if not is_chainable_node(raw_args[0]) and is_chainable_node(raw_args[1]):
                    config, base, *rest = args
                    return self._method(base, method, [config, *rest])
            if is_chainable_node(raw_args[0]):
                first, *rest = args
                return self._method(first, method, rest)
        return self._method(self.prefix, method, args)

    def visit_CoalesceExpr(self, expr: Mapping[str, Any]) -> str:
        raw_args = list(expr.get("args") or ())
        args = self._args(raw_args)
        if self.options.chainable and args and is_chainable_node(raw_args[0]):
            first, *rest = args
            return self._method(first, "coalesce", rest)
        return self._method(self.prefix, "coalesce", args)

    def visit_SQLValueFunction(self, expr: Mapping[str, Any]) -> str:
        op = expr.get("op", "")
        method = SQL_VALUE_FUNCTIONS.get(op)
        if method is None:
            raise UnsupportedNodeError("SQL value function", op, "Map it in SQL_VALUE_FUNCTIONS.")
        return self._method(self.prefix, method)

    # ------------------------------------------------------------------ #
    # Operators
    # ------------------------------------------------------------------ #
    def visit_A_Expr(self, expr: Mapping[str, Any]) -> str:
        names = _names(expr.get("name"))
        op = names[0] if names else ""
        left_node = expr.get("lexpr")
        if left_node is None:
            return self._unary(op, expr.get("rexpr"))
        left_chainable = is_chainable_node(left_node)
        chain = self.options.chainable and left_chainable
        left = self.transpile(left_node)
        right = self.transpile(expr.get("rexpr"))

        if op == "||":
            if chain:
                return self._method(left, "concat", [right])
            return f"{CONCAT_PLACEHOLDER}{left}, {right}]"
        if op in JSON_METHODS or op in ARITHMETIC_METHODS:
            method = JSON_METHODS.get(op) or ARITHMETIC_METHODS[op]
            if chain:
                return self._method(left, method, [right])
            return self._method(self.prefix, method, [left, right])
        if op in COMPARISON_METHODS:
            if (self.options.use_table_ref or self.options.chainable) and left_chainable:
                return self._method(left, COMPARISON_METHODS[op], [right])
            return self._method(self.prefix, "compare", [left, f"'{op}'", right])
        if op in REGEX_OPERATORS:
            if chain:
                args = [right, "'i'"] if "*" in op else [right]
                call = self._method(left, "matches", args)
                return call + ".not_()" if op.startswith("!") else call
            return self._method(self.prefix, "regex", [left, f"'{op}'", right])
        if self.options.allow_raw:
            logger.debug("Emitting generic operator call for %s", op)
            return self._method(self.prefix, "op", [left, f"'{escape_string(op)}'", right])
        raise UnsupportedNodeError(
            "operator",
            op,
            "Add explicit handling for this operator in BuilderTranspiler.visit_A_Expr.",
        )

    def _unary(self, op: str, operand_node: Optional[Mapping[str, Any]]) -> str:
        operand = self.transpile(operand_node)
        if op == "+":
            return operand
        if op == "-":
            if self.options.chainable and is_chainable_node(operand_node):
                return self._method(operand, "negate")
            return self._method(self.prefix, "negate", [operand])
        raise UnsupportedNodeError("unary operator", op, "Only prefix + and - are mapped.")

    def visit_BoolExpr(self, expr: Mapping[str, Any]) -> str:
        boolop = expr.get("boolop")
        args = self._args(expr.get("args"))
        if boolop == "NOT_EXPR":
            if self.options.use_table_ref and args:
                return f"{args[0]}.not_()"
            return self._method(self.prefix, "not_", args[:1])
        method = {"AND_EXPR": "and_", "OR_EXPR": "or_"}.get(boolop or "")
        if method is None:
            raise UnsupportedNodeError("boolean operator", str(boolop), "Expected AND_EXPR, OR_EXPR or NOT_EXPR.")
        if self.options.use_table_ref and len(args) >= 2:
            chained = args[0]
            for arg in args[1:]:
                chained = self._method(chained, method, [arg])
            return chained
        return self._method(self.prefix, method, args)

    def visit_NullTest(self, test: Mapping[str, Any]) -> str:
        arg_node = test.get("arg")
        arg = self.transpile(arg_node)
        method = "is_null" if test.get("nulltesttype") == "IS_NULL" else "is_not_null"
        if self.options.chainable and is_chainable_node(arg_node):
            return self._method(arg, method)
        return self._method(self.prefix, method, [arg])

    # ------------------------------------------------------------------ #
    # Leaves
    # ------------------------------------------------------------------ #
    def visit_ColumnRef(self, ref: Mapping[str, Any]) -> str:
        fields = _names(ref.get("fields"))
        if not fields:
            raise UnsupportedNodeError("column reference", "*", "Only named columns can be transpiled.")
        name = fields[-1]
        if self.options.use_camel_case:
            name = to_camel_case(name)
        if name.isidentifier() and not keyword.iskeyword(name):
            return f"{self.prefix}.{name}"
        return self._method(self.prefix, "col", [f"'{escape_string(name)}'"])

    def visit_A_Const(self, const: Mapping[str, Any]) -> str:
        if const.get("isnull"):
            return "None"
        if "sval" in const:
            return f"'{escape_string(str(_scalar(const['sval'], 'sval') or ''))}'"
        if "ival" in const:
            return str(_scalar(const["ival"], "ival") or 0)
        if "fval" in const:
            return str(_scalar(const["fval"], "fval"))
        if "boolval" in const:
            return "True" if _scalar(const["boolval"], "boolval") else "False"
        return "''"

    def visit_TypeCast(self, cast: Mapping[str, Any]) -> str:
        arg_node = cast.get("arg") or {}
        arg = self.transpile(arg_node)
        type_name = ".".join(_names((cast.get("typeName") or {}).get("names")))
        short_name = type_name.lower()
        if short_name.startswith("pg_catalog."):
            short_name = short_name[len("pg_catalog."):]
        arg_chainable = is_chainable_node(arg_node)

        if short_name == "text":
            if "A_Const" in arg_node:
                return arg
            if self.options.chainable and arg_chainable:
                return self._method(arg, "as_text")
            return self._method(self.prefix, "as_text", [arg])
        if short_name in TRANSPARENT_CASTS or "character varying" in short_name:
            return arg
        if self.options.chainable and arg_chainable:
            return self._method(arg, "cast", [f"'{type_name}'"])
        return self._method(self.prefix, "cast", [arg, f"'{type_name}'"])

    def visit_CaseExpr(self, expr: Mapping[str, Any]) -> str:
        subject = expr.get("arg")
        chain = self._method(self.prefix, "case", [self.transpile(subject)] if subject else [])
        for branch in expr.get("args") or ():
            when = branch.get("CaseWhen")
            if when is None:
                continue
            condition = self.transpile(when.get("expr"))
            result = self.transpile(when.get("result"))
            chain = self._method(chain, "when", [condition, result])
        default = expr.get("defresult")
        if default:
            return self._method(chain, "else_", [self.transpile(default)])
        return self._method(chain, "end")


def ast_to_builder(
    node: Optional[Mapping[str, Any]],
    prefix: str = "g",
    *,
    chainable: bool = False,
    use_table_ref: bool = False,
    use_camel_case: bool = False,
    allow_raw: bool = False,
) -> str:
    """
    Builder source for one expression node.

    With ``chainable`` the first argument of a chainable function becomes
    the receiver (``g.email.lower()``). ``use_table_ref`` chains comparisons
    and boolean operators off their left operand. ``allow_raw`` emits
    ``g.func(...)``/``g.op(...)`` for unmapped functions and operators
    instead of raising :class:`~relq.errors.UnsupportedNodeError`.

    A top-level ``||`` without ``chainable`` yields a ``__CONCAT__[...]``
    placeholder; pass the result through :func:`format_generated_expression`.
    """

    options = TranspileOptions(
        prefix=prefix,
        chainable=chainable,
        use_table_ref=use_table_ref,
        use_camel_case=use_camel_case,
        allow_raw=allow_raw,
    )
    return BuilderTranspiler(options).transpile(node)


__all__ = [
    "BuilderTranspiler",
    "CONCAT_PLACEHOLDER",
    "TranspileOptions",
    "ast_to_builder",
    "escape_string",
    "is_chainable_node",
]
