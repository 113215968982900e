"""
Post-pass that replaces ``__CONCAT__[...]`` placeholders left by
:func:`~relq.transpile.builder.ast_to_builder` with ``concat`` calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from ..errors import InvalidArgumentError
from .builder import CONCAT_PLACEHOLDER


@dataclass
class FormattedExpression:
    """
    ``is_array`` is true when the whole expression was a ``||`` chain; its
    operands are then listed separately in ``items``.
    """

    is_array: bool
    items: List[str] = field(default_factory=list)

    @property
    def source(self) -> str:
        if self.is_array:
            return "[" + ", ".join(self.items) + "]"
        return self.items[0] if self.items else "''"


def _closing_bracket(text: str, start: int) -> int:
    """
    Index of the ``]`` closing the placeholder whose contents begin at
    ``start``. Quoted strings are skipped, honouring backslash escapes.
    """

    depth = 0
    index = start
    in_quote = False
    while index < len(text):
        char = text[index]
        if in_quote:
            if char == "\\":
                index += 2
                continue
            if char == "'":
                in_quote = False
        elif char == "'":
            in_quote = True
        elif char in "[(":
            depth += 1
        elif char in "])":
            if depth == 0:
                return index
            depth -= 1
        index += 1
    raise InvalidArgumentError(f"Unbalanced concat placeholder in {text!r}")


def _split_top_level(inner: str) -> List[str]:
    items: List[str] = []
    depth = 0
    in_quote = False
    current: List[str] = []
    index = 0
    while index < len(inner):
        char = inner[index]
        if in_quote:
            current.append(char)
            if char == "\\" and index + 1 < len(inner):
                current.append(inner[index + 1])
                index += 2
                continue
            if char == "'":
                in_quote = False
        elif char == "'":
            in_quote = True
            current.append(char)
        elif char in "[(":
            depth += 1
            current.append(char)
        elif char in "])":
            depth -= 1
            current.append(char)
        elif char == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1
    tail = "".join(current).strip()
    if tail:
        items.append(tail)
    return items


def _placeholder_items(expr: str) -> Tuple[List[str], int]:
    """
    Flattened operands of the placeholder at the start of ``expr`` and the
    index just past it. Nested placeholders contribute their operands.
    """

    start = len(CONCAT_PLACEHOLDER)
    end = _closing_bracket(expr, start)
    items: List[str] = []
    for item in _split_top_level(expr[start:end]):
        if item.startswith(CONCAT_PLACEHOLDER):
            nested, _ = _placeholder_items(item)
            items.extend(nested)
        else:
            items.append(item)
    return items, end + 1


def replace_concat_placeholders(expr: str, prefix: str = "F") -> str:
    """
    Rewrite every placeholder as one ``{prefix}.concat(...)`` call.
    """

    parts: List[str] = []
    position = 0
    while True:
        found = expr.find(CONCAT_PLACEHOLDER, position)
        if found == -1:
            parts.append(expr[position:])
            break
        parts.append(expr[position:found])
        items, end = _placeholder_items(expr[found:])
        cleaned = [replace_concat_placeholders(item, prefix) for item in items]
        parts.append(f"{prefix}.concat({', '.join(cleaned)})")
        position = found + end
    return "".join(parts)


def format_generated_expression(expr: str, prefix: str = "F") -> FormattedExpression:
    """
    Normalise transpiler output. A top-level concatenation is returned as
    its list of operands; any other expression has nested placeholders
    replaced by ``concat`` calls.
    """

    if expr.startswith(CONCAT_PLACEHOLDER):
        items, end = _placeholder_items(expr)
        if end == len(expr):
            return FormattedExpression(True, [replace_concat_placeholders(item, prefix) for item in items])
    return FormattedExpression(False, [replace_concat_placeholders(expr, prefix)])
