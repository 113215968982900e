"""
Naming utilities shared by column proxies and code generation.
"""

import re


_FIRST_CAP_RE = re.compile("(.)([A-Z][a-z]+)")
_ALL_CAP_RE = re.compile("([a-z0-9])([A-Z])")
_LEADING_JUNK_RE = re.compile(r"^[_0-9]+")


def camel_to_snake(name: str) -> str:
    """
    Convert ``camelCase`` / ``CamelCase`` names to ``snake_case`` column names.
    """
    step1 = _FIRST_CAP_RE.sub(r"\1_\2", name)
    return _ALL_CAP_RE.sub(r"\1_\2", step1).lower()


def to_camel_case(name: str) -> str:
    if not name:
        return "unknown"
    words = _LEADING_JUNK_RE.sub("", name).split("_")
    return "".join(
        word.lower() if i == 0 else word[:1].upper() + word[1:].lower()
        for i, word in enumerate(words)
    )


def to_pascal_case(name: str) -> str:
    if not name:
        return "Unknown"
    words = _LEADING_JUNK_RE.sub("", name).split("_")
    return "".join(word[:1].upper() + word[1:].lower() for word in words)
