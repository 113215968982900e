"""
Error hierarchy shared by builders, the transpiler and configuration.
"""

from __future__ import annotations

from typing import List


class RelqError(Exception):
    """Base class for errors raised by relq."""


class InvalidArgumentError(RelqError, ValueError):
    """Raised eagerly when a builder receives semantically invalid input."""


class UnsupportedNodeError(RelqError, NotImplementedError):
    """
    Raised by the expression transpiler for parse-tree nodes, operators or
    functions that have no registered handler.
    """

    def __init__(self, kind: str, name: str, hint: str) -> None:
        self.kind = kind
        self.name = name
        self.hint = hint
        super().__init__(f'Unsupported {kind} in generated expression: "{name}". {hint}')


class ConfigurationError(RelqError):
    """
    Aggregated configuration problems. Normally returned inside a
    ``ConfigResult``; raised only on explicit request.
    """

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")
