"""
Masking of credentials before they reach a log record.

Keys are matched after camelCase and separators are folded away, so
``apiKey``, ``API_KEY`` and ``api-key`` are treated alike. Values are
matched for bearer headers, ``key=value`` credentials, AWS access key ids
(Aurora DSQL) and JWT-shaped tokens (Turso, Nile).
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

REDACTED_VALUE = "***"

_KEY_FRAGMENTS = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "apikey",
    "accesskey",
    "privatekey",
    "sslkey",
    "credential",
)

_VALUE_PATTERNS = (
    re.compile(r"\bbearer\s+\S+", re.IGNORECASE),
    re.compile(r"\b(?:password|passwd|pwd|secret|token|api_?key)\s*[=:]", re.IGNORECASE),
    re.compile(r"\b(?:password|secret|token|authorization)\b", re.IGNORECASE),
    re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b"),
    re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"),
)


def _fold(key: str) -> str:
    return re.sub(r"[^a-z0-9]", "", key.lower())


def is_sensitive_key(key: str) -> bool:
    folded = _fold(key)
    return any(fragment in folded for fragment in _KEY_FRAGMENTS)


def is_sensitive_value(value: str) -> bool:
    return any(pattern.search(value) for pattern in _VALUE_PATTERNS)


def redact_query_params(query: Mapping[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else val for key, val in query.items()}


def redact_value(value: Any, *, key: str | None = None) -> Any:
    """
    Redact ``value`` recursively. Mappings are redacted per key; lists and
    tuples keep their type.
    """

    if key is not None and is_sensitive_key(str(key)):
        return REDACTED_VALUE
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("utf-8", errors="ignore")
        return REDACTED_VALUE if text and is_sensitive_value(text) else value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_params(params: Iterable[Any]) -> list[Any]:
    return [redact_value(value) for value in params]
