"""
Environment-driven runtime settings.
"""

from __future__ import annotations

import os

SLOW_QUERY_ENV = "RELQ_SLOW_QUERY_MS"


def resolve_slow_query_ms(*, default: int = 100, override: int | None = None) -> int:
    """
    Resolve the slow-query threshold: explicit override, then the
    ``RELQ_SLOW_QUERY_MS`` environment variable, then ``default``.
    """

    if override is not None:
        return override
    raw = os.getenv(SLOW_QUERY_ENV)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default
