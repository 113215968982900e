"""
Rule catalogs: coded templates that diagnostics are instantiated from, and
regex rules scanned over raw SQL.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from .diagnostics import Diagnostic


@dataclass(frozen=True)
class AutoFix:
    """
    Mechanical rewrite hint; consumers apply it outside the validator.
    """

    description: str
    original_type: Optional[str] = None
    replacement_type: Optional[str] = None
    additional_changes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleEntry:
    code: str
    severity: str
    message: str
    category: str
    alternative: Optional[str] = None
    docs_url: Optional[str] = None
    auto_fix: Optional[AutoFix] = None

    def diagnostic(
        self,
        *,
        feature: Optional[str] = None,
        severity: Optional[str] = None,
        message: Optional[str] = None,
        detected: Optional[str] = None,
        location: Optional[Mapping[str, Any]] = None,
    ) -> Diagnostic:
        return Diagnostic(
            code=self.code,
            severity=severity or self.severity,
            category=self.category,
            feature=feature or self.code,
            message=message or self.message,
            alternative=self.alternative,
            location=dict(location) if location else None,
            detected=detected,
            docs_url=self.docs_url,
            auto_fix=self.auto_fix,
        )


class RuleCatalog:
    """
    Immutable code → :class:`RuleEntry` table for one dialect.
    """

    def __init__(self, dialect: str, entries: Iterable[RuleEntry]) -> None:
        self.dialect = dialect
        self._entries: Dict[str, RuleEntry] = {}
        for entry in entries:
            if entry.code in self._entries:
                raise ValueError(f"Duplicate {dialect} rule code {entry.code}")
            self._entries[entry.code] = entry

    def lookup(self, code: str) -> Optional[RuleEntry]:
        return self._entries.get(code)

    def create(
        self,
        code: str,
        severity: Optional[str] = None,
        *,
        feature: Optional[str] = None,
        message: Optional[str] = None,
        detected: Optional[str] = None,
        **location: Any,
    ) -> Diagnostic:
        """
        Instantiate a diagnostic from the template for ``code``, filling
        the location from keyword arguments (``table=``, ``column=`` ...).
        """

        entry = self._entries.get(code)
        loc = {key: value for key, value in location.items() if value is not None}
        if entry is None:
            return Diagnostic(
                code=code,
                severity="error",
                category="UNKNOWN",
                feature=feature or code,
                message=message or f"Unknown {self.dialect} validation rule: {code}",
                location=loc or None,
                detected=detected,
            )
        return entry.diagnostic(
            feature=feature,
            severity=severity,
            message=message,
            detected=detected,
            location=loc,
        )

    def codes(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, code: object) -> bool:
        return code in self._entries

    def __iter__(self) -> Iterator[RuleEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class SqlRule:
    """
    One regex rule. ``feature`` doubles as the diagnostic code for
    findings; ``rule_code`` links to a catalog entry.
    """

    feature: str
    pattern: str
    message: str
    alternative: Optional[str] = None
    category: str = "SYNTAX"
    severity: str = "error"
    rule_code: Optional[str] = None
    docs_url: Optional[str] = None
    flags: int = re.IGNORECASE
    regex: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, self.flags))

    def finditer(self, sql: str) -> Iterator["re.Match[str]"]:
        return self.regex.finditer(sql)

    def search(self, sql: str) -> Optional["re.Match[str]"]:
        return self.regex.search(sql)
