"""
Diagnostic records returned by the compatibility validators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

SEVERITIES: Tuple[str, ...] = ("error", "warning", "info")


@dataclass(frozen=True)
class Diagnostic:
    """
    One finding. ``code`` names the rule that fired (a catalog code such as
    ``CRDB_E101`` or a feature name such as ``SERIAL``); ``rule_code`` links a
    feature finding back to its catalog entry when there is one.
    """

    code: str
    severity: str
    category: str
    feature: str
    message: str
    alternative: Optional[str] = None
    location: Optional[Dict[str, Any]] = None
    detected: Optional[str] = None
    docs_url: Optional[str] = None
    auto_fix: Optional[Any] = None
    rule_code: Optional[str] = None

    @property
    def codes(self) -> Tuple[str, ...]:
        if self.rule_code and self.rule_code != self.code:
            return (self.code, self.rule_code)
        return (self.code,)

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def location_text(self) -> Optional[str]:
        if not self.location:
            return None
        loc = self.location
        parts = []
        if loc.get("table"):
            target = loc["table"]
            if loc.get("column"):
                target = f"{target}.{loc['column']}"
            parts.append(target)
        elif loc.get("column"):
            parts.append(loc["column"])
        for key in ("index", "constraint", "function", "trigger", "sequence", "object"):
            if loc.get(key):
                parts.append(f"{key} {loc[key]}")
        if loc.get("line") is not None:
            parts.append(f"line {loc['line']}")
        if loc.get("file"):
            parts.insert(0, loc["file"])
        return ", ".join(parts) or None


@dataclass
class ValidationResult:
    """
    Aggregate of diagnostics for one dialect; ``valid`` is true when no
    error-level diagnostic was recorded.
    """

    dialect: str
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "warning"]

    @property
    def info(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "info"]

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "info": len(self.info),
        }

    def codes(self) -> List[str]:
        return [d.code for d in self.diagnostics]

    def has_code(self, code: str) -> bool:
        return any(code in d.codes for d in self.diagnostics)

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if code in d.codes]

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> "ValidationResult":
        self.diagnostics.extend(diagnostics)
        return self

    def __bool__(self) -> bool:
        return self.valid

    def __len__(self) -> int:
        return len(self.diagnostics)
