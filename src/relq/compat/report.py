"""
Plain-text rendering of validation results.
"""

from __future__ import annotations

from typing import Dict, List

from .diagnostics import Diagnostic, ValidationResult

_RESET = "\033[0m"
_DIM = "\033[2m"
_COLORS: Dict[str, str] = {
    "error": "\033[31m",
    "warning": "\033[33m",
    "info": "\033[36m",
}
_LABELS: Dict[str, str] = {
    "error": "ERROR",
    "warning": "WARNING",
    "info": "INFO",
}


def _paint(text: str, code: str, color: bool) -> str:
    return f"{code}{text}{_RESET}" if color else text


def format_diagnostic(diag: Diagnostic, *, color: bool = True) -> str:
    label = _LABELS.get(diag.severity, diag.severity.upper())
    head = f"{_paint(label, _COLORS.get(diag.severity, ''), color)} [{diag.code}]"
    if diag.rule_code and diag.rule_code != diag.code:
        head += f" ({diag.rule_code})"
    lines: List[str] = [f"{head} {diag.message}"]
    where = diag.location_text()
    if where:
        lines.append(f"  at: {where}")
    if diag.detected:
        lines.append(f"  found: {diag.detected}")
    if diag.alternative:
        lines.append(f"  use: {diag.alternative}")
    if diag.docs_url:
        lines.append(_paint(f"  docs: {diag.docs_url}", _DIM, color))
    return "\n".join(lines)


def summary_line(result: ValidationResult) -> str:
    counts = result.summary
    status = "PASSED" if result.valid else "FAILED"
    return f"{counts['errors']} errors, {counts['warnings']} warnings, {counts['info']} info; Status: {status}"


def format_diagnostics(result: ValidationResult, color: bool = True) -> str:
    """
    One block per diagnostic followed by the summary line, e.g.::

        ERROR [SERIAL] (DSQL-TYPE-001) SERIAL type not supported ...
          at: t.id
          found: SERIAL
          use: uuid() + gen_random_uuid()

        1 errors, 0 warnings, 0 info; Status: FAILED
    """

    blocks = [format_diagnostic(diag, color=color) for diag in result.diagnostics]
    blocks.append(summary_line(result))
    return "\n\n".join(blocks)
