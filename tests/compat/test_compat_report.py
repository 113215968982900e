import pytest

from relq.compat import (
    DSQL_RULES,
    Diagnostic,
    RuleCatalog,
    RuleEntry,
    SqlRule,
    ValidationResult,
    format_diagnostic,
    format_diagnostics,
    summary_line,
)


def serial_diagnostic(**overrides):
    fields = dict(
        code="SERIAL",
        severity="error",
        category="DATA_TYPE",
        feature="SERIAL",
        message="SERIAL type not supported",
        alternative="uuid() + gen_random_uuid()",
        location={"table": "t", "column": "id"},
        detected="SERIAL",
        docs_url="https://example.com/types",
        rule_code="DSQL-TYPE-001",
    )
    fields.update(overrides)
    return Diagnostic(**fields)


def test_format_diagnostic_plain():
    text = format_diagnostic(serial_diagnostic(), color=False)
    assert text == (
        "ERROR [SERIAL] (DSQL-TYPE-001) SERIAL type not supported\n"
        "  at: t.id\n"
        "  found: SERIAL\n"
        "  use: uuid() + gen_random_uuid()\n"
        "  docs: https://example.com/types"
    )


def test_format_diagnostic_colored():
    text = format_diagnostic(serial_diagnostic(severity="warning", docs_url=None))
    assert text.startswith("\033[33mWARNING\033[0m [SERIAL]")
    assert "docs:" not in text


def test_location_text_variants():
    diag = serial_diagnostic(location={"file": "001.sql", "table": "t", "index": "idx_t", "line": 3})
    assert diag.location_text() == "001.sql, t, index idx_t, line 3"
    assert serial_diagnostic(location={"column": "c"}).location_text() == "c"
    assert serial_diagnostic(location=None).location_text() is None
    assert serial_diagnostic().codes == ("SERIAL", "DSQL-TYPE-001")
    assert serial_diagnostic(rule_code=None).codes == ("SERIAL",)


def test_result_aggregates_and_summary():
    result = ValidationResult("dsql")
    assert result.valid is True
    assert summary_line(result) == "0 errors, 0 warnings, 0 info; Status: PASSED"
    assert format_diagnostics(result, color=False) == summary_line(result)

    result.extend([serial_diagnostic(), serial_diagnostic(code="DSQL-CONS-001", severity="warning", rule_code=None)])
    assert bool(result) is False
    assert len(result) == 2
    assert result.summary == {"errors": 1, "warnings": 1, "info": 0}
    assert summary_line(result) == "1 errors, 1 warnings, 0 info; Status: FAILED"
    report = format_diagnostics(result, color=False)
    assert report.split("\n\n")[-1] == summary_line(result)
    assert report.count("\n\n") == 2


def test_catalog_create_and_unknown_codes():
    diag = DSQL_RULES.create("DSQL-SEQ-001", detected="CREATE SEQUENCE s", sequence="s", table=None)
    assert diag.code == "DSQL-SEQ-001"
    assert diag.location == {"sequence": "s"}
    assert diag.alternative == "Use UUID with gen_random_uuid() for unique IDs"
    assert DSQL_RULES.create("DSQL-SEQ-001", "warning").severity == "warning"

    unknown = DSQL_RULES.create("DSQL-NOPE-999")
    assert unknown.category == "UNKNOWN"
    assert unknown.message == "Unknown DSQL validation rule: DSQL-NOPE-999"
    assert "DSQL-TYPE-001" in DSQL_RULES
    assert DSQL_RULES.lookup("DSQL-TYPE-002").alternative == "text()"


def test_catalog_rejects_duplicate_codes():
    entry = RuleEntry("X-1", "error", "msg", "misc")
    with pytest.raises(ValueError):
        RuleCatalog("X", [entry, entry])
    assert len(RuleCatalog("X", [entry])) == 1


def test_sql_rule_is_case_insensitive():
    rule = SqlRule("LISTEN", r"\bLISTEN\b", "LISTEN not supported")
    assert rule.search("listen jobs") is not None
    assert [m.group(0) for m in rule.finditer("LISTEN a; listen b")] == ["LISTEN", "listen"]
