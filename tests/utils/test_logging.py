import logging

import pytest

from relq.utils import (
    camel_to_snake,
    get_correlation_id,
    get_logger,
    resolve_slow_query_ms,
    set_correlation_id,
    time_call,
    to_camel_case,
    to_pascal_case,
)
from relq.utils.logging import CorrelationIdFilter


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"
    generated = set_correlation_id()
    assert generated != "test-token"
    assert len(generated) == 36


def test_correlation_filter_stamps_records():
    set_correlation_id("req-42")
    record = logging.LogRecord("relq.tests", logging.INFO, __file__, 1, "hello", None, None)
    assert CorrelationIdFilter().filter(record) is True
    assert record.correlation_id == "req-42"


def test_loggers_live_under_the_package_namespace():
    logger = get_logger("tests.logging")
    assert logger.name == "relq.tests.logging"
    assert logging.getLogger("relq").handlers


def test_time_call_logs_duration(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, sql="SELECT 1", params=[1], threshold_ms=10_000) as timer:
        pass
    records = [record for record in caplog.records if record.name == logger.name]
    assert records[-1].levelno == logging.DEBUG
    assert "unit-test took" in records[-1].message
    assert records[-1].sql == "SELECT 1"
    assert timer.elapsed_ms >= 0


def test_time_call_warns_on_slow_blocks(caplog):
    logger = get_logger("tests.slow")
    with caplog.at_level(logging.WARNING, logger=logger.name):
        with time_call("slow-query", logger, threshold_ms=0):
            pass
    assert [record.levelno for record in caplog.records if record.name == logger.name] == [logging.WARNING]


def test_time_call_logs_even_when_the_block_raises(caplog):
    logger = get_logger("tests.failing")
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        with pytest.raises(RuntimeError):
            with time_call("failing", logger):
                raise RuntimeError("boom")
    assert "failing took" in caplog.text


@pytest.mark.parametrize(
    "env, override, expected",
    [
        (None, None, 100),
        ("250", None, 250),
        ("250", 5, 5),
        ("fast", None, 100),
        ("-1", None, 100),
        ("  ", None, 100),
        ("0", None, 0),
    ],
)
def test_resolve_slow_query_ms(monkeypatch, env, override, expected):
    if env is None:
        monkeypatch.delenv("RELQ_SLOW_QUERY_MS", raising=False)
    else:
        monkeypatch.setenv("RELQ_SLOW_QUERY_MS", env)
    assert resolve_slow_query_ms(default=100, override=override) == expected


def test_naming_helpers():
    assert camel_to_snake("createdAt") == "created_at"
    assert camel_to_snake("HTTPResponseCode") == "http_response_code"
    assert to_camel_case("user_id") == "userId"
    assert to_camel_case("_2fa_secret") == "faSecret"
    assert to_camel_case("") == "unknown"
    assert to_pascal_case("order_items") == "OrderItems"
    assert to_pascal_case("") == "Unknown"
