"""Structured Logging — verifies JSON output and relay extra fields."""

import json
import logging

from metarelay.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "metarelay.services.relay_executor", logging.WARNING, __file__, 1,
        "Rejected transfer: already executed", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_base_fields_present():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "metarelay.services.relay_executor"
    assert log["message"] == "Rejected transfer: already executed"
    assert "timestamp" in log


def test_relay_extras_surfaced():
    log = json.loads(JSONFormatter().format(_record(
        digest="0xab", sender="0xs", nonce=2**255, error_code="ALREADY_EXECUTED",
    )))
    assert log["digest"] == "0xab"
    assert log["sender"] == "0xs"
    assert log["nonce"] == 2**255
    assert log["error_code"] == "ALREADY_EXECUTED"


def test_absent_extras_omitted():
    log = json.loads(JSONFormatter().format(_record()))
    assert "digest" not in log
    assert "relayer" not in log
