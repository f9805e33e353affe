"""Structured Logging: JSON formatter fields and idempotent setup."""

import json
import logging
import sys

import pytest

from geoprivacy.infrastructure.observability import JSONFormatter, setup_logging


def _record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "geoprivacy.test", logging.WARNING, __file__, 1, msg, None, None,
    )
    for key, val in extra.items():
        setattr(record, key, val)
    return record


def test_json_formatter_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "geoprivacy.test"
    assert log["message"] == "hello"
    assert "timestamp" in log


def test_json_formatter_surfaces_known_extras():
    record = _record(
        item_id="abc", privacy_level="HIDDEN", error_code="STORE_ERROR",
        reason="stale", radius_km=5.0, latitude=40.0,
    )
    log = json.loads(JSONFormatter().format(record))
    assert log["item_id"] == "abc"
    assert log["privacy_level"] == "HIDDEN"
    assert log["error_code"] == "STORE_ERROR"
    assert log["reason"] == "stale"
    assert log["radius_km"] == 5.0
    assert "latitude" not in log


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            "geoprivacy.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info(),
        )
    log = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in log["exception"]


@pytest.fixture
def restore_root_logger():
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


def test_setup_logging_is_idempotent(restore_root_logger):
    setup_logging("DEBUG", "json")
    handler = setup_logging("WARNING", "text")

    ours = [h for h in logging.root.handlers if h.get_name() == "geoprivacy"]
    assert ours == [handler]
    assert not isinstance(handler.formatter, JSONFormatter)
    assert logging.root.level == logging.WARNING


def test_setup_logging_unknown_level_falls_back_to_info(restore_root_logger):
    handler = setup_logging("chatty", "json")
    assert isinstance(handler.formatter, JSONFormatter)
    assert logging.root.level == logging.INFO
