# src/petads/tests/test_logging/test_formatters.py
import json
import logging
import sys

from petads.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record(exc_info=None):
    return logging.LogRecord("petads.service", logging.INFO, __file__, 10, "hello %s", ("tester",), exc_info)


def test_json_formatter_basic_fields():
    rec = make_record()
    rec.operation = "delete_ad"
    rec.correlation_id = "op-1"

    data = json.loads(JsonFormatter(env="testing", service="svc").format(rec))

    assert data["message"] == "hello tester"
    assert data["level"] == "INFO"
    assert data["logger"] == "petads.service"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert data["correlation_id"] == "op-1"
    assert data["operation"] == "delete_ad"
    assert "timestamp" in data
    assert "version" in data


def test_json_formatter_leaves_out_standard_record_attributes():
    data = json.loads(JsonFormatter().format(make_record()))

    for attr in ("args", "msg", "levelno", "thread", "processName"):
        assert attr not in data


def test_json_formatter_non_serializable_extra():
    class Opaque:
        def __repr__(self):
            return "<Opaque>"

    rec = make_record()
    rec.obj = Opaque()

    data = json.loads(JsonFormatter().format(rec))

    assert data["obj"] == "<Opaque>"


def test_json_formatter_includes_traceback():
    try:
        raise ValueError("boom")
    except ValueError:
        rec = make_record(exc_info=sys.exc_info())

    data = json.loads(JsonFormatter().format(rec))

    assert "ValueError: boom" in data["exc_info"]


def test_color_formatter_line_layout():
    rec = make_record()
    rec.correlation_id = "op-9"

    line = ColorFormatter().format(rec)

    assert ColorFormatter.COLOR_CODES["INFO"] in line
    assert "petads.service" in line
    assert "op-9" in line
    assert line.endswith("hello tester")
