# src/petads/tests/test_logging/test_builder_setup.py
import json
import logging
from pathlib import Path

import pytest

from petads.core.logging.builder import (
    is_queue_logging_active,
    make_dict_config,
    setup_logging,
    stop_queue_logging,
)
from petads.core.logging.filters import reset_correlation_id, set_correlation_id
from petads.tests.test_fixtures.settings_fixtures import make_test_settings


@pytest.fixture(autouse=True)
def restore_session_logging(settings):
    """These tests reconfigure global logging; put the session config back afterwards."""
    yield
    stop_queue_logging()
    setup_logging(settings)


def test_stdout_config_uses_console_handlers_only():
    cfg = make_dict_config(make_test_settings(LOG_TO_STDOUT=True))

    assert set(cfg["handlers"]) == {"console", "error_console"}
    assert cfg["handlers"]["error_console"]["level"] == "ERROR"


def test_file_config_adds_rotating_files(tmp_path):
    cfg = make_dict_config(make_test_settings(LOG_TO_STDOUT=False, LOG_DIR=tmp_path, LOG_FORMAT="json"))

    assert set(cfg["handlers"]) == {"console", "file", "error_file"}
    assert cfg["handlers"]["file"]["filename"] == str(tmp_path / "app.log")
    assert cfg["handlers"]["console"]["formatter"] == "json"
    assert cfg["handlers"]["file"]["filters"] == ["correlation_id", "redact"]


@pytest.mark.parametrize("enabled, level", [(True, "DEBUG"), (False, "WARNING")])
def test_sql_logging_toggle(enabled, level):
    cfg = make_dict_config(make_test_settings(ENABLE_SQL_LOGGING=enabled))

    assert cfg["loggers"]["sqlalchemy.engine"]["level"] == level
    assert "sqlalchemy.pool" in cfg["loggers"]
    assert "petads" in cfg["loggers"]


def test_setup_logging_creates_log_dir(tmp_path):
    log_dir = tmp_path / "logs"
    assert not log_dir.exists()

    setup_logging(make_test_settings(LOG_TO_STDOUT=False, LOG_DIR=log_dir))

    assert log_dir.exists()
    assert logging.getLogger().handlers


def test_queue_listener_writes_redacted_json(tmp_path):
    settings = make_test_settings(
        LOG_TO_STDOUT=False, LOG_DIR=tmp_path, LOG_FORMAT="json", LOG_USE_QUEUE=True, LOG_LEVEL="DEBUG"
    )
    setup_logging(settings)
    assert is_queue_logging_active()

    logger = logging.getLogger("petads.test.queue")
    token = set_correlation_id("queue-op-1")
    try:
        for i in range(5):
            logger.info("queued message %d", i, extra={"iteration": i, "password": "hunter2"})
    finally:
        reset_correlation_id(token)

    stop_queue_logging()
    assert not is_queue_logging_active()

    lines = [json.loads(line) for line in (Path(tmp_path) / "app.log").read_text().splitlines()]
    queued = [line for line in lines if line["logger"] == "petads.test.queue"]
    assert [line["iteration"] for line in queued] == [0, 1, 2, 3, 4]
    assert all(line["correlation_id"] == "queue-op-1" for line in queued)
    assert all(line["password"] == "***REDACTED***" for line in queued)
