# src/petads/core/logging/builder.py
"""
Logging builder: build and apply a dictConfig from Settings, optionally moving
handler I/O to a background QueueListener.

  - make_dict_config(settings): the dictConfig mapping (formatters, filters,
    handlers, loggers for root, petads and SQLAlchemy)
  - setup_logging(settings): apply it; with LOG_USE_QUEUE, producers only
    enqueue records and a listener thread runs the real handlers
  - stop_queue_logging(): flush and stop the listener at shutdown

Handler selection:

| LOG_TO_STDOUT | LOG_DIR set | Handlers                       |
| ------------- | ----------- | ------------------------------ |
| true          | any         | console + error_console        |
| false         | no          | console + error_console        |
| false         | yes         | console + file + error_file    |
"""

from __future__ import annotations

import logging
import logging.config
import queue as _queue
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Optional

from petads.config.settings import Settings
from petads.utils.logging import get_project_name

from .filters import CorrelationIdFilter, RedactFilter
from .formatters import ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)

_QUEUE_LISTENER: Optional[QueueListener] = None
_QUEUE: Optional[_queue.Queue] = None


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "correlation_id": {"()": CorrelationIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            # Application loggers propagate to root's handlers
            "petads": {
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            # SQL text can contain bound values; keep it off unless asked for
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.pool": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration.

    With LOG_USE_QUEUE the configured handler instances are detached from every
    logger and handed to a QueueListener; root gets a QueueHandler that runs the
    correlation-id and redaction filters in the producing task before enqueueing.
    """
    global _QUEUE_LISTENER, _QUEUE

    # A previous queue listener would keep writing to replaced handlers.
    stop_queue_logging()

    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    root_logger = logging.getLogger()
    # dictConfig leaves root filters in place across calls
    if not any(isinstance(f, CorrelationIdFilter) for f in root_logger.filters):
        root_logger.addFilter(CorrelationIdFilter())

    if not settings.LOG_USE_QUEUE:
        return

    current_handlers = list(root_logger.handlers)
    if not current_handlers:
        return

    moved = set(current_handlers)
    for logger_obj in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(logger_obj, logging.Logger):
            for handler in list(logger_obj.handlers):
                if handler in moved:
                    logger_obj.removeHandler(handler)
    for handler in current_handlers:
        root_logger.removeHandler(handler)

    log_queue: _queue.Queue = _queue.Queue()
    listener = QueueListener(log_queue, *current_handlers, respect_handler_level=True)
    listener.start()

    queue_handler = QueueHandler(log_queue)
    queue_handler.addFilter(CorrelationIdFilter())
    queue_handler.addFilter(RedactFilter())
    root_logger.addHandler(queue_handler)

    _QUEUE_LISTENER = listener
    _QUEUE = log_queue


def stop_queue_logging() -> None:
    """Stop the QueueListener (flushing queued records) if one is running."""
    global _QUEUE_LISTENER, _QUEUE
    listener = _QUEUE_LISTENER
    if listener is None:
        return

    try:
        listener.stop()
    finally:
        _QUEUE_LISTENER = None
        _QUEUE = None


def is_queue_logging_active() -> bool:
    return _QUEUE_LISTENER is not None
