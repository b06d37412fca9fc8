# src/petads/core/logging/filters.py
"""
Logging filters.

CorrelationIdFilter
-------------------
Stamps every LogRecord with a `correlation_id` so all lines produced by one
logical operation (a service call, a retry cycle, a CLI command) can be tied
together. The id lives in a `contextvars.ContextVar`, which follows the current
asyncio task across `await` points and is copied into `asyncio.to_thread`
workers.

    token = set_correlation_id("reg-42")
    try:
        await service.create_user(...)
    finally:
        reset_correlation_id(token)

Records without an id get the sentinel "-" so `%(correlation_id)s` in a format
string never raises KeyError.

RedactFilter
------------
Masks record attributes (usually passed via `extra={...}`) whose name looks
like a credential, before any handler sees them.
"""

import contextvars
import logging
from logging import LogRecord

_correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def set_correlation_id(correlation_id: str | None) -> contextvars.Token:
    """Set the id for the current context; returns the token for `reset_correlation_id`."""
    return _correlation_id_ctx.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    _correlation_id_ctx.reset(token)


def get_correlation_id() -> str | None:
    return _correlation_id_ctx.get()


class CorrelationIdFilter(logging.Filter):
    """
    Guarantee a `correlation_id` attribute on every record.

    Precedence: an explicit `extra={"correlation_id": ...}`, then the context
    variable, then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = (
            getattr(record, "correlation_id", None) or get_correlation_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Replace the value of any credential-like record attribute with a mask."""

    MASK = "***REDACTED***"
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "digest"}
    SENSITIVE_PARTS = ("password", "secret", "token")

    def _is_sensitive(self, key: str) -> bool:
        key = key.lower()
        return key in self.SENSITIVE or any(part in key for part in self.SENSITIVE_PARTS)

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if self._is_sensitive(key):
                record.__dict__[key] = self.MASK
        return True
