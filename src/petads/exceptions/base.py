"""
Custom exceptions for the data-access layer and the marketplace service.
"""

from typing import Iterable

# canonical repository-level exception

class RepositoryError(Exception):
    """
    Base exception for executor/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['email'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'invalid_field') used by clients
    """

    # Map canonical error_code -> default HTTP status for the routing layer.
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "invalid_field": 422,
        "not_allowed": 403,
        "recoverable": 503,
        "execution_failure": 500,
        "rollback_failure": 500,
        "mapping_failure": 500,
        # fallback: default to 400 for general repository errors
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message  # user-friendly message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for transport-level responses.
        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "duplicate",           # optional canonical code
                "fields": ["username"],        # optional list for client usage
            }
        The `constraint` value and raw driver text are never included.
        """
        payload = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        """
        Return the HTTP status code that should accompany this error.
        Unknown or missing codes default to 400 (Bad Request).
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class InvalidFieldError(RepositoryError):
    """Malformed caller input, detected before any database call."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


class NotAllowedError(RepositoryError):
    """The ownership check for a mutation failed."""

    def __init__(self, message: str = "Not allowed", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_allowed")


class DuplicateError(RepositoryError):
    """
    Unique-constraint violation at the storage layer.

    `fields` carries the violating column(s) and `values` the violating value(s)
    when the driver diagnostic exposes them.
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 values: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")
        self.values = list(values) if values else None


class RecoverableError(RepositoryError):
    """Transient connection/transport failure. Retried by the executor, never surfaced."""

    def __init__(self, message: str, *, operation: str | None = None):
        super().__init__(message, error_code="recoverable")
        self.operation = operation


class ExecutionError(RepositoryError):
    """Any non-recoverable database failure, a failed post-condition, or retry exhaustion."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str = "execution_failure"):
        super().__init__(message, fields=fields, constraint=constraint, error_code=error_code)


class RollbackError(ExecutionError):
    """Rollback itself failed after an execution failure."""

    def __init__(self, message: str):
        super().__init__(message, error_code="rollback_failure")


class MappingError(RepositoryError):
    """A row could not be converted into its record shape."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="mapping_failure")


__all__ = [
    "RepositoryError",
    "InvalidFieldError",
    "NotAllowedError",
    "DuplicateError",
    "RecoverableError",
    "ExecutionError",
    "RollbackError",
    "MappingError",
]
