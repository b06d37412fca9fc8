r"""
Classification of raw database failures.

Two levels are used here:

1. Constraint-level tags (`UniqueConstraintError`, `NotNullConstraintError`, ...)
   describe what exactly failed inside an `IntegrityError`. They are internal
   labels produced by `classify_integrity_error()` and are never raised to callers.

2. Handling kinds (`ErrorKind`) decide what the executor does with a failure:

| Kind          | Executor behaviour                                          |
| ------------- | ----------------------------------------------------------- |
| `RECOVERABLE` | release the connection, back off, retry the whole operation |
| `CONFLICT`    | no retry, raise `DuplicateError` with the violating column  |
| `FAILURE`     | rollback, raise `ExecutionError`                            |
"""
import logging
from enum import Enum
from typing import Type

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)

from .base import RepositoryError

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    RECOVERABLE = "recoverable"
    CONFLICT = "conflict"
    FAILURE = "failure"


# =================================================================================================================
# Constraint-specific tags
# =================================================================================================================


class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations (subclass of RepositoryError)."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    """Unique constraint / duplicate value."""
    pass


class NotNullConstraintError(ConstraintViolationError):
    """NOT NULL violation (missing required field)."""
    pass


class ForeignKeyConstraintError(ConstraintViolationError):
    """Foreign key constraint violated."""
    pass


class CheckConstraintError(ConstraintViolationError):
    """CHECK constraint violated."""
    pass


class UnknownIntegrityError(ConstraintViolationError):
    """Unrecognized integrity error."""
    pass


# =================================================================================================================
# Postgres SQLSTATE codes
# =================================================================================================================

# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"
    SERIALIZATION_FAILURE = "40001"
    DEADLOCK_DETECTED = "40P01"
    TOO_MANY_CONNECTIONS = "53300"
    ADMIN_SHUTDOWN = "57P01"
    CRASH_SHUTDOWN = "57P02"
    CANNOT_CONNECT_NOW = "57P03"


PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION: NotNullConstraintError,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ForeignKeyConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION: CheckConstraintError,
}

TRANSIENT_PGCODES = {
    PostgresErrorCodes.SERIALIZATION_FAILURE,
    PostgresErrorCodes.DEADLOCK_DETECTED,
    PostgresErrorCodes.TOO_MANY_CONNECTIONS,
    PostgresErrorCodes.ADMIN_SHUTDOWN,
    PostgresErrorCodes.CRASH_SHUTDOWN,
    PostgresErrorCodes.CANNOT_CONNECT_NOW,
}

# SQLSTATE class 08: connection exception
CONNECTION_EXCEPTION_CLASS = "08"

# Driver text fragments that indicate a transient transport condition
TRANSIENT_MESSAGE_KEYWORDS = [
    "connection refused",
    "connection reset",
    "connection was closed",
    "connection is closed",
    "server closed the connection",
    "could not connect",
    "broken pipe",
    "timeout",
    "timed out",
    "database is locked",
    "terminating connection",
]


# =================================================================================================================
# Helpers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def get_sqlstate(orig) -> str | None:
    """
    Return the SQLSTATE of a driver exception.

    psycopg2 exposes it as `pgcode`, psycopg 3 and asyncpg as `sqlstate`;
    SQLAlchemy's async adapters copy it onto the wrapped error under both names.
    """
    if orig is None:
        return None
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


# =================================================================================================================
# Integrity Error Classifiers
# =================================================================================================================

def _classify_from_postgres_diag(orig) -> tuple[Type[ConstraintViolationError] | None, str | None]:
    """
    Classify Postgres integrity error based on SQLSTATE and diagnostics.
    """
    pgcode = get_sqlstate(orig)
    if not pgcode:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None

    exception_class = PGCODE_EXCEPTION_MAP.get(pgcode)

    if exception_class:
        logger.debug("Postgres integrity diagnostic",
                    extra={"pgcode": pgcode, "constraint_name": constraint_name}
        )
        return exception_class, constraint_name

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"pgcode": pgcode, "constraint_name": constraint_name}
    )
    logger.debug("Postgres orig diagnostic (raw)", extra={"orig_repr": repr(orig)})

    return UnknownIntegrityError, constraint_name


def _classify_from_generic_message(msg: str) -> tuple[Type[ConstraintViolationError], None]:
    """
    Classify integrity error based on message content (fallback for SQLite, MySQL, etc).
    """
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueConstraintError, None

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return NotNullConstraintError, None

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ForeignKeyConstraintError, None

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckConstraintError, None

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return UnknownIntegrityError, None


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Heuristically classify a SQLAlchemy IntegrityError into a specific ConstraintViolationError subclass.

    Returns:
        A tuple of (ExceptionClass, constraint_name if available)
    """
    orig = exc.orig

    # Prefer Postgres-specific classification
    exception_class, constraint_name = _classify_from_postgres_diag(orig)

    if exception_class is not None:
        return exception_class, constraint_name

    # Fallback to generic message parsing
    return _classify_from_generic_message(str(orig))


# =================================================================================================================
# Handling-kind classifier
# =================================================================================================================

def is_transient_sqlstate(sqlstate: str | None) -> bool:
    if not sqlstate:
        return False
    return sqlstate.startswith(CONNECTION_EXCEPTION_CLASS) or sqlstate in TRANSIENT_PGCODES


def classify_db_error(exc: BaseException) -> ErrorKind:
    """
    Decide how the executor handles a failure raised while acquiring a connection,
    executing a statement or committing.

    Order matters: SQLSTATE (the most precise signal) is checked first, then
    SQLAlchemy's own invalidation flag and exception types, then driver text.
    """
    if isinstance(exc, (DisconnectionError, PoolTimeoutError)):
        return ErrorKind.RECOVERABLE

    if isinstance(exc, DBAPIError):
        sqlstate = get_sqlstate(exc.orig)

        if sqlstate == PostgresErrorCodes.UNIQUE_VIOLATION:
            return ErrorKind.CONFLICT
        if is_transient_sqlstate(sqlstate):
            return ErrorKind.RECOVERABLE

        if exc.connection_invalidated:
            return ErrorKind.RECOVERABLE

        if isinstance(exc, IntegrityError):
            exc_cls, _ = classify_integrity_error(exc)
            if exc_cls is UniqueConstraintError:
                return ErrorKind.CONFLICT
            return ErrorKind.FAILURE

        if isinstance(exc, (OperationalError, InterfaceError)):
            if _match_any(str(exc.orig).lower(), TRANSIENT_MESSAGE_KEYWORDS):
                return ErrorKind.RECOVERABLE

        return ErrorKind.FAILURE

    # Raw transport errors that escaped DBAPI wrapping (e.g. raised while connecting)
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return ErrorKind.RECOVERABLE

    return ErrorKind.FAILURE
