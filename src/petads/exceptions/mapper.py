"""
Map classified database failures to app-level exceptions.

The driver's diagnostic text is parsed here, once, so callers receive the
violating column(s)/value(s) as structured attributes instead of raw messages.
"""
import re
import logging
from typing import NamedTuple

from sqlalchemy.exc import DBAPIError, IntegrityError

from .error_classifier import (
    classify_integrity_error,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, ExecutionError

logger = logging.getLogger(__name__)


class ConflictDetail(NamedTuple):
    fields: list[str] | None
    values: list[str] | None
    table: str | None


# -----------------------
# Detail extraction helpers
# -----------------------

def _split_list(raw: str) -> list[str]:
    return [part.strip().strip('"') for part in raw.split(",")]


def _extract_postgres(msg: str) -> ConflictDetail | None:
    """
    Postgres messages:
      - 'DETAIL:  Key (email, username)=(a@b.com, u) already exists.'
      - 'null value in column "username" of relation "users" violates not-null constraint'
    """
    m = re.search(r'key \((?P<cols>[^)]+)\)=\((?P<vals>.*?)\)', msg, flags=re.IGNORECASE)
    if m:
        return ConflictDetail(_split_list(m.group("cols")), _split_list(m.group("vals")), None)

    m = re.search(r'null value in column "(?P<col>[^"]+)"(?: of relation "(?P<table>[^"]+)")?', msg, flags=re.IGNORECASE)
    if m:
        return ConflictDetail([m.group("col")], None, m.group("table"))

    return None


def _extract_sqlite(msg: str) -> ConflictDetail | None:
    # SQLite: 'UNIQUE constraint failed: users.email' / 'NOT NULL constraint failed: ads.pet_name'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE | re.MULTILINE)
    if m:
        qualified = [c.strip() for c in re.split(r',\s*', m.group("cols"))]
        fields = [c.split('.')[-1] for c in qualified]
        table = qualified[0].split('.')[0] if '.' in qualified[0] else None
        return ConflictDetail(fields, None, table)
    return None


def _extract_mysql(msg: str) -> ConflictDetail | None:
    # MySQL: "Duplicate entry 'bob' for key 'users.username'"
    m = re.search(r"Duplicate entry '(?P<val>[^']*)' for key '(?P<key>[^']+)'", msg, flags=re.IGNORECASE)
    if m:
        key = m.group("key")
        table, _, column = key.rpartition(".")
        return ConflictDetail([column], [m.group("val")], table or None)
    return None


def extract_conflict_detail(exc: DBAPIError) -> ConflictDetail:
    """
    Best-effort extraction of columns/values/table from the DB message (Postgres, SQLite, MySQL).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    for extractor in (_extract_postgres, _extract_sqlite, _extract_mysql):
        detail = extractor(msg)
        if detail:
            diag = getattr(orig, "diag", None)
            table = detail.table or getattr(diag, "table_name", None)
            return detail._replace(table=table)

    return ConflictDetail(None, None, None)


def _constraint_name(exc: DBAPIError) -> str | None:
    diag = getattr(exc.orig, "diag", None)
    return getattr(diag, "constraint_name", None) if diag else None


# -----------------------
# Mappers
# -----------------------

def map_conflict_error(exc: DBAPIError) -> DuplicateError:
    """
    Build the DuplicateError for a unique-constraint violation.
    Returned (not raised) so the caller controls exception chaining.
    """
    detail = extract_conflict_detail(exc)
    constraint = _constraint_name(exc)
    record = detail.table or "Record"

    # INFO: duplicates are an expected client-level outcome, not a fault
    logger.info(
        "mapper.duplicate_detected",
        extra={"table": detail.table, "fields": detail.fields, "constraint": constraint},
    )

    if detail.fields:
        message = f"{record} already exists for field(s): {', '.join(detail.fields)}"
    elif constraint:
        message = f"{record} already exists (constraint: {constraint})"
    else:
        message = f"{record} already exists (unique constraint)"

    return DuplicateError(message, fields=detail.fields, values=detail.values, constraint=constraint)


def map_execution_error(exc: BaseException, operation: str) -> ExecutionError:
    """
    Build the ExecutionError for a non-recoverable, non-conflict failure.
    Integrity failures keep their column detail; raw driver text stays in DEBUG logs.
    """
    if isinstance(exc, IntegrityError):
        exc_cls, constraint = classify_integrity_error(exc)
        detail = extract_conflict_detail(exc)
        logger.debug("mapper.integrity_failure_raw", extra={"operation": operation, "raw": str(exc.orig)})

        if exc_cls is NotNullConstraintError:
            return ExecutionError(f"Missing required field(s) for {operation}", fields=detail.fields, constraint=constraint)
        if exc_cls is ForeignKeyConstraintError:
            return ExecutionError(f"Referenced entity not found for {operation}", fields=detail.fields, constraint=constraint)
        if exc_cls is CheckConstraintError:
            return ExecutionError(f"Business rule violated (check constraint) for {operation}", constraint=constraint)
        return ExecutionError(f"Database integrity error for {operation}", constraint=constraint)

    return ExecutionError(f"Failed to execute {operation}: {type(exc).__name__}")
