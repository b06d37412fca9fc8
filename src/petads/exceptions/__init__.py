# petads/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # App-level errors (DuplicateError, ExecutionError, ...)
# │   ├── error_classifier.py        # Recoverable / conflict / failure classification of DB errors
# │   └── mapper.py                  # Driver diagnostics -> app-level errors
from .base import (
    RepositoryError,
    InvalidFieldError,
    NotAllowedError,
    DuplicateError,
    RecoverableError,
    ExecutionError,
    RollbackError,
    MappingError,
)
from .error_classifier import ErrorKind, classify_db_error

__all__ = [
    "RepositoryError",
    "InvalidFieldError",
    "NotAllowedError",
    "DuplicateError",
    "RecoverableError",
    "ExecutionError",
    "RollbackError",
    "MappingError",
    "ErrorKind",
    "classify_db_error",
]
