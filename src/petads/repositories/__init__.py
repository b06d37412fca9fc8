"""
Data-access layer.

`QueryExecutor` owns the connection/transaction lifecycle and retry policy,
`row_mapper` turns row maps into typed records, and `statements` holds the
parameterized SQL issued by the service layer.

Usage:
    from petads.repositories import QueryExecutor, map_rows_to_records
"""

from .query_executor import (
    QueryExecutor,
    compute_backoff_delay,
    count_affected_rows,
    fetch_rows,
)
from .row_mapper import map_row_to_record, map_rows_to_records

__all__ = [
    "QueryExecutor",
    "compute_backoff_delay",
    "count_affected_rows",
    "fetch_rows",
    "map_row_to_record",
    "map_rows_to_records",
]
