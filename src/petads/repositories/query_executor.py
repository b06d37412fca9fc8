"""
Transactional query execution over a pooled AsyncEngine.

Every logical operation runs through the same lifecycle:

    1. acquire a connection from the engine's bounded pool
    2. open a transaction (no implicit autocommit)
    3. run the caller's work with the bound parameters
    4. commit and return the work's result
    5. release the connection back to the pool, on every exit path

Failures are classified (see `petads.exceptions.error_classifier`):

    - recoverable -> the connection is released, the executor sleeps for a
      randomized, exponentially growing, bounded delay and reruns the whole
      operation on a fresh connection, at most `max_retries` times
    - conflict    -> DuplicateError, never retried
    - other       -> rollback, then ExecutionError (RollbackError if the
      rollback itself fails)

The executor holds no per-call state; the engine's pool is the only shared
resource and is safe for concurrent use.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from sqlalchemy import text
from sqlalchemy.sql.expression import Executable
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from petads.config.settings import Settings
from petads.exceptions.base import (
    ExecutionError,
    RecoverableError,
    RepositoryError,
    RollbackError,
)
from petads.exceptions.error_classifier import ErrorKind, classify_db_error
from petads.exceptions.mapper import map_conflict_error, map_execution_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
INITIAL_SLEEP_DURATION_MS = 1000
MAX_SLEEP_DURATION_MS = 30_000

Params = Mapping[str, Any]
Work = Callable[[AsyncConnection], Awaitable[T]]
ResultHandler = Callable[[AsyncConnection, Executable, Params], Awaitable[T]]


# =================================================================================================================
# Result handlers
# =================================================================================================================

async def fetch_rows(connection: AsyncConnection, statement: Executable, params: Params) -> list[dict[str, Any]]:
    """Run a SELECT and return every row as a plain dict (column name -> value)."""
    result = await connection.execute(statement, params)
    try:
        return [dict(row) for row in result.mappings()]
    finally:
        result.close()


async def count_affected_rows(connection: AsyncConnection, statement: Executable, params: Params) -> int:
    """Run an INSERT/UPDATE/DELETE and return the number of affected rows."""
    result = await connection.execute(statement, params)
    try:
        return result.rowcount
    finally:
        result.close()


# =================================================================================================================
# Backoff
# =================================================================================================================

def compute_backoff_delay(
    retry: int,
    base_delay_ms: int = INITIAL_SLEEP_DURATION_MS,
    max_delay_ms: int = MAX_SLEEP_DURATION_MS,
    rng: random.Random | None = None,
) -> float:
    """
    Return the sleep before retry number `retry + 1`, in seconds.

    The exponent is randomized within [retry, retry + 1), so consecutive waits
    grow exponentially with jitter: ~1-2s, 2-4s, 4-8s for a 1000 ms base.
    The result never exceeds `max_delay_ms`.
    """
    rng = rng or random
    exponent = retry + rng.random()
    delay_ms = min(max_delay_ms, base_delay_ms * (2 ** exponent))
    return delay_ms / 1000


def describe_statement(statement: Executable | str, limit: int = 60) -> str:
    """Short single-line label of a statement for logs (never includes parameters)."""
    sql = statement if isinstance(statement, str) else str(statement)
    label = " ".join(sql.split())
    return label if len(label) <= limit else label[: limit - 3] + "..."


# =================================================================================================================
# Executor
# =================================================================================================================

class QueryExecutor:
    """
    Runs parameterized statements, or arbitrary transactional work, with
    managed connection/transaction lifecycle and retry of recoverable failures.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        max_retries: int = MAX_RETRIES,
        base_delay_ms: int = INITIAL_SLEEP_DURATION_MS,
        max_delay_ms: int = MAX_SLEEP_DURATION_MS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        """
        Args:
            engine: AsyncEngine whose pool supplies connections.
            max_retries: retries allowed after the first attempt for recoverable failures.
            base_delay_ms / max_delay_ms: backoff base and ceiling.
            sleep: awaitable sleep, injectable so tests do not wait.
            rng: random source for backoff jitter.
        """
        self.engine = engine
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._sleep = sleep
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, engine: AsyncEngine, settings: Settings, **overrides) -> "QueryExecutor":
        options = {
            "max_retries": settings.DB_MAX_RETRIES,
            "base_delay_ms": settings.DB_RETRY_BASE_DELAY_MS,
            "max_delay_ms": settings.DB_RETRY_MAX_DELAY_MS,
        }
        options.update(overrides)
        return cls(engine, **options)

    # -------------------------------------------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------------------------------------------

    async def execute(self, statement: Executable | str, params: Params | None, handler: ResultHandler[T]) -> T:
        """
        Execute one statement inside a managed transaction.

        `handler(connection, statement, params)` consumes the open connection and
        produces the result (rows, an affected-row count, ...).
        """
        clause = text(statement) if isinstance(statement, str) else statement
        bound = dict(params or {})

        async def work(connection: AsyncConnection) -> T:
            return await handler(connection, clause, bound)

        return await self.run_in_transaction(work, operation=describe_statement(clause))

    async def query(self, statement: Executable | str, params: Params | None = None) -> list[dict[str, Any]]:
        """Execute a SELECT; return its rows as dicts."""
        return await self.execute(statement, params, fetch_rows)

    async def update(self, statement: Executable | str, params: Params | None = None) -> int:
        """Execute an INSERT/UPDATE/DELETE; return the affected-row count."""
        affected_rows = await self.execute(statement, params, count_affected_rows)
        logger.info("executor.update.success", extra={"affected_rows": affected_rows})
        return affected_rows

    async def run_in_transaction(self, work: Work[T], *, operation: str = "transaction", retry: int = 0) -> T:
        """
        Run `work(connection)` as one transaction, retrying the whole operation on
        recoverable failures.

        Any RepositoryError raised by `work` itself (e.g. a failed post-condition)
        rolls the transaction back and propagates unchanged.

        Raises:
            DuplicateError: unique-constraint violation.
            ExecutionError: other failures, or retries exhausted.
            RollbackError: rollback failed after an execution failure.
        """
        try:
            return await self._attempt(work, operation, retry)
        except RecoverableError as exc:
            cause = exc.__cause__
            if not self.should_retry(retry):
                logger.error(
                    "executor.retry.exhausted",
                    extra={"operation": operation, "attempts": retry + 1},
                )
                raise ExecutionError(
                    f"Failed to execute {operation} after {retry + 1} attempt(s)"
                ) from cause

            await self._sleep_until_next_try(retry, operation)
            return await self.run_in_transaction(work, operation=operation, retry=retry + 1)

    def should_retry(self, retry: int) -> bool:
        return retry < self.max_retries

    # -------------------------------------------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------------------------------------------

    async def _attempt(self, work: Work[T], operation: str, retry: int) -> T:
        connection: AsyncConnection | None = None
        start = time.perf_counter()

        logger.debug("executor.attempt.start", extra={"operation": operation, "retry": retry})

        try:
            connection = await self.engine.connect()
            await connection.begin()

            result = await work(connection)

            await connection.commit()

            logger.debug(
                "executor.attempt.success",
                extra={
                    "operation": operation,
                    "retry": retry,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                },
            )
            return result

        except RepositoryError:
            # Raised deliberately by the work body; undo its partial effects.
            await self._rollback(connection, operation)
            raise

        except Exception as exc:
            kind = classify_db_error(exc)

            if kind is ErrorKind.RECOVERABLE:
                logger.warning(
                    "executor.attempt.recoverable_failure",
                    extra={"operation": operation, "retry": retry, "error_type": type(exc).__name__},
                )
                raise RecoverableError(f"Recoverable failure in {operation}", operation=operation) from exc

            if kind is ErrorKind.CONFLICT:
                # No retry. Releasing the connection resets the aborted transaction.
                raise map_conflict_error(exc) from exc

            logger.error(
                "executor.attempt.failure",
                extra={"operation": operation, "retry": retry, "error_type": type(exc).__name__},
                exc_info=True,
            )
            await self._rollback(connection, operation)
            raise map_execution_error(exc, operation) from exc

        finally:
            if connection is not None:
                await self._release(connection, operation)

    async def _rollback(self, connection: AsyncConnection | None, operation: str) -> None:
        """
        Roll back the open transaction, if any.

        Raises:
            RollbackError: if the rollback itself fails.
        """
        if connection is None or not connection.in_transaction():
            return
        try:
            await connection.rollback()
            logger.info("executor.rollback.success", extra={"operation": operation})
        except Exception as rollback_exc:
            logger.exception("executor.rollback.failed", extra={"operation": operation})
            raise RollbackError(f"Rollback failed for {operation}: {type(rollback_exc).__name__}") from rollback_exc

    async def _release(self, connection: AsyncConnection, operation: str) -> None:
        """
        Return the connection to the pool.

        The pool resets the connection on return (any leftover transaction is
        rolled back), which restores its default commit mode for the next caller.
        """
        try:
            await connection.close()
        except Exception:
            logger.exception("executor.release.failed", extra={"operation": operation})

    async def _sleep_until_next_try(self, retry: int, operation: str) -> None:
        delay = compute_backoff_delay(retry, self.base_delay_ms, self.max_delay_ms, self._rng)
        logger.info(
            "executor.retry.scheduled",
            extra={"operation": operation, "retry": retry + 1, "sleep_seconds": round(delay, 3)},
        )
        await self._sleep(delay)
