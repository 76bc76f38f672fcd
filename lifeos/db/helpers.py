"""
Query helpers shared by the repositories.

Each helper runs on the caller's connection when one is passed (so several
statements can share a transaction) and otherwise borrows one from the
pool. psycopg errors surface as DatabaseError tagged with the operation.
"""

import asyncio
import functools
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql

from lifeos.db.pool import db_pool
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

Query = str | sql.Composable


class DatabaseError(Exception):
    """A failed database operation, wrapping the psycopg error as __cause__."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


def _preview(query: Query) -> str:
    text = query if isinstance(query, str) else repr(query)
    return " ".join(text.split())[:100]


@asynccontextmanager
async def _borrow(
    connection: psycopg.AsyncConnection | None,
) -> AsyncGenerator[psycopg.AsyncConnection, None]:
    if connection is not None:
        yield connection
        return
    async with db_pool.connection() as conn:
        yield conn


@asynccontextmanager
async def _translate_errors(operation: str, query: Query) -> AsyncGenerator[None, None]:
    try:
        yield
    except psycopg.Error as e:
        logger.error("Database query failed", operation=operation, query=_preview(query), error=str(e))
        raise DatabaseError(
            f"Query failed: {e}",
            operation=operation,
            recoverable=isinstance(e, psycopg.OperationalError),
        ) from e


async def fetch_one(
    query: Query, params: Sequence = (), *, connection: psycopg.AsyncConnection | None = None
) -> dict[str, Any] | None:
    """First row of the result as a dict, or None when there are no rows."""
    async with _translate_errors("fetch_one", query), _borrow(connection) as conn:
        cursor = await conn.execute(query, params)
        return await cursor.fetchone()


async def fetch_all(
    query: Query, params: Sequence = (), *, connection: psycopg.AsyncConnection | None = None
) -> list[dict[str, Any]]:
    async with _translate_errors("fetch_all", query), _borrow(connection) as conn:
        cursor = await conn.execute(query, params)
        return await cursor.fetchall()


async def execute_query(
    query: Query, params: Sequence = (), *, connection: psycopg.AsyncConnection | None = None
) -> int:
    """Run a write statement and return the number of affected rows."""
    async with _translate_errors("execute", query), _borrow(connection) as conn:
        cursor = await conn.execute(query, params)
        return cursor.rowcount


@asynccontextmanager
async def db_transaction(operation: str = "transaction") -> AsyncGenerator[psycopg.AsyncConnection, None]:
    """
    Pooled connection inside a transaction, for repository calls that must
    land together. Pass it on as ``connection=``.

    Usage:
        async with db_transaction("log_interaction") as conn:
            await InteractionRepository.create(..., connection=conn)
            await JournalRepository.create(..., connection=conn)
    """
    async with _translate_errors(operation, operation), db_pool.transaction() as conn:
        yield conn


async def execute_transaction(statements: Sequence[tuple[Query, Sequence]]) -> None:
    """
    Run several statements atomically.

    Example:
        await execute_transaction([
            ("DELETE FROM habit_completions WHERE habit_id = %s", (habit_id,)),
            ("DELETE FROM habits WHERE id = %s", (habit_id,)),
        ])
    """
    first_query = statements[0][0] if statements else ""
    async with _translate_errors("transaction", first_query), db_pool.transaction() as conn:
        for query, params in statements:
            await conn.execute(query, params)

    logger.debug("Transaction committed", statement_count=len(statements))


def with_db_retry(max_retries: int = 3, base_delay: float = 0.1):
    """
    Retry a coroutine when it fails with a recoverable DatabaseError.

    Only errors caused by psycopg.OperationalError (dropped connections,
    pool timeouts) are retried, with exponential backoff. Calls made on a
    caller's ``connection=`` are never retried; the enclosing transaction
    owns the failure. Apply it to reads only, a retried INSERT can commit
    twice.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except DatabaseError as e:
                    transient = isinstance(e.__cause__, psycopg.OperationalError)
                    in_transaction = kwargs.get("connection") is not None
                    if not transient or in_transaction or attempt >= max_retries:
                        raise
                    delay = base_delay * (2**attempt)
                    attempt += 1
                    logger.warning(
                        "Retrying database operation",
                        operation=func.__name__,
                        attempt=attempt,
                        max_retries=max_retries,
                        delay=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
