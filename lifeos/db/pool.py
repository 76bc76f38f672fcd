"""
PostgreSQL connection pool for the life OS backend.

One AsyncConnectionPool per process, opened in the FastAPI lifespan.
Every pooled connection hands out dict rows, runs in autocommit mode and
talks to the server in UTC; timestamps are converted to the user's zone
in the services, never in SQL.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from lifeos.config import settings
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CLOSE_TIMEOUT_SECONDS = 30.0
STATEMENT_TIMEOUT = "30s"

# Utilization above which the pool reports a warning, and above which it is unhealthy
UTILIZATION_WARNING_PERCENT = 80
UTILIZATION_UNHEALTHY_PERCENT = 90


@dataclass(frozen=True, slots=True)
class PoolUsage:
    size: int
    available: int
    waiting: int

    @classmethod
    def from_stats(cls, stats: dict[str, int]) -> "PoolUsage":
        return cls(
            size=stats.get("pool_size", 0),
            available=stats.get("pool_available", 0),
            waiting=stats.get("requests_waiting", 0),
        )

    @property
    def utilization_percent(self) -> float:
        if self.size <= 0:
            return 0.0
        return (self.size - self.available) / self.size * 100

    def warnings(self) -> list[str]:
        found = []
        if self.utilization_percent > UTILIZATION_WARNING_PERCENT:
            found.append(f"High pool utilization: {self.utilization_percent:.1f}%")
        if self.waiting > 0:
            found.append(f"Requests waiting for connections: {self.waiting}")
        return found

    def to_dict(self) -> dict[str, Any]:
        return {
            "pool_size": self.size,
            "pool_available": self.available,
            "pool_utilization_percent": round(self.utilization_percent, 2),
            "requests_waiting": self.waiting,
        }


class DatabasePoolManager:
    """Owns the process-wide pool and the rules for handing out connections."""

    def __init__(self):
        self.pool: AsyncConnectionPool | None = None
        self._initialized = False
        self._closed = False

    async def initialize(self) -> None:
        """Open the pool and prove it can serve a query."""
        if self._initialized:
            logger.warning("Database pool already initialized")
            return
        if self._closed:
            raise RuntimeError("Cannot reinitialize closed pool")

        pool_config = settings.get_db_pool_config()
        logger.info("Opening database pool", **pool_config)

        self.pool = AsyncConnectionPool(
            conninfo=settings.DATABASE_URL,
            open=False,
            check=AsyncConnectionPool.check_connection,
            configure=self._configure_connection,
            **pool_config,
        )
        try:
            await self.pool.open(wait=True)
            self._initialized = True
            await self._ping()
        except psycopg.Error as e:
            logger.error("Failed to initialize database pool", error=str(e))
            self._initialized = False
            await self.pool.close()
            self.pool = None
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        logger.info("Database pool ready")

    async def _configure_connection(self, conn: psycopg.AsyncConnection) -> None:
        conn.row_factory = dict_row
        await conn.set_autocommit(True)

        application_name = f"lifeos-{settings.environment}"
        await conn.execute(
            sql.SQL("SET application_name = {}").format(sql.Literal(application_name))
        )
        await conn.execute("SET timezone = 'UTC'")
        await conn.execute(
            sql.SQL("SET statement_timeout = {}").format(sql.Literal(STATEMENT_TIMEOUT))
        )

    async def _ping(self) -> float:
        """Round-trip SELECT 1 through the pool; returns elapsed milliseconds."""
        started = time.perf_counter()
        async with self.connection() as conn:
            cursor = await conn.execute("SELECT 1 AS ok")
            row = await cursor.fetchone()
        if not row or row["ok"] != 1:
            raise RuntimeError("Database ping returned an unexpected result")
        return (time.perf_counter() - started) * 1000

    async def close(self) -> None:
        if not self._initialized or self._closed:
            return

        logger.info("Closing database pool")
        try:
            await asyncio.wait_for(self.pool.close(), timeout=CLOSE_TIMEOUT_SECONDS)
        except TimeoutError:
            logger.warning("Database pool close timed out, forcing shutdown")
        finally:
            self._initialized = False
            self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Database pool is closed")
        if not self._initialized:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """
        Borrow a pooled connection for the duration of the block.

        Usage:
            async with db_pool.connection() as conn:
                await conn.execute("SELECT 1")
        """
        self._ensure_open()
        async with self.pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Pooled connection inside a transaction: commit on success, roll back on error."""
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def health_check(self) -> dict[str, Any]:
        if not self._initialized or self._closed:
            reason = "Pool is closed" if self._closed else "Pool not initialized"
            return {"healthy": False, "error": reason, "service": "database_pool"}

        usage = PoolUsage.from_stats(self.pool.get_stats())
        try:
            connection_time_ms = await self._ping()
        except (psycopg.Error, RuntimeError) as e:
            logger.error("Database pool health check failed", error=str(e))
            return {
                "healthy": False,
                "service": "database_pool",
                "error": str(e),
                "error_type": type(e).__name__,
            }

        health = {
            "healthy": usage.utilization_percent < UTILIZATION_UNHEALTHY_PERCENT,
            "service": "database_pool",
            "connection_time_ms": round(connection_time_ms, 2),
            "pool_stats": usage.to_dict(),
        }
        warnings = usage.warnings()
        if warnings:
            health["warnings"] = warnings
        return health


# Global pool instance
db_pool = DatabasePoolManager()


async def db_health_check() -> dict[str, Any]:
    """Get database pool health status."""
    return await db_pool.health_check()
