import asyncio
import logging

import asyncpg
from fastapi import Request

from hydroponics.config import Settings
from hydroponics.errors import StoreError, StoreTimeout

logger = logging.getLogger(__name__)


def _get_raw_pg_url(settings: Settings) -> str:
    """Convert SQLAlchemy-style URL to plain postgres:// for asyncpg."""
    # asyncpg needs postgresql:// not postgresql+asyncpg://
    return settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://")


def _rowcount(status: str) -> int:
    """Extract the affected row count from an asyncpg command tag ("DELETE 3")."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class Database:
    """Query gateway: the only component that talks to the store.

    Wraps a connection pool. Every call is bounded by ``timeout`` and any
    failure is re-raised as :class:`StoreError` (or :class:`StoreTimeout`).
    """

    def __init__(self, pool, timeout: float = 10.0):
        self._pool = pool
        self.timeout = timeout

    @classmethod
    async def connect(cls, settings: Settings) -> "Database":
        """Open an asyncpg pool for the given settings."""
        try:
            pool = await asyncpg.create_pool(
                _get_raw_pg_url(settings),
                min_size=settings.DB_POOL_MIN_SIZE,
                max_size=settings.DB_POOL_MAX_SIZE,
                command_timeout=settings.DB_COMMAND_TIMEOUT,
            )
        except Exception as exc:
            raise StoreError("Could not open database pool") from exc
        logger.info(
            "Database pool opened (min=%d, max=%d)",
            settings.DB_POOL_MIN_SIZE,
            settings.DB_POOL_MAX_SIZE,
        )
        return cls(pool, timeout=settings.DB_COMMAND_TIMEOUT)

    async def close(self) -> None:
        """Close the pool (call on app shutdown)."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    async def _run(self, operation: str, statement: str, params: tuple):
        if self._pool is None:
            raise StoreError("Database pool is closed")
        call = getattr(self._pool, operation)
        try:
            return await asyncio.wait_for(call(statement, *params), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Store %s timed out after %.1fs: %s", operation, self.timeout, _first_line(statement))
            raise StoreTimeout(f"{operation} timed out") from exc
        except Exception as exc:
            logger.error("Store %s failed: %s (%s)", operation, _first_line(statement), exc)
            raise StoreError(f"{operation} failed") from exc

    async def execute(self, statement: str, *params) -> int:
        """Run a write statement and return the number of affected rows."""
        status = await self._run("execute", statement, params)
        return _rowcount(status)

    async def fetch(self, statement: str, *params) -> list[dict]:
        rows = await self._run("fetch", statement, params)
        return [dict(r) for r in rows]

    async def fetchrow(self, statement: str, *params) -> dict | None:
        row = await self._run("fetchrow", statement, params)
        return dict(row) if row else None


def _first_line(statement: str) -> str:
    return " ".join(statement.split())[:80]


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the store handle owned by the app lifespan."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise StoreError("Database is not initialised")
    return db
