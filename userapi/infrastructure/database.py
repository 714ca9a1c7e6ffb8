"""Database Session Manager — async connection pool, health checks and driver error helpers.

Invariants:
    - Every session rolls back on exception; the exception is re-raised unchanged
    - Connection pool uses pool_pre_ping for stale connection detection
    - At most one background health-check task per manager
    - is_unique_violation is the only place that inspects driver error codes

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: entities stay readable after the session closes
    - Unique violations recognised by SQLSTATE 23505 (PostgreSQL) with a message
      fallback for SQLite, which the test suite runs against
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_CODE = "23505"


def _sqlstate(exc: BaseException | None) -> str | None:
    """Dig the SQLSTATE out of a DBAPI error (asyncpg, psycopg or the adapted wrapper)."""
    while exc is not None:
        code = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
        if code:
            return str(code)
        exc = exc.__cause__
    return None


def is_unique_violation(exc: BaseException) -> bool:
    """True when exc is an IntegrityError raised by a unique constraint."""
    if not isinstance(exc, IntegrityError):
        return False
    code = _sqlstate(exc.orig)
    if code is not None:
        return code == UNIQUE_VIOLATION_CODE
    return "UNIQUE constraint failed" in str(exc.orig)


def violated_constraint(exc: IntegrityError) -> str | None:
    """Constraint name (PostgreSQL) or column list (SQLite) an IntegrityError points at."""
    err = exc.orig
    while err is not None:
        name = getattr(err, "constraint_name", None)
        if name:
            return str(name)
        err = err.__cause__
    message = str(exc.orig)
    if "UNIQUE constraint failed:" in message:
        return message.split("UNIQUE constraint failed:", 1)[1].strip()
    return None


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_recycle: int = 3600,
    ):
        engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=pool_recycle,
        )
        self._bind(engine)

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "DatabaseSessionManager":
        """Wrap an engine built elsewhere (tests, scripts)."""
        manager = cls.__new__(cls)
        manager._bind(engine)
        return manager

    def _bind(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._health_task: asyncio.Task | None = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def ping(self) -> None:
        """Round-trip SELECT 1; raises whatever the driver raises."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            await self.ping()
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    def start_health_check(self, interval: float) -> None:
        """Ping the pool every `interval` seconds until stop_health_check()."""
        if interval <= 0 or self._health_task is not None:
            return
        self._health_task = asyncio.create_task(
            self._health_check_loop(interval), name="db-health-check",
        )

    async def _health_check_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.health_check()

    async def stop_health_check(self) -> None:
        task, self._health_task = self._health_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def close(self) -> None:
        await self.stop_health_check()
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.close()
        db_manager = None

