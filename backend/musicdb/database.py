"""
Music DB API - Database Engine, Sessions & Ready State
=======================================================

What:  Async SQLAlchemy engine, session factory, FastAPI dependency, and the
       connection ready-state used by the availability gate.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error,
       and tracks whether the database link is currently established.
Who:   Route handlers (via Depends), the availability middleware, the lifespan.
When:  Engine is created at module import; sessions are created per-request.

Ready State:
    The gate must answer "is the database up?" without issuing a query per
    request. `ConnectionState.ready` is an in-memory flag updated by:
        - connect():  startup probe, retried with tenacity
        - watch():    background SELECT 1 heartbeat
        - engine events: new DBAPI connection → ready,
                         disconnect error → not ready
"""

import asyncio
import logging
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from musicdb.config import settings

logger = logging.getLogger(__name__)


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(url: str) -> AsyncEngine:
    """
    Create the async engine for `url`.

    SQLite (used by tests and local experiments) gets no pool at all: each
    checkout opens the file afresh, so connections are never shared between
    event loops. Pool sizing only applies to server databases.
    """
    options = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


engine = build_engine(settings.database_url)

# expire_on_commit=False: rows stay readable after the request's commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits (a no-op for the read-only routes)
        4. On error: rolls back
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Connection Ready State ────────────────────────────────────────────────
class DatabaseNotReady(Exception):
    """Internal signal used to drive tenacity retries in connect()."""


class ConnectionState:
    """
    In-memory view of whether the database link is established.

    Attributes:
        engine: The engine being probed.
        ready:  True once a probe (or a fresh DBAPI connection) succeeded and
                no disconnect has been observed since.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        if not self._ready:
            logger.info("Database connection established")
        self._ready = True

    def mark_down(self, reason: str = "") -> None:
        if self._ready:
            logger.warning("Database connection lost: %s", reason or "unknown")
        self._ready = False

    async def ping(self) -> bool:
        """Run SELECT 1 and update the ready flag. Never raises."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            self.mark_down(str(e))
            return False
        self.mark_ready()
        return True

    @retry(
        retry=retry_if_exception_type(DatabaseNotReady),
        stop=stop_after_attempt(settings.db_connect_attempts),
        wait=wait_fixed(settings.db_connect_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _ping_with_retry(self) -> None:
        if not await self.ping():
            raise DatabaseNotReady()

    async def connect(self) -> bool:
        """
        Probe the database at startup, retrying a few times.

        Returns the final ready state. A failure is logged, not raised: the
        server keeps running, the gate answers 503 and watch() keeps probing.
        """
        try:
            await self._ping_with_retry()
        except DatabaseNotReady:
            logger.error(
                "Database unreachable after %d attempts; serving 503 until it recovers",
                settings.db_connect_attempts,
            )
        return self.ready

    async def watch(self, interval: float) -> None:
        """Heartbeat loop: probe every `interval` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.ping()


connection_state = ConnectionState(engine)


def install_connection_listeners(target: AsyncEngine, state: ConnectionState) -> None:
    """Keep `state` in step with what the driver reports between heartbeats."""

    @event.listens_for(target.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        state.mark_ready()

    @event.listens_for(target.sync_engine, "handle_error")
    def _on_error(exception_context):
        if exception_context.is_disconnect:
            state.mark_down(str(exception_context.original_exception))


install_connection_listeners(engine, connection_state)


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all connections in the pool (application shutdown)."""
    await engine.dispose()
