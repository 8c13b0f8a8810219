"""
Blog Backend: Database Engine & Session Management
=====================================================

What:  Async SQLAlchemy engine construction, session factory, declarative base
       and the per-request session dependency.
Why:   Centralizes all database connection logic in one place.
How:   The application factory builds one engine (and its connection pool) and
       one session factory, stores them on `app.state`, and every request gets
       its own session through `get_db_session`.
Who:   Used by the application factory, the health route and page handlers.

Architecture Decision:
    We use async SQLAlchemy (with the asyncpg driver) so that a slow query
    suspends only the request that issued it; other requests keep being
    scheduled on the event loop while the driver waits on the socket.

Connection Pooling Strategy:
    pool_size:     Persistent connections for normal load
    max_overflow:  Temporary connections for traffic spikes
    pool_timeout:  How long a request waits for a free connection
    pool_pre_ping: Validates connections before use (catches stale connections)
    pool_recycle:  Recycles connections every hour
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blog.config import Settings


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine (and its connection pool) for the configured URL.

    The engine does not connect until the first query, so building it at
    application construction time is cheap and has no side effects.
    """
    url = make_url(settings.database_url)
    pool_options = {}
    # SQLite (used for local runs and tests) picks its own pool class;
    # sizing arguments only make sense for a real server-side pool.
    if url.get_backend_name() != "sqlite":
        pool_options = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout,
            "pool_recycle": 3600,
        }

    return create_async_engine(
        url,
        pool_pre_ping=settings.db_pool_pre_ping,
        # SQL logging is noisy; only useful during development
        echo=settings.log_level == "DEBUG",
        **pool_options,
    )


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the session ends
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers models with a shared metadata object, which Alembic reads
    for migrations and tests use to create the schema.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Takes the session factory the application was built with
        2. Yields a new session to the route handler
        3. Always closes the session, returning any connection to the pool

    The blog only reads, so there is nothing to commit. A connection is
    checked out of the pool lazily, when the first query runs, and is
    released when the session closes.

    Example usage in a route:
        @router.get("/blog")
        async def blog(db: AsyncSession = Depends(get_db_session)):
            posts = await post_service.select_last_n_posts(db, 10)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
