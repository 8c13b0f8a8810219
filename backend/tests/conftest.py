"""
Blog Backend: Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   A real in-memory SQLite store (aiosqlite) for query behaviour, a mocked
       AsyncSession for failure paths, and an httpx AsyncClient talking to an
       app built by create_app() with the test store injected.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:         in-memory engine with the schema created
    ├── session_factory:   sessions bound to db_engine
    ├── seeded_posts:      three posts with known publication times
    ├── mock_db_session:   AsyncMock standing in for AsyncSession
    ├── test_settings:     Settings pointing at the test store
    └── test_client:       AsyncClient over ASGITransport
"""

import os
from datetime import timedelta
from unittest.mock import AsyncMock

# Must run before any blog import: blog.main builds its module-level app
# from the environment.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from blog.config import Settings
from blog.database import Base, build_session_factory
from blog.main import create_app
from factories import BASE_TIME, add_posts, make_post


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    An in-memory SQLite engine with all tables created.

    StaticPool keeps one shared connection, so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def seeded_posts(session_factory):
    """
    Three posts published one day apart.

    Oldest to newest: "first-post", "second-post", "third-post".
    """
    posts = [
        make_post("second-post", "Second Post", BASE_TIME + timedelta(days=1)),
        make_post("first-post", "First Post", BASE_TIME),
        make_post("third-post", "Third Post", BASE_TIME + timedelta(days=2)),
    ]
    await add_posts(session_factory, posts)
    return posts


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.connection.side_effect = OperationalError(...)
        await service.select_last_n_posts(mock_db_session, 10)
    """
    session = AsyncMock()
    session.connection = AsyncMock()
    session.execute = AsyncMock()
    session.close = AsyncMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings():
    return Settings(database_url="sqlite+aiosqlite://", log_level="WARNING")


@pytest.fixture
def app(test_settings, db_engine, session_factory):
    """An application wired to the in-memory store."""
    return create_app(test_settings, engine=db_engine, session_factory=session_factory)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_index(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
