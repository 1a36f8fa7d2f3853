"""
Traceability API — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── app_settings:    Settings pointing at a throwaway SQLite file
    ├── test_app:        Application with its lifespan entered
    ├── test_client:     HTTPX AsyncClient over ASGITransport
    └── count_rows:      Helper counting rows of a model in the test database
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_SSL_MODE"] = "disable"

from traceability.config import Settings  # noqa: E402
from traceability.main import create_app  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.mappings.return_value.all.return_value = [row]
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'trace.db'}",
        db_ssl_mode="disable",
        db_create_tables=True,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_app(app_settings):
    """
    Application with startup/shutdown run around the test.

    Why enter the lifespan by hand: ASGITransport does not send lifespan
    events, and the database lives on app.state only after startup.
    """
    app = create_app(app_settings)
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def count_rows(test_app):
    """Returns an async callable: `await count_rows(FarmerLog)`."""

    async def _count(model) -> int:
        async with test_app.state.db.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()

    return _count
