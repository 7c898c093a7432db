"""
TouristMap Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── db_path:      Path of a fresh SQLite file under tmp_path
    ├── store:        SQLiteStore opened on db_path (disposed afterwards)
    ├── louvre:       A stored pin, returned as PinResponse
    ├── mock_store:   AsyncMock standing in for any PinStore
    └── test_client:  HTTPX AsyncClient bound to an app using `store`
"""

import os
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Must be set before app.config is imported anywhere
os.environ["DATABASE_PATH"] = os.path.join(os.getcwd(), "touristmap_test_unused.db")
os.environ["LOG_LEVEL"] = "WARNING"

from app.services.sqlite_store import SQLiteStore  # noqa: E402
from app.services.storage_base import PinStore  # noqa: E402


@pytest.fixture
def db_path(tmp_path):
    """A database path that does not exist yet."""
    return str(tmp_path / "tourist_test.db")


@pytest_asyncio.fixture
async def store(db_path):
    """
    A freshly initialized SQLite store.

    Usage:
        async def test_something(store):
            await store.insert_pin("museum", "Louvre", "art museum", 2.3376, 48.8606)
    """
    s = await SQLiteStore.open(db_path)
    try:
        yield s
    finally:
        await s.close()


@pytest_asyncio.fixture
async def louvre(store):
    """The Louvre pin, inserted and read back."""
    await store.insert_pin("museum", "Louvre", "art museum", 2.3376, 48.8606)
    pins = await store.get_all_pins()
    return pins[-1]


@pytest.fixture
def mock_store():
    """
    An AsyncMock implementing the PinStore interface.

    Every contract method is an AsyncMock; configure return_value or
    side_effect per test.
    """
    return AsyncMock(spec=PinStore)


@pytest_asyncio.fixture
async def test_client(store):
    """
    HTTPX AsyncClient talking to a fresh app whose store is `store`.

    ASGITransport does not run the lifespan, so the store is attached
    to app.state directly.
    """
    from app.main import create_app

    app = create_app()
    app.state.store = store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
