"""Pytest configuration and shared fixtures for the Cursor Page API tests."""

import logging
import socket
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cursorpage.main import create_app


# Disable logging for cleaner test output
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)


class FakePool:
    """Stand-in for an asyncpg pool that hands out one mocked connection."""

    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


@pytest.fixture
def app() -> FastAPI:
    """Create FastAPI application instance for testing."""
    return create_app()


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    """Create test client for API testing."""
    return TestClient(app)


@pytest.fixture
def mock_conn() -> AsyncMock:
    """Mocked asyncpg connection."""
    conn = AsyncMock()
    conn.fetch.return_value = []
    conn.fetchval.return_value = 0
    return conn


@pytest.fixture
def fake_pool(mock_conn: AsyncMock) -> FakePool:
    """Pool handing out the mocked connection."""
    return FakePool(mock_conn)


@pytest.fixture
def mock_db_pool(fake_pool: FakePool, mock_conn: AsyncMock):
    """Patch the shared pool used by SQL queries with a fake one."""
    pool = fake_pool
    with patch("cursorpage.db.query.get_db_pool", AsyncMock(return_value=pool)):
        yield pool, mock_conn


@pytest.fixture
def scenario_rows() -> List[Dict[str, Any]]:
    """Four rows where ids 2 and 3 share a creation date."""
    return [
        {"id": 1, "created_at": "2024-01-01"},
        {"id": 2, "created_at": "2024-01-02"},
        {"id": 3, "created_at": "2024-01-02"},
        {"id": 4, "created_at": "2024-01-03"},
    ]


@pytest.fixture
def hourly_rows() -> List[Dict[str, Any]]:
    """Ten rows created an hour apart, ids 1-10 in creation order."""
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        {"id": i, "stage": "lead", "created_at": base_time + timedelta(hours=i)}
        for i in range(1, 11)
    ]


@pytest.fixture
def record_rows() -> List[Dict[str, Any]]:
    """Rows shaped like the records table, newest first."""
    base_time = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    return [
        {
            "id": 30 - i,
            "stage": "lead",
            "status": "open",
            "title": f"Record {30 - i}",
            "value": 1000 + i,
            "created_at": base_time - timedelta(days=i),
            "updated_at": base_time - timedelta(days=i),
        }
        for i in range(3)
    ]


# Pytest markers for test categorization
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, mocked)")
    config.addinivalue_line("markers", "integration: Integration tests (slower, real database)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


# Skip integration tests if database is not available
def pytest_runtest_setup(item):
    """Skip tests that require database if it's not available."""
    if item.get_closest_marker("integration"):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        try:
            result = sock.connect_ex(("localhost", 5432))
        except OSError:
            result = 1
        finally:
            sock.close()
        if result != 0:
            pytest.skip("PostgreSQL database not available for integration tests")
