"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Shared database fixtures
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REPOSITORY_AUTO_TRANSACTION"] = "true"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "true"

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for async tests.

    Returns:
        str: Backend name ("asyncio")
    """
    return "asyncio"


@pytest.fixture(scope="function")
async def async_session():
    """
    Provide an async database session.

    Creates tables before the test and drops them after. The session is
    closed (rolling back anything left open) before tables are dropped.
    """
    from crudbase.core.database import engine, async_session_maker
    from crudbase.models.base import Base
    from crudbase.models.example import Example  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
