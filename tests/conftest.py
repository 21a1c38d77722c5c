# tests/conftest.py

"""
Fixtures for integration tests against a real PostgreSQL database.

Set TEST_DATABASE_URL to a disposable database; every test truncates the
academy tables. Without it the integration tests are skipped.
"""

import logging
import os

import pytest
import pytest_asyncio
from sqlalchemy import text

from academy_loader.database import DatabaseManager


def pytest_configure(config):
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename="all_logs.log",
        filemode="w",
    )


@pytest.fixture(scope="session")
def database_url():
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL is not set")
    return url


@pytest_asyncio.fixture
async def db_manager(database_url):
    """Initialized manager with the academy tables present and empty."""
    manager = DatabaseManager()
    await manager.initialize(database_url)
    await manager.create_all_tables()
    async with manager.engine.begin() as conn:
        await conn.execute(text("TRUNCATE TABLE exams, students, courses RESTART IDENTITY"))
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def table_counts(db_manager):
    """Return a coroutine function that reads committed row counts."""

    async def _counts():
        counts = {}
        async with db_manager.engine.connect() as conn:
            for table in ("courses", "students", "exams"):
                result = await conn.execute(text(f"SELECT count(*) FROM {table}"))
                counts[table] = result.scalar_one()
        return counts

    return _counts
