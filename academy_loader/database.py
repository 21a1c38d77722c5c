# academy_loader/database.py

"""
Async engine lifecycle and the single scoped transaction used for loading.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from .config import to_async_url
from .exceptions import DatabaseError
from .schema import metadata

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the async SQLAlchemy engine for one loader run."""

    def __init__(self) -> None:
        self.engine: Optional[AsyncEngine] = None
        self._is_initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    async def initialize(self, database_url: str, echo: bool = False) -> None:
        """
        Create the async engine and check that the database answers.
        No retries: a failed connection is reported straight away.
        """
        if self._is_initialized:
            logger.warning("Database already initialized")
            return

        if not database_url:
            raise ValueError("Database URL is required")

        # NullPool closes the connection on release instead of pooling it
        try:
            self.engine = create_async_engine(
                to_async_url(database_url),
                echo=echo,
                poolclass=NullPool,
                future=True,
            )
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Invalid database URL: {e}", phase="connect", cause=e
            ) from e

        try:
            await self._test_connection()
        except Exception as e:
            # asyncpg auth and catalog errors can arrive unwrapped
            await self.close()
            raise DatabaseError(
                f"Could not connect to database: {e}", phase="connect", cause=e
            ) from e

        self._is_initialized = True
        logger.info("Async database initialized successfully")

    async def _test_connection(self) -> None:
        """Run a lightweight query to ensure connectivity."""
        engine = self.engine
        if engine is None:
            raise RuntimeError("Engine not initialized")

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.debug("Database connection test successful")

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Yield a connection whose work stays in one transaction.

        Nothing is committed unless the caller calls ``commit()``. Any
        exception rolls the transaction back before the connection closes.
        """
        if not self._is_initialized or self.engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self.engine.connect() as conn:
            try:
                yield conn
            except Exception as e:
                logger.error(f"Transaction error, rolling back: {e}")
                if conn.in_transaction():
                    await conn.rollback()
                raise

    async def create_all_tables(self) -> None:
        """Create any missing academy tables."""
        if not self._is_initialized or self.engine is None:
            raise RuntimeError("Database not initialized")

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
            logger.info("All tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create tables: {e}")
            raise DatabaseError(
                f"Failed to create tables: {e}", phase="create_schema", cause=e
            ) from e

    async def close(self) -> None:
        """Dispose the async engine."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self._is_initialized = False


__all__ = ["DatabaseManager"]
