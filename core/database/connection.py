# Async database connection management
import asyncio
import time
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.engine import make_url
from sqlalchemy import text
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.logging import (
    get_logger,
    get_database_logger_safe,
    get_error_logger_safe,
)

logger = get_logger(__name__, component="database")

# Initialize specialized loggers
db_logger = get_database_logger_safe("database_manager")
error_logger = get_error_logger_safe("database_manager")

# The base class for all SQLAlchemy models
Base = declarative_base()


class DatabaseManager:
    """Manages the connection to the backing store"""

    def __init__(self, db_url: str, environment: str = "development",
                 schema_management: str = "auto", echo: bool = False):
        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if not make_url(db_url).drivername.startswith("sqlite"):
            # SQLite file databases do not benefit from a sized pool
            engine_kwargs.update(
                pool_size=20,        # Base pool size
                max_overflow=30,     # Additional connections beyond pool_size
                pool_recycle=3600    # Recycle connections after 1 hour
            )
        self._engine = create_async_engine(db_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession
        )
        self._environment = environment
        self._schema_management = schema_management

    @property
    def engine(self):
        return self._engine

    async def init(self, schema_management: str = None):
        """Create tables unless schema management is delegated elsewhere."""
        schema_mgmt = schema_management or self._schema_management

        if schema_mgmt == "skip":
            logger.info("Database schema management skipped")
            return

        # Import models so they register with Base.metadata
        from core.database import models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized with create_all", mode=schema_mgmt)

    async def verify_connection(self) -> bool:
        """Verify database connection is ready"""
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database connection verification failed", error=str(e))
            return False

    async def wait_for_ready(self, timeout: int = 30, check_interval: float = 1.0):
        """Wait for database to be ready with timeout"""
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        while (loop.time() - start_time) < timeout:
            if await self.verify_connection():
                logger.info("Database connection verified")
                return True

            logger.info("Database not ready, waiting...")
            await asyncio.sleep(check_interval)

        raise RuntimeError(f"Database not ready after {timeout} seconds")

    async def shutdown(self):
        """Closes the database connection pool"""
        await self._engine.dispose()
        logger.info("Database connection pool closed.")

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """Provides a new database session context manager WITHOUT auto-commit.

        Services own their transaction boundaries; on error the session is
        rolled back and the exception re-raised.
        """
        session_start_time = time.time()
        async with self._session_factory() as session:
            db_logger.debug("Database session opened",
                            operation="session_open",
                            environment=self._environment)
            try:
                yield session
            except Exception as session_error:
                await session.rollback()
                error_logger.error("Database session error with rollback",
                                   error=str(session_error),
                                   error_type=type(session_error).__name__,
                                   session_duration_ms=(time.time() - session_start_time) * 1000,
                                   environment=self._environment)
                raise
            finally:
                db_logger.debug("Database session closed",
                                operation="session_close",
                                session_duration_ms=(time.time() - session_start_time) * 1000,
                                environment=self._environment)
