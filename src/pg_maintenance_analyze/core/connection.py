"""Database connection management with SQLAlchemy."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from pg_maintenance_analyze.errors import InfrastructureError
from pg_maintenance_analyze.models.config import DatabaseConfig

logger = logging.getLogger(__name__)

# Failures raised by the driver or the pool; asyncio.TimeoutError is not an
# OSError before Python 3.11
DRIVER_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class DatabaseConnection:
    """Manages the process-wide SQLAlchemy async engine and connection pool."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database connection.

        Args:
            config: Database configuration with connection URL and pool settings
        """
        self.config = config
        self.engine: Optional[AsyncEngine] = None
        self._url = config.url

    async def initialize(self) -> None:
        """Create the async engine. Connections are opened lazily by the pool."""
        if self.engine is not None:
            return  # Already initialized

        # asyncpg expects 'ssl' in connect_args, not in the URL
        connect_args = {}
        url_obj = make_url(self._url)
        if url_obj.query:
            if "sslmode" in url_obj.query:
                sslmode = url_obj.query["sslmode"]
                if sslmode in ["require", "prefer", "allow", "verify-ca", "verify-full"]:
                    connect_args["ssl"] = sslmode
                elif sslmode == "disable":
                    connect_args["ssl"] = False
                url_obj = url_obj.difference_update_query(["sslmode"])
            elif "ssl" in url_obj.query:
                ssl_value = url_obj.query["ssl"]
                if ssl_value in ["require", "true", "1"]:
                    connect_args["ssl"] = "require"
                elif ssl_value in ["false", "0", "disable"]:
                    connect_args["ssl"] = False
                url_obj = url_obj.difference_update_query(["ssl"])
            self._url = url_obj.render_as_string(hide_password=False)

        self.engine = create_async_engine(
            self._url,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_pre_ping=True,  # Verify connections before using
            echo=self.config.echo_sql,
            connect_args=connect_args,
        )
        logger.info(f"Created connection pool for {self.config.safe_url}")

    async def dispose(self) -> None:
        """Dispose of the connection pool and cleanup resources."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Get a connection from the pool as an async context manager.

        Yields:
            AsyncConnection for executing statements

        Raises:
            RuntimeError: If engine not initialized
        """
        if self.engine is None:
            raise RuntimeError(
                "DatabaseConnection not initialized. Call initialize() first."
            )

        async with self.engine.connect() as conn:
            if self.config.statement_timeout:
                await self._set_timeout(conn, self.config.statement_timeout)

            yield conn

    async def _set_timeout(self, conn: AsyncConnection, timeout: int) -> None:
        """Set the session statement timeout."""
        timeout_ms = int(timeout) * 1000
        await conn.execute(text(f"SET statement_timeout = {timeout_ms}"))

    async def get_version(self) -> str:
        """
        Get database version string. Also used as the startup connectivity check.

        Returns:
            Database version string

        Raises:
            InfrastructureError: If the database cannot be reached
        """
        try:
            async with self.get_connection() as conn:
                result = await conn.execute(text("SELECT version()"))
                row = result.fetchone()
                return str(row[0]) if row else "Unknown"
        except DRIVER_ERRORS as e:
            raise InfrastructureError(f"database connection failed: {e}") from e

    async def __aenter__(self) -> "DatabaseConnection":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.dispose()
