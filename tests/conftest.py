"""Pytest configuration and shared fixtures for pg-maintenance-analyze tests"""

import os
import re
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import pytest
from dotenv import load_dotenv
from sqlalchemy.dialects.postgresql.asyncpg import PGDialect_asyncpg

from pg_maintenance_analyze.core import DatabaseConnection
from pg_maintenance_analyze.core.validator import CheckedTableName
from pg_maintenance_analyze.errors import InfrastructureError
from pg_maintenance_analyze.models.config import DatabaseConfig

# Load environment variables
load_dotenv()

# Fix for Windows: asyncpg requires SelectorEventLoop on Windows
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())  # type: ignore[attr-defined]


# ==================== In-memory doubles ====================


def like_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a SQL LIKE pattern into an anchored, case-sensitive regex."""
    parts = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.DOTALL)


class InMemoryCatalog:
    """TableCatalog over a dict of schema -> ordered table names."""

    def __init__(self, tables: dict[str, list[str]]):
        self.tables = tables
        self.exists_calls: list[tuple[str, str]] = []
        self.names_calls: list[tuple[str, str]] = []

    async def table_exists(self, schema: str, name: str) -> bool:
        self.exists_calls.append((schema, name))
        return name in self.tables.get(schema, [])

    async def table_names(self, schema: str, pattern: str) -> list[str]:
        self.names_calls.append((schema, pattern))
        regex = like_to_regex(pattern)
        return [t for t in self.tables.get(schema, []) if regex.fullmatch(t)]


class SpyAnalyzer:
    """Records analyze() calls; fails for names listed in `fail_on`."""

    def __init__(self, fail_on: tuple[str, ...] = ()):
        self.fail_on = set(fail_on)
        self.calls: list[CheckedTableName] = []

    async def analyze(self, table: CheckedTableName) -> None:
        self.calls.append(table)
        if table.name in self.fail_on:
            raise InfrastructureError(f"relation {table.name!r} does not exist")


class FakeResult:
    def __init__(self, rows: list[tuple]):
        self._rows = rows

    def fetchall(self) -> list[tuple]:
        return list(self._rows)

    def fetchone(self) -> Optional[tuple]:
        return self._rows[0] if self._rows else None


class FakeStreamResult:
    """Async-iterable rows, like AsyncResult from AsyncConnection.stream()."""

    def __init__(self, rows: list[tuple]):
        self._rows = rows

    async def __aiter__(self):
        for row in self._rows:
            yield row


class FakeAsyncConnection:
    """Stands in for sqlalchemy AsyncConnection."""

    def __init__(self, rows: list[tuple], error: Optional[Exception]):
        self.dialect = PGDialect_asyncpg()
        self._rows = rows
        self._error = error
        self.executed: list[tuple[str, dict]] = []
        self.driver_sql: list[str] = []
        self.commits = 0

    async def execute(self, statement, parameters=None):
        self.executed.append((str(statement), dict(parameters or {})))
        if self._error is not None:
            raise self._error
        return FakeResult(self._rows)

    async def stream(self, statement, parameters=None):
        self.executed.append((str(statement), dict(parameters or {})))
        if self._error is not None:
            raise self._error
        return FakeStreamResult(self._rows)

    async def exec_driver_sql(self, statement: str):
        self.driver_sql.append(statement)
        if self._error is not None:
            raise self._error
        return FakeResult([])

    async def commit(self) -> None:
        self.commits += 1


class FakeDatabaseConnection:
    """DatabaseConnection double handing out one FakeAsyncConnection."""

    def __init__(self, rows: Optional[list[tuple]] = None, error: Optional[Exception] = None):
        self.conn = FakeAsyncConnection(rows or [], error)

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[FakeAsyncConnection, None]:
        yield self.conn


class FakeEngine:
    """AsyncEngine double whose connect() hands out one FakeAsyncConnection."""

    def __init__(self, rows: Optional[list[tuple]] = None, error: Optional[Exception] = None):
        self.conn = FakeAsyncConnection(rows or [], error)

    @asynccontextmanager
    async def connect(self) -> AsyncGenerator[FakeAsyncConnection, None]:
        yield self.conn


# ==================== Fixture data ====================


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Catalog with a handful of tables in two schemas"""
    return InMemoryCatalog(
        {
            "public": ["user_accounts", "user_sessions", "orders"],
            "audit": ["events", "Events"],
        }
    )


@pytest.fixture
def spy_analyzer() -> SpyAnalyzer:
    return SpyAnalyzer()


@pytest.fixture
def make_catalog():
    """Factory for InMemoryCatalog"""
    return InMemoryCatalog


@pytest.fixture
def make_analyzer():
    """Factory for SpyAnalyzer"""
    return SpyAnalyzer


@pytest.fixture
def fake_connection():
    """Factory for FakeDatabaseConnection(rows=..., error=...)"""
    return FakeDatabaseConnection


@pytest.fixture
def fake_engine():
    """Factory for FakeEngine(rows=..., error=...)"""
    return FakeEngine


# ==================== PostgreSQL Fixtures ====================


@pytest.fixture(scope="session")
def pg_database_url() -> Optional[str]:
    """PostgreSQL test database URL from environment"""
    return os.getenv("PG_TEST_DATABASE_URL")


@pytest.fixture
async def pg_config(pg_database_url: Optional[str]) -> DatabaseConfig:
    """PostgreSQL database configuration"""
    if not pg_database_url:
        pytest.skip("PG_TEST_DATABASE_URL not set in environment")
    return DatabaseConfig(url=pg_database_url)


@pytest.fixture
async def pg_connection(
    pg_config: DatabaseConfig,
) -> AsyncGenerator[DatabaseConnection, None]:
    """PostgreSQL database connection with proper cleanup"""
    connection = DatabaseConnection(pg_config)
    await connection.initialize()
    try:
        yield connection
    finally:
        await connection.dispose()


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "postgresql: PostgreSQL-specific tests")
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )
