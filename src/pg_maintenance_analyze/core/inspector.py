"""Catalog lookups against information_schema."""

import logging
from typing import Protocol, runtime_checkable

from sqlalchemy import text

from pg_maintenance_analyze.core.connection import DRIVER_ERRORS, DatabaseConnection
from pg_maintenance_analyze.errors import (
    InfrastructureError,
    UnexpectedCatalogStateError,
)

logger = logging.getLogger(__name__)

TABLE_EXISTS_QUERY = text("""
    SELECT 1::INTEGER AS one
    FROM information_schema.tables
    WHERE
        table_schema = :schema
        AND table_name = :name
""")

TABLE_NAMES_QUERY = text("""
    SELECT table_name
    FROM information_schema.tables
    WHERE
        table_schema = :schema
        AND table_name LIKE :pattern
""")


@runtime_checkable
class TableCatalog(Protocol):
    """Read-only view of the tables a database knows about."""

    async def table_exists(self, schema: str, name: str) -> bool:
        """Return whether `name` is a table in `schema` (exact match)."""
        ...

    async def table_names(self, schema: str, pattern: str) -> list[str]:
        """List table names in `schema` matching the LIKE `pattern`."""
        ...


class CatalogInspector:
    """TableCatalog backed by PostgreSQL's information_schema."""

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize catalog inspector.

        Args:
            connection: Shared database connection manager
        """
        self.connection = connection

    async def table_exists(self, schema: str, name: str) -> bool:
        """
        Check whether a table exists.

        Both arguments are bound parameters and compared exactly (no
        wildcards, case-sensitive).

        Args:
            schema: Schema name
            name: Candidate table name, untrusted

        Returns:
            True for exactly one match, False for none

        Raises:
            UnexpectedCatalogStateError: If the lookup returned anything else
            InfrastructureError: If the query failed
        """
        try:
            async with self.connection.get_connection() as conn:
                result = await conn.execute(
                    TABLE_EXISTS_QUERY, {"schema": schema, "name": name}
                )
                rows = result.fetchall()
        except DRIVER_ERRORS as e:
            raise InfrastructureError(f"table lookup failed: {e}") from e

        if not rows:
            return False
        if len(rows) > 1:
            raise UnexpectedCatalogStateError(
                f"expected at most one catalog row, got: {len(rows)}"
            )
        value = rows[0][0]
        if value != 1:
            raise UnexpectedCatalogStateError(f"unexpected value got: {value}")
        return True

    async def table_names(self, schema: str, pattern: str) -> list[str]:
        """
        List table names matching a LIKE pattern.

        Args:
            schema: Schema name
            pattern: SQL LIKE pattern (`%` and `_` wildcards, case-sensitive)

        Returns:
            Table names in the order the database returned them

        Raises:
            UnexpectedCatalogStateError: If a row has no table name
            InfrastructureError: If the query failed
        """
        try:
            async with self.connection.get_connection() as conn:
                result = await conn.stream(
                    TABLE_NAMES_QUERY, {"schema": schema, "pattern": pattern}
                )
                names = []
                async for row in result:
                    if row[0] is None:
                        raise UnexpectedCatalogStateError(
                            "non empty table name expected"
                        )
                    names.append(row[0])
        except DRIVER_ERRORS as e:
            raise InfrastructureError(f"table listing failed: {e}") from e

        return names
