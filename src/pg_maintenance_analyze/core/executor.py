"""ANALYZE execution for catalog-checked tables."""

import logging

from pg_maintenance_analyze.core.connection import DRIVER_ERRORS, DatabaseConnection
from pg_maintenance_analyze.core.validator import CheckedTableName
from pg_maintenance_analyze.errors import InfrastructureError

logger = logging.getLogger(__name__)


class AnalyzeExecutor:
    """Runs ANALYZE on tables that passed the catalog check."""

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize analyze executor.

        Args:
            connection: Shared database connection manager
        """
        self.connection = connection

    async def analyze(self, table: CheckedTableName) -> None:
        """
        Refresh planner statistics for one table.

        The table name cannot be a bind parameter here, so it is spliced into
        the statement text. Only CheckedTableName values are accepted.

        Args:
            table: Name returned by TableNameChecker

        Raises:
            TypeError: If `table` is not a CheckedTableName
            InfrastructureError: If the statement failed, including when the
                table was dropped after it was checked
        """
        if not isinstance(table, CheckedTableName):
            raise TypeError(
                f"analyze() requires a CheckedTableName, got {type(table).__name__}"
            )

        try:
            async with self.connection.get_connection() as conn:
                preparer = conn.dialect.identifier_preparer
                statement = "ANALYZE {}.{}".format(
                    preparer.quote_identifier(table.schema),
                    preparer.quote_identifier(table.as_str()),
                )
                # exec_driver_sql: no bind-parameter parsing of the name
                await conn.exec_driver_sql(statement)
                await conn.commit()
        except DRIVER_ERRORS as e:
            raise InfrastructureError(
                f"ANALYZE failed for {table.schema}.{table.name}: {e}"
            ) from e

        logger.info(f"Analyzed {table.schema}.{table.name}")
