"""Single-table and batch ANALYZE operations."""

from typing import Iterable, Protocol

from pg_maintenance_analyze.core.validator import (
    CheckedTableName,
    TableNameChecker,
    UncheckedTableName,
)


class TableAnalyzer(Protocol):
    async def analyze(self, table: CheckedTableName) -> None: ...


class MaintenanceService:
    """Validates caller-supplied names, then analyzes them."""

    def __init__(self, checker: TableNameChecker, analyzer: TableAnalyzer):
        """
        Initialize maintenance service.

        Args:
            checker: Converts unchecked names into checked ones
            analyzer: Runs ANALYZE for checked names
        """
        self.checker = checker
        self.analyzer = analyzer

    async def analyze_by_table_name(self, schema: str, name: str) -> bool:
        """Analyze one table. Returns True, or raises on any failure."""
        checked = await self.checker.check_table_name(
            schema, UncheckedTableName(name)
        )
        await self.analyzer.analyze(checked)
        return True

    async def analyze_tables(self, schema: str, names: Iterable[str]) -> bool:
        """
        Analyze tables one after another in the given order.

        The first failure propagates and the remaining names are not
        attempted. Tables analyzed before the failure stay analyzed.
        """
        for name in names:
            checked = await self.checker.check_table_name(
                schema, UncheckedTableName(name)
            )
            await self.analyzer.analyze(checked)
        return True
