"""Core catalog, validation and maintenance components."""

from .connection import DatabaseConnection
from .discovery import TableQueryService
from .executor import AnalyzeExecutor
from .inspector import CatalogInspector, TableCatalog
from .maintenance import MaintenanceService
from .validator import CheckedTableName, TableNameChecker, UncheckedTableName

__all__ = [
    "DatabaseConnection",
    "CatalogInspector",
    "TableCatalog",
    "TableNameChecker",
    "UncheckedTableName",
    "CheckedTableName",
    "AnalyzeExecutor",
    "MaintenanceService",
    "TableQueryService",
]
