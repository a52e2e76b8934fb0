"""Read-only table name discovery."""

from typing import Optional

from pg_maintenance_analyze.core.inspector import TableCatalog

DEFAULT_SCHEMA = "public"
MATCH_ALL = "%"


class TableQueryService:
    """Lists table names through the catalog.

    The pattern is a LIKE pattern, not an identifier, and is only ever sent
    as a bind parameter.
    """

    def __init__(self, catalog: TableCatalog, default_schema: str = DEFAULT_SCHEMA):
        self.catalog = catalog
        self.default_schema = default_schema

    async def get_table_names(
        self,
        schema: Optional[str] = None,
        table_name_pattern: Optional[str] = None,
    ) -> list[str]:
        return await self.catalog.table_names(
            schema if schema is not None else self.default_schema,
            table_name_pattern if table_name_pattern is not None else MATCH_ALL,
        )
