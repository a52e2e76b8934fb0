"""GraphQL schema: table name discovery (query) and ANALYZE (mutation).

Resolvers read the services from the request context:

    {"tables": TableQueryService, "maintenance": MaintenanceService}
"""

from typing import Optional

import strawberry
from strawberry.types import Info

from pg_maintenance_analyze.core.discovery import TableQueryService
from pg_maintenance_analyze.core.maintenance import MaintenanceService


@strawberry.type
class Query:
    @strawberry.field(description="List table names in a schema matching a LIKE pattern")
    async def get_table_names(
        self,
        info: Info,
        schema: Optional[str] = None,
        table_name_pattern: Optional[str] = None,
    ) -> list[str]:
        tables: TableQueryService = info.context["tables"]
        return await tables.get_table_names(schema, table_name_pattern)


@strawberry.type
class Mutation:
    @strawberry.mutation(description="Run ANALYZE on one existing table")
    async def analyze_by_table_name(self, info: Info, schema: str, name: str) -> bool:
        maintenance: MaintenanceService = info.context["maintenance"]
        return await maintenance.analyze_by_table_name(schema, name)

    @strawberry.mutation(
        description="Run ANALYZE on each table in order, stopping at the first failure"
    )
    async def analyze_tables(self, info: Info, schema: str, names: list[str]) -> bool:
        maintenance: MaintenanceService = info.context["maintenance"]
        return await maintenance.analyze_tables(schema, names)


def build_schema() -> strawberry.Schema:
    """Compose the query and mutation roots. There is no subscription root."""
    return strawberry.Schema(query=Query, mutation=Mutation)


def build_context(
    tables: TableQueryService, maintenance: MaintenanceService
) -> dict:
    return {"tables": tables, "maintenance": maintenance}
