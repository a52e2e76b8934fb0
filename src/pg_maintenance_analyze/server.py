"""PostgreSQL maintenance GraphQL server

Serves a single POST endpoint that lists tables and runs ANALYZE on
catalog-checked table names.
"""

import asyncio
import logging
import os
import socket
import sys
from pathlib import Path
from typing import Optional

import strawberry
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter

from pg_maintenance_analyze.core import (
    AnalyzeExecutor,
    CatalogInspector,
    DatabaseConnection,
    MaintenanceService,
    TableNameChecker,
    TableQueryService,
)
from pg_maintenance_analyze.errors import InfrastructureError, StartupError
from pg_maintenance_analyze.models.config import ServerConfig
from pg_maintenance_analyze.schema import build_context, build_schema

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    schema: strawberry.Schema,
    tables: TableQueryService,
    maintenance: MaintenanceService,
) -> FastAPI:
    """
    Mount the GraphQL schema at POST /.

    Args:
        schema: Composed GraphQL schema
        tables: Service behind the query root
        maintenance: Service behind the mutation root

    Returns:
        FastAPI application
    """
    context = build_context(tables, maintenance)

    async def get_context() -> dict:
        return dict(context)

    graphql_router = GraphQLRouter(
        schema,
        path="/",
        context_getter=get_context,
        graphql_ide=None,
        allow_queries_via_get=False,
    )

    app = FastAPI(title="pg-maintenance-analyze", docs_url=None, redoc_url=None)
    app.include_router(graphql_router)
    return app


class MaintenanceApiServer:
    """Owns the shared connection pool and wires every component to it."""

    def __init__(self, config: ServerConfig):
        """
        Initialize maintenance API server.

        Args:
            config: Server configuration
        """
        self.config = config
        self.connection = DatabaseConnection(config.database)
        self.schema = build_schema()
        self.inspector: Optional[CatalogInspector] = None
        self.tables: Optional[TableQueryService] = None
        self.maintenance: Optional[MaintenanceService] = None
        self.app: Optional[FastAPI] = None

    async def initialize(self) -> None:
        """Create the pool, verify connectivity and build the services."""
        await self.connection.initialize()

        try:
            version = await self.connection.get_version()
        except InfrastructureError as e:
            raise StartupError(str(e)) from e

        self.inspector = CatalogInspector(self.connection)
        self.tables = TableQueryService(self.inspector, self.config.default_schema)
        self.maintenance = MaintenanceService(
            TableNameChecker(self.inspector),
            AnalyzeExecutor(self.connection),
        )
        self.app = create_app(self.schema, self.tables, self.maintenance)

        logger.info(f"Connected to {version}")

    def write_sdl(self) -> Path:
        """
        Write the GraphQL schema description to disk.

        Returns:
            Path that was written

        Raises:
            StartupError: If the file cannot be written
        """
        path = Path(self.config.sdl_path)
        try:
            path.write_text(self.schema.as_str() + "\n", encoding="utf-8")
        except OSError as e:
            raise StartupError(f"Cannot write schema to {path}: {e}") from e

        logger.info(f"Wrote GraphQL schema to {path}")
        return path

    def bind(self) -> socket.socket:
        """
        Bind the listening socket.

        Raises:
            StartupError: If the address cannot be bound
        """
        host = self.config.host
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        try:
            return socket.create_server((host, self.config.port), family=family)
        except OSError as e:
            raise StartupError(
                f"Cannot listen on {self.config.listen_addr}: {e}"
            ) from e

    async def serve(self) -> None:
        """Serve HTTP requests until the process is stopped."""
        assert self.app is not None

        sock = self.bind()
        uvicorn_config = uvicorn.Config(
            self.app,
            log_level=self.config.log_level.lower(),
        )
        logger.info(f"Listening on {self.config.listen_addr}")
        await uvicorn.Server(uvicorn_config).serve(sockets=[sock])

    async def cleanup(self) -> None:
        """Cleanup resources."""
        await self.connection.dispose()
        logger.info("Maintenance API server cleaned up")


async def main() -> None:
    """Main entry point for the GraphQL server."""
    config = ServerConfig.from_env()
    logging.getLogger().setLevel(config.log_level)

    server = MaintenanceApiServer(config)

    try:
        await server.initialize()
        server.write_sdl()
        await server.serve()
    finally:
        await server.cleanup()


def cli_entry() -> None:
    """
    Synchronous entry point for console script.

    This function is called by the 'pg-maintenance-analyze' console script.
    Any startup or top-level failure is printed and the process exits 1.
    """
    # Windows-specific event loop policy
    if os.name == "nt":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())  # type: ignore[attr-defined]

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        print(f"{e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli_entry()
