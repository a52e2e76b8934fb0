"""Exception hierarchy for catalog checks, maintenance and startup."""


class MaintenanceError(Exception):
    """Base class for all pg-maintenance-analyze errors."""


class TableNotFoundError(MaintenanceError):
    """The named table does not exist in the given schema.

    The rejected name is kept for diagnostics only and must never be used to
    build further statements.
    """

    def __init__(self, schema: str, name: str):
        self.schema = schema
        self.name = name
        super().__init__(f"the table {name!r} not found in schema {schema!r}")


class UnexpectedCatalogStateError(MaintenanceError):
    """The catalog returned something other than zero-or-one matching rows."""


class InfrastructureError(MaintenanceError):
    """Connection, metadata query or statement execution failed."""


class StartupError(MaintenanceError):
    """Missing configuration or a failed startup step."""
