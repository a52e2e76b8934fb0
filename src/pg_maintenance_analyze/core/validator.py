"""Trust-state wrappers for table names and the check that converts them.

An `UncheckedTableName` is whatever the caller sent. A `CheckedTableName`
can only be produced by `TableNameChecker.check_table_name`, after the
catalog confirmed the table exists. Only checked names may reach the
maintenance executor.
"""

import logging
from typing import Any

from pg_maintenance_analyze.core.inspector import TableCatalog
from pg_maintenance_analyze.errors import TableNotFoundError

logger = logging.getLogger(__name__)

# Held only by this module; CheckedTableName refuses construction without it
_CHECKED = object()


class UncheckedTableName:
    """Caller-supplied table name. May contain anything."""

    __slots__ = ("value",)

    def __init__(self, value: str):
        self.value = value

    def __repr__(self) -> str:
        return f"UncheckedTableName({self.value!r})"


class CheckedTableName:
    """Table name proven to exist in `schema` at validation time."""

    __slots__ = ("_schema", "_name")

    def __init__(self, schema: str, name: str, *, _token: Any = None):
        if _token is not _CHECKED:
            raise TypeError(
                "CheckedTableName can only be created by TableNameChecker"
            )
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_name", name)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("CheckedTableName is immutable")

    @property
    def schema(self) -> str:
        return self._schema

    @property
    def name(self) -> str:
        return self._name

    def as_str(self) -> str:
        """The validated table name, verbatim."""
        return self._name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckedTableName):
            return NotImplemented
        return (self._schema, self._name) == (other._schema, other._name)

    def __hash__(self) -> int:
        return hash((self._schema, self._name))

    def __repr__(self) -> str:
        return f"CheckedTableName({self._schema!r}, {self._name!r})"


class TableNameChecker:
    """Turns unchecked names into checked ones using a TableCatalog."""

    def __init__(self, catalog: TableCatalog):
        self.catalog = catalog

    async def check_table_name(
        self, schema: str, unchecked: UncheckedTableName
    ) -> CheckedTableName:
        """
        Validate a table name against the catalog.

        The name is not normalized or escaped; validation proves existence,
        it does not sanitize.

        Args:
            schema: Schema the table must live in
            unchecked: Caller-supplied name

        Returns:
            Checked name carrying the original text

        Raises:
            TableNotFoundError: If the catalog has no such table
            UnexpectedCatalogStateError, InfrastructureError: From the catalog
        """
        raw_name = unchecked.value
        found = await self.catalog.table_exists(schema, raw_name)
        if not found:
            logger.warning(f"Rejected table name {raw_name!r} in schema {schema!r}")
            raise TableNotFoundError(schema, raw_name)
        return CheckedTableName(schema, raw_name, _token=_CHECKED)
