"""Remote table access interface and the in-memory implementation."""

import copy
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from visitation.exceptions import ConstraintError
from visitation.utils.logging import get_logger

logger = get_logger(__name__)

Row = dict[str, Any]
Filters = Mapping[str, Any]


class PersistenceClient(Protocol):
    """Interface for the hosted database's table API.

    Filters are equality-only. Every call either returns whole rows or raises
    a PersistenceError, there are no partial results.
    """

    async def select(self, table: str, filters: Filters | None = None) -> list[Row]:
        """Fetch the rows of ``table`` matching every filter.

        Args:
            table: Remote table name
            filters: Column to value equality filters

        Returns:
            Matching rows
        """
        ...

    async def insert(self, table: str, rows: list[Row]) -> Row:
        """Insert rows and return the first one as stored by the backend."""
        ...

    async def update(self, table: str, patch: Row, filters: Filters) -> Row | None:
        """Apply ``patch`` to matching rows.

        Returns:
            The first updated row, or None if nothing matched
        """
        ...

    async def delete(self, table: str, filters: Filters) -> bool:
        """Delete matching rows.

        Returns:
            True if at least one row was deleted, False if nothing matched
        """
        ...

    async def aclose(self) -> None:
        """Release any underlying connection resources."""
        ...


def _matches(row: Row, filters: Filters | None) -> bool:
    if not filters:
        return True
    return all(row.get(column) == value for column, value in filters.items())


class InMemoryPersistenceClient:
    """In-memory table store for development and tests.

    Mirrors what the hosted backend provides: integer identity columns for
    the configured tables and unique constraints on configured columns.
    Rows are copied in both directions so callers never share state with the
    store.
    """

    def __init__(
        self,
        auto_increment_tables: Iterable[str] = (),
        unique_columns: Mapping[str, Iterable[str]] | None = None,
    ):
        """Initialize an empty store.

        Args:
            auto_increment_tables: Tables whose ``id`` is assigned by the store
            unique_columns: Per-table columns that must be unique
        """
        self.tables: dict[str, list[Row]] = {}
        self.auto_increment_tables = set(auto_increment_tables)
        self.unique_columns = {table: tuple(columns) for table, columns in (unique_columns or {}).items()}
        self._sequences: dict[str, int] = {}

    async def select(self, table: str, filters: Filters | None = None) -> list[Row]:
        """Fetch matching rows in insertion order."""
        return [copy.deepcopy(row) for row in self.tables.get(table, []) if _matches(row, filters)]

    async def insert(self, table: str, rows: list[Row]) -> Row:
        """Insert rows, assigning ids where the table owns them."""
        if not rows:
            raise ValueError("insert requires at least one row")

        stored_rows = self.tables.setdefault(table, [])
        staged: list[Row] = []
        for row in rows:
            new_row = copy.deepcopy(row)
            if table in self.auto_increment_tables and new_row.get("id") is None:
                new_row["id"] = self._next_id(table)
            self._check_unique(table, new_row, stored_rows + staged)
            staged.append(new_row)

        stored_rows.extend(staged)
        logger.debug(f"Inserted {len(staged)} row(s) into {table}")
        return copy.deepcopy(staged[0])

    async def update(self, table: str, patch: Row, filters: Filters) -> Row | None:
        """Patch matching rows in place."""
        stored_rows = self.tables.get(table, [])
        matched = [row for row in stored_rows if _matches(row, filters)]
        if not matched:
            return None

        for row in matched:
            candidate = {**row, **copy.deepcopy(patch)}
            others = [other for other in stored_rows if other is not row]
            self._check_unique(table, candidate, others)

        for row in matched:
            row.update(copy.deepcopy(patch))
        return copy.deepcopy(matched[0])

    async def delete(self, table: str, filters: Filters) -> bool:
        """Delete matching rows."""
        stored_rows = self.tables.get(table, [])
        remaining = [row for row in stored_rows if not _matches(row, filters)]
        deleted = len(stored_rows) - len(remaining)
        self.tables[table] = remaining
        return deleted > 0

    async def aclose(self) -> None:
        """Nothing to release."""

    def _next_id(self, table: str) -> int:
        # Continue after any ids that were inserted explicitly, never reuse deleted ones
        existing = (row["id"] for row in self.tables.get(table, []) if isinstance(row.get("id"), int))
        current = max(self._sequences.get(table, 0), max(existing, default=0)) + 1
        self._sequences[table] = current
        return current

    def _check_unique(self, table: str, row: Row, others: list[Row]) -> None:
        for column in ("id", *self.unique_columns.get(table, ())):
            value = row.get(column)
            if value is None:
                continue
            if any(other.get(column) == value for other in others):
                raise ConstraintError(f"Duplicate value for {table}.{column}: {value!r}")
