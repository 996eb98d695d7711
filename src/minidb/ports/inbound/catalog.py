"""Catalog port - the table-level API offered to front ends.

The statement executor, the console and the HTTP adapter all talk to the
store through this contract. Table names are case-insensitive; every
implementation canonicalizes them to lowercase before lookup.

Error surface (see minidb.domain.exceptions):
    - TableNotFoundError: insert, select, add_column, drop_column,
      aggregate, columns, table on an unknown table
    - ColumnNotFoundError, ColumnCountMismatchError,
      UnknownAggregateFunctionError: raised by the table operation

update() and delete() on an unknown table do nothing and return 0.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterator, Protocol, Sequence

from minidb.domain.entities import Column, Row, Table
from minidb.domain.services import AggregateResult


class Catalog(Protocol):
    """Protocol for the name-keyed table registry."""

    @abstractmethod
    def create_table(self, name: str, columns: Sequence[Column]) -> bool:
        """Create and persist an empty table.

        Returns:
            True if created, False if a table with that name already exists
            (the existing table is left untouched).
        """
        ...

    @abstractmethod
    def insert(
        self,
        name: str,
        values: Sequence[str],
        columns: Sequence[str] | None = None,
    ) -> Row:
        """Append one row to a table."""
        ...

    @abstractmethod
    def select(
        self,
        name: str,
        where_column: str | None = None,
        where_value: str | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> Iterator[Row]:
        """Query a table with an optional predicate, sort key and limit."""
        ...

    @abstractmethod
    def update(
        self,
        name: str,
        target_column: str,
        new_value: str,
        where_column: str,
        where_value: str,
    ) -> int:
        """Update matching rows; returns the number of rows updated."""
        ...

    @abstractmethod
    def delete(self, name: str, where_column: str, where_value: str) -> int:
        """Delete matching rows; returns the number of rows removed."""
        ...

    @abstractmethod
    def add_column(self, name: str, column: Column) -> None:
        """Append a column to a table's schema."""
        ...

    @abstractmethod
    def drop_column(self, name: str, column_name: str) -> Column:
        """Remove a column from a table's schema."""
        ...

    @abstractmethod
    def aggregate(self, name: str, function: str, column: str) -> AggregateResult:
        """Compute COUNT, SUM, AVG, MIN or MAX over a column."""
        ...

    @abstractmethod
    def drop_table(self, name: str) -> bool:
        """Remove a table and its backing file.

        Never fails for a missing table. Returns True if a backing file
        was deleted.
        """
        ...

    @abstractmethod
    def save_all(self) -> None:
        """Persist every registered table."""
        ...

    @abstractmethod
    def load_all(self, names: Sequence[str]) -> list[str]:
        """Load tables from their backing files; returns the names loaded."""
        ...

    @abstractmethod
    def list_tables(self) -> list[str]:
        """Return the registered table names (no guaranteed order)."""
        ...

    @abstractmethod
    def columns(self, name: str) -> list[Column]:
        """Return a table's schema."""
        ...

    @abstractmethod
    def table(self, name: str) -> Table:
        """Return the registered Table object."""
        ...
