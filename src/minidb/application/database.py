"""Database - the catalog of tables.

This module provides the Database class, the Catalog implementation that
owns every Table, resolves table names and delegates each request to the
matching Table method. Each request runs to completion, including the
file rewrite, before it returns.

Usage:
    from minidb.application import Database
    from minidb.domain.entities import Column
    from minidb.domain.value_objects import DataType

    with Database(data_dir="/path/to/data") as db:    # start(): load tables
        db.create_table("users", [Column("id", DataType.INT),
                                  Column("name", DataType.VARCHAR)])
        db.insert("users", ["1", "Alice"])
        rows = list(db.select("users", order_by="name", desc=True))
                                                      # stop(): save tables

Lifecycle:
    start() discovers table files in the store and loads them; stop()
    rewrites every registered table. Both are explicit; nothing is loaded
    at import time and there is no process-wide catalog.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Sequence

from minidb.adapters.outbound.file_table_store import FileTableStore
from minidb.domain.entities import Column, Row, Table
from minidb.domain.exceptions import TableNotFoundError
from minidb.domain.services import AggregateResult
from minidb.infrastructure.config import get_config
from minidb.infrastructure.logging import get_logger
from minidb.infrastructure.metrics import MetricsRegistry, get_metrics
from minidb.infrastructure.tracing import catalog_span
from minidb.ports.outbound.table_store import TableStore

logger = get_logger(__name__)


def canonical_name(name: str) -> str:
    """Table names are case-insensitive; the catalog key is lowercase."""
    return name.strip().lower()


class Database:
    """Name-keyed registry of exclusively owned tables.

    Every table-scoped call canonicalizes the name, resolves the Table and
    delegates. Unknown tables raise TableNotFoundError, except update() and
    delete(), which do nothing and report zero affected rows.

    Thread Safety:
        None. A Database serves one caller at a time.
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        store: TableStore | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the database.

        Args:
            data_dir: Directory for table files. Ignored if `store` is given;
                defaults to the configured data directory.
            store: Persistence adapter. Defaults to a FileTableStore built
                from the storage configuration.
            metrics: Metrics registry (default: process registry).
        """
        self._metrics = metrics or get_metrics()
        if store is None:
            store = FileTableStore.from_config(
                get_config(), metrics=self._metrics, data_dir=data_dir
            )
        self._store = store
        self._tables: dict[str, Table] = {}
        self._started = False

    @property
    def store(self) -> TableStore:
        return self._store

    @property
    def is_started(self) -> bool:
        return self._started

    # Lifecycle

    def start(self) -> list[str]:
        """Load every table found in the store.

        Returns:
            Names of the tables loaded.

        Raises:
            RuntimeError: If already started.
        """
        if self._started:
            raise RuntimeError("Database already started")
        loaded = self.load_all(self._store.list_names())
        self._started = True
        logger.info("database_started", tables=len(loaded))
        return loaded

    def stop(self) -> None:
        """Persist every table.

        Raises:
            RuntimeError: If not started.
        """
        if not self._started:
            raise RuntimeError("Database not started")
        self.save_all()
        self._started = False
        logger.info("database_stopped", tables=len(self._tables))

    def __enter__(self) -> Database:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # Table lifecycle

    def create_table(self, name: str, columns: Sequence[Column]) -> bool:
        """Register and persist a new, empty table.

        An existing table with the same name is left untouched.

        Returns:
            True if the table was created, False if it already existed.
        """
        key = canonical_name(name)
        with catalog_span("create_table", key):
            if key in self._tables:
                logger.info("table_exists", table=key)
                return False

            table = Table(key, columns, store=self._store)
            self._tables[key] = table
            table.save()
            self._metrics.tables.set(len(self._tables))
            logger.info("table_created", table=key, columns=len(table.columns))
            return True

    def drop_table(self, name: str) -> bool:
        """Unregister a table and delete its backing file.

        Neither a missing table nor a missing file is an error.

        Returns:
            True if the backing file was deleted, False if it was not found.
        """
        key = canonical_name(name)
        with catalog_span("drop_table", key):
            self._tables.pop(key, None)
            deleted = self._store.delete(key)
            self._metrics.tables.set(len(self._tables))
            logger.info("table_dropped", table=key, file_deleted=deleted)
            return deleted

    def table(self, name: str) -> Table:
        """Return a registered table.

        Raises:
            TableNotFoundError: If no table has that name.
        """
        key = canonical_name(name)
        table = self._tables.get(key)
        if table is None:
            raise TableNotFoundError(key)
        return table

    def columns(self, name: str) -> list[Column]:
        """Return a table's schema."""
        return self.table(name).columns

    def list_tables(self) -> list[str]:
        """Return the registered table names; callers must not rely on order."""
        return list(self._tables)

    # Row operations

    def insert(
        self,
        name: str,
        values: Sequence[str],
        columns: Sequence[str] | None = None,
    ) -> Row:
        """Append a row; see Table.insert."""
        with catalog_span("insert", canonical_name(name)):
            table = self.table(name)
            row = table.insert(values, columns)
            logger.debug("row_inserted", table=table.name)
            return row

    def select(
        self,
        name: str,
        where_column: str | None = None,
        where_value: str | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> Iterator[Row]:
        """Query a table; see Table.select."""
        with catalog_span("select", canonical_name(name)):
            return self.table(name).select(where_column, where_value, order_by, desc, limit)

    def update(
        self,
        name: str,
        target_column: str,
        new_value: str,
        where_column: str,
        where_value: str,
    ) -> int:
        """Update matching rows; see Table.update.

        An unknown table is ignored and 0 is returned.
        """
        key = canonical_name(name)
        with catalog_span("update", key):
            table = self._tables.get(key)
            if table is None:
                logger.warning("update_unknown_table", table=key)
                return 0
            updated = table.update(target_column, new_value, where_column, where_value)
            logger.debug("rows_updated", table=key, rows=updated)
            return updated

    def delete(self, name: str, where_column: str, where_value: str) -> int:
        """Delete matching rows; see Table.delete_where.

        An unknown table is ignored and 0 is returned.
        """
        key = canonical_name(name)
        with catalog_span("delete", key):
            table = self._tables.get(key)
            if table is None:
                logger.warning("delete_unknown_table", table=key)
                return 0
            removed = table.delete_where(where_column, where_value)
            logger.debug("rows_deleted", table=key, rows=removed)
            return removed

    # Schema operations

    def add_column(self, name: str, column: Column) -> None:
        """Append a column; see Table.add_column."""
        with catalog_span("add_column", canonical_name(name)):
            table = self.table(name)
            table.add_column(column)
            logger.info("column_added", table=table.name, column=column.name)

    def drop_column(self, name: str, column_name: str) -> Column:
        """Remove a column; see Table.drop_column."""
        with catalog_span("drop_column", canonical_name(name)):
            table = self.table(name)
            column = table.drop_column(column_name)
            logger.info("column_dropped", table=table.name, column=column.name)
            return column

    # Aggregates

    def aggregate(self, name: str, function: str, column: str) -> AggregateResult:
        """Compute an aggregate; see Table.aggregate."""
        with catalog_span("aggregate", canonical_name(name)):
            table = self.table(name)
            result = table.aggregate(function, column)
            if result.skipped:
                self._metrics.aggregate_skipped_cells_total.labels(
                    function=result.function.value
                ).inc(result.skipped)
                logger.info(
                    "aggregate_cells_skipped",
                    table=table.name,
                    function=result.function.value,
                    column=column,
                    skipped=result.skipped,
                )
            return result

    # Bulk persistence

    def save_all(self) -> None:
        """Rewrite the backing file of every registered table."""
        with catalog_span("save_all"):
            for table in self._tables.values():
                table.save()

    def load_all(self, names: Sequence[str]) -> list[str]:
        """Load tables from their backing files.

        A candidate is registered only if its file exists and its header
        yields at least one column; other candidates are skipped silently.
        A loaded table replaces any registered table of the same name.

        Returns:
            Canonical names of the tables loaded, in candidate order.
        """
        loaded: list[str] = []
        with catalog_span("load_all"):
            for name in names:
                key = canonical_name(name)
                text = self._store.load(key)
                if text is None:
                    logger.debug("table_file_missing", table=key)
                    continue

                table = Table.deserialize(key, text, store=self._store)
                if not table.columns:
                    logger.debug("table_skipped_empty_schema", table=key)
                    continue

                self._tables[key] = table
                loaded.append(key)
                self._metrics.tables_loaded_total.inc()
                logger.info("table_loaded", table=key, rows=len(table))

            self._metrics.tables.set(len(self._tables))
        return loaded
