"""Table entity: schema, rows, queries and the flat-file codec.

A Table owns an ordered list of Columns and an ordered list of Rows. Every
row holds one text cell per column, aligned by position. Column names are
matched case-insensitively everywhere; duplicate names are allowed and
lookups resolve to the first match.

File Format (one document per table):
    - Line 1: "<name> <TYPE>," for every column, concatenated
    - Line 2+: "<cell>," for every cell of a row, concatenated

    id INT,name VARCHAR,
    1,Alice,
    2,Bob,

Cells and names are written verbatim. A comma or newline inside a value
corrupts the document on reload; the format has no escaping.

Persistence:
    A table bound to a TableStore rewrites its whole document after every
    mutating call (insert, update, delete_where, add_column, drop_column).
    The write happens after the in-memory change; there is no rollback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence

from minidb.domain.exceptions import ColumnCountMismatchError, ColumnNotFoundError
from minidb.domain.services.aggregation import (
    NULL_TEXT,
    AggregateFunction,
    AggregateResult,
    compute_aggregate,
)
from minidb.domain.value_objects.data_type import (
    DataType,
    format_type,
    is_type_token,
    parse_type,
)

if TYPE_CHECKING:
    from minidb.ports.outbound.table_store import TableStore

logger = logging.getLogger(__name__)

CELL_SEPARATOR = ","
COLUMN_NOT_FOUND = -1
"""Sentinel returned by Table.column_index for an unknown name."""


@dataclass(frozen=True)
class Column:
    """A named, typed column."""

    name: str
    data_type: DataType

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.lower() == name.lower()

    def __str__(self) -> str:
        return f"{self.name} {format_type(self.data_type)}"


@dataclass
class Row:
    """One row of text cells, positionally aligned to the table schema."""

    values: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> str:
        return self.values[index]


class Table:
    """In-memory table with optional write-through persistence.

    Example:
        >>> users = Table("users", [Column("id", DataType.INT),
        ...                         Column("name", DataType.VARCHAR)])
        >>> users.insert(["1", "Alice"])
        Row(values=['1', 'Alice'])
        >>> [row.values for row in users.select(order_by="name")]
        [['1', 'Alice']]
    """

    def __init__(
        self,
        name: str,
        columns: Iterable[Column] = (),
        rows: Iterable[Row] = (),
        store: TableStore | None = None,
    ) -> None:
        """Initialize the table.

        Args:
            name: Canonical table name (used as the document key).
            columns: Schema in declaration order.
            rows: Initial rows; each must match the schema arity.
            store: Where to persist after mutations. None keeps the
                table purely in memory.

        Raises:
            ColumnCountMismatchError: If a row does not match the schema.
        """
        self._name = name
        self._columns: list[Column] = list(columns)
        self._rows: list[Row] = []
        self._store = store

        for row in rows:
            self._check_arity(row.values, len(self._columns))
            self._rows.append(Row(list(row.values)))

    @property
    def name(self) -> str:
        return self._name

    @property
    def columns(self) -> list[Column]:
        """Schema in declaration order (a copy)."""
        return list(self._columns)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def rows(self) -> list[Row]:
        """Rows in insertion order (a copy of the list, not of the rows)."""
        return list(self._rows)

    @property
    def store(self) -> TableStore | None:
        return self._store

    def bind(self, store: TableStore | None) -> None:
        """Attach (or detach) the persistence target."""
        self._store = store

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return (
            self._name == other._name
            and self._columns == other._columns
            and self._rows == other._rows
        )

    def __repr__(self) -> str:
        cols = ", ".join(str(column) for column in self._columns)
        return f"Table({self._name!r}, [{cols}], rows={len(self._rows)})"

    # Column resolution

    def column_index(self, name: str) -> int:
        """Return the position of the first column named `name`.

        Matching ignores case. Returns COLUMN_NOT_FOUND (-1) if no column
        matches.
        """
        for index, column in enumerate(self._columns):
            if column.matches(name):
                return index
        return COLUMN_NOT_FOUND

    def _resolve(self, name: str) -> int:
        index = self.column_index(name)
        if index == COLUMN_NOT_FOUND:
            raise ColumnNotFoundError(name)
        return index

    # Row mutation

    def insert(
        self,
        values: Sequence[str],
        columns: Sequence[str] | None = None,
    ) -> Row:
        """Append one row and persist.

        Args:
            values: Cell text. Without `columns`, one value per schema
                column in declaration order.
            columns: Optional subset of column names the values belong to.
                Columns not named receive the literal "NULL".

        Returns:
            The appended row.

        Raises:
            ColumnCountMismatchError: If the value count does not match.
            ColumnNotFoundError: If a named column does not exist.
        """
        if not columns:
            self._check_arity(values, len(self._columns))
            row = Row(list(values))
        else:
            self._check_arity(values, len(columns))
            cells = [NULL_TEXT] * len(self._columns)
            for column, value in zip(columns, values):
                cells[self._resolve(column)] = value
            row = Row(cells)

        self._rows.append(row)
        self._persist()
        return row

    def update(
        self,
        target_column: str,
        new_value: str,
        where_column: str,
        where_value: str,
    ) -> int:
        """Set `target_column` on every row whose `where_column` equals `where_value`.

        The match is exact and case-sensitive, with no trimming. This is
        deliberately not the predicate select() uses. The table is
        persisted even if no row matched.

        Returns:
            Number of rows updated.

        Raises:
            ColumnNotFoundError: If either column does not exist.
        """
        target = self._resolve(target_column)
        where = self._resolve(where_column)

        updated = 0
        for row in self._rows:
            if row.values[where] == where_value:
                row.values[target] = new_value
                updated += 1

        self._persist()
        return updated

    def delete_where(self, where_column: str, where_value: str) -> int:
        """Remove every row whose `where_column` equals `where_value` exactly.

        Uses the same exact, case-sensitive match as update().

        Returns:
            Number of rows removed.

        Raises:
            ColumnNotFoundError: If the column does not exist.
        """
        where = self._resolve(where_column)

        kept = [row for row in self._rows if row.values[where] != where_value]
        removed = len(self._rows) - len(kept)
        self._rows = kept

        self._persist()
        return removed

    # Schema evolution

    def add_column(self, column: Column) -> None:
        """Append a column; every existing row gets an empty cell."""
        self._columns.append(column)
        for row in self._rows:
            row.values.append("")
        self._check_alignment()
        self._persist()

    def drop_column(self, name: str) -> Column:
        """Remove a column and its cell from every row.

        Returns:
            The removed column.

        Raises:
            ColumnNotFoundError: If the column does not exist.
        """
        index = self._resolve(name)
        column = self._columns.pop(index)
        for row in self._rows:
            del row.values[index]
        self._check_alignment()
        self._persist()
        return column

    # Queries

    def select(
        self,
        where_column: str | None = None,
        where_value: str | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> Iterator[Row]:
        """Filter, sort and limit the rows.

        Column names are resolved immediately, so an unknown column raises
        here rather than on first iteration. The returned iterator is
        single-use: it materializes the filtered rows once, on first
        `next()`.

        Args:
            where_column: Column for the equality predicate. Cells and
                `where_value` are compared after stripping surrounding
                whitespace and lowercasing both sides.
            where_value: Value for the predicate (None is treated as "").
            order_by: Column to sort by. Sorting compares raw cell text
                (so "10" < "2") and is stable.
            desc: Reverse the sort comparison.
            limit: Yield at most this many rows; None or <= 0 is unlimited.

        Raises:
            ColumnNotFoundError: If `where_column` or `order_by` is unknown.
        """
        where = self._resolve(where_column) if where_column else None
        order = self._resolve(order_by) if order_by else None
        return self._scan(where, _fold(where_value or ""), order, desc, limit)

    def _scan(
        self,
        where: int | None,
        folded_value: str,
        order: int | None,
        desc: bool,
        limit: int | None,
    ) -> Iterator[Row]:
        rows = self._rows
        if where is not None:
            rows = [row for row in rows if _fold(row.values[where]) == folded_value]
        if order is not None:
            rows = sorted(rows, key=lambda row: row.values[order], reverse=desc)
        else:
            rows = list(rows)
        if limit is not None and limit > 0:
            rows = rows[:limit]
        yield from rows

    def column_values(self, name: str) -> list[str]:
        """Return the raw cells of one column, in row order."""
        index = self._resolve(name)
        return [row.values[index] for row in self._rows]

    def aggregate(self, function: str | AggregateFunction, column: str) -> AggregateResult:
        """Compute COUNT, SUM, AVG, MIN or MAX over a column.

        Args:
            function: An AggregateFunction or its exact uppercase token.
            column: Column to aggregate.

        Raises:
            ColumnNotFoundError: If the column does not exist.
            UnknownAggregateFunctionError: If the token is not recognised.
        """
        cells = self.column_values(column)
        if not isinstance(function, AggregateFunction):
            function = AggregateFunction.from_token(function)
        result = compute_aggregate(function, cells, column)
        if result.skipped:
            logger.debug(
                f"{function.value}({column}) on {self._name} skipped "
                f"{result.skipped} non-numeric cell(s)"
            )
        return result

    # Serialization

    def serialize(self) -> str:
        """Encode the table as a flat-file document."""
        lines = ["".join(f"{column}{CELL_SEPARATOR}" for column in self._columns)]
        for row in self._rows:
            lines.append("".join(f"{value}{CELL_SEPARATOR}" for value in row.values))
        return "\n".join(lines) + "\n"

    @classmethod
    def deserialize(
        cls,
        name: str,
        text: str,
        store: TableStore | None = None,
    ) -> Table:
        """Decode a flat-file document.

        Header entries with a missing or unknown type token are dropped,
        together with the matching cell of every row, so the result is
        always aligned. Rows shorter than the header are padded with empty
        cells. A document whose header yields no columns produces a table
        with an empty schema.

        Args:
            name: Canonical table name.
            text: Document text as produced by serialize().
            store: Persistence target for the decoded table.
        """
        lines = text.splitlines()
        if not lines:
            return cls(name, store=store)

        columns: list[Column] = []
        positions: list[int] = []
        declared = [entry for entry in lines[0].split(CELL_SEPARATOR) if entry.strip()]
        for position, entry in enumerate(declared):
            parts = entry.split()
            if len(parts) < 2 or not is_type_token(parts[1]):
                logger.warning(f"Table {name}: dropping column with bad definition {entry!r}")
                continue
            columns.append(Column(parts[0], parse_type(parts[1])))
            positions.append(position)

        rows: list[Row] = []
        for line_no, line in enumerate(lines[1:], start=2):
            if not line:
                continue
            cells = _split_cells(line)
            if len(cells) != len(declared):
                logger.warning(
                    f"Table {name}: line {line_no} has {len(cells)} cells, "
                    f"header declares {len(declared)}"
                )
            rows.append(Row([cells[p] if p < len(cells) else "" for p in positions]))

        return cls(name, columns, rows, store=store)

    # Internals

    def save(self) -> None:
        """Write the whole table to its store, if bound."""
        self._persist()

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self._name, self.serialize())

    def _check_alignment(self) -> None:
        width = len(self._columns)
        for row in self._rows:
            if len(row.values) != width:
                raise AssertionError(
                    f"Table {self._name}: row has {len(row.values)} cells, schema has {width}"
                )

    @staticmethod
    def _check_arity(values: Sequence[str], expected: int) -> None:
        if len(values) != expected:
            raise ColumnCountMismatchError(expected, len(values))


def _fold(value: str) -> str:
    """Normalize a cell for select() predicates: trimmed and lowercased."""
    return value.strip().lower()


def _split_cells(line: str) -> list[str]:
    """Split a row line, dropping the terminator after the last cell."""
    if line.endswith(CELL_SEPARATOR):
        line = line[: -len(CELL_SEPARATOR)]
    return line.split(CELL_SEPARATOR)
