"""Errors raised by the tabular store core.

Every error is recoverable: it aborts the single request that raised it
and leaves the catalog usable. Front ends turn these into result values.
"""

from __future__ import annotations


class MiniDBError(Exception):
    """Base class for all store errors."""

    pass


class TableNotFoundError(MiniDBError):
    """The named table is not registered in the catalog."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table not found: {table}")
        self.table = table


class ColumnNotFoundError(MiniDBError):
    """A column name did not resolve against the table schema."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Column not found: {column}")
        self.column = column


class ColumnCountMismatchError(MiniDBError):
    """The number of values does not match the number of target columns."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Column count mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class UnknownAggregateFunctionError(MiniDBError):
    """The aggregate function token is not COUNT, SUM, AVG, MIN or MAX."""

    def __init__(self, function: str) -> None:
        super().__init__(f"Unknown aggregate function: {function}")
        self.function = function


class InvalidTypeError(MiniDBError, ValueError):
    """A type token names none of the supported column types."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown data type: {token}")
        self.token = token
