"""Aggregate computation over stringly-typed cells.

Cells are stored as text. SUM, AVG, MIN and MAX coerce each cell to a
float through one helper, parse_numeric(), so every function skips the
same cells:

    - "NULL" and "" are absent values and are ignored by every function.
    - Any other cell that does not parse as a float is skipped. Skipping
      never aborts the aggregate; the number of skipped cells is reported
      on the result.

COUNT never parses: it counts the cells that are present.

Example:
    >>> result = compute_aggregate(AggregateFunction.SUM, ["5", "NULL", "7"])
    >>> result.value
    12.0
    >>> compute_aggregate(AggregateFunction.AVG, ["abc", "NULL", ""]).value is None
    True
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from minidb.domain.exceptions import UnknownAggregateFunctionError

NULL_TEXT = "NULL"
"""Literal cell text that stands for a missing value."""

# Plain decimal with optional exponent; no inf, nan or digit underscores
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class AggregateFunction(Enum):
    """Supported aggregate functions."""

    COUNT = "COUNT"
    SUM = "SUM"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"

    @classmethod
    def from_token(cls, token: str) -> AggregateFunction:
        """Resolve a function token.

        Matching is exact and case-sensitive: "SUM" resolves, "sum" does not.

        Raises:
            UnknownAggregateFunctionError: If the token is not one of the five.
        """
        for member in cls:
            if member.value == token:
                return member
        raise UnknownAggregateFunctionError(token)


@dataclass(frozen=True)
class AggregateResult:
    """Outcome of an aggregate over one column.

    Attributes:
        function: The function that was applied.
        column: Column name as requested by the caller.
        value: Numeric result, or None for NULL (AVG/MIN/MAX over no
            parseable cells).
        skipped: Present cells that failed numeric parsing.
    """

    function: AggregateFunction
    column: str
    value: float | int | None
    skipped: int = 0

    @property
    def is_null(self) -> bool:
        return self.value is None

    def format_value(self) -> str:
        """Render the value the way the console prints it (12, 6.5, NULL)."""
        if self.value is None:
            return NULL_TEXT
        return f"{self.value:g}"

    def __str__(self) -> str:
        return f"{self.function.value}({self.column}) = {self.format_value()}"


def is_absent(cell: str) -> bool:
    """Check whether a cell holds no value ("NULL" or empty)."""
    return cell == "" or cell == NULL_TEXT


def parse_numeric(cell: str) -> float | None:
    """Parse a cell as a finite float.

    Only plain decimal text is accepted ("12", "-3.5", "1e3", surrounding
    whitespace allowed). "nan", "inf" and "1_000" are not numbers here.

    Returns:
        The parsed value, or None if the cell is absent or not numeric.
    """
    if is_absent(cell):
        return None
    text = cell.strip()
    if not _NUMBER.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def compute_aggregate(
    function: AggregateFunction,
    cells: Iterable[str],
    column: str = "",
) -> AggregateResult:
    """Apply an aggregate function to a column's cells.

    Args:
        function: The aggregate to compute.
        cells: Raw cell text, one per row.
        column: Column name, carried onto the result for display.

    Returns:
        AggregateResult with the value and the skipped-cell count.
    """
    if function is AggregateFunction.COUNT:
        count = sum(1 for cell in cells if not is_absent(cell))
        return AggregateResult(function, column, count)

    numbers: list[float] = []
    skipped = 0
    for cell in cells:
        if is_absent(cell):
            continue
        number = parse_numeric(cell)
        if number is None:
            skipped += 1
            continue
        numbers.append(number)

    value: float | None
    if function is AggregateFunction.SUM:
        value = float(sum(numbers))
    elif not numbers:
        value = None
    elif function is AggregateFunction.AVG:
        value = sum(numbers) / len(numbers)
    elif function is AggregateFunction.MIN:
        value = min(numbers)
    else:
        value = max(numbers)

    return AggregateResult(function, column, value, skipped)
