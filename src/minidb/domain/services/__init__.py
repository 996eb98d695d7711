"""Domain services for the tabular store.

Exports:
    Aggregation:
        - AggregateFunction: COUNT, SUM, AVG, MIN, MAX
        - AggregateResult: Value plus skipped-cell diagnostic
        - compute_aggregate: Apply a function to a column's cells
        - parse_numeric: Shared float coercion for SUM/AVG/MIN/MAX
        - is_absent: "NULL"/empty cell test
        - NULL_TEXT: The literal "NULL"
"""

from minidb.domain.services.aggregation import (
    NULL_TEXT,
    AggregateFunction,
    AggregateResult,
    compute_aggregate,
    is_absent,
    parse_numeric,
)

__all__ = [
    "NULL_TEXT",
    "AggregateFunction",
    "AggregateResult",
    "compute_aggregate",
    "is_absent",
    "parse_numeric",
]
