"""Value objects for the tabular store domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Data types:
        - DataType: Closed set of column kinds (INT, TEXT, FLOAT, ...)
        - parse_type: Case-insensitive token -> DataType
        - format_type: DataType -> canonical uppercase token
        - is_type_token: Membership test for type tokens
"""

from minidb.domain.value_objects.data_type import (
    DataType,
    format_type,
    is_type_token,
    parse_type,
)

__all__ = [
    "DataType",
    "parse_type",
    "format_type",
    "is_type_token",
]
