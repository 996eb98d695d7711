"""Column data types and the textual type registry.

Every column is declared with one of a closed set of scalar kinds. Type
tokens appear in CREATE/ALTER statements and in the header line of every
table file, so parsing is case-insensitive and formatting is always the
canonical uppercase token.

    >>> parse_type("varchar")
    <DataType.VARCHAR: 'VARCHAR'>
    >>> format_type(DataType.BOOL)
    'BOOL'
"""

from __future__ import annotations

from enum import Enum

from minidb.domain.exceptions import InvalidTypeError


class DataType(Enum):
    """Scalar kinds a column can be declared with.

    The value of each member is its canonical on-disk token. Cells are
    stored as text regardless of the declared type; the type is schema
    metadata only.
    """

    INT = "INT"
    TEXT = "TEXT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DATE = "DATE"
    BOOL = "BOOL"
    VARCHAR = "VARCHAR"

    def __str__(self) -> str:
        return self.value


_TOKENS: dict[str, DataType] = {member.value: member for member in DataType}


def parse_type(token: str) -> DataType:
    """Parse a type token, ignoring case.

    Args:
        token: Type name as written by the user or read from a table file.

    Returns:
        The matching DataType.

    Raises:
        InvalidTypeError: If the token names none of the seven types.
    """
    data_type = _TOKENS.get(token.strip().upper())
    if data_type is None:
        raise InvalidTypeError(token)
    return data_type


def format_type(data_type: DataType) -> str:
    """Return the canonical uppercase token for a type."""
    return data_type.value


def is_type_token(token: str) -> bool:
    """Check whether a token names a known type."""
    return token.strip().upper() in _TOKENS
