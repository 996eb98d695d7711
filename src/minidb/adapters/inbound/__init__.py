"""Inbound adapters for the tabular store.

Inbound adapters handle incoming requests and convert them to
catalog operations.

Exports:
    Statement Parser:
        - StatementParser: Parses one statement line
        - Statement: Base class for parsed statements
        - StatementType: Kinds of statements
        - ParseError: Exception for parsing errors

The console (minidb.adapters.inbound.console) and the REST API
(minidb.adapters.inbound.rest_api) are imported from their modules
directly; both depend on the application layer.
"""

from minidb.adapters.inbound.sql_parser import (
    AddColumnStatement,
    AggregateStatement,
    CreateTableStatement,
    DeleteStatement,
    DropColumnStatement,
    DropTableStatement,
    ExitStatement,
    InsertStatement,
    ParseError,
    SelectStatement,
    ShowTablesStatement,
    Statement,
    StatementParser,
    StatementType,
    UpdateStatement,
)

__all__ = [
    "StatementParser",
    "ParseError",
    "Statement",
    "StatementType",
    "CreateTableStatement",
    "InsertStatement",
    "SelectStatement",
    "AggregateStatement",
    "UpdateStatement",
    "DeleteStatement",
    "DropTableStatement",
    "ShowTablesStatement",
    "AddColumnStatement",
    "DropColumnStatement",
    "ExitStatement",
]
