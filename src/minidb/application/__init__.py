"""Application layer for the tabular store.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    Database:
        - Database: Catalog implementation with start()/stop() lifecycle
        - canonical_name: Table name canonicalization
    Executor:
        - StatementExecutor: Runs statement lines against a Catalog
        - ExecutionResult: Result of statement execution
"""

from minidb.application.database import Database, canonical_name
from minidb.application.executor import ExecutionResult, StatementExecutor, error_message

__all__ = [
    "Database",
    "canonical_name",
    "StatementExecutor",
    "ExecutionResult",
    "error_message",
]
