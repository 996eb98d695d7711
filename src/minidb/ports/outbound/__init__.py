"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
store depends on, such as the file system holding table documents.
"""

from minidb.ports.outbound.table_store import TableStore

__all__ = [
    "TableStore",
]
