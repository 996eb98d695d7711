"""Outbound adapters - implementations of outbound ports.

These adapters implement external dependencies such as table file
persistence.
"""

from minidb.adapters.outbound.file_table_store import FileTableStore

__all__ = [
    "FileTableStore",
]
