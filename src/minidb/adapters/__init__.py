"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (console, REST)
- Outbound adapters: Implement external dependencies (table files)
"""

from minidb.adapters.outbound import FileTableStore

__all__ = [
    # Outbound adapters
    "FileTableStore",
]
