"""Inbound ports - APIs offered to clients.

Exports:
    - Catalog: Table-level API used by the executor, console and HTTP adapter
"""

from minidb.ports.inbound.catalog import Catalog

__all__ = [
    "Catalog",
]
