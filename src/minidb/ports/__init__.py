"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (e.g., Catalog)
- Outbound ports: Dependencies on external systems (e.g., TableStore)

Adapters implement these ports with concrete functionality.
"""

from minidb.ports.inbound import Catalog
from minidb.ports.outbound import TableStore

__all__ = [
    # Inbound ports
    "Catalog",
    # Outbound ports
    "TableStore",
]
