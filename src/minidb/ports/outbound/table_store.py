"""Table Store port for backing-file persistence.

This outbound port defines how the domain persists a table: one text
document per table, addressed by the table's canonical (lowercase) name.
The domain produces and consumes the document text; the store only moves
it to and from stable storage.

Every mutating table operation rewrites the whole document. There is no
append path and no log.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol


class TableStore(Protocol):
    """Protocol for table document persistence.

    Thread Safety:
        None. The store assumes a single writer; two saves of the same
        table must never interleave.
    """

    @abstractmethod
    def path_for(self, name: str) -> Path:
        """Return the backing file path for a table name."""
        ...

    @abstractmethod
    def save(self, name: str, text: str) -> None:
        """Replace the stored document for a table.

        Args:
            name: Canonical table name.
            text: Complete serialized table.

        Raises:
            OSError: If the write fails.
        """
        ...

    @abstractmethod
    def load(self, name: str) -> str | None:
        """Read the stored document for a table.

        Returns:
            The document text, or None if no document exists.
        """
        ...

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove the stored document for a table.

        Returns:
            True if a document was removed, False if none existed.
        """
        ...

    @abstractmethod
    def list_names(self) -> list[str]:
        """Return the names of all stored tables."""
        ...
