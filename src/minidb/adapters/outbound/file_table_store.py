"""File-based Table Store implementation.

This adapter implements the TableStore protocol with one text file per
table under a data directory:

    <data_dir>/<name>.table

The directory is created on first use. A save truncates and rewrites the
whole file. With `atomic_writes` enabled the document is first written to
a sibling temporary file which then replaces the target with os.replace(),
so a crash leaves either the old or the new document. The on-disk format
is the same either way.

Thread Safety:
    None. One writer per data directory.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from minidb.infrastructure.config import Config, get_config
from minidb.infrastructure.logging import get_logger
from minidb.infrastructure.metrics import MetricsRegistry, get_metrics

logger = get_logger(__name__)


class FileTableStore:
    """File-based implementation of the TableStore protocol.

    Attributes:
        data_dir: Directory holding the table files.
        extension: File extension, including the dot.
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        extension: str = ".table",
        atomic_writes: bool = False,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            data_dir: Table directory (default from config).
            extension: Table file extension, including the dot.
            atomic_writes: Write via temporary file + rename.
            metrics: Metrics registry (default: process registry).
        """
        if data_dir is None:
            data_dir = get_config().storage.data_dir

        self._data_dir = Path(data_dir).expanduser()
        self._extension = extension
        self._atomic_writes = atomic_writes
        self._metrics = metrics or get_metrics()

    @classmethod
    def from_config(
        cls,
        config: Config,
        metrics: MetricsRegistry | None = None,
        data_dir: str | Path | None = None,
    ) -> FileTableStore:
        """Build a store from the storage section of a Config.

        `data_dir`, if given, replaces the configured directory.
        """
        return cls(
            data_dir=data_dir if data_dir is not None else config.storage.data_dir,
            extension=config.storage.file_extension,
            atomic_writes=config.storage.atomic_writes,
            metrics=metrics,
        )

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def atomic_writes(self) -> bool:
        return self._atomic_writes

    def path_for(self, name: str) -> Path:
        """Return <data_dir>/<name><extension>."""
        return self._data_dir / f"{name}{self._extension}"

    def save(self, name: str, text: str) -> None:
        """Rewrite the file for a table."""
        self._data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        data = text.encode("utf-8")

        if self._atomic_writes:
            self._replace(path, data)
        else:
            with open(path, "wb") as f:
                f.write(data)

        self._metrics.table_writes_total.inc()
        self._metrics.table_write_bytes_total.inc(len(data))
        logger.debug("table_file_written", table=name, path=str(path), bytes=len(data))

    def _replace(self, path: Path, data: bytes) -> None:
        """Write to a temporary sibling, fsync, then rename over `path`."""
        fd, tmp_name = tempfile.mkstemp(
            dir=self._data_dir, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self, name: str) -> str | None:
        """Read the file for a table, or None if it does not exist."""
        path = self.path_for(name)
        try:
            with open(path, "rb") as f:
                return f.read().decode("utf-8")
        except FileNotFoundError:
            return None

    def delete(self, name: str) -> bool:
        """Remove the file for a table; a missing file is not an error."""
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("table_file_missing", table=name, path=str(path))
            return False
        logger.debug("table_file_removed", table=name, path=str(path))
        return True

    def list_names(self) -> list[str]:
        """Return the stems of all table files, sorted."""
        if not self._data_dir.is_dir():
            return []
        return sorted(
            entry.name[: -len(self._extension)]
            for entry in self._data_dir.iterdir()
            if entry.is_file()
            and entry.name.endswith(self._extension)
            and len(entry.name) > len(self._extension)
        )
