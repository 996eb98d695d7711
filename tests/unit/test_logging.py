"""Unit tests for logging setup."""

from __future__ import annotations

import io
import json
import logging
from typing import Generator

import pytest
import structlog

from minidb.infrastructure.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Restore the root logger and structlog defaults after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
@pytest.mark.usefixtures("restore_logging")
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_events(self) -> None:
        """structlog events are rendered as JSON with context."""
        stream = io.StringIO()
        setup_logging("INFO", "json", stream=stream)

        get_logger("minidb.test", table="users").info("table_created", columns=2)

        entry = json.loads(stream.getvalue().splitlines()[-1])
        assert entry["event"] == "table_created"
        assert entry["table"] == "users"
        assert entry["columns"] == 2
        assert entry["level"] == "info"
        assert entry["service"] == "minidb"

    def test_stdlib_loggers_share_handler(self) -> None:
        """Plain stdlib loggers go through the same renderer."""
        stream = io.StringIO()
        setup_logging("WARNING", "json", stream=stream)

        logging.getLogger("minidb.domain.test").warning("dropping column %s", "blob")

        entry = json.loads(stream.getvalue().splitlines()[-1])
        assert entry["event"] == "dropping column blob"
        assert entry["logger"] == "minidb.domain.test"

    def test_level_filter(self) -> None:
        """Events below the level are dropped."""
        stream = io.StringIO()
        setup_logging("WARNING", "console", stream=stream)

        get_logger("minidb.test").info("hidden")
        logging.getLogger("minidb.test").info("hidden too")

        assert stream.getvalue() == ""
