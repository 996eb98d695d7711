"""Unit tests for the interactive console."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from minidb.adapters.inbound import console
from minidb.adapters.inbound.console import BANNER, PROMPT, format_result, main, run_console
from minidb.application import Database, ExecutionResult, StatementExecutor
from minidb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def executor(database: Database, metrics_registry: MetricsRegistry) -> StatementExecutor:
    """Create an executor bound to a started database."""
    return StatementExecutor(database, metrics=metrics_registry)


def run_lines(executor: StatementExecutor, *lines: str) -> tuple[int, list[str]]:
    stdin = io.StringIO("".join(f"{line}\n" for line in lines))
    stdout = io.StringIO()
    failures = run_console(executor, stdin=stdin, stdout=stdout)
    output = stdout.getvalue().replace(PROMPT, "").splitlines()
    return failures, [line for line in output if line]


@pytest.mark.unit
class TestFormatResult:
    """Tests for format_result."""

    def test_select(self) -> None:
        """SELECT prints a tab-separated header and rows."""
        result = ExecutionResult(columns=["id", "name"], rows=[["1", "Alice"]])
        assert format_result(result) == ["id\tname", "1\tAlice"]

    def test_message(self) -> None:
        """Other statements print their message."""
        assert format_result(ExecutionResult(message="Row inserted.")) == ["Row inserted."]

    def test_failure(self) -> None:
        """Failures print the error message only."""
        result = ExecutionResult.failure("Table not found.")
        assert format_result(result) == ["Table not found."]


@pytest.mark.unit
class TestRunConsole:
    """Tests for the read-execute-print loop."""

    def test_session(self, executor: StatementExecutor) -> None:
        """Statements are executed in order until exit."""
        failures, output = run_lines(
            executor,
            "CREATE TABLE users (id INT, name VARCHAR)",
            "INSERT INTO users VALUES (1, 'Alice')",
            "INSERT INTO users VALUES (2, 'Bob')",
            "SELECT * FROM users ORDER BY name DESC",
            "SELECT COUNT(id) FROM users",
            "SELECT * FROM ghost",
            "exit",
            "DROP TABLE users",
        )

        assert failures == 1
        assert output == [
            BANNER,
            "Table created.",
            "Row inserted.",
            "Row inserted.",
            "id\tname",
            "2\tBob",
            "1\tAlice",
            "COUNT(id) = 2",
            "Table not found.",
        ]
        assert executor.catalog.list_tables() == ["users"]

    def test_end_of_input(self, executor: StatementExecutor) -> None:
        """End of input ends the session like exit."""
        failures, output = run_lines(executor, "", "SHOW TABLES")

        assert failures == 0
        assert output == [BANNER, "Tables:"]


@pytest.mark.unit
class TestMain:
    """Tests for the console entry point."""

    @pytest.fixture(autouse=True)
    def keep_logging(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Leave the process-wide logging configuration alone."""
        monkeypatch.setattr(console, "setup_logging", lambda *args, **kwargs: None)

    def test_single_command(self, temp_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """-c executes one statement and saves the table."""
        data_dir = temp_dir / "data"

        assert main(["--data-dir", str(data_dir), "-c", "CREATE TABLE t (a INT)"]) == 0
        assert (data_dir / "t.table").read_text() == "a INT,\n"
        assert "Table created." in capsys.readouterr().out

    def test_single_command_failure(self, temp_dir: Path) -> None:
        """A failed statement sets the exit status."""
        assert main(["--data-dir", str(temp_dir), "-c", "SELECT * FROM ghost"]) == 1

    def test_tables_loaded_at_start(
        self, temp_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Tables found in the data directory are available."""
        (temp_dir / "users.table").write_text("id INT,name VARCHAR,\n1,Alice,\n")

        assert main(["--data-dir", str(temp_dir), "-c", "SELECT * FROM users"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "id\tname" in lines
        assert "1\tAlice" in lines
