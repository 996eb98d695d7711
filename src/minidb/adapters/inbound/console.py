"""Interactive console for the tabular store.

Reads one statement per line at a ">> " prompt and prints the result:
SELECT output is tab-separated, a header line followed by one line per
row. "exit" (or end of input) ends the session, after which every table
is saved.

    $ minidb --data-dir /tmp/mydb
    Enter SQL Commands (type 'exit' to quit):
    >> CREATE TABLE users (id INT, name VARCHAR(20))
    Table created.
    >> SELECT * FROM users
    id	name

The same entry point can also execute a single statement (-c) or serve
the REST API (--serve).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TextIO

from minidb.application import Database, ExecutionResult, StatementExecutor
from minidb.adapters.outbound import FileTableStore
from minidb.infrastructure.config import Config
from minidb.infrastructure.logging import get_logger, setup_logging
from minidb.infrastructure.metrics import setup_metrics
from minidb.infrastructure.tracing import setup_tracing

logger = get_logger(__name__)

BANNER = "Enter SQL Commands (type 'exit' to quit):"
PROMPT = ">> "


def format_result(result: ExecutionResult) -> list[str]:
    """Render a result as console lines."""
    if not result.success or result.aggregate is not None:
        return [result.message]

    # SELECT carries no message and prints its header instead
    lines = [result.message] if result.message else ["\t".join(result.columns)]
    lines.extend("\t".join(row) for row in result.rows)
    return lines


def run_console(
    executor: StatementExecutor,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run the read-execute-print loop until exit or end of input.

    Args:
        executor: Executor bound to a started Database.
        stdin: Input stream (default: sys.stdin).
        stdout: Output stream (default: sys.stdout).

    Returns:
        Number of statements that failed.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    failures = 0

    print(BANNER, file=stdout)
    while True:
        stdout.write(PROMPT)
        stdout.flush()
        line = stdin.readline()
        if not line:
            stdout.write("\n")
            break
        if not line.strip():
            continue

        result = executor.execute(line)
        if result.is_exit:
            break
        if not result.success:
            failures += 1
        for out in format_result(result):
            print(out, file=stdout)

    return failures


def build_config(args: argparse.Namespace) -> Config:
    """Load configuration and apply command-line overrides."""
    config = Config()
    if args.data_dir is not None:
        config.storage.data_dir = args.data_dir
    if args.log_level is not None:
        config.observability.log_level = args.log_level.upper()
    if args.log_format is not None:
        config.observability.log_format = args.log_format
    config.ensure_directories()
    return config


def build_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog="minidb",
        description="Interactive console for the minidb tabular store",
    )
    arg_parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding the .table files (default: ~/miniDB/mydb_data)",
    )
    arg_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Log level (default: WARNING in the console, INFO when serving)",
    )
    arg_parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=None,
        help="Log format",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single statement and exit",
    )
    arg_parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the REST API instead of reading statements",
    )
    return arg_parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.log_level is None and not args.serve:
        args.log_level = "WARNING"

    config = build_config(args)
    obs = config.observability
    setup_logging(obs.log_level, obs.log_format)
    if obs.otel_endpoint:
        setup_tracing(obs.otel_service_name, obs.otel_endpoint)

    metrics = setup_metrics(config.server.metrics_port) if args.serve else None
    store = FileTableStore.from_config(config, metrics=metrics)
    db = Database(store=store, metrics=metrics)

    with db:
        logger.info("session_started", data_dir=str(store.data_dir), tables=len(db.list_tables()))
        if args.serve:
            from minidb.adapters.inbound.rest_api import run_server

            run_server(db, host=config.server.host, port=config.server.port)
            return 0

        executor = StatementExecutor(db, metrics=metrics)
        if args.command:
            result = executor.execute(args.command)
            for out in format_result(result):
                print(out)
            return 0 if result.success else 1

        try:
            run_console(executor)
        except KeyboardInterrupt:
            print()
        return 0


if __name__ == "__main__":
    sys.exit(main())
