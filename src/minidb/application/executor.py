"""Statement Executor.

This module runs one statement line against a Catalog: it parses the
line, dispatches the parsed statement to the matching Catalog call and
wraps the outcome in an ExecutionResult. Store errors and parse errors
become failed results; they never end the session.

Usage:
    executor = StatementExecutor(db)
    result = executor.execute("SELECT * FROM users ORDER BY name DESC")
    print(result.columns, result.rows)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from minidb.adapters.inbound.sql_parser import (
    AddColumnStatement,
    AggregateStatement,
    CreateTableStatement,
    DeleteStatement,
    DropColumnStatement,
    DropTableStatement,
    InsertStatement,
    ParseError,
    SelectStatement,
    ShowTablesStatement,
    Statement,
    StatementParser,
    StatementType,
    UpdateStatement,
)
from minidb.domain.exceptions import (
    ColumnCountMismatchError,
    ColumnNotFoundError,
    InvalidTypeError,
    MiniDBError,
    TableNotFoundError,
    UnknownAggregateFunctionError,
)
from minidb.domain.services import AggregateResult
from minidb.infrastructure.logging import get_logger
from minidb.infrastructure.metrics import MetricsRegistry, get_metrics
from minidb.infrastructure.tracing import trace_span
from minidb.ports.inbound.catalog import Catalog

logger = get_logger(__name__)


@dataclass
class ExecutionResult:
    """Result of statement execution."""

    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    message: str = ""
    affected_rows: int = 0
    success: bool = True
    aggregate: AggregateResult | None = None
    statement_type: StatementType | None = None

    @property
    def is_exit(self) -> bool:
        return self.statement_type is StatementType.EXIT

    @classmethod
    def failure(
        cls, message: str, statement_type: StatementType | None = None
    ) -> ExecutionResult:
        return cls(message=message, success=False, statement_type=statement_type)


def error_message(error: Exception) -> str:
    """Console wording for a store error."""
    if isinstance(error, TableNotFoundError):
        return "Table not found."
    if isinstance(error, ColumnNotFoundError):
        return f"Column not found: {error.column}"
    if isinstance(error, ColumnCountMismatchError):
        return "Column count mismatch."
    if isinstance(error, UnknownAggregateFunctionError):
        return "Unknown aggregate function."
    if isinstance(error, InvalidTypeError):
        return f"Unknown data type: {error.token}"
    return str(error)


class StatementExecutor:
    """Executes statement lines against a Catalog.

    Each call to execute() handles exactly one statement. The executor
    keeps no state between calls beyond its collaborators.
    """

    def __init__(
        self,
        catalog: Catalog,
        parser: StatementParser | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            catalog: The catalog statements run against.
            parser: Statement parser (default: StatementParser()).
            metrics: Metrics registry (default: process registry).
        """
        self._catalog = catalog
        self._parser = parser or StatementParser()
        self._metrics = metrics or get_metrics()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def execute(self, line: str) -> ExecutionResult:
        """Parse and execute one statement.

        Args:
            line: Statement text.

        Returns:
            The result; `success` is False if parsing or execution failed.

        Raises:
            OSError: If a table file cannot be written.
        """
        try:
            statement = self._parser.parse(line)
        except ParseError as e:
            logger.info("statement_rejected", error=str(e))
            self._metrics.statements_total.labels(statement="invalid", status="error").inc()
            return ExecutionResult.failure(str(e))
        except InvalidTypeError as e:
            logger.info("statement_rejected", error=str(e))
            self._metrics.statements_total.labels(statement="invalid", status="error").inc()
            return ExecutionResult.failure(error_message(e))

        return self.execute_statement(statement)

    def execute_statement(self, statement: Statement) -> ExecutionResult:
        """Execute an already parsed statement."""
        kind = statement.statement_type.value
        latency = self._metrics.statement_latency_seconds.labels(statement=kind)
        with latency.time(), trace_span(f"statement.{kind}") as span:
            try:
                result = self._dispatch(statement)
            except (MiniDBError, ParseError) as e:
                span.set_attribute("error", type(e).__name__)
                logger.info("statement_failed", statement=kind, error=str(e))
                self._metrics.statements_total.labels(statement=kind, status="error").inc()
                return ExecutionResult.failure(error_message(e), statement.statement_type)
            span.set_attribute("affected_rows", result.affected_rows)

        result.statement_type = statement.statement_type
        self._metrics.statements_total.labels(statement=kind, status="success").inc()
        logger.debug("statement_executed", statement=kind, affected_rows=result.affected_rows)
        return result

    def _dispatch(self, statement: Statement) -> ExecutionResult:
        """Route a statement to its handler."""
        if isinstance(statement, SelectStatement):
            return self._execute_select(statement)
        elif isinstance(statement, InsertStatement):
            return self._execute_insert(statement)
        elif isinstance(statement, UpdateStatement):
            return self._execute_update(statement)
        elif isinstance(statement, DeleteStatement):
            return self._execute_delete(statement)
        elif isinstance(statement, AggregateStatement):
            return self._execute_aggregate(statement)
        elif isinstance(statement, CreateTableStatement):
            return self._execute_create(statement)
        elif isinstance(statement, DropTableStatement):
            return self._execute_drop(statement)
        elif isinstance(statement, AddColumnStatement):
            self._catalog.add_column(statement.table_name, statement.column)
            return ExecutionResult(message=f"Column added: {statement.column.name}")
        elif isinstance(statement, DropColumnStatement):
            column = self._catalog.drop_column(statement.table_name, statement.column_name)
            return ExecutionResult(message=f"Column dropped: {column.name}")
        elif isinstance(statement, ShowTablesStatement):
            names = self._catalog.list_tables()
            return ExecutionResult(
                columns=["Tables"], rows=[[name] for name in names], message="Tables:"
            )
        elif statement.statement_type is StatementType.EXIT:
            return ExecutionResult(message="Bye.")
        else:
            raise ParseError(f"Unsupported statement: {statement}")

    def _execute_select(self, stmt: SelectStatement) -> ExecutionResult:
        rows = self._catalog.select(
            stmt.table_name,
            where_column=stmt.where_column,
            where_value=stmt.where_value,
            order_by=stmt.order_by,
            desc=stmt.desc,
            limit=stmt.limit,
        )
        header = [col.name for col in self._catalog.columns(stmt.table_name)]
        values = [list(row.values) for row in rows]
        return ExecutionResult(columns=header, rows=values, affected_rows=len(values))

    def _execute_insert(self, stmt: InsertStatement) -> ExecutionResult:
        # Rows are inserted one by one; a failing row leaves earlier ones in place.
        for values in stmt.rows:
            self._catalog.insert(stmt.table_name, values, stmt.columns or None)
        count = len(stmt.rows)
        message = "Row inserted." if count == 1 else f"{count} rows inserted."
        return ExecutionResult(message=message, affected_rows=count)

    def _execute_update(self, stmt: UpdateStatement) -> ExecutionResult:
        updated = self._catalog.update(
            stmt.table_name,
            stmt.target_column,
            stmt.new_value,
            stmt.where_column,
            stmt.where_value,
        )
        return ExecutionResult(message="Rows updated.", affected_rows=updated)

    def _execute_delete(self, stmt: DeleteStatement) -> ExecutionResult:
        removed = self._catalog.delete(stmt.table_name, stmt.where_column, stmt.where_value)
        return ExecutionResult(message="Rows deleted.", affected_rows=removed)

    def _execute_aggregate(self, stmt: AggregateStatement) -> ExecutionResult:
        result = self._catalog.aggregate(stmt.table_name, stmt.function, stmt.column)
        label = f"{result.function.value}({stmt.column})"
        return ExecutionResult(
            columns=[label],
            rows=[[result.format_value()]],
            message=str(result),
            aggregate=result,
        )

    def _execute_create(self, stmt: CreateTableStatement) -> ExecutionResult:
        created = self._catalog.create_table(stmt.table_name, stmt.columns)
        return ExecutionResult(
            message="Table created." if created else "Table already exists."
        )

    def _execute_drop(self, stmt: DropTableStatement) -> ExecutionResult:
        name = stmt.table_name.lower()
        if self._catalog.drop_table(stmt.table_name):
            return ExecutionResult(message=f"Table dropped and file deleted: {name}")
        return ExecutionResult(message=f"Table dropped (file not found): {name}")
