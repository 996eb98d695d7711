"""REST API adapter for the tabular store.

This module provides a FastAPI-based REST API for executing statements
against a Database.

Endpoints:
    POST /execute - Execute one statement
    GET /tables - List tables
    GET /tables/{name} - Describe a table's schema
    GET /health - Health check

Usage:
    from minidb.adapters.inbound.rest_api import create_app
    from minidb.application import Database

    db = Database(data_dir="/path/to/data")
    db.start()

    app = create_app(db)
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000

Handlers are async and call the Database directly, so requests are
executed one at a time on the event loop.

References:
    - FastAPI documentation: https://fastapi.tiangolo.com/
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from minidb import __version__
from minidb.application import Database, ExecutionResult, StatementExecutor
from minidb.domain.exceptions import TableNotFoundError
from minidb.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SQLRequest(BaseModel):
    """Request model for statement execution."""

    sql: str = Field(..., description="Statement to execute")


class SQLResponse(BaseModel):
    """Response model for statement execution."""

    success: bool = Field(..., description="Whether the statement succeeded")
    message: str = Field("", description="Status or error message")
    columns: list[str] = Field(default_factory=list, description="Column names")
    rows: list[list[str]] = Field(default_factory=list, description="Result rows")
    affected_rows: int = Field(0, description="Number of affected rows")


class ColumnResponse(BaseModel):
    """One schema entry."""

    name: str
    type: str


class TableResponse(BaseModel):
    """Response model for a table description."""

    name: str = Field(..., description="Canonical table name")
    columns: list[ColumnResponse] = Field(default_factory=list)
    rows: int = Field(0, description="Number of rows")


class TablesResponse(BaseModel):
    """Response model for the table list."""

    tables: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def _result_to_response(result: ExecutionResult) -> SQLResponse:
    """Convert ExecutionResult to SQLResponse."""
    return SQLResponse(
        success=result.success,
        message=result.message,
        columns=result.columns,
        rows=result.rows,
        affected_rows=result.affected_rows,
    )


def create_app(db: Database, executor: StatementExecutor | None = None) -> FastAPI:
    """Create a FastAPI application for the store.

    Args:
        db: The started database to serve.
        executor: Statement executor (default: one bound to `db`).

    Returns:
        A configured FastAPI application.
    """
    executor = executor or StatementExecutor(db)

    app = FastAPI(
        title="minidb API",
        description="REST API for the embedded tabular store",
        version=__version__,
    )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy" if db.is_started else "unhealthy",
            version=__version__,
        )

    @app.get("/tables", response_model=TablesResponse, tags=["Tables"])
    async def list_tables() -> TablesResponse:
        """List registered tables."""
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")
        return TablesResponse(tables=sorted(db.list_tables()))

    @app.get("/tables/{name}", response_model=TableResponse, tags=["Tables"])
    async def describe_table(name: str) -> TableResponse:
        """Describe one table."""
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")

        try:
            table = db.table(name)
        except TableNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

        return TableResponse(
            name=table.name,
            columns=[ColumnResponse(name=c.name, type=c.data_type.value) for c in table.columns],
            rows=len(table),
        )

    @app.post("/execute", response_model=SQLResponse, tags=["SQL"])
    async def execute_sql(request: SQLRequest) -> SQLResponse:
        """Execute a statement.

        Args:
            request: The request containing the statement.

        Returns:
            The execution result.
        """
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")

        result = executor.execute(request.sql)
        if result.is_exit:
            return SQLResponse(success=False, message="exit is only available in the console")
        return _result_to_response(result)

    return app


def run_server(
    db: Database,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        db: The started database.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(db)
    logger.info("http_server_starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port)
