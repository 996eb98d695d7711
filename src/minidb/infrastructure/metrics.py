"""Prometheus metrics for the tabular store."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.statements_total = Counter(
            "minidb_statements_total",
            "Total number of statements executed",
            ["statement", "status"],  # status: success, error
            registry=self._registry,
        )

        self.statement_latency_seconds = Histogram(
            "minidb_statement_latency_seconds",
            "Statement latency in seconds",
            ["statement"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry,
        )

        # Table file metrics
        self.table_writes_total = Counter(
            "minidb_table_writes_total",
            "Total table file rewrites",
            registry=self._registry,
        )

        self.table_write_bytes_total = Counter(
            "minidb_table_write_bytes_total",
            "Total bytes written to table files",
            registry=self._registry,
        )

        # Catalog metrics
        self.tables = Gauge(
            "minidb_tables",
            "Number of tables registered in the catalog",
            registry=self._registry,
        )

        self.tables_loaded_total = Counter(
            "minidb_tables_loaded_total",
            "Total tables loaded from disk",
            registry=self._registry,
        )

        self.aggregate_skipped_cells_total = Counter(
            "minidb_aggregate_skipped_cells_total",
            "Total non-numeric cells skipped by aggregates",
            ["function"],
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "minidb",
            "Tabular store information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from minidb import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
