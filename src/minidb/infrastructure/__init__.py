"""Infrastructure layer - cross-cutting concerns."""

from minidb.infrastructure.config import Config, get_config
from minidb.infrastructure.logging import setup_logging, get_logger
from minidb.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from minidb.infrastructure.tracing import setup_tracing, get_tracer, trace_span, catalog_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
    "catalog_span",
]
