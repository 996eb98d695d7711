"""Pytest configuration and fixtures for minidb tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from minidb.adapters.outbound import FileTableStore
from minidb.application import Database
from minidb.infrastructure.config import Config, StorageConfig
from minidb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with a temporary data directory."""
    return Config(
        storage=StorageConfig(
            data_dir=temp_dir / "data",
            atomic_writes=False,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def store(test_config: Config, metrics_registry: MetricsRegistry) -> FileTableStore:
    """Provide a table store on the temporary data directory."""
    return FileTableStore.from_config(test_config, metrics=metrics_registry)


@pytest.fixture
def database(
    store: FileTableStore, metrics_registry: MetricsRegistry
) -> Generator[Database, None, None]:
    """Provide a started database; tables are saved on teardown."""
    db = Database(store=store, metrics=metrics_registry)
    db.start()
    yield db
    if db.is_started:
        db.stop()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
