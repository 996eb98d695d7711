"""Unit tests for the Database catalog."""

from __future__ import annotations

from pathlib import Path

import pytest

from minidb.adapters.outbound import FileTableStore
from minidb.application import Database, canonical_name
from minidb.domain.entities import Column
from minidb.domain.exceptions import ColumnNotFoundError, TableNotFoundError
from minidb.domain.value_objects import DataType
from minidb.infrastructure.config import get_config
from minidb.infrastructure.metrics import MetricsRegistry

USERS = [Column("id", DataType.INT), Column("name", DataType.VARCHAR)]


@pytest.mark.unit
class TestTableLifecycle:
    """Tests for create_table and drop_table."""

    def test_create_table_persists(self, database: Database, store: FileTableStore) -> None:
        """A new table is written immediately."""
        assert database.create_table("users", USERS) is True

        assert store.load("users") == "id INT,name VARCHAR,\n"
        assert database.list_tables() == ["users"]

    def test_names_are_case_insensitive(self, database: Database) -> None:
        """Table names are lowercased."""
        database.create_table("Users", USERS)
        database.insert("USERS", ["1", "Alice"])

        assert database.list_tables() == ["users"]
        assert len(database.table("uSeRs")) == 1
        assert canonical_name(" Users ") == "users"

    def test_create_existing_is_noop(self, database: Database) -> None:
        """Creating an existing table keeps its rows."""
        database.create_table("users", USERS)
        database.insert("users", ["1", "Alice"])

        assert database.create_table("users", [Column("x", DataType.TEXT)]) is False
        assert database.columns("users") == USERS
        assert len(database.table("users")) == 1

    def test_drop_table(self, database: Database, store: FileTableStore) -> None:
        """Dropping removes the entry and the file."""
        database.create_table("users", USERS)

        assert database.drop_table("users") is True
        assert database.list_tables() == []
        assert not store.path_for("users").exists()

        with pytest.raises(TableNotFoundError):
            database.insert("users", ["1", "Alice"])
        with pytest.raises(TableNotFoundError):
            list(database.select("users"))

    def test_drop_missing_table(self, database: Database) -> None:
        """Dropping an unknown table is not an error."""
        assert database.drop_table("ghost") is False


@pytest.mark.unit
class TestRowOperations:
    """Tests for row-level catalog calls."""

    @pytest.fixture
    def users(self, database: Database) -> Database:
        database.create_table("users", USERS)
        database.insert("users", ["1", "Alice"])
        database.insert("users", ["2", "Bob"])
        return database

    def test_select_order_desc(self, users: Database) -> None:
        """The end-to-end ordering example."""
        rows = list(users.select("users", order_by="name", desc=True))
        assert [r.values for r in rows] == [["2", "Bob"], ["1", "Alice"]]

    def test_update_and_delete(self, users: Database, store: FileTableStore) -> None:
        """Mutations return counts and are persisted."""
        assert users.update("users", "name", "Robert", "id", "2") == 1
        assert users.delete("users", "id", "1") == 1

        assert store.load("users") == "id INT,name VARCHAR,\n2,Robert,\n"

    def test_update_delete_unknown_table(self, users: Database) -> None:
        """update() and delete() ignore unknown tables."""
        assert users.update("ghost", "a", "b", "c", "d") == 0
        assert users.delete("ghost", "a", "b") == 0

    def test_unknown_table_errors(self, database: Database) -> None:
        """Other operations report TableNotFound."""
        with pytest.raises(TableNotFoundError):
            database.select("ghost")
        with pytest.raises(TableNotFoundError):
            database.add_column("ghost", Column("x", DataType.INT))
        with pytest.raises(TableNotFoundError):
            database.drop_column("ghost", "x")
        with pytest.raises(TableNotFoundError):
            database.aggregate("ghost", "COUNT", "x")
        with pytest.raises(TableNotFoundError):
            database.columns("ghost")

    def test_schema_changes(self, users: Database, store: FileTableStore) -> None:
        """add_column and drop_column are persisted."""
        users.add_column("users", Column("email", DataType.TEXT))
        assert store.load("users") == "id INT,name VARCHAR,email TEXT,\n1,Alice,,\n2,Bob,,\n"

        users.drop_column("users", "email")
        assert store.load("users") == "id INT,name VARCHAR,\n1,Alice,\n2,Bob,\n"

        with pytest.raises(ColumnNotFoundError):
            users.drop_column("users", "email")

    def test_aggregate(self, users: Database, metrics_registry: MetricsRegistry) -> None:
        """Aggregates delegate to the table and count skipped cells."""
        assert users.aggregate("users", "SUM", "id").value == 3

        result = users.aggregate("users", "MAX", "name")
        assert result.is_null
        assert result.skipped == 2
        skipped = metrics_registry.aggregate_skipped_cells_total.labels(function="MAX")
        assert skipped._value.get() == 2


@pytest.mark.unit
class TestPersistenceLifecycle:
    """Tests for start, stop, save_all and load_all."""

    def test_reload_from_disk(self, store: FileTableStore, metrics_registry: MetricsRegistry) -> None:
        """Tables written by one Database are loaded by the next."""
        with Database(store=store, metrics=metrics_registry) as db:
            db.create_table("users", USERS)
            db.insert("users", ["1", "Alice"])

        with Database(store=store, metrics=metrics_registry) as db:
            assert db.list_tables() == ["users"]
            assert [r.values for r in db.select("users")] == [["1", "Alice"]]

    def test_load_all_skips_missing_and_empty(
        self, store: FileTableStore, metrics_registry: MetricsRegistry
    ) -> None:
        """Candidates without a file or without columns are skipped."""
        store.save("good", "a INT,\n1,\n")
        store.save("empty", "\n")

        db = Database(store=store, metrics=metrics_registry)
        assert db.load_all(["Good", "empty", "missing"]) == ["good"]
        assert db.list_tables() == ["good"]

    def test_load_all_replaces_existing(self, database: Database, store: FileTableStore) -> None:
        """A loaded table replaces the registered one."""
        database.create_table("t", [Column("a", DataType.INT)])
        store.save("t", "a INT,b TEXT,\n1,x,\n")

        database.load_all(["t"])

        assert [c.name for c in database.columns("t")] == ["a", "b"]

    def test_save_all(self, database: Database, store: FileTableStore) -> None:
        """save_all rewrites every table."""
        database.create_table("t", [Column("a", DataType.INT)])
        store.path_for("t").unlink()

        database.save_all()

        assert store.load("t") == "a INT,\n"

    def test_start_twice(self, database: Database) -> None:
        """A started database cannot be started again."""
        with pytest.raises(RuntimeError):
            database.start()

    def test_stop_requires_start(
        self, store: FileTableStore, metrics_registry: MetricsRegistry
    ) -> None:
        """stop() before start() is an error."""
        db = Database(store=store, metrics=metrics_registry)
        with pytest.raises(RuntimeError):
            db.stop()

    def test_default_store_follows_config(
        self,
        temp_dir: Path,
        metrics_registry: MetricsRegistry,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Without a store, storage settings come from the configuration."""
        monkeypatch.setenv("MINIDB_STORAGE__DATA_DIR", str(temp_dir / "configured"))
        monkeypatch.setenv("MINIDB_STORAGE__ATOMIC_WRITES", "true")
        monkeypatch.setenv("MINIDB_STORAGE__FILE_EXTENSION", ".tbl")
        get_config.cache_clear()
        try:
            db = Database(data_dir=temp_dir / "override", metrics=metrics_registry)
            store = db.store

            assert isinstance(store, FileTableStore)
            assert store.atomic_writes is True
            assert store.extension == ".tbl"
            assert store.data_dir == temp_dir / "override"

            assert Database(metrics=metrics_registry).store.data_dir == temp_dir / "configured"
        finally:
            get_config.cache_clear()
