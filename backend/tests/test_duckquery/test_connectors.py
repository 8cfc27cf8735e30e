"""Tests for datasource connectors."""

from pathlib import Path

import duckdb
import pytest

from duckquery.config import DuckDBSettings
from duckquery.connectors import DBAPIConnector, DuckDBConnector
from duckquery.connectors.duckdb_connector import MEMORY_DATABASE, resolve_database_path
from duckquery.core.request import ConnectionParams
from duckquery.errors import DatasourceConnectionError


class TestResolveDatabasePath:
    """Test mapping connection params onto DuckDB paths."""

    def test_memory_by_default(self):
        """Test that empty params open an in-memory database."""
        assert resolve_database_path(ConnectionParams()) == MEMORY_DATABASE

    def test_explicit_memory(self):
        """Test that :memory: wins over a URL."""
        params = ConnectionParams(url="/data", database=":memory:")
        assert resolve_database_path(params) == MEMORY_DATABASE

    def test_url_and_database(self, tmp_path: Path):
        """Test that the URL is a directory holding the database file."""
        params = ConnectionParams(url=str(tmp_path), database="dw.duckdb")
        assert resolve_database_path(params) == str(tmp_path / "dw.duckdb")

    def test_database_only(self):
        """Test that a database path alone is used as-is."""
        assert resolve_database_path(ConnectionParams(database="dw.duckdb")) == "dw.duckdb"

    def test_url_only(self):
        """Test that a URL alone is used as the path."""
        assert resolve_database_path(ConnectionParams(url="/data/dw.duckdb")) == "/data/dw.duckdb"


class TestDuckDBConnector:
    """Test the DuckDB connector."""

    def test_connect_and_close(self, tmp_path: Path):
        """Test that connect yields a healthy connection and closes it."""
        connector = DuckDBConnector(DuckDBSettings(threads=1))
        params = ConnectionParams(url=str(tmp_path), database="test.duckdb")

        with connector.connect(params) as conn:
            assert conn.execute("SELECT 42").fetchone() == (42,)

        with pytest.raises(duckdb.Error):
            conn.execute("SELECT 1")

    def test_read_only_missing_file(self, tmp_path: Path):
        """Test that a read-only open of a missing file is a connection error."""
        connector = DuckDBConnector(DuckDBSettings(read_only=True))
        params = ConnectionParams(database=str(tmp_path / "absent.duckdb"))

        with pytest.raises(DatasourceConnectionError) as exc_info:
            with connector.connect(params):
                pass

        assert "absent.duckdb" in str(exc_info.value)

    def test_read_only_ignored_for_memory(self):
        """Test that read-only does not apply to in-memory databases."""
        connector = DuckDBConnector(DuckDBSettings(read_only=True))
        with connector.connect(ConnectionParams()) as conn:
            assert conn.execute("SELECT 1").fetchone() == (1,)

    def test_describe(self, tmp_path: Path):
        """Test the log-safe target description."""
        connector = DuckDBConnector(DuckDBSettings())
        params = ConnectionParams(database=str(tmp_path / "x.duckdb"), password="pw")
        assert connector.describe(params) == f"duckdb:{tmp_path / 'x.duckdb'}"


class TestDBAPIConnector:
    """Test the generic DB-API connector."""

    def test_factory_receives_params(self):
        """Test that the factory gets the batch connection params."""
        received = []

        def factory(params: ConnectionParams) -> duckdb.DuckDBPyConnection:
            received.append(params)
            return duckdb.connect(":memory:")

        params = ConnectionParams(user="me", use_prepared_statements=True)
        with DBAPIConnector(factory).connect(params):
            pass

        assert received == [params]
        assert received[0].use_prepared_statements is True

    def test_close_on_error_inside_block(self):
        """Test that the connection is closed when the caller raises."""
        conn = duckdb.connect(":memory:")
        connector = DBAPIConnector(lambda params: conn)

        with pytest.raises(RuntimeError):
            with connector.connect(ConnectionParams()):
                raise RuntimeError("caller failed")

        with pytest.raises(duckdb.Error):
            conn.execute("SELECT 1")
