"""Datasource connectors for duckquery."""

from duckquery.connectors.base import Connector, DBAPIConnector
from duckquery.connectors.duckdb_connector import DuckDBConnector

__all__ = ["Connector", "DBAPIConnector", "DuckDBConnector"]
