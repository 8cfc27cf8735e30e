"""DuckDB connector."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import duckdb

from duckquery.config import DuckDBSettings, get_settings
from duckquery.connectors.base import Connector
from duckquery.core.request import ConnectionParams

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


def resolve_database_path(params: ConnectionParams) -> str:
    """
    Map URL and database name onto a DuckDB database path.

    The URL is read as a directory and the database as a file inside it;
    either may be empty. With neither set, an in-memory database is used.

    Examples:
        >>> resolve_database_path(ConnectionParams(url="/data", database="dw.duckdb"))
        '/data/dw.duckdb'
        >>> resolve_database_path(ConnectionParams())
        ':memory:'
    """
    if params.database == MEMORY_DATABASE:
        return MEMORY_DATABASE
    if not params.url and not params.database:
        return MEMORY_DATABASE
    if not params.url:
        return params.database
    if not params.database:
        return params.url
    return str(Path(params.url) / params.database)


class DuckDBConnector(Connector):
    """
    Opens DuckDB databases.

    User, password and TLS mode have no meaning for an embedded database
    and are ignored.
    """

    scheme = "duckdb"

    def __init__(self, settings: Optional[DuckDBSettings] = None) -> None:
        self.settings = settings or get_settings().duckdb

    def describe(self, params: ConnectionParams) -> str:
        return f"duckdb:{resolve_database_path(params)}"

    def open(self, params: ConnectionParams) -> duckdb.DuckDBPyConnection:
        path = resolve_database_path(params)
        read_only = self.settings.read_only and path != MEMORY_DATABASE

        logger.debug("Opening DuckDB database %s (read_only=%s)", path, read_only)
        return duckdb.connect(
            database=path,
            read_only=read_only,
            config={"threads": self.settings.threads},
        )
