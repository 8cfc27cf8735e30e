"""Abstract base class for datasource connectors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import closing, contextmanager
from typing import Any, Callable, Iterator

from duckquery.core.request import ConnectionParams
from duckquery.errors import DatasourceConnectionError

logger = logging.getLogger(__name__)

HEALTH_CHECK_SQL = "SELECT 1"


class Connector(ABC):
    """
    Opens one DB-API connection per batch.

    Implementations only need ``open``; ``connect`` adds the health check
    and guarantees the connection is closed on every exit path.
    """

    scheme: str = "dbapi"

    @abstractmethod
    def open(self, params: ConnectionParams) -> Any:
        """
        Open a DB-API 2.0 connection.

        Args:
            params: Connection parameters of the batch

        Returns:
            Connection object with ``cursor()`` and ``close()``
        """
        pass

    def health_check(self, conn: Any) -> None:
        """Run a trivial query; raises whatever the driver raises."""
        with closing(conn.cursor()) as cursor:
            cursor.execute(HEALTH_CHECK_SQL)
            cursor.fetchone()

    def describe(self, params: ConnectionParams) -> str:
        """Target description safe for logs and error messages."""
        return params.dsn(self.scheme)

    @contextmanager
    def connect(self, params: ConnectionParams) -> Iterator[Any]:
        """
        Open and health-check a connection, closing it on exit.

        Raises:
            DatasourceConnectionError: If opening or the health check fails
        """
        target = self.describe(params)

        try:
            conn = self.open(params)
        except Exception as e:
            logger.error("Error opening connection to %s: %s", target, e)
            raise DatasourceConnectionError(target, e) from e

        try:
            try:
                self.health_check(conn)
            except Exception as e:
                logger.error("Health check failed for %s: %s", target, e)
                raise DatasourceConnectionError(target, e) from e

            logger.debug("Connected to %s", target)
            yield conn
        finally:
            conn.close()
            logger.debug("Closed connection to %s", target)


class DBAPIConnector(Connector):
    """
    Connector for any DB-API driver.

    Example:
        >>> import vertica_python
        >>> connector = DBAPIConnector(
        ...     lambda p: vertica_python.connect(
        ...         host=p.url, user=p.user, database=p.database,
        ...         password=p.password.get_secret_value(),
        ...     ),
        ...     scheme="vertica",
        ... )
    """

    def __init__(self, connect_fn: Callable[[ConnectionParams], Any], scheme: str = "dbapi") -> None:
        self._connect_fn = connect_fn
        self.scheme = scheme

    def open(self, params: ConnectionParams) -> Any:
        return self._connect_fn(params)
