"""BatchExecutor - runs every query of a batch against one connection."""

from __future__ import annotations

import logging
import threading
from contextlib import closing
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from duckquery.config import DuckquerySettings, get_settings
from duckquery.connectors.base import Connector
from duckquery.core.request import BatchRequest, QuerySpec, decode_request
from duckquery.core.result import BatchResponse, QueryResult, Table
from duckquery.core.table import build_table
from duckquery.errors import (
    DuckqueryError,
    ExecutionError,
    InvalidRequestError,
    SanitizationError,
    UnsupportedFormatError,
)
from duckquery.logging_config import format_sql_for_log
from duckquery.parsing.sanitize import sanitize_and_interpolate

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "request cancelled"

Sanitizer = Callable[[str, BatchRequest], str]


def _elapsed_ms(started_at: datetime) -> int:
    return int((datetime.now() - started_at).total_seconds() * 1000)


class BatchExecutor:
    """
    Executes a BatchRequest and collects one QueryResult per query.

    Queries run in request order on a single connection. A failing query
    is answered with its error message and the next query still runs.
    Only a connection failure aborts the whole batch.

    Example:
        >>> executor = BatchExecutor(DuckDBConnector())
        >>> response = executor.execute(decode_request(payload))
        >>> response.results[0].table.row_count
        3
    """

    def __init__(
        self,
        connector: Connector,
        *,
        sanitizer: Sanitizer = sanitize_and_interpolate,
        settings: Optional[DuckquerySettings] = None,
    ) -> None:
        """
        Initialize BatchExecutor.

        Args:
            connector: Opens and health-checks the batch connection
            sanitizer: Turns raw SQL into executable SQL, raising
                SanitizationError when it refuses
            settings: Pipeline settings (defaults to the cached settings)
        """
        self.connector = connector
        self.sanitizer = sanitizer
        self.settings = settings or get_settings()

    # ─────────────────────────────────────────────────
    # Batch
    # ─────────────────────────────────────────────────

    def execute(
        self,
        request: BatchRequest,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchResponse:
        """
        Execute every query of the batch.

        Args:
            request: Decoded batch request
            cancel_event: Checked before each query; once set, the
                remaining queries are answered with "request cancelled"

        Returns:
            BatchResponse with exactly one result per query, in order

        Raises:
            DatasourceConnectionError: If the connection cannot be opened
                or fails its health check
        """
        started_at = datetime.now()
        results: List[QueryResult] = []

        with self.connector.connect(request.connection) as conn:
            for query in request.queries:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("[%s] Skipped: %s", query.ref_id, CANCELLED_MESSAGE)
                    results.append(QueryResult.failure(query.ref_id, CANCELLED_MESSAGE))
                    continue

                results.append(self.execute_query(conn, query, request))

        response = BatchResponse(results=results)
        logger.info(
            "Batch finished: %d queries, %d failed, %dms",
            len(response),
            response.failed_count,
            _elapsed_ms(started_at),
        )
        return response

    def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Decode an envelope, execute it and encode the response.

        Equivalent to: execute(decode_request(payload)).to_dict()
        """
        return self.execute(decode_request(payload)).to_dict()

    # ─────────────────────────────────────────────────
    # Single query
    # ─────────────────────────────────────────────────

    def execute_query(self, conn: Any, query: QuerySpec, request: BatchRequest) -> QueryResult:
        """
        Run one query on an open connection.

        Never raises: every failure becomes the result's error.
        """
        started_at = datetime.now()

        try:
            table = self._run(conn, query, request)
        except DuckqueryError as e:
            logger.warning("[%s] Query failed: %s", query.ref_id, e)
            return QueryResult.failure(query.ref_id, str(e), _elapsed_ms(started_at))
        except Exception as e:
            logger.exception("[%s] Unexpected error while running query", query.ref_id)
            return QueryResult.failure(query.ref_id, str(e), _elapsed_ms(started_at))

        duration_ms = _elapsed_ms(started_at)
        logger.debug("[%s] %d rows in %dms", query.ref_id, table.row_count, duration_ms)
        return QueryResult.success(query.ref_id, table, duration_ms)

    def _run(self, conn: Any, query: QuerySpec, request: BatchRequest) -> Table:
        if query.decode_error:
            raise InvalidRequestError(query.decode_error)
        if not query.is_table():
            raise UnsupportedFormatError(query.format)

        sql = self._sanitize(query, request)
        logger.debug("[%s] Executing: %s", query.ref_id, format_sql_for_log(sql))

        try:
            cursor = conn.cursor()
        except Exception as e:
            raise ExecutionError(query.ref_id, e) from e

        with closing(cursor):
            try:
                cursor.execute(sql)
            except Exception as e:
                raise ExecutionError(query.ref_id, e) from e

            return build_table(
                cursor,
                sql,
                ref_id=query.ref_id,
                initial_capacity=self.settings.initial_row_capacity,
                fetch_size=self.settings.fetch_size,
            )

    def _sanitize(self, query: QuerySpec, request: BatchRequest) -> str:
        try:
            return self.sanitizer(query.raw_sql, request)
        except SanitizationError:
            raise
        except Exception as e:
            raise SanitizationError(str(e)) from e
