"""
duckquery: Batch SQL execution into typed tables

Runs a batch of dashboard queries against one database connection and
turns each result set into a column-described table of typed cells:
- Ordered runtime type dispatch with a visible fallback for unknown types
- Amortized row accumulation for result sets of unknown size
- Per-query failures that never abort the rest of the batch
- Dashboard macro interpolation and single-statement sanitization
"""

from duckquery.core.values import Cell, CellKind, classify
from duckquery.core.result import BatchResponse, Column, QueryResult, Row, Table
from duckquery.core.buffer import RowBuffer
from duckquery.core.table import build_table
from duckquery.core.request import (
    BatchRequest,
    ConnectionParams,
    QuerySpec,
    TimeRange,
    decode_request,
)
from duckquery.core.executor import BatchExecutor
from duckquery.connectors import Connector, DBAPIConnector, DuckDBConnector
from duckquery.config import DuckquerySettings, get_settings
from duckquery.logging_config import configure_logging
from duckquery.errors import (
    DuckqueryError,
    InvalidRequestError,
    DatasourceConnectionError,
    UnsupportedFormatError,
    SanitizationError,
    ExecutionError,
    RowFetchError,
)

__version__ = "0.1.0"

__all__ = [
    # Value model
    "Cell",
    "CellKind",
    "classify",
    # Results
    "BatchResponse",
    "Column",
    "QueryResult",
    "Row",
    "Table",
    "RowBuffer",
    "build_table",
    # Requests
    "BatchRequest",
    "ConnectionParams",
    "QuerySpec",
    "TimeRange",
    "decode_request",
    # Execution
    "BatchExecutor",
    "Connector",
    "DBAPIConnector",
    "DuckDBConnector",
    # Configuration
    "DuckquerySettings",
    "get_settings",
    "configure_logging",
    # Errors
    "DuckqueryError",
    "InvalidRequestError",
    "DatasourceConnectionError",
    "UnsupportedFormatError",
    "SanitizationError",
    "ExecutionError",
    "RowFetchError",
]
