"""Core duckquery models and classes."""

from duckquery.core.values import Cell, CellKind, classify
from duckquery.core.result import BatchResponse, Column, QueryResult, Row, Table
from duckquery.core.buffer import RowBuffer
from duckquery.core.materializer import materialize_row, materialize_rows
from duckquery.core.table import build_table
from duckquery.core.request import (
    BatchRequest,
    ConnectionParams,
    QuerySpec,
    TimeRange,
    decode_request,
)
from duckquery.core.executor import BatchExecutor

__all__ = [
    "Cell",
    "CellKind",
    "classify",
    "BatchResponse",
    "Column",
    "QueryResult",
    "Row",
    "Table",
    "RowBuffer",
    "materialize_row",
    "materialize_rows",
    "build_table",
    "BatchRequest",
    "ConnectionParams",
    "QuerySpec",
    "TimeRange",
    "decode_request",
    "BatchExecutor",
]
