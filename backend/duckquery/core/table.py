"""Table result builder."""

from __future__ import annotations

import logging
from typing import List

from duckquery.core.buffer import DEFAULT_INITIAL_CAPACITY, RowBuffer
from duckquery.core.materializer import DEFAULT_FETCH_SIZE, Cursor, materialize_rows
from duckquery.core.result import Column, Table

logger = logging.getLogger(__name__)


def read_columns(cursor: Cursor) -> List[Column]:
    """Column list in the order the driver reports it.

    Statements without a result set have no description and yield no columns.
    """
    if not cursor.description:
        return []
    return [Column(name=str(desc[0]) if desc[0] is not None else "") for desc in cursor.description]


def build_table(
    cursor: Cursor,
    sql: str,
    *,
    ref_id: str = "",
    initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
    fetch_size: int = DEFAULT_FETCH_SIZE,
) -> Table:
    """
    Build one Table from an executed cursor.

    The cursor is not closed here; its lifetime belongs to the caller.

    Args:
        cursor: Cursor positioned on an executed query
        sql: Sanitized SQL, echoed in the table metadata
        ref_id: Query reference id, for logging and errors
        initial_capacity: Row buffer capacity hint
        fetch_size: Rows fetched per driver round trip

    Returns:
        Table whose row count equals the number of rows read

    Raises:
        RowFetchError: If the driver fails while rows are being read
    """
    columns = read_columns(cursor)
    buffer = RowBuffer(initial_capacity)

    if columns:
        materialize_rows(
            cursor, len(columns), buffer, ref_id=ref_id, fetch_size=fetch_size
        )

    logger.debug(
        "[%s] Materialized %d rows x %d columns (buffer grew %d times)",
        ref_id,
        len(buffer),
        len(columns),
        buffer.grow_count,
    )

    return Table(columns=columns, rows=buffer.to_list(), sql=sql)
