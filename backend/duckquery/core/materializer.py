"""Row materialization: driver rows to typed rows."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Protocol, Sequence

from duckquery.core.buffer import RowBuffer
from duckquery.core.result import Row
from duckquery.core.values import classify
from duckquery.errors import RowFetchError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_SIZE = 1024


class Cursor(Protocol):
    """The subset of a DB-API 2.0 cursor the pipeline relies on."""

    description: Any

    def execute(self, operation: str, *args: Any) -> Any: ...

    def fetchmany(self, size: int = ...) -> Sequence[Sequence[Any]]: ...

    def close(self) -> None: ...


def materialize_row(raw: Sequence[Any]) -> Row:
    """Classify each raw value positionally."""
    return Row([classify(value) for value in raw])


def _fetch_batches(cursor: Cursor, fetch_size: int) -> Iterator[Sequence[Sequence[Any]]]:
    while True:
        batch = cursor.fetchmany(fetch_size)
        if not batch:
            return
        yield batch


def materialize_rows(
    cursor: Cursor,
    column_count: int,
    buffer: RowBuffer,
    *,
    ref_id: str = "",
    fetch_size: int = DEFAULT_FETCH_SIZE,
) -> RowBuffer:
    """
    Read every remaining row from ``cursor`` into ``buffer``.

    Rows keep cursor order and none are skipped. If the driver fails
    while fetching, rows already in the buffer stay valid and a
    RowFetchError is raised.

    Args:
        cursor: Cursor positioned on an executed query
        column_count: Number of columns the cursor reported
        buffer: Accumulation target (owned by the caller)
        ref_id: Query reference id, for error reporting
        fetch_size: Rows requested from the driver per round trip

    Returns:
        The same buffer, for chaining
    """
    batches = _fetch_batches(cursor, fetch_size)
    while True:
        try:
            batch = next(batches)
        except StopIteration:
            break
        except Exception as e:
            logger.warning(
                "[%s] Row fetch failed after %d rows: %s", ref_id, len(buffer), e
            )
            raise RowFetchError(ref_id, e, len(buffer)) from e

        for raw in batch:
            if len(raw) != column_count:
                error = ValueError(
                    f"driver returned {len(raw)} values for {column_count} columns"
                )
                raise RowFetchError(ref_id, error, len(buffer))
            buffer.append(materialize_row(raw))

    return buffer
