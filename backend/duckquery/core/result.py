"""Query result models."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from duckquery.core.values import Cell


@dataclass(frozen=True)
class Column:
    """A result column. Only the name is known up front; types are per cell."""

    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Row:
    """One materialized row, positionally aligned with the table's columns."""

    values: List[Cell]

    def __len__(self) -> int:
        return len(self.values)

    def to_dict(self) -> Dict[str, Any]:
        return {"values": [cell.to_dict() for cell in self.values]}


def build_meta_json(row_count: int, sql: str) -> str:
    """
    Build the table metadata string.

    The SQL is JSON-escaped so the metadata stays valid embedded JSON.

    Examples:
        >>> build_meta_json(3, "SELECT 1")
        '{"rowCount":3,"sql":"SELECT 1"}'
    """
    return json.dumps({"rowCount": row_count, "sql": sql}, separators=(",", ":"))


@dataclass
class Table:
    """
    A materialized result set.

    Owned by exactly one QueryResult.
    """

    columns: List[Column]
    rows: List[Row] = field(default_factory=list)
    sql: str = ""

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def meta_json(self) -> str:
        return build_meta_json(self.row_count, self.sql)

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "rows": [r.to_dict() for r in self.rows],
            "metaJson": self.meta_json,
        }

    def __repr__(self) -> str:
        return f"Table({len(self.columns)} columns, {self.row_count} rows)"


@dataclass
class QueryResult:
    """
    Outcome of one query in a batch.

    Exactly one of ``table`` and ``error`` is set.
    """

    ref_id: str
    table: Optional[Table] = None
    error: Optional[str] = None
    duration_ms: Optional[int] = None

    @classmethod
    def success(cls, ref_id: str, table: Table, duration_ms: Optional[int] = None) -> QueryResult:
        return cls(ref_id=ref_id, table=table, duration_ms=duration_ms)

    @classmethod
    def failure(cls, ref_id: str, error: str, duration_ms: Optional[int] = None) -> QueryResult:
        return cls(ref_id=ref_id, error=error, duration_ms=duration_ms)

    def is_success(self) -> bool:
        """Check if the query produced a table."""
        return self.error is None

    def is_failed(self) -> bool:
        """Check if the query failed."""
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"refId": self.ref_id, "error": self.error}
        return {"refId": self.ref_id, "table": self.table.to_dict() if self.table else None}

    def __repr__(self) -> str:
        if self.error is not None:
            return f"QueryResult({self.ref_id}, failed: {self.error})"
        return f"QueryResult({self.ref_id}, {self.table!r})"


@dataclass
class BatchResponse:
    """
    Results for one batch, in request order.

    results[i] always answers query[i] of the request.
    """

    results: List[QueryResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        """Get number of queries that produced a table."""
        return sum(1 for r in self.results if r.is_success())

    @property
    def failed_count(self) -> int:
        """Get number of failed queries."""
        return sum(1 for r in self.results if r.is_failed())

    def by_ref_id(self, ref_id: str) -> Optional[QueryResult]:
        """Get the first result with the given reference id."""
        for r in self.results:
            if r.ref_id == ref_id:
                return r
        return None

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            f"Batch Response: {len(self.results)} queries",
            f"    - Success: {self.success_count}",
            f"    - Failed: {self.failed_count}",
        ]
        for r in self.results:
            if r.is_failed():
                lines.append(f"  [{r.ref_id}] {r.error}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {"results": [r.to_dict() for r in self.results]}

    def __len__(self) -> int:
        return len(self.results)

    def __repr__(self) -> str:
        return f"BatchResponse({len(self.results)} results, {self.failed_count} failed)"
