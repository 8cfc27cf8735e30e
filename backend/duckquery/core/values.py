"""Typed cell values.

Drivers hand back plain Python objects; the front end needs every cell tagged
with one of four wire kinds. ``classify`` is the single place where that
decision is made.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class CellKind(str, Enum):
    """Wire kind of a cell."""

    STRING = "STRING"
    INT64 = "INT64"
    BOOL = "BOOL"
    DOUBLE = "DOUBLE"


_PAYLOAD_KEYS = {
    CellKind.STRING: "stringValue",
    CellKind.INT64: "int64Value",
    CellKind.BOOL: "boolValue",
    CellKind.DOUBLE: "doubleValue",
}


def _is_int64(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and INT64_MIN <= value <= INT64_MAX
    )


@dataclass(frozen=True)
class Cell:
    """
    One typed scalar value.

    Attributes:
        kind: Wire kind
        value: Payload; its Python type always agrees with ``kind``
    """

    kind: CellKind
    value: Any

    def __post_init__(self) -> None:
        if not _payload_matches(self.kind, self.value):
            raise TypeError(
                f"{type(self.value).__name__} payload does not match kind {self.kind.value}"
            )

    @classmethod
    def string(cls, value: str) -> Cell:
        return cls(CellKind.STRING, value)

    @classmethod
    def int64(cls, value: int) -> Cell:
        return cls(CellKind.INT64, value)

    @classmethod
    def boolean(cls, value: bool) -> Cell:
        return cls(CellKind.BOOL, value)

    @classmethod
    def double(cls, value: float) -> Cell:
        return cls(CellKind.DOUBLE, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return {"kind": self.kind.value, _PAYLOAD_KEYS[self.kind]: self.value}


def _payload_matches(kind: CellKind, value: Any) -> bool:
    if kind == CellKind.STRING:
        return isinstance(value, str)
    if kind == CellKind.INT64:
        return _is_int64(value)
    if kind == CellKind.BOOL:
        return isinstance(value, bool)
    if kind == CellKind.DOUBLE:
        return isinstance(value, float)
    return False


def to_epoch_millis(value: date) -> int:
    """
    Convert a date or datetime to Unix epoch milliseconds.

    Naive datetimes are read as UTC and dates as midnight UTC.
    Sub-millisecond precision is truncated toward zero.

    Examples:
        >>> to_epoch_millis(datetime(1970, 1, 1, 0, 0, 1, 999))
        1000
    """
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    else:
        moment = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    delta = moment - _EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis


def missing_type_placeholder(value: Any) -> str:
    """Diagnostic text shown in place of a value of an unsupported type."""
    return f"MISSING TYPE {type(value).__name__}!"


def classify(value: Any) -> Cell:
    """
    Classify one raw driver value into a Cell.

    Checks run in a fixed order and the first match wins:
    str, 64-bit int, bool, float, datetime/date, then a diagnostic
    STRING fallback. This never raises: a value of an unknown type
    becomes a visible "MISSING TYPE ...!" string instead of failing
    the row.

    Examples:
        >>> classify("a").kind
        <CellKind.STRING: 'STRING'>
        >>> classify(None).value
        'MISSING TYPE NoneType!'
    """
    if isinstance(value, str):
        return Cell(CellKind.STRING, value)
    if _is_int64(value):
        return Cell(CellKind.INT64, value)
    if isinstance(value, bool):
        return Cell(CellKind.BOOL, value)
    if isinstance(value, float):
        return Cell(CellKind.DOUBLE, value)
    if isinstance(value, date):
        return Cell(CellKind.INT64, to_epoch_millis(value))
    return Cell(CellKind.STRING, missing_type_placeholder(value))
