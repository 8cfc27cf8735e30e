"""Tests for the typed value model."""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from duckquery.core.values import (
    INT64_MAX,
    INT64_MIN,
    Cell,
    CellKind,
    classify,
    to_epoch_millis,
)


class TestClassify:
    """Test ordered runtime type dispatch."""

    def test_string(self):
        """Test that strings become STRING cells."""
        cell = classify("hello")
        assert cell.kind == CellKind.STRING
        assert cell.value == "hello"

    def test_int(self):
        """Test that 64-bit integers become INT64 cells."""
        cell = classify(42)
        assert cell.kind == CellKind.INT64
        assert cell.value == 42

    def test_int64_bounds(self):
        """Test that both int64 bounds are still INT64."""
        assert classify(INT64_MAX).kind == CellKind.INT64
        assert classify(INT64_MIN).kind == CellKind.INT64

    def test_bool_is_not_int(self):
        """Test that booleans are BOOL even though bool subclasses int."""
        cell = classify(True)
        assert cell.kind == CellKind.BOOL
        assert cell.value is True

        assert classify(False).kind == CellKind.BOOL

    def test_float(self):
        """Test that floats become DOUBLE cells."""
        cell = classify(1.5)
        assert cell.kind == CellKind.DOUBLE
        assert cell.value == 1.5

    def test_datetime(self):
        """Test that datetimes become epoch milliseconds."""
        cell = classify(datetime(2024, 1, 2, 3, 4, 5, 678901))
        assert cell.kind == CellKind.INT64
        assert cell.value == 1704164645678

    def test_aware_datetime(self):
        """Test that timezone-aware datetimes are converted to UTC first."""
        plus_two = timezone(timedelta(hours=2))
        cell = classify(datetime(1970, 1, 1, 2, 0, 1, tzinfo=plus_two))
        assert cell.value == 1000

    def test_date(self):
        """Test that dates are read as midnight UTC."""
        cell = classify(date(1970, 1, 2))
        assert cell.kind == CellKind.INT64
        assert cell.value == 86_400_000

    @pytest.mark.parametrize(
        "value, type_name",
        [
            (None, "NoneType"),
            (Decimal("1.25"), "Decimal"),
            (b"\x00", "bytes"),
            (uuid.UUID(int=1), "UUID"),
            ([1, 2], "list"),
            (INT64_MAX + 1, "int"),
        ],
    )
    def test_fallback(self, value, type_name):
        """Test that unsupported values become a diagnostic STRING."""
        cell = classify(value)
        assert cell.kind == CellKind.STRING
        assert cell.value == f"MISSING TYPE {type_name}!"

    def test_reclassify_is_stable(self):
        """Test that reclassifying a cell's value keeps its kind."""
        for value in ["x", 7, False, 2.5, datetime(2020, 5, 1), None, Decimal("3")]:
            cell = classify(value)
            assert classify(cell.value).kind == cell.kind


class TestEpochMillis:
    """Test datetime to epoch conversion."""

    def test_truncates_sub_millisecond(self):
        """Test that microseconds are truncated, not rounded."""
        assert to_epoch_millis(datetime(1970, 1, 1, 0, 0, 0, 999)) == 0
        assert to_epoch_millis(datetime(1970, 1, 1, 0, 0, 0, 1999)) == 1

    def test_truncates_toward_zero_before_epoch(self):
        """Test that pre-epoch values truncate toward zero."""
        assert to_epoch_millis(datetime(1969, 12, 31, 23, 59, 59, 998500)) == -1
        assert to_epoch_millis(datetime(1969, 12, 31, 23, 59, 59, 999500)) == 0


class TestCell:
    """Test Cell invariants and wire encoding."""

    def test_kind_payload_mismatch_rejected(self):
        """Test that a cell cannot carry a payload of another kind."""
        with pytest.raises(TypeError):
            Cell(CellKind.INT64, "1")
        with pytest.raises(TypeError):
            Cell(CellKind.INT64, True)
        with pytest.raises(TypeError):
            Cell(CellKind.DOUBLE, 1)

    def test_constructors(self):
        """Test the per-kind constructors."""
        assert Cell.string("a").kind == CellKind.STRING
        assert Cell.int64(1).kind == CellKind.INT64
        assert Cell.boolean(True).kind == CellKind.BOOL
        assert Cell.double(1.0).kind == CellKind.DOUBLE

    def test_to_dict(self):
        """Test that only the payload key of the kind is emitted."""
        assert Cell.int64(3).to_dict() == {"kind": "INT64", "int64Value": 3}
        assert Cell.string("a").to_dict() == {"kind": "STRING", "stringValue": "a"}
        assert Cell.boolean(False).to_dict() == {"kind": "BOOL", "boolValue": False}
        assert Cell.double(0.5).to_dict() == {"kind": "DOUBLE", "doubleValue": 0.5}
