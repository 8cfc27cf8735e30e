"""Tests for RowBuffer."""

import pytest

from duckquery.core.buffer import DEFAULT_INITIAL_CAPACITY, RowBuffer
from duckquery.core.result import Row
from duckquery.core.values import Cell


def make_row(i: int) -> Row:
    return Row([Cell.int64(i)])


class TestRowBuffer:
    """Test append-only accumulation."""

    def test_default_capacity(self):
        """Test that the default capacity hint is preallocated."""
        buf = RowBuffer()
        assert buf.capacity == DEFAULT_INITIAL_CAPACITY == 2048
        assert len(buf) == 0
        assert buf.to_list() == []

    def test_no_growth_within_capacity(self):
        """Test that appends within capacity do not reallocate."""
        buf = RowBuffer()
        for i in range(3):
            buf.append(make_row(i))

        assert len(buf) == 3
        assert buf.grow_count == 0
        assert buf.capacity == 2048

    def test_growth_factor(self):
        """Test that capacity grows to 1.5 x new length + 1."""
        buf = RowBuffer(initial_capacity=2)
        buf.append(make_row(0))
        buf.append(make_row(1))
        assert buf.capacity == 2

        buf.append(make_row(2))
        assert buf.capacity == 5
        assert buf.grow_count == 1

    def test_logarithmic_growth(self):
        """Test that n appends cause only O(log n) reallocations."""
        buf = RowBuffer(initial_capacity=0)
        for i in range(100):
            buf.append(make_row(i))

        assert len(buf) == 100
        assert buf.grow_count == 8
        assert buf.capacity == 104

    def test_order_preserved(self):
        """Test that rows come back in append order, duplicates included."""
        buf = RowBuffer(initial_capacity=1)
        values = [3, 1, 3, 2, 0]
        for v in values:
            buf.append(make_row(v))

        assert [r.values[0].value for r in buf] == values
        assert [r.values[0].value for r in buf.to_list()] == values

    def test_negative_capacity_rejected(self):
        """Test that a negative capacity hint is an error."""
        with pytest.raises(ValueError):
            RowBuffer(initial_capacity=-1)
