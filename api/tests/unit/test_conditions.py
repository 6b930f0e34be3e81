"""Tests for cursor boundary conditions."""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace

from cursorpage.pagination.conditions import (
    Comparison,
    build_cursor_condition,
    resolve_comparison
)
from cursorpage.pagination.cursor import CursorData
from cursorpage.pagination.query import Column


class TestResolveComparison:
    """Test the boundary operator table."""

    @pytest.mark.parametrize("sort_order,direction,expected", [
        ("desc", "next", Comparison.LESS_THAN),
        ("desc", "prev", Comparison.GREATER_THAN),
        ("asc", "next", Comparison.GREATER_THAN),
        ("asc", "prev", Comparison.LESS_THAN),
    ])
    def test_operator_table(self, sort_order, direction, expected):
        """Each order and direction selects the right strict inequality."""
        assert resolve_comparison(sort_order, direction) == expected


class TestBuildCursorCondition:
    """Test building conditions from decoded cursors."""

    def test_to_sql(self):
        """The condition renders as a parameterized tie-broken boundary."""
        cursor = CursorData(sort_value="2024-01-03T12:00:00.000Z", id=42, sort_by="createdAt", sort_order="desc")
        condition = build_cursor_condition(
            cursor,
            "next",
            Column(name="created_at", cast="timestamptz"),
            Column(name="id"),
        )

        sql, params = condition.to_sql(first_param=3)

        assert sql == "(created_at < $3::timestamptz OR (created_at = $3::timestamptz AND id < $4))"
        assert params == [datetime(2024, 1, 3, 12, tzinfo=timezone.utc), 42]

    def test_column_names_accepted(self):
        """Bare column names work without casts."""
        cursor = CursorData(sort_value="Acme", id=7, sort_by="title", sort_order="asc")
        condition = build_cursor_condition(cursor, "next", "title", "id")

        sql, params = condition.to_sql()

        assert sql == "(title > $1 OR (title = $1 AND id > $2))"
        assert params == ["Acme", 7]

    def test_sort_order_override(self):
        """The page's sort order wins over the one in the cursor."""
        cursor = CursorData(sort_value=10, id=1, sort_by="value", sort_order="desc")
        condition = build_cursor_condition(cursor, "next", "value", "id", sort_order="asc")

        assert condition.comparison == Comparison.GREATER_THAN


class TestConditionMatches:
    """Test evaluating conditions against rows."""

    @pytest.fixture
    def condition(self):
        cursor = CursorData(sort_value="2024-01-02", id=3, sort_by="createdAt", sort_order="desc")
        return build_cursor_condition(cursor, "next", "created_at", "id")

    def test_strictly_beyond(self, condition):
        """Rows with a smaller sort value match descending-next."""
        assert condition.matches({"id": 9, "created_at": "2024-01-01"})
        assert not condition.matches({"id": 1, "created_at": "2024-01-03"})

    def test_tie_broken_by_id(self, condition):
        """Rows sharing the sort value are split by id."""
        assert condition.matches({"id": 2, "created_at": "2024-01-02"})
        assert not condition.matches({"id": 3, "created_at": "2024-01-02"})
        assert not condition.matches({"id": 4, "created_at": "2024-01-02"})

    def test_datetime_rows(self, condition):
        """Rows holding datetimes compare with string cursors."""
        earlier = {"id": 10, "created_at": datetime(2024, 1, 1, 23, 59, tzinfo=timezone.utc)}
        tie = {"id": 2, "created_at": datetime(2024, 1, 2, tzinfo=timezone.utc)}

        assert condition.matches(earlier)
        assert condition.matches(tie)

    def test_attribute_rows(self, condition):
        """Attribute-style rows are supported."""
        assert condition.matches(SimpleNamespace(id=1, created_at="2024-01-01"))

    def test_null_sort_value_never_matches(self, condition):
        """NULL sort values never satisfy the boundary."""
        assert not condition.matches({"id": 1, "created_at": None})

    def test_incomparable_values_do_not_match(self):
        """Values of incompatible types do not match."""
        cursor = CursorData(sort_value=5, id=1, sort_by="value", sort_order="asc")
        condition = build_cursor_condition(cursor, "next", "value", "id")

        assert not condition.matches({"id": 2, "value": "five"})
