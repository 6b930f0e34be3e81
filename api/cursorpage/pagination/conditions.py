"""Cursor boundary conditions."""

import operator
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel

from .cursor import CursorData, SortValue, coerce_pair
from .query import Column, as_column, row_value


class Comparison(str, Enum):
    """Strict inequality applied at the cursor boundary."""

    LESS_THAN = "<"
    GREATER_THAN = ">"

    def apply(self, left: Any, right: Any) -> bool:
        compare = operator.lt if self is Comparison.LESS_THAN else operator.gt
        return compare(left, right)


def resolve_comparison(sort_order: str, direction: str) -> Comparison:
    """Pick the boundary operator for a sort order and traversal direction.

    Descending pages move towards smaller values going forward and larger
    values going back; ascending pages do the opposite.
    """
    descending = sort_order == "desc"
    forward = direction == "next"
    if descending == forward:
        return Comparison.LESS_THAN
    return Comparison.GREATER_THAN


class CursorCondition(BaseModel):
    """``(sort OP value) OR (sort = value AND id OP id)``."""

    sort_column: Column
    id_column: Column
    comparison: Comparison
    sort_value: SortValue
    id: Any

    model_config = {"frozen": True}

    def matches(self, row: Any) -> bool:
        """Evaluate the condition against a materialized row.

        NULL sort values never satisfy a comparison, as in SQL.
        """
        value, bound = coerce_pair(
            row_value(row, self.sort_column.name), self.sort_value, self.sort_column
        )
        if value is None or bound is None:
            return False

        try:
            if self.comparison.apply(value, bound):
                return True
            if value != bound:
                return False
            return self.comparison.apply(row_value(row, self.id_column.name), self.id)
        except TypeError:
            return False

    def to_sql(self, first_param: int = 1) -> Tuple[str, List[Any]]:
        """Render as a parameterized SQL fragment.

        Args:
            first_param: Index of the first ``$n`` placeholder to use

        Returns:
            Tuple of (sql_fragment, parameters)
        """
        value_param = _placeholder(first_param, self.sort_column)
        id_param = _placeholder(first_param + 1, self.id_column)
        op = self.comparison.value
        sort_name = self.sort_column.name
        id_name = self.id_column.name

        sql = (
            f"({sort_name} {op} {value_param} OR "
            f"({sort_name} = {value_param} AND {id_name} {op} {id_param}))"
        )
        return sql, [self.sort_value, self.id]


def _placeholder(index: int, column: Column) -> str:
    if column.cast:
        return f"${index}::{column.cast}"
    return f"${index}"


def build_cursor_condition(
    cursor: CursorData,
    direction: str,
    sort_column: Any,
    id_column: Any,
    sort_order: Optional[str] = None,
) -> CursorCondition:
    """Build the boundary condition for a decoded cursor.

    Args:
        cursor: Decoded cursor data
        direction: Traversal direction, 'next' or 'prev'
        sort_column: Column (or column name) holding the sort value
        id_column: Column (or column name) holding the unique identifier
        sort_order: Sort order of the page being fetched; defaults to the
            order the cursor was minted with

    Returns:
        Condition selecting rows strictly beyond the cursor
    """
    sort_column = as_column(sort_column)
    return CursorCondition(
        sort_column=sort_column,
        id_column=as_column(id_column),
        comparison=resolve_comparison(sort_order or cursor.sort_order, direction),
        sort_value=cursor.sort_value_for(sort_column),
        id=cursor.id,
    )
