"""In-memory query handle.

Implements the same contract as the SQL-backed query so pagination logic can
run against plain lists of rows.
"""

from functools import cmp_to_key
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .conditions import CursorCondition
from .cursor import coerce_pair
from .query import Ordering, PageQuery, row_value


RowPredicate = Callable[[Any], bool]


def _compare_values(left: Any, right: Any, descending: bool) -> int:
    # PostgreSQL places NULLs last when ascending and first when descending
    if left is None or right is None:
        if left is None and right is None:
            return 0
        result = 1 if left is None else -1
    elif left == right:
        return 0
    else:
        result = -1 if left < right else 1
    return -result if descending else result


class InMemoryQuery(PageQuery):
    """Query over a sequence of mapping or attribute rows."""

    def __init__(
        self,
        rows: Sequence[Any],
        predicates: Tuple[RowPredicate, ...] = (),
        orderings: Tuple[Ordering, ...] = (),
        row_limit: Optional[int] = None,
    ):
        self._rows = rows
        self._predicates = predicates
        self._orderings = orderings
        self._limit = row_limit

    def _copy(self, **changes: Any) -> "InMemoryQuery":
        state = {
            "predicates": self._predicates,
            "orderings": self._orderings,
            "row_limit": self._limit,
        }
        state.update(changes)
        return InMemoryQuery(self._rows, **state)

    def where(self, predicate: RowPredicate) -> "InMemoryQuery":
        """Return a query further filtered by ``predicate``."""
        return self._copy(predicates=self._predicates + (predicate,))

    def with_condition(self, condition: CursorCondition) -> "InMemoryQuery":
        return self.where(condition.matches)

    def order_by(self, *orderings: Ordering) -> "InMemoryQuery":
        return self._copy(orderings=tuple(orderings))

    def limit(self, count: int) -> "InMemoryQuery":
        return self._copy(row_limit=count)

    def _matching(self) -> List[Any]:
        return [row for row in self._rows if all(p(row) for p in self._predicates)]

    def _compare_rows(self, left: Any, right: Any) -> int:
        for column, descending in self._orderings:
            left_value, right_value = coerce_pair(
                row_value(left, column.name), row_value(right, column.name), column
            )
            result = _compare_values(left_value, right_value, descending)
            if result:
                return result
        return 0

    async def fetch(self) -> List[Any]:
        rows = self._matching()
        if self._orderings:
            rows.sort(key=cmp_to_key(self._compare_rows))
        if self._limit is not None:
            rows = rows[:self._limit]
        return rows

    async def count(self) -> int:
        return len(self._matching())
