"""Query handle contract consumed by the paginator."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, List, NamedTuple, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .conditions import CursorCondition


TEMPORAL_TYPES = frozenset({
    "date", "timestamp", "timestamptz",
    "timestamp with time zone", "timestamp without time zone",
})


class Column(BaseModel):
    """Reference to a column the host data layer can resolve."""

    name: str = Field(description="Column name")
    cast: Optional[str] = Field(default=None, description="SQL type used to cast bound parameters")

    model_config = {"frozen": True}

    @property
    def is_temporal(self) -> Optional[bool]:
        """Whether the column holds dates, or None when no type is declared."""
        if self.cast is None:
            return None
        return self.cast.lower() in TEMPORAL_TYPES


class Ordering(NamedTuple):
    """One ORDER BY term."""

    column: Column
    descending: bool


def as_column(column: Any) -> Column:
    """Accept either a Column or a bare column name."""
    if isinstance(column, Column):
        return column
    return Column(name=str(column))


def row_value(row: Any, name: str) -> Any:
    """Read a field from a mapping row or an attribute-style row."""
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


class PageQuery(ABC):
    """Pre-filtered query handle that the paginator narrows and executes.

    Every builder method returns a new handle and leaves the receiver
    untouched, so a base query can be reused for counting after a cursor
    condition has been applied to a copy.
    """

    @abstractmethod
    def with_condition(self, condition: "CursorCondition") -> "PageQuery":
        """Return a query restricted by a cursor boundary condition."""

    @abstractmethod
    def order_by(self, *orderings: Ordering) -> "PageQuery":
        """Return a query ordered by the given terms, replacing any prior ordering."""

    @abstractmethod
    def limit(self, count: int) -> "PageQuery":
        """Return a query capped at ``count`` rows."""

    @abstractmethod
    async def fetch(self) -> List[Any]:
        """Execute the query and return materialized rows."""

    @abstractmethod
    async def count(self) -> int:
        """Count matching rows, ignoring ordering and limit."""
