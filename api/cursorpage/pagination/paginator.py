"""Keyset paginator for a single collection."""

import asyncio
import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from .conditions import build_cursor_condition
from .cursor import create_cursors, decode_cursor
from .params import normalize_pagination_params
from .query import Ordering, PageQuery, as_column


logger = logging.getLogger(__name__)

T = TypeVar("T")


class PageInfo(BaseModel):
    """Navigation metadata for one page.

    ``has_prev`` reflects a cursor that was applied, not merely supplied. An
    unreadable cursor is dropped and the first page is served, and the first
    page has nothing before it.
    """

    next_cursor: Optional[str] = Field(default=None, description="Cursor for the next page")
    prev_cursor: Optional[str] = Field(default=None, description="Cursor for the previous page")
    has_more: bool = Field(default=False, description="Whether more items exist in the traversal direction")
    has_prev: bool = Field(default=False, description="Whether the page was fetched from a decoded cursor")
    count: int = Field(default=0, description="Number of items returned")
    total_count: Optional[int] = Field(default=None, description="Total matching items, when requested")


class PaginatedResult(BaseModel, Generic[T]):
    """One page of items plus navigation metadata."""

    items: List[T] = Field(default_factory=list, description="Items in reading order")
    pagination: PageInfo = Field(default_factory=PageInfo)


async def paginate(
    query: PageQuery,
    params: Any,
    sort_column: Any,
    id_column: Any,
    get_sort_value: Callable[[Any], Any],
    get_id: Optional[Callable[[Any], Any]] = None,
    include_total_count: bool = False,
    count_query: Optional[PageQuery] = None,
) -> PaginatedResult:
    """Fetch one page from a pre-filtered query.

    Only the cursor condition, the ordering and the limit are added to
    ``query``. Rows are ordered by the sort column and then the id column so
    the order is total even when sort values repeat. Backward pages are
    fetched in reverse order and flipped, so items always read in the
    requested sort order.

    Args:
        query: Pre-filtered query handle
        params: Pagination parameters (normalized here)
        sort_column: Column or column name for the sort field
        id_column: Column or column name for the unique identifier
        get_sort_value: Returns an item's sort value, used to build cursors
        get_id: Returns an item's identifier, defaults to its ``id``
        include_total_count: Whether to run a count query
        count_query: Query to count instead of ``query``

    Returns:
        Paginated result

    Errors raised by the query handle propagate unchanged.
    """
    normalized = normalize_pagination_params(params)
    limit = normalized.limit
    direction = normalized.direction
    sort_by = normalized.sort_by
    sort_order = normalized.sort_order
    sort_column = as_column(sort_column)
    id_column = as_column(id_column)

    page_query = query
    cursor_data = None
    if normalized.cursor:
        cursor_data = decode_cursor(normalized.cursor)
        if cursor_data is None:
            logger.warning("Ignoring undecodable cursor, returning first page")
        else:
            if cursor_data.sort_by != sort_by or cursor_data.sort_order != sort_order:
                logger.warning(
                    f"Cursor minted for {cursor_data.sort_by} {cursor_data.sort_order} "
                    f"replayed with {sort_by} {sort_order}"
                )
            condition = build_cursor_condition(
                cursor_data, direction, sort_column, id_column, sort_order=sort_order
            )
            page_query = page_query.with_condition(condition)

    descending = sort_order == "desc"
    if direction == "prev":
        descending = not descending

    page_query = page_query.order_by(
        Ordering(sort_column, descending),
        Ordering(id_column, descending),
    ).limit(limit + 1)

    if include_total_count:
        rows, total_count = await asyncio.gather(
            page_query.fetch(),
            (count_query or query).count(),
        )
    else:
        rows = await page_query.fetch()
        total_count = None

    has_more = len(rows) > limit
    items = list(rows[:limit])
    if direction == "prev":
        items.reverse()

    first_cursor, last_cursor = create_cursors(items, sort_by, sort_order, get_sort_value, get_id)
    has_cursor = cursor_data is not None

    if direction == "prev":
        next_cursor = last_cursor if has_cursor else None
        prev_cursor = first_cursor if has_more else None
    else:
        next_cursor = last_cursor if has_more else None
        prev_cursor = first_cursor if has_cursor else None

    logger.debug(
        f"Fetched {len(items)} items ({direction}, {sort_by} {sort_order}, "
        f"limit {limit}, has_more={has_more})"
    )

    return PaginatedResult(
        items=items,
        pagination=PageInfo(
            next_cursor=next_cursor,
            prev_cursor=prev_cursor,
            has_more=has_more,
            has_prev=has_cursor,
            count=len(items),
            total_count=total_count,
        ),
    )
