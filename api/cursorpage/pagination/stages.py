"""Concurrent pagination across independent partitions (pipeline stages)."""

import asyncio
import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from .paginator import paginate
from .params import DEFAULT_SORT_BY, DEFAULT_SORT_ORDER, SORT_ORDERS, PaginationParams, clamp_limit
from .query import PageQuery


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STAGE_LIMIT = 10
MAX_STAGE_LIMIT = 50


class StagePaginationParams(BaseModel):
    """Parameters shared by every stage, plus one cursor per stage."""

    limit_per_stage: Optional[int] = Field(default=None, description="Number of items per stage")
    cursors: Dict[str, str] = Field(default_factory=dict, description="Cursor for each stage, keyed by stage")
    sort_by: Optional[str] = Field(default=None, description="Field to sort by")
    sort_order: Optional[str] = Field(default=None, description="Sort order, 'asc' or 'desc'")
    include_counts: bool = Field(default=False, description="Whether to count each stage")


class StagePage(BaseModel, Generic[T]):
    """One stage's page."""

    items: List[T] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False
    total_count: Optional[int] = None


class StageResult(BaseModel):
    """Pages keyed by stage, in the order the stages were requested."""

    stages: Dict[str, StagePage] = Field(default_factory=dict)


async def paginate_by_stage(
    query_builder: Callable[[str], PageQuery],
    stages: Sequence[str],
    params: StagePaginationParams,
    sort_column: Any,
    id_column: Any,
    get_sort_value: Callable[[Any], Any],
    get_id: Optional[Callable[[Any], Any]] = None,
) -> StageResult:
    """Paginate each stage independently and concurrently.

    Args:
        query_builder: Returns the pre-filtered query scoped to one stage
        stages: Stage keys to paginate
        params: Shared page size and sort, plus per-stage cursors
        sort_column: Column or column name for the sort field
        id_column: Column or column name for the unique identifier
        get_sort_value: Returns an item's sort value
        get_id: Returns an item's identifier, defaults to its ``id``

    Returns:
        Result with exactly one page per stage
    """
    limit = clamp_limit(params.limit_per_stage, DEFAULT_STAGE_LIMIT, MAX_STAGE_LIMIT)
    sort_by = params.sort_by or DEFAULT_SORT_BY
    sort_order = params.sort_order if params.sort_order in SORT_ORDERS else DEFAULT_SORT_ORDER

    async def paginate_stage(stage: str) -> StagePage:
        result = await paginate(
            query_builder(stage),
            PaginationParams(
                limit=limit,
                cursor=params.cursors.get(stage),
                sort_by=sort_by,
                sort_order=sort_order,
            ),
            sort_column,
            id_column,
            get_sort_value,
            get_id=get_id,
            include_total_count=params.include_counts,
        )
        return StagePage(
            items=result.items,
            next_cursor=result.pagination.next_cursor,
            has_more=result.pagination.has_more,
            total_count=result.pagination.total_count,
        )

    pages = await asyncio.gather(*(paginate_stage(stage) for stage in stages))
    logger.debug(f"Paginated {len(pages)} stages with {limit} items per stage")

    return StageResult(stages=dict(zip(stages, pages)))
