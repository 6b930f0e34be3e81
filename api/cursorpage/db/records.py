"""Database operations for records."""

import logging
from typing import Any, Dict, Optional, Sequence

import asyncpg
from asyncpg import Pool

from ..models.records import Record, RecordFilters
from ..pagination import (
    RECORD_SORT_FIELDS, Column, PaginatedResult, PaginationParams, StagePage,
    StagePaginationParams, StageResult, normalize_record_params, normalize_sort_field,
    paginate, paginate_by_stage
)
from ..errors.problem_details import InternalServerError
from .query import SQLQuery


logger = logging.getLogger(__name__)

RECORDS_TABLE = "records"
RECORD_COLUMNS = ("id", "stage", "status", "title", "value", "created_at", "updated_at")

ID_COLUMN = Column(name="id", cast="bigint")
SORT_COLUMNS = {
    "createdAt": Column(name="created_at", cast="timestamptz"),
    "updatedAt": Column(name="updated_at", cast="timestamptz"),
    "title": Column(name="title", cast="text"),
    "stage": Column(name="stage", cast="text"),
    "value": Column(name="value", cast="numeric"),
}


def resolve_sort_column(sort_by: Optional[str]) -> Column:
    """Map a public sort field to its column, defaulting to created_at."""
    return SORT_COLUMNS.get(sort_by or "createdAt", SORT_COLUMNS["createdAt"])


def sort_value_getter(column: Column):
    """Return an accessor reading ``column`` from a fetched row."""
    def get_sort_value(row: Dict[str, Any]) -> Any:
        return row[column.name]
    return get_sort_value


def build_records_query(
    filters: Optional[RecordFilters] = None,
    pool: Optional[Pool] = None
) -> SQLQuery:
    """Build the filtered base query that pagination narrows.

    Args:
        filters: Optional record filters
        pool: Connection pool, defaults to the shared pool

    Returns:
        Query over the records table
    """
    query = SQLQuery(RECORDS_TABLE, RECORD_COLUMNS, pool=pool)
    if filters is None:
        return query

    if filters.stage:
        query = query.where("stage = {}", filters.stage)
    if filters.status:
        query = query.where("status = {}", filters.status)
    if filters.search:
        query = query.where("title ILIKE {}", f"%{filters.search}%")
    if filters.created_from:
        query = query.where("created_at >= {}::timestamptz", filters.created_from)
    if filters.created_to:
        query = query.where("created_at <= {}::timestamptz", filters.created_to)

    return query


def _to_page(result: PaginatedResult) -> PaginatedResult[Record]:
    return PaginatedResult[Record](
        items=[Record.model_validate(row) for row in result.items],
        pagination=result.pagination,
    )


async def list_records(
    filters: RecordFilters,
    pagination: PaginationParams,
    include_total_count: bool = False,
    max_limit: int = 100
) -> PaginatedResult[Record]:
    """List records with cursor-based pagination.

    Args:
        filters: Filters applied before pagination
        pagination: Pagination parameters
        include_total_count: Whether to count all matching records
        max_limit: Largest page size allowed

    Returns:
        One page of records

    Raises:
        InternalServerError: If database operation fails
    """
    params = normalize_record_params(pagination, max_limit=max_limit)
    sort_column = resolve_sort_column(params.sort_by)

    try:
        result = await paginate(
            build_records_query(filters),
            params,
            sort_column,
            ID_COLUMN,
            sort_value_getter(sort_column),
            include_total_count=include_total_count,
        )
    except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.error(f"Database error listing records: {e}")
        raise InternalServerError(f"Database error: {e}")

    logger.debug(f"Listed {result.pagination.count} records sorted by {params.sort_by} {params.sort_order}")
    return _to_page(result)


async def list_stage_records(
    stage: str,
    pagination: PaginationParams,
    max_limit: int = 100
) -> PaginatedResult[Record]:
    """List one stage's records, the "load more" path of a kanban column.

    Raises:
        InternalServerError: If database operation fails
    """
    return await list_records(RecordFilters(stage=stage), pagination, max_limit=max_limit)


async def list_kanban(
    stages: Sequence[str],
    params: StagePaginationParams
) -> StageResult:
    """Page every stage concurrently, each with its own cursor.

    Args:
        stages: Stage keys to include
        params: Per-stage page size, sort and cursors

    Returns:
        One page of records per stage

    Raises:
        InternalServerError: If database operation fails
    """
    sort_by = normalize_sort_field(params.sort_by, RECORD_SORT_FIELDS)
    params = params.model_copy(update={"sort_by": sort_by})
    sort_column = resolve_sort_column(sort_by)

    try:
        result = await paginate_by_stage(
            lambda stage: build_records_query(RecordFilters(stage=stage)),
            stages,
            params,
            sort_column,
            ID_COLUMN,
            sort_value_getter(sort_column),
        )
    except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.error(f"Database error listing kanban stages: {e}")
        raise InternalServerError(f"Database error: {e}")

    return StageResult(stages={
        stage: StagePage[Record](
            items=[Record.model_validate(row) for row in page.items],
            next_cursor=page.next_cursor,
            has_more=page.has_more,
            total_count=page.total_count,
        )
        for stage, page in result.stages.items()
    })
