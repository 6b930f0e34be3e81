"""Records API endpoints."""

import json
import logging
from datetime import datetime
from typing import Annotated, Dict, Optional

from fastapi import APIRouter, Query, Request, Response

from ..config import get_settings
from ..db.records import list_kanban, list_records, list_stage_records
from ..errors.problem_details import NotFoundError
from ..models.records import KanbanResponse, RecordFilters, RecordListResponse
from ..pagination import PaginatedResult, PaginationParams, StagePaginationParams, create_link_header


logger = logging.getLogger(__name__)

records_router = APIRouter(
    prefix="/records",
    tags=["Records"],
    responses={
        404: {"description": "Not Found"},
        422: {"description": "Unprocessable Entity"}
    }
)

LimitQuery = Annotated[Optional[int], Query(description="Number of records per page, clamped to 1-100")]
CursorQuery = Annotated[Optional[str], Query(description="Cursor from a previous page")]
DirectionQuery = Annotated[Optional[str], Query(description="Traversal direction, 'next' or 'prev'")]
SortByQuery = Annotated[Optional[str], Query(description="Sort field; unknown fields fall back to createdAt")]
SortOrderQuery = Annotated[Optional[str], Query(description="Sort order, 'asc' or 'desc'")]


def parse_stage_cursors(raw: Optional[str]) -> Dict[str, str]:
    """Parse a JSON object of per-stage cursors.

    Malformed input is treated as no cursors, so every stage starts from its
    first page.
    """
    if not raw:
        return {}
    try:
        cursors = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed stage cursors")
        return {}
    if not isinstance(cursors, dict):
        logger.warning("Ignoring stage cursors that are not a JSON object")
        return {}
    return {str(stage): cursor for stage, cursor in cursors.items() if isinstance(cursor, str)}


def add_link_header(
    request: Request,
    response: Response,
    result: PaginatedResult,
    params: Dict[str, Optional[str]]
) -> None:
    """Attach an RFC 8288 Link header for the neighbouring pages."""
    base_url = str(request.url).split('?')[0]
    link_header = create_link_header(
        base_url=base_url,
        params=params,
        next_cursor=result.pagination.next_cursor,
        prev_cursor=result.pagination.prev_cursor
    )
    if link_header:
        response.headers["Link"] = link_header


@records_router.get(
    "",
    response_model=RecordListResponse,
    summary="List records",
    description="List records with cursor-based pagination, filtering and stable ordering."
)
async def get_records(
    request: Request,
    response: Response,
    limit: LimitQuery = None,
    cursor: CursorQuery = None,
    direction: DirectionQuery = None,
    sort_by: SortByQuery = None,
    sort_order: SortOrderQuery = None,
    stage: Annotated[Optional[str], Query(description="Only records in this stage")] = None,
    status: Annotated[Optional[str], Query(description="Only records with this status")] = None,
    search: Annotated[Optional[str], Query(description="Case-insensitive title search")] = None,
    created_from: Annotated[Optional[datetime], Query(description="Created at or after")] = None,
    created_to: Annotated[Optional[datetime], Query(description="Created at or before")] = None,
    include_count: Annotated[bool, Query(description="Include the total number of matching records")] = False
) -> RecordListResponse:
    """List records a page at a time.

    Records are ordered by the requested field with the record id as a
    tie-breaker, so pages stay stable while records are added or removed.
    Invalid paging parameters are corrected rather than rejected, and an
    unreadable cursor restarts from the first page.
    """
    settings = get_settings()
    filters = RecordFilters(
        stage=stage,
        status=status,
        search=search,
        created_from=created_from,
        created_to=created_to
    )
    pagination = PaginationParams(
        limit=limit or settings.default_page_size,
        cursor=cursor,
        direction=direction,
        sort_by=sort_by,
        sort_order=sort_order
    )

    result = await list_records(
        filters,
        pagination,
        include_total_count=include_count,
        max_limit=settings.max_page_size
    )

    add_link_header(request, response, result, {
        "limit": str(limit) if limit else None,
        "sort_by": sort_by,
        "sort_order": sort_order,
        "stage": stage,
        "status": status,
        "search": search,
        "created_from": created_from.isoformat() if created_from else None,
        "created_to": created_to.isoformat() if created_to else None,
        "include_count": "true" if include_count else None
    })

    logger.info(f"Retrieved {result.pagination.count} records")
    return RecordListResponse(items=result.items, pagination=result.pagination)


@records_router.get(
    "/kanban",
    response_model=KanbanResponse,
    summary="List records by stage",
    description="Page every pipeline stage independently, each with its own cursor."
)
async def get_kanban(
    limit_per_stage: Annotated[Optional[int], Query(description="Number of records per stage, clamped to 1-50")] = None,
    cursors: Annotated[Optional[str], Query(description="JSON object mapping stage to cursor")] = None,
    sort_by: SortByQuery = None,
    sort_order: SortOrderQuery = None,
    include_counts: Annotated[bool, Query(description="Include each stage's record count")] = False
) -> KanbanResponse:
    """List one page of records for every configured stage.

    Stages with no records are still present in the response.
    """
    settings = get_settings()
    limit = min(limit_per_stage or settings.default_stage_page_size, settings.max_stage_page_size)
    params = StagePaginationParams(
        limit_per_stage=limit,
        cursors=parse_stage_cursors(cursors),
        sort_by=sort_by or "updatedAt",
        sort_order=sort_order,
        include_counts=include_counts
    )

    result = await list_kanban(settings.pipeline_stages, params)

    logger.info(f"Retrieved kanban page for {len(result.stages)} stages")
    return KanbanResponse(stages=result.stages)


@records_router.get(
    "/stages/{stage}",
    response_model=RecordListResponse,
    summary="List records in a stage",
    description="Load more records for a single stage.",
    responses={
        404: {"description": "Unknown stage"}
    }
)
async def get_stage_records(
    stage: str,
    request: Request,
    response: Response,
    limit: LimitQuery = None,
    cursor: CursorQuery = None,
    direction: DirectionQuery = None,
    sort_by: SortByQuery = None,
    sort_order: SortOrderQuery = None
) -> RecordListResponse:
    """List records of one stage a page at a time.

    Raises:
        NotFoundError: If the stage is not a configured pipeline stage
    """
    settings = get_settings()
    if stage not in settings.pipeline_stages:
        raise NotFoundError(f"Stage '{stage}' not found")

    pagination = PaginationParams(
        limit=limit or settings.default_stage_page_size,
        cursor=cursor,
        direction=direction,
        sort_by=sort_by or "updatedAt",
        sort_order=sort_order
    )

    result = await list_stage_records(stage, pagination, max_limit=settings.max_page_size)

    add_link_header(request, response, result, {
        "limit": str(limit) if limit else None,
        "sort_by": sort_by,
        "sort_order": sort_order
    })

    return RecordListResponse(items=result.items, pagination=result.pagination)
