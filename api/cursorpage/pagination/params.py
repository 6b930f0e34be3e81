"""Pagination request parameters and their normalization."""

from typing import Any, Literal, Optional, Sequence

from pydantic import BaseModel, Field


DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"
DEFAULT_DIRECTION = "next"

DIRECTIONS = ("next", "prev")
SORT_ORDERS = ("asc", "desc")

RECORD_SORT_FIELDS = (
    "createdAt",
    "updatedAt",
    "title",
    "stage",
    "value",
)


class PaginationParams(BaseModel):
    """Caller-supplied pagination parameters.

    Fields are deliberately loose; out-of-range or unknown values are
    corrected by ``normalize_pagination_params`` instead of being rejected.
    """

    limit: Optional[int] = Field(default=None, description="Number of items per page")
    cursor: Optional[str] = Field(default=None, description="Cursor for pagination")
    direction: Optional[str] = Field(default=None, description="Traversal direction, 'next' or 'prev'")
    sort_by: Optional[str] = Field(default=None, description="Field to sort by")
    sort_order: Optional[str] = Field(default=None, description="Sort order, 'asc' or 'desc'")


class NormalizedParams(BaseModel):
    """Pagination parameters with defaults and bounds applied."""

    limit: int = Field(ge=1, description="Number of items per page")
    cursor: str = Field(default="", description="Cursor for pagination, empty for the first page")
    direction: Literal["next", "prev"] = DEFAULT_DIRECTION
    sort_by: str = DEFAULT_SORT_BY
    sort_order: Literal["asc", "desc"] = DEFAULT_SORT_ORDER

    model_config = {"frozen": True}


def clamp_limit(limit: Optional[int], default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Clamp a page size to ``[1, maximum]``; a missing or zero size means ``default``."""
    if not limit:
        limit = default
    return min(max(int(limit), 1), maximum)


def normalize_pagination_params(
    params: Any,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> NormalizedParams:
    """Apply defaults and bounds to pagination parameters.

    Args:
        params: PaginationParams, NormalizedParams or a plain mapping of the
            same fields
        default_limit: Page size used when none is given
        max_limit: Largest page size allowed

    Returns:
        Normalized parameters
    """
    if isinstance(params, dict):
        params = PaginationParams.model_validate(params)

    direction = params.direction if params.direction in DIRECTIONS else DEFAULT_DIRECTION
    sort_order = params.sort_order if params.sort_order in SORT_ORDERS else DEFAULT_SORT_ORDER

    return NormalizedParams(
        limit=clamp_limit(params.limit, default_limit, max_limit),
        cursor=params.cursor or "",
        direction=direction,
        sort_by=params.sort_by or DEFAULT_SORT_BY,
        sort_order=sort_order,
    )


def normalize_sort_field(
    sort_by: Optional[str],
    allowed: Sequence[str],
    default: str = DEFAULT_SORT_BY,
) -> str:
    """Replace a sort field outside ``allowed`` with ``default``."""
    if sort_by in allowed:
        return sort_by
    return default


def normalize_record_params(
    params: Any,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> NormalizedParams:
    """Normalize parameters for the records collection.

    Unknown sort fields fall back to ``createdAt`` rather than failing the
    request.
    """
    normalized = normalize_pagination_params(params, default_limit, max_limit)
    sort_by = normalize_sort_field(normalized.sort_by, RECORD_SORT_FIELDS)
    return normalized.model_copy(update={"sort_by": sort_by})
