"""Pagination module for cursor-based pagination."""

from .cursor import (
    CursorData,
    encode_cursor,
    decode_cursor,
    create_cursors,
    coerce_sort_value
)
from .params import (
    PaginationParams,
    NormalizedParams,
    RECORD_SORT_FIELDS,
    normalize_pagination_params,
    normalize_sort_field,
    normalize_record_params
)
from .query import Column, Ordering, PageQuery
from .conditions import Comparison, CursorCondition, build_cursor_condition, resolve_comparison
from .memory import InMemoryQuery
from .paginator import PageInfo, PaginatedResult, paginate
from .stages import StagePage, StagePaginationParams, StageResult, paginate_by_stage
from .links import create_link_header

__all__ = [
    "CursorData",
    "encode_cursor",
    "decode_cursor",
    "create_cursors",
    "coerce_sort_value",
    "PaginationParams",
    "NormalizedParams",
    "RECORD_SORT_FIELDS",
    "normalize_pagination_params",
    "normalize_sort_field",
    "normalize_record_params",
    "Column",
    "Ordering",
    "PageQuery",
    "Comparison",
    "CursorCondition",
    "build_cursor_condition",
    "resolve_comparison",
    "InMemoryQuery",
    "PageInfo",
    "PaginatedResult",
    "paginate",
    "StagePage",
    "StagePaginationParams",
    "StageResult",
    "paginate_by_stage",
    "create_link_header"
]
