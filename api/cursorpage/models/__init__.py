"""Data models for Cursor Page API."""

from .records import (
    Record,
    RecordFilters,
    RecordListResponse,
    KanbanResponse
)

__all__ = [
    "Record",
    "RecordFilters",
    "RecordListResponse",
    "KanbanResponse"
]
