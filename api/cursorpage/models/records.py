"""Pydantic models for records."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from ..pagination import PageInfo, StagePage


class Record(BaseModel):
    """A row of the records collection."""

    id: int = Field(description="Record identifier")
    stage: str = Field(description="Pipeline stage the record is in")
    status: Optional[str] = Field(default=None, description="Record status")
    title: str = Field(description="Record title")
    value: Optional[float] = Field(default=None, description="Monetary value")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 42,
                "stage": "qualified",
                "status": "open",
                "title": "Northside Auto Repair",
                "value": 12500.0,
                "created_at": "2024-01-01T12:00:00Z",
                "updated_at": "2024-01-02T09:30:00Z"
            }
        }
    )


class RecordFilters(BaseModel):
    """Filters applied before pagination."""

    stage: Optional[str] = Field(default=None, description="Only records in this stage")
    status: Optional[str] = Field(default=None, description="Only records with this status")
    search: Optional[str] = Field(default=None, description="Case-insensitive title search")
    created_from: Optional[datetime] = Field(default=None, description="Created at or after")
    created_to: Optional[datetime] = Field(default=None, description="Created at or before")


class RecordListResponse(BaseModel):
    """Response model for listing records."""

    items: List[Record] = Field(description="Records in reading order")
    pagination: PageInfo = Field(description="Navigation metadata")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [
                    {
                        "id": 42,
                        "stage": "qualified",
                        "status": "open",
                        "title": "Northside Auto Repair",
                        "value": 12500.0,
                        "created_at": "2024-01-03T12:00:00Z",
                        "updated_at": "2024-01-03T12:00:00Z"
                    }
                ],
                "pagination": {
                    "next_cursor": "eyJ2IjoiMjAyNC0wMS0wM1QxMjowMDowMC4wMDBaIiwiaSI6NDIsInMiOiJjcmVhdGVkQXQiLCJvIjoiZGVzYyJ9",
                    "prev_cursor": None,
                    "has_more": True,
                    "has_prev": False,
                    "count": 1
                }
            }
        }
    )


class KanbanResponse(BaseModel):
    """Response model for records grouped by stage."""

    stages: Dict[str, StagePage[Record]] = Field(description="One page per stage")
