"""Opaque cursor tokens for keyset pagination."""

import base64
import json
import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Literal, Optional, Sequence, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_validator

from .query import Column, row_value


logger = logging.getLogger(__name__)

# Values that appear on the wire inside a token
WireSortValue = Optional[Union[int, float, str]]
# Values the condition compares with once a token is decoded
SortValue = Optional[Union[datetime, int, float, str]]

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")


def format_datetime(value: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with microsecond precision.

    Naive datetimes are taken to be UTC. PostgreSQL timestamps carry
    microseconds, so the boundary must keep all six digits. Tokens with
    millisecond fractions, as browsers produce them, still decode.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def to_wire_value(value: Any) -> Any:
    """Normalize a row's sort value into its canonical wire scalar."""
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def coerce_sort_value(value: Any, column: Optional[Column] = None) -> SortValue:
    """Convert a wire sort value into its typed form.

    ISO-date-shaped strings become timezone-aware datetimes, since lexical and
    temporal ordering disagree across formats. Strings that only look like
    dates are returned unchanged. When ``column`` declares a non-temporal
    type the value is never read as a date.
    """
    if column is not None and column.is_temporal is False:
        return to_wire_value(value)
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and ISO_DATE_PATTERN.match(value):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return value
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    if isinstance(value, Decimal):
        return to_wire_value(value)
    return value


def coerce_pair(left: Any, right: Any, column: Optional[Column] = None) -> Tuple[SortValue, SortValue]:
    """Type two sort values so they can be compared with each other.

    Both are read as datetimes only when both parse as one; otherwise they
    are compared in wire form.
    """
    typed_left = coerce_sort_value(left, column)
    typed_right = coerce_sort_value(right, column)
    if typed_left is None or typed_right is None:
        return typed_left, typed_right
    if isinstance(typed_left, datetime) != isinstance(typed_right, datetime):
        return to_wire_value(left), to_wire_value(right)
    return typed_left, typed_right


class CursorData(BaseModel):
    """Decoded payload of a pagination cursor."""

    sort_value: WireSortValue = Field(description="Sort column value of the boundary row")
    id: Union[int, str] = Field(description="Identifier of the boundary row, used as tie-breaker")
    sort_by: str = Field(description="Sort field active when the cursor was minted")
    sort_order: Literal["asc", "desc"] = Field(description="Sort order active when the cursor was minted")

    model_config = {"frozen": True}

    @field_validator("sort_value", mode="before")
    @classmethod
    def normalize_sort_value(cls, v):
        """Store dates, decimals and UUIDs in their wire form."""
        return to_wire_value(v)

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v):
        """Store UUID identifiers as strings."""
        if isinstance(v, UUID):
            return str(v)
        if isinstance(v, bool):
            raise ValueError("Identifier must be an integer or string")
        return v

    @property
    def typed_sort_value(self) -> SortValue:
        """Sort value converted for comparison against stored rows."""
        return coerce_sort_value(self.sort_value)

    def sort_value_for(self, column: Optional[Column]) -> SortValue:
        """Sort value typed for ``column``."""
        return coerce_sort_value(self.sort_value, column)


def encode_cursor(data: CursorData) -> str:
    """Encode a cursor as unpadded URL-safe base64 of compact JSON.

    Args:
        data: Cursor payload

    Returns:
        Token safe to place in a query string
    """
    payload = json.dumps(
        {"v": data.sort_value, "i": data.id, "s": data.sort_by, "o": data.sort_order},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> Optional[CursorData]:
    """Decode a cursor token.

    Args:
        cursor: Token produced by ``encode_cursor``

    Returns:
        Decoded cursor data, or None if the token is empty or malformed
    """
    if not cursor or not isinstance(cursor, str):
        return None

    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
        if not isinstance(payload, dict):
            return None

        return CursorData(
            sort_value=payload["v"],
            id=payload["i"],
            sort_by=payload["s"],
            sort_order=payload["o"],
        )
    except KeyError as e:
        logger.debug(f"Cursor is missing field {e}")
        return None
    except (ValueError, TypeError, RecursionError, ValidationError) as e:
        logger.debug(f"Cursor could not be decoded: {e}")
        return None


def create_cursors(
    items: Sequence[Any],
    sort_by: str,
    sort_order: str,
    get_sort_value: Callable[[Any], Any],
    get_id: Optional[Callable[[Any], Any]] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """Encode cursors for the first and last item of a page.

    Args:
        items: Page items in reading order
        sort_by: Sort field that produced the page
        sort_order: Sort order that produced the page
        get_sort_value: Returns an item's sort value
        get_id: Returns an item's identifier, defaults to its ``id``

    Returns:
        Tuple of (first_cursor, last_cursor), both None for an empty page
    """
    if not items:
        return None, None

    get_id = get_id or (lambda item: row_value(item, "id"))

    def cursor_for(item: Any) -> str:
        return encode_cursor(CursorData(
            sort_value=get_sort_value(item),
            id=get_id(item),
            sort_by=sort_by,
            sort_order=sort_order,
        ))

    return cursor_for(items[0]), cursor_for(items[-1])
