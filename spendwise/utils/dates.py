"""
Timestamp helpers.

Dates are persisted as fixed-width UTC strings (``2025-11-03T12:00:00.000Z``)
so that DynamoDB string comparisons order them chronologically.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Tuple

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    value = to_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime. Naive values are taken as UTC."""
    return to_utc(datetime.fromisoformat(value.strip()))


def utcnow_iso() -> str:
    return format_timestamp(utcnow())


def month_bounds(month: str) -> Tuple[datetime, datetime]:
    """
    Inclusive [start, end] range for a ``YYYY-MM`` month.
    Raises ValueError for anything else.
    """
    match = _MONTH_RE.match(month or "")
    if not match:
        raise ValueError("Month must follow YYYY-MM format")
    year, mon = int(match.group(1)), int(match.group(2))
    if not 1 <= mon <= 12:
        raise ValueError("Month must follow YYYY-MM format")

    start = datetime(year, mon, 1, tzinfo=timezone.utc)
    if mon == 12:
        next_start = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        next_start = datetime(year, mon + 1, 1, tzinfo=timezone.utc)
    return start, next_start - timedelta(milliseconds=1)
