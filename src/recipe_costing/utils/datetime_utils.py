"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from recipe_costing.utils.datetime_utils import utc_now, iso_timestamp

    # For SQLAlchemy Column defaults
    updated_at = Column(DateTime, default=utc_now)

    # For JSON documents
    document["exportedAt"] = iso_timestamp()
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def iso_timestamp(value: Optional[datetime] = None) -> str:
    """
    Format a datetime as an ISO 8601 UTC string with a trailing 'Z'.

    Args:
        value: Datetime to format (default: now). Naive values are taken as UTC.

    Returns:
        String like "2025-01-31T09:15:00.123Z"
    """
    if value is None:
        value = utc_now()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 string (as written by iso_timestamp) into a UTC datetime.

    Returns:
        Timezone-aware datetime, or None if value is empty or unparsable
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def filename_timestamp(value: Optional[datetime] = None) -> str:
    """
    Timestamp safe for filenames, e.g. "2025-01-31T09-15-00".
    """
    return iso_timestamp(value)[:19].replace(":", "-")
