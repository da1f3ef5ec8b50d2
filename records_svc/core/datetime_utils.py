"""
UTC-first datetime utilities.

- All datetimes are processed as timezone-aware UTC values.
- SQLite stores them as ISO 8601 TEXT with a 'Z' suffix.
- Request input may be any common ISO 8601 / day-first format and is
  normalised to UTC on the way in.

Usage:
    from core.datetime_utils import utc_now, parse_datetime, format_iso

    performed_at = parse_datetime("2024-01-15T10:30:00+05:30")
    format_iso(performed_at)  # "2024-01-15T05:00:00Z"
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Accepted when fromisoformat() fails; naive results are taken as UTC
_FALLBACK_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%d-%m-%Y %H:%M:%S",
    "%d-%m-%Y %H:%M",
    "%d-%m-%Y",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value: Union[str, datetime, date]) -> datetime:
    """
    Parse a datetime value to a UTC datetime.

    Args:
        value: ISO 8601 string, common day-first string, datetime or date.

    Returns:
        datetime: Timezone-aware datetime in UTC.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"Expected datetime or string, got {type(value).__name__}")

    value = value.strip()
    if not value:
        raise ValueError("Cannot parse empty datetime")

    try:
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError(f"Cannot parse datetime: '{value}'")


def format_iso(dt: datetime) -> str:
    """
    Format a datetime as ISO 8601 UTC with a 'Z' suffix.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def from_db_string(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp; None for NULL or unparseable values."""
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError as e:
        logger.warning(f"Failed to parse stored datetime '{value}': {e}")
        return None
