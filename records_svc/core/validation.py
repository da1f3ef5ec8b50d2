"""
Coercion of raw request input into typed field values.

Request bodies arrive as untyped JSON mappings and path segments as
strings. The helpers here turn them into the values the repositories
expect, or raise ValidationError with the exact message the client sees.
Nothing in this module touches the database.

Conventions:
    - A key missing from the body is UNSET; an explicit null is None.
    - Labels are written as they appear at the start of a sentence
      ("Full name"), so messages read "Full name is required" and
      "Invalid full name".
"""
import re
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from core.datetime_utils import parse_datetime, utc_now
from core.exceptions import ValidationError
from core.payload import UNSET, has_any_field

E = TypeVar("E", bound=Enum)

NO_ID_MESSAGE = "No ID provided"
INVALID_ID_MESSAGE = "Invalid ID"
NO_FIELDS_MESSAGE = "No fields provided for update"

_DIGITS = re.compile(r"[0-9]+")

# Largest value an SQLite INTEGER column holds
MAX_ID = 2 ** 63 - 1


def field(body: Optional[Mapping[str, Any]], key: str) -> Any:
    """Raw value of a body key, or UNSET when the key is absent."""
    if body is None:
        return UNSET
    return body.get(key, UNSET)


def _invalid(label: str) -> ValidationError:
    return ValidationError(f"Invalid {label.lower()}")


def _as_text(value: Any, label: str) -> str:
    if isinstance(value, str):
        return value
    # Numbers are accepted and stringified; structures are not
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise _invalid(label)


# =============================================================================
# STRINGS
# =============================================================================

def require_string(
    body: Optional[Mapping[str, Any]],
    key: str,
    label: str,
    blank_message: Optional[str] = None,
    strip: bool = True,
) -> str:
    """
    A string field that must be present and non-blank.

    Raises:
        ValidationError: "<label> is required" when absent or null, and
            `blank_message` (default: the same message) when blank.
    """
    value = field(body, key)
    if value is UNSET or value is None:
        raise ValidationError(f"{label} is required")
    text = _as_text(value, label)
    if not text.strip():
        raise ValidationError(blank_message or f"{label} is required")
    return text.strip() if strip else text


def optional_string(body: Optional[Mapping[str, Any]], key: str, label: str) -> Any:
    """A nullable string field: UNSET if absent, None if null."""
    value = field(body, key)
    if value is UNSET or value is None:
        return value
    return _as_text(value, label)


def updated_string(
    body: Optional[Mapping[str, Any]],
    key: str,
    label: str,
    blank_message: Optional[str] = None,
) -> Any:
    """
    A mandatory column in an update body: may be omitted, but when
    supplied must be a non-blank string.
    """
    value = field(body, key)
    if value is UNSET:
        return UNSET
    if value is None:
        raise ValidationError(blank_message or f"{label} cannot be empty")
    text = _as_text(value, label)
    if not text.strip():
        raise ValidationError(blank_message or f"{label} cannot be empty")
    return text.strip()


def query_string(value: Optional[str], message: str) -> str:
    """A required, non-blank query parameter."""
    if value is None or not value.strip():
        raise ValidationError(message)
    return value.strip()


# =============================================================================
# IDENTIFIERS
# =============================================================================

def parse_id(
    raw: Any,
    missing_message: str = NO_ID_MESSAGE,
    invalid_message: str = INVALID_ID_MESSAGE,
) -> int:
    """
    Coerce an identifier from a path segment or body value.

    Accepts positive integers and strings of digits; integral floats such
    as 3.0 are accepted as 3. Values beyond the SQLite INTEGER range
    are invalid.
    """
    if raw is UNSET or raw is None:
        raise ValidationError(missing_message)
    if isinstance(raw, bool):
        raise ValidationError(invalid_message)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise ValidationError(invalid_message)
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError(missing_message)
        if not _DIGITS.fullmatch(text):
            raise ValidationError(invalid_message)
        value = int(text)
    else:
        raise ValidationError(invalid_message)

    if value <= 0 or value > MAX_ID:
        raise ValidationError(invalid_message)
    return value


def optional_id(body: Optional[Mapping[str, Any]], key: str, invalid_message: str) -> Any:
    """An identifier field in a body; UNSET if absent, any other bad value is invalid."""
    value = field(body, key)
    if value is UNSET:
        return UNSET
    return parse_id(value, missing_message=invalid_message, invalid_message=invalid_message)


# =============================================================================
# ENUMS
# =============================================================================

def parse_enum(value: Any, enum_cls: Type[E], label: str) -> E:
    """Match a value against an enum's member names, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise _invalid(label)
    try:
        return enum_cls[value.strip().upper()]
    except KeyError:
        raise _invalid(label) from None


def require_enum(body: Optional[Mapping[str, Any]], key: str, enum_cls: Type[E], label: str) -> E:
    value = field(body, key)
    if value is UNSET or value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required")
    return parse_enum(value, enum_cls, label)


def optional_enum(
    body: Optional[Mapping[str, Any]],
    key: str,
    enum_cls: Type[E],
    label: str,
    nullable: bool = True,
) -> Any:
    value = field(body, key)
    if value is UNSET:
        return UNSET
    if value is None:
        if nullable:
            return None
        raise _invalid(label)
    return parse_enum(value, enum_cls, label)


# =============================================================================
# DATES
# =============================================================================

def parse_timestamp(value: Any, label: str) -> datetime:
    try:
        return parse_datetime(value)
    except ValueError:
        raise _invalid(label) from None


def optional_timestamp(
    body: Optional[Mapping[str, Any]],
    key: str,
    label: str,
    nullable: bool = True,
) -> Any:
    """A date/time field; UNSET if absent, None if null and allowed."""
    value = field(body, key)
    if value is UNSET:
        return UNSET
    if value is None:
        if nullable:
            return None
        raise _invalid(label)
    return parse_timestamp(value, label)


def timestamp_or_now(body: Optional[Mapping[str, Any]], key: str, label: str) -> datetime:
    """A date/time field that defaults to the current UTC time when omitted."""
    value = field(body, key)
    if value is UNSET or value is None or (isinstance(value, str) and not value.strip()):
        return utc_now()
    return parse_timestamp(value, label)


# =============================================================================
# UPDATE BODIES
# =============================================================================

def require_update_fields(fields: Mapping[str, Any]) -> None:
    """Reject an update in which no optional field was supplied."""
    if not has_any_field(fields):
        raise ValidationError(NO_FIELDS_MESSAGE)
