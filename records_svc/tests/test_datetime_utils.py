"""
Tests for UTC datetime utilities.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from core.datetime_utils import format_iso, from_db_string, parse_datetime, to_utc, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is timezone.utc


def test_to_utc_naive_is_assumed_utc():
    assert to_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def test_to_utc_converts_offsets():
    ist = timezone(timedelta(hours=5, minutes=30))
    assert to_utc(datetime(2024, 1, 15, 16, 0, tzinfo=ist)) == datetime(
        2024, 1, 15, 10, 30, tzinfo=timezone.utc
    )


@pytest.mark.parametrize("value, expected", [
    ("2024-01-15T10:30:00Z", datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)),
    ("2024-01-15T16:00:00+05:30", datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)),
    ("2024-01-15 10:30", datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)),
    ("15/01/2024", datetime(2024, 1, 15, tzinfo=timezone.utc)),
    ("15-01-2024 10:30", datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)),
    (date(2024, 1, 15), datetime(2024, 1, 15, tzinfo=timezone.utc)),
])
def test_parse_datetime_formats(value, expected):
    assert parse_datetime(value) == expected


@pytest.mark.parametrize("value", ["", "not a date", 12345, None])
def test_parse_datetime_rejects(value):
    with pytest.raises(ValueError):
        parse_datetime(value)


def test_format_iso():
    assert format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)) == "2024-01-15T10:30:00Z"


def test_from_db_string():
    assert from_db_string(None) is None
    assert from_db_string("garbage") is None
    assert from_db_string("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
