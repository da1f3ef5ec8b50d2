"""
Tests for coercion of raw request input (core.validation).
"""
from datetime import datetime, timezone

import pytest

from core.exceptions import ErrorKind, ValidationError
from core.payload import UNSET
from core.validation import (
    INVALID_ID_MESSAGE,
    NO_FIELDS_MESSAGE,
    NO_ID_MESSAGE,
    field,
    optional_enum,
    optional_id,
    optional_string,
    optional_timestamp,
    parse_enum,
    parse_id,
    query_string,
    require_enum,
    require_string,
    require_update_fields,
    timestamp_or_now,
    updated_string,
)
from models import BloodGroup, Sex


def _message(excinfo):
    return excinfo.value.message


# Required strings

def test_field_distinguishes_absent_from_null():
    assert field({"a": None}, "a") is None
    assert field({}, "a") is UNSET
    assert field(None, "a") is UNSET


@pytest.mark.parametrize("body", [{}, {"fullName": None}, {"fullName": "   "}, None])
def test_require_string_missing_or_blank(body):
    with pytest.raises(ValidationError) as excinfo:
        require_string(body, "fullName", "Full name")
    assert _message(excinfo) == "Full name is required"
    assert excinfo.value.kind is ErrorKind.VALIDATION


def test_require_string_blank_has_own_message():
    with pytest.raises(ValidationError) as excinfo:
        require_string({"diagnosis": "  "}, "diagnosis", "Diagnosis",
                       blank_message="Diagnosis cannot be empty")
    assert _message(excinfo) == "Diagnosis cannot be empty"

    with pytest.raises(ValidationError) as excinfo:
        require_string({}, "diagnosis", "Diagnosis", blank_message="Diagnosis cannot be empty")
    assert _message(excinfo) == "Diagnosis is required"


def test_require_string_trims_and_stringifies_numbers():
    assert require_string({"result": "  6.1% "}, "result", "Result") == "6.1%"
    assert require_string({"result": 42}, "result", "Result") == "42"
    assert require_string({"password": " pw "}, "password", "Password", strip=False) == " pw "


def test_require_string_rejects_structures():
    with pytest.raises(ValidationError) as excinfo:
        require_string({"result": {"value": 1}}, "result", "Result")
    assert _message(excinfo) == "Invalid result"


def test_optional_string():
    assert optional_string({}, "notes", "Notes") is UNSET
    assert optional_string({"notes": None}, "notes", "Notes") is None
    assert optional_string({"notes": ""}, "notes", "Notes") == ""


def test_updated_string():
    assert updated_string({}, "fullName", "Full name") is UNSET
    assert updated_string({"fullName": " Ann "}, "fullName", "Full name") == "Ann"
    for value in (None, "", "  "):
        with pytest.raises(ValidationError) as excinfo:
            updated_string({"fullName": value}, "fullName", "Full name")
        assert _message(excinfo) == "Full name cannot be empty"


def test_query_string():
    assert query_string(" doe ", "Search query is required") == "doe"
    for value in (None, "", "   "):
        with pytest.raises(ValidationError) as excinfo:
            query_string(value, "Search query is required")
        assert _message(excinfo) == "Search query is required"


# Identifiers

@pytest.mark.parametrize("raw, expected", [
    ("7", 7), (7, 7), (" 12 ", 12), (3.0, 3), (str(2 ** 63 - 1), 2 ** 63 - 1),
])
def test_parse_id_valid(raw, expected):
    assert parse_id(raw) == expected


@pytest.mark.parametrize("raw", [None, UNSET, "", "  "])
def test_parse_id_missing(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_id(raw)
    assert _message(excinfo) == NO_ID_MESSAGE


@pytest.mark.parametrize("raw", [
    "abc", "1.5", "-3", "0", 0, -1, 2.5, True, [1], "1e3",
    "99999999999999999999", 2 ** 63, 1e30,
    "\u0661", "1\u0662",
])
def test_parse_id_invalid(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_id(raw)
    assert _message(excinfo) == INVALID_ID_MESSAGE


def test_optional_id():
    message = "Invalid patient ID provided"
    assert optional_id({}, "patientId", message) is UNSET
    assert optional_id({"patientId": "4"}, "patientId", message) == 4
    for value in (None, "x", 0):
        with pytest.raises(ValidationError) as excinfo:
            optional_id({"patientId": value}, "patientId", message)
        assert _message(excinfo) == message


# Enums

def test_parse_enum_case_insensitive():
    assert parse_enum("male", Sex, "Sex") is Sex.MALE
    assert parse_enum(" a_plus ", BloodGroup, "Blood group") is BloodGroup.A_PLUS
    assert parse_enum(Sex.OTHER, Sex, "Sex") is Sex.OTHER


@pytest.mark.parametrize("value", ["unknown", 1, "A+"])
def test_parse_enum_invalid(value):
    with pytest.raises(ValidationError) as excinfo:
        parse_enum(value, BloodGroup, "Blood group")
    assert _message(excinfo) == "Invalid blood group"


def test_require_enum_missing():
    for body in ({}, {"sex": None}, {"sex": ""}):
        with pytest.raises(ValidationError) as excinfo:
            require_enum(body, "sex", Sex, "Sex")
        assert _message(excinfo) == "Sex is required"


def test_optional_enum_nullable():
    assert optional_enum({}, "bloodGroup", BloodGroup, "Blood group") is UNSET
    assert optional_enum({"bloodGroup": None}, "bloodGroup", BloodGroup, "Blood group") is None
    with pytest.raises(ValidationError) as excinfo:
        optional_enum({"sex": None}, "sex", Sex, "Sex", nullable=False)
    assert _message(excinfo) == "Invalid sex"


# Dates

def test_optional_timestamp():
    parsed = optional_timestamp({"dateOfBirth": "1990-05-01"}, "dateOfBirth", "Date of birth")
    assert parsed == datetime(1990, 5, 1, tzinfo=timezone.utc)
    assert optional_timestamp({}, "dateOfBirth", "Date of birth") is UNSET
    assert optional_timestamp({"dateOfBirth": None}, "dateOfBirth", "Date of birth") is None

    with pytest.raises(ValidationError) as excinfo:
        optional_timestamp({"dateOfBirth": "yesterday"}, "dateOfBirth", "Date of birth")
    assert _message(excinfo) == "Invalid date of birth"


def test_timestamp_or_now_defaults_to_current_time():
    before = datetime.now(timezone.utc)
    value = timestamp_or_now({}, "performedAt", "Performed at")
    after = datetime.now(timezone.utc)
    assert before <= value <= after

    explicit = timestamp_or_now(
        {"performedAt": "2024-01-15T10:30:00Z"}, "performedAt", "Performed at"
    )
    assert explicit == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


# Update bodies

def test_require_update_fields():
    require_update_fields({"a": UNSET, "b": None})
    with pytest.raises(ValidationError) as excinfo:
        require_update_fields({"a": UNSET, "b": UNSET})
    assert _message(excinfo) == NO_FIELDS_MESSAGE
