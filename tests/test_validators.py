import math

import pytest
from hypothesis import given, strategies as st

from backend.services.validators import (
    VisitRecord,
    normalize_identifier,
    record_from_mapping,
    validate_record,
)

noise = st.text(alphabet=" -./:xX", max_size=3)


def test_normalize_strips_non_digits():
    assert normalize_identifier("1234 5678-9012") == "123456789012"
    assert normalize_identifier(None) == ""
    assert normalize_identifier(123456789012) == "123456789012"


@given(
    digits=st.text(alphabet="0123456789", min_size=12, max_size=12),
    gaps=st.lists(noise, min_size=13, max_size=13),
)
def test_interleaved_identifier_normalizes_and_validates(digits, gaps):
    raw = "".join(gap + digit for gap, digit in zip(gaps, digits)) + gaps[-1]
    record = record_from_mapping({"AADHAR_NO": raw, "NAME": "Asha", "DEPARTMENT_VISITED": "ENT"})

    assert record.identifier == digits
    assert validate_record(record).valid


def test_record_from_upload_columns():
    record = record_from_mapping(
        {
            "AADHAR_NO": "012345678901",
            "NAME": "  Ravi Kumar ",
            "AGE": "45",
            "GENDER": "Male",
            "ADDRESS": "",
            "PHONE": "9876543210",
            "DEPARTMENT_VISITED": "Cardiology",
        }
    )
    assert record == VisitRecord(
        identifier="012345678901",
        name="Ravi Kumar",
        department="Cardiology",
        age=45,
        gender="Male",
        address=None,
        phone="9876543210",
    )


def test_record_from_json_names():
    record = record_from_mapping({"aadhar": "1234-5678-9012", "name": "Asha", "department": "ENT", "age": 31.0})
    assert record.identifier == "123456789012"
    assert record.age == 31
    assert record.department == "ENT"


def test_unparseable_age_is_dropped():
    assert record_from_mapping({"age": "thirty"}).age is None
    assert record_from_mapping({"age": math.nan}).age is None
    assert record_from_mapping({"age": ""}).age is None



@pytest.mark.parametrize("raw", ["99999999999999999999", "-4", 151, 1e30])
def test_out_of_range_age_is_dropped(raw):
    assert record_from_mapping({"age": raw}).age is None


def test_missing_name_reported():
    result = validate_record(VisitRecord(identifier="123456789012", name=None, department="ENT"))
    assert not result.valid
    assert len(result.errors) == 1
    assert "name" in result.errors[0].lower()


def test_identifier_length_enforced():
    for identifier in ("", "12345678901", "1234567890123"):
        result = validate_record(VisitRecord(identifier=identifier, name="A", department="ENT"))
        assert not result.valid
        assert "12 digits" in result.errors[0]


def test_department_required_and_comma_free():
    missing = validate_record(VisitRecord(identifier="123456789012", name="A", department=None))
    assert missing.errors == ["Department (DEPARTMENT_VISITED) is required"]

    comma = validate_record(VisitRecord(identifier="123456789012", name="A", department="ENT, Eye"))
    assert not comma.valid
