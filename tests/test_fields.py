from datetime import date, datetime

import pytest

from signup.errors import ErrorKind, FieldConstraintError, FieldTypeError
from signup.fields import (
    FieldDescriptor,
    FieldKind,
    check_field,
    matches,
    min_length,
    validate_field,
)
from signup.results import Invalid, Valid


def _field(form, name):
    for step in form.steps:
        for f in step.fields:
            if f.name == name:
                return f
    raise KeyError(name)


def test_blank_required_field_reports_required_message(form):
    for raw in ("", "   ", None):
        result = validate_field(_field(form, "name"), raw)
        assert isinstance(result, Invalid)
        assert result.errors == {"name": "Name is required."}
        assert result.kinds == {"name": ErrorKind.CONSTRAINT}


def test_blank_optional_field_is_none(form):
    result = validate_field(_field(form, "address2"), "")
    assert result == Valid(values={"address2": None})


def test_non_string_text_is_type_error():
    f = FieldDescriptor(name="nickname", label="Nickname")
    with pytest.raises(FieldTypeError) as exc:
        check_field(f, 42)
    assert exc.value.field == "nickname"
    assert exc.value.message == "Nickname is not a valid text."


def test_email_shape(form):
    f = _field(form, "email")

    bad = validate_field(f, "not-an-email")
    assert bad.errors == {"email": "Invalid email address."}
    assert bad.kinds == {"email": ErrorKind.TYPE}

    empty = validate_field(f, "")
    assert empty.errors == {"email": "Invalid email address."}

    assert validate_field(f, "a@b.com") == Valid(values={"email": "a@b.com"})


def test_date_accepts_iso_dates_and_picker_timestamps(form):
    f = _field(form, "dob")
    assert check_field(f, "2000-01-01") == date(2000, 1, 1)
    assert check_field(f, "2000-01-01T00:00:00.000Z") == date(2000, 1, 1)
    assert check_field(f, date(1985, 3, 2)) == date(1985, 3, 2)
    assert check_field(f, datetime(1985, 3, 2, 14, 30)) == date(1985, 3, 2)


def test_unparseable_date_is_type_error(form):
    f = _field(form, "dob")
    for raw in ("2000-02-30", "yesterday"):
        with pytest.raises(FieldTypeError) as exc:
            check_field(f, raw)
        assert exc.value.message == "Invalid date of birth."


def test_digit_strings_are_not_read_as_timestamps(form):
    f = _field(form, "dob")
    for raw in ("20000101", "0", "946684800"):
        result = validate_field(f, raw)
        assert result.errors == {"dob": "Invalid date of birth."}
        assert result.kinds == {"dob": ErrorKind.TYPE}


def test_email_with_display_name_is_rejected(form):
    f = _field(form, "email")
    for raw in ("Mallory <a@b.com>", "<a@b.com>"):
        result = validate_field(f, raw)
        assert result.errors == {"email": "Invalid email address."}
        assert result.kinds == {"email": ErrorKind.TYPE}


def test_zip_rejects_non_ascii_digits(form):
    f = _field(form, "zip")
    for raw in ("１２３４５", "١٢٣"):
        assert validate_field(f, raw).errors == {"zip": "Zip code must be a number."}


def test_date_range(form):
    f = _field(form, "dob")

    with pytest.raises(FieldConstraintError) as exc:
        check_field(f, "2030-01-01")
    assert exc.value.message == "Date of birth cannot be in the future."

    with pytest.raises(FieldConstraintError) as exc:
        check_field(f, "1899-12-31")
    assert exc.value.message == "Date of birth cannot be before 1900-01-01."

    # both bounds inclusive
    assert check_field(f, "1900-01-01") == date(1900, 1, 1)
    assert check_field(f, "2026-10-17") == date(2026, 10, 17)


def test_zip_must_be_digits(form):
    f = _field(form, "zip")

    bad = validate_field(f, "12a45")
    assert bad.errors == {"zip": "Zip code must be a number."}
    assert bad.kinds == {"zip": ErrorKind.CONSTRAINT}

    assert validate_field(f, "12345") == Valid(values={"zip": "12345"})


def test_first_failing_constraint_wins():
    f = FieldDescriptor(
        name="code",
        constraints=(
            min_length(5, "Code is too short."),
            matches(r"\d+", "Code must be digits."),
        ),
    )
    assert validate_field(f, "ab").errors == {"code": "Code is too short."}
    assert validate_field(f, "abcdef").errors == {"code": "Code must be digits."}


def test_password_field_keeps_raw_text():
    f = FieldDescriptor(name="password", kind=FieldKind.PASSWORD)
    assert check_field(f, "  spaced  ") == "  spaced  "
