from __future__ import annotations

import pytest

from directory.errors import ValidationError
from directory.validation import clean_user_fields, is_valid_email, validate_form


def _fields(**overrides):
    data = {"name": "Ann", "email": "ann@x.com", "city": "NYC", "country": "US"}
    data.update(overrides)
    return data


def test_clean_user_fields_trims_and_lowercases_email() -> None:
    fields = clean_user_fields(
        name="  Ann Lee ",
        email="  Ann.Lee@Example.COM ",
        city=" NYC",
        country="US ",
    )

    assert fields.name == "Ann Lee"
    assert fields.email == "ann.lee@example.com"
    assert fields.city == "NYC"
    assert fields.country == "US"


@pytest.mark.parametrize("field", ["name", "email", "city", "country"])
@pytest.mark.parametrize("value", [None, "", "   ", 42])
def test_clean_user_fields_requires_every_field(field: str, value: object) -> None:
    with pytest.raises(ValidationError) as excinfo:
        clean_user_fields(**_fields(**{field: value}))

    assert excinfo.value.message == "All fields are required"
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize("email", ["ann", "ann@x", "ann@@x.com", "a nn@x.com", "@x.com", "ann@.com"])
def test_clean_user_fields_rejects_malformed_email(email: str) -> None:
    with pytest.raises(ValidationError, match="Invalid email format"):
        clean_user_fields(**_fields(email=email))


def test_clean_user_fields_can_skip_email_format() -> None:
    fields = clean_user_fields(**_fields(email="Not-An-Email"), check_email=False)
    assert fields.email == "not-an-email"


@pytest.mark.parametrize("field", ["name", "email", "city", "country"])
def test_clean_user_fields_requires_fields_when_email_check_skipped(field: str) -> None:
    with pytest.raises(ValidationError, match="All fields are required"):
        clean_user_fields(**_fields(**{field: "  "}), check_email=False)


def test_is_valid_email_accepts_light_format() -> None:
    assert is_valid_email("first.last+tag@sub.example.org")
    assert not is_valid_email("first.last@example")


def test_validate_form_reports_per_field_messages() -> None:
    fields, errors = validate_form({"name": "A", "email": "", "city": "  ", "country": "U"})

    assert fields is None
    assert errors == {
        "name": "Name must be at least 2 characters",
        "email": "Email is required",
        "city": "City is required",
        "country": "Country must be at least 2 characters",
    }


def test_validate_form_rejects_bad_email() -> None:
    _, errors = validate_form(_fields(email="ann@x"))
    assert errors == {"email": "Please enter a valid email address"}


def test_validate_form_returns_cleaned_fields() -> None:
    fields, errors = validate_form(_fields(name=" Ann ", email=" ANN@X.COM "))

    assert errors == {}
    assert fields is not None
    assert fields.as_dict() == {"name": "Ann", "email": "ann@x.com", "city": "NYC", "country": "US"}


def test_validate_form_treats_missing_keys_as_empty() -> None:
    fields, errors = validate_form({})
    assert fields is None
    assert set(errors) == {"name", "email", "city", "country"}
