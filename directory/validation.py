"""Validation rules for user payloads and the directory form."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from .errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

USER_FIELDS = ("name", "email", "city", "country")

FORM_MIN_LENGTH = 2

_FIELD_LABELS = {
    "name": "Name",
    "email": "Email",
    "city": "City",
    "country": "Country",
}


@dataclass(frozen=True)
class UserFields:
    """The four business fields of a user, trimmed and normalised."""

    name: str
    email: str
    city: str
    country: str

    def as_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "city": self.city,
            "country": self.country,
        }


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def _clean(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def clean_user_fields(
    *,
    name: object,
    email: object,
    city: object,
    country: object,
    check_email: bool = True,
) -> UserFields:
    """Validate a user payload and return its normalised fields.

    Every field must be a string that is non-empty after trimming. The email
    format is only checked when ``check_email`` is true; updates skip it.
    """

    clean_name, clean_email, clean_city, clean_country = (
        _clean(value) for value in (name, email, city, country)
    )
    if clean_name is None or clean_email is None or clean_city is None or clean_country is None:
        raise ValidationError("All fields are required")

    if check_email and not is_valid_email(clean_email):
        raise ValidationError("Invalid email format")

    return UserFields(
        name=clean_name,
        email=clean_email.lower(),
        city=clean_city,
        country=clean_country,
    )


def validate_form(values: Mapping[str, object]) -> Tuple[Optional[UserFields], Dict[str, str]]:
    """Apply the form rules used by the web UI before anything is submitted.

    Returns the cleaned fields (or ``None``) together with a mapping of field
    name to error message.
    """

    errors: Dict[str, str] = {}
    texts: Dict[str, str] = {}
    for field in USER_FIELDS:
        raw = values.get(field)
        texts[field] = raw.strip() if isinstance(raw, str) else ""

    for field in ("name", "city", "country"):
        label = _FIELD_LABELS[field]
        if not texts[field]:
            errors[field] = f"{label} is required"
        elif len(texts[field]) < FORM_MIN_LENGTH:
            errors[field] = f"{label} must be at least {FORM_MIN_LENGTH} characters"

    if not texts["email"]:
        errors["email"] = "Email is required"
    elif not is_valid_email(texts["email"]):
        errors["email"] = "Please enter a valid email address"

    if errors:
        return None, errors

    return (
        UserFields(
            name=texts["name"],
            email=texts["email"].lower(),
            city=texts["city"],
            country=texts["country"],
        ),
        {},
    )


__all__ = [
    "EMAIL_PATTERN",
    "FORM_MIN_LENGTH",
    "USER_FIELDS",
    "UserFields",
    "clean_user_fields",
    "is_valid_email",
    "validate_form",
]
