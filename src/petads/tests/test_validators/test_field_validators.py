import pytest

from petads.exceptions.base import InvalidFieldError
from petads.validators.field_validators import (
    is_valid_email,
    is_valid_phone,
    validate_identity,
    validate_password,
    validate_pet_age,
    validate_user_fields,
)


@pytest.mark.parametrize("email", ["a@b.co", "first.last@example.com", "x+tag@sub.domain.org"])
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["", None, "no-at-sign", "no@tld", "@example.com", "a b@example.com", "a@b@c.com"])
def test_invalid_emails(email):
    assert not is_valid_email(email)


@pytest.mark.parametrize("phone", ["5550100", "555-0100", "1-800-555-0199"])
def test_valid_phones(phone):
    assert is_valid_phone(phone)


@pytest.mark.parametrize("phone", ["", None, "555 0100", "555-CALL", "+1555", "(555)0100"])
def test_invalid_phones(phone):
    assert not is_valid_phone(phone)


def test_validate_user_fields_reports_the_offending_field():
    with pytest.raises(InvalidFieldError) as exc_info:
        validate_user_fields("ok@example.com", "abc")

    assert exc_info.value.fields == ["phone"]
    assert exc_info.value.http_status() == 422


def test_validate_password_requires_a_value():
    validate_password("p" * 200)

    with pytest.raises(InvalidFieldError):
        validate_password("")
    with pytest.raises(InvalidFieldError):
        validate_password(None)


def test_validate_identity_lists_missing_parts():
    validate_identity("bob", 0)

    with pytest.raises(InvalidFieldError) as exc_info:
        validate_identity("", None)

    assert exc_info.value.fields == ["username", "user_id"]


@pytest.mark.parametrize("age", [0, 0.5, 12])
def test_non_negative_pet_age(age):
    validate_pet_age(age)


@pytest.mark.parametrize("age", [-0.1, None])
def test_invalid_pet_age(age):
    with pytest.raises(InvalidFieldError):
        validate_pet_age(age)
