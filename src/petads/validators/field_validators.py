"""
Input checks run by the service layer before any database call.

Every check raises `InvalidFieldError` naming the offending field; none of
them touch the database.
"""
import re

from petads.exceptions.base import InvalidFieldError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^[\d-]+$")


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_valid_phone(phone: str | None) -> bool:
    return bool(phone) and PHONE_PATTERN.match(phone) is not None


def validate_user_fields(email: str | None, phone: str | None) -> None:
    """
    Check the contact fields of a registration, email first.

    Raises:
        InvalidFieldError: malformed email (`local@domain.tld`) or a phone
            containing anything other than digits and hyphens.
    """
    if not is_valid_email(email):
        raise InvalidFieldError("Invalid email address", fields=["email"])
    if not is_valid_phone(phone):
        raise InvalidFieldError("Invalid phone number", fields=["phone"])


def validate_password(password: str | None) -> None:
    if not password:
        raise InvalidFieldError("Password is required", fields=["password"])


def validate_identity(username: str | None, user_id: int | None) -> None:
    """Both halves of the author identity must be present before an ad is created."""
    missing = []
    if not username:
        missing.append("username")
    if user_id is None:
        missing.append("user_id")
    if missing:
        raise InvalidFieldError("Must be a registered user to create an ad", fields=missing)


def validate_pet_age(pet_age: float | None) -> None:
    if pet_age is None or pet_age < 0:
        raise InvalidFieldError("Pet age must be a non-negative number", fields=["pet_age"])
