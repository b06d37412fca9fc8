from .config_validators import require_async_driver, to_lowercase, to_uppercase
from .field_validators import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    is_valid_email,
    is_valid_phone,
    validate_identity,
    validate_password,
    validate_pet_age,
    validate_user_fields,
)

__all__ = [
    "require_async_driver",
    "to_lowercase",
    "to_uppercase",
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "is_valid_email",
    "is_valid_phone",
    "validate_identity",
    "validate_password",
    "validate_pet_age",
    "validate_user_fields",
]
