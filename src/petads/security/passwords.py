"""
Password hashing capability used by the marketplace service.

The service depends only on the `PasswordHasher` protocol; `BcryptPasswordHasher`
is the production implementation.
"""
import base64
import hashlib
import logging
from typing import Protocol

import bcrypt

from petads.config.settings import Settings
from petads.validators.field_validators import validate_password

logger = logging.getLogger(__name__)


class PasswordHasher(Protocol):
    def hash(self, secret: str) -> str: ...

    def verify(self, secret: str, digest: str) -> bool: ...


def _prehash(secret: str) -> bytes:
    # bcrypt reads at most 72 bytes; a base64 SHA-256 digest is 44
    return base64.b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


class BcryptPasswordHasher:
    """
    bcrypt-backed hasher. Digests are stored as UTF-8 text (`$2b$<rounds>$...`).

    Secrets of any length are accepted: each one is reduced to a fixed-size
    SHA-256 digest before it reaches bcrypt, on both hash and verify.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    @classmethod
    def from_settings(cls, settings: Settings) -> "BcryptPasswordHasher":
        return cls(rounds=settings.BCRYPT_ROUNDS)

    def hash(self, secret: str) -> str:
        """
        Raises:
            InvalidFieldError: empty secret.
        """
        validate_password(secret)
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_prehash(secret), salt).decode("utf-8")

    def verify(self, secret: str, digest: str) -> bool:
        if not secret or not digest:
            return False
        try:
            return bcrypt.checkpw(_prehash(secret), digest.encode("utf-8"))
        except ValueError:
            # Malformed digest
            logger.warning("passwords.verify.invalid_input")
            return False
