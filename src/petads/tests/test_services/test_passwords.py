import pytest

from petads.exceptions.base import InvalidFieldError
from petads.security.passwords import BcryptPasswordHasher


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


class TestBcryptPasswordHasher:

    def test_hash_then_verify(self, hasher):
        digest = hasher.hash("correct horse")

        assert digest != "correct horse"
        assert digest.startswith("$2b$04$")
        assert hasher.verify("correct horse", digest) is True
        assert hasher.verify("wrong horse", digest) is False

    def test_hashes_are_salted(self, hasher):
        assert hasher.hash("same") != hasher.hash("same")

    @pytest.mark.parametrize("digest", ["", "not-a-bcrypt-digest", "$2b$04$short"])
    def test_malformed_digest_does_not_verify(self, hasher, digest):
        assert hasher.verify("secret", digest) is False

    def test_secrets_past_72_bytes_are_distinguished(self, hasher):
        # Two secrets sharing their first 72 bytes must not verify against each other
        prefix = "é" * 36
        digest = hasher.hash(prefix + "a")

        assert hasher.verify(prefix + "a", digest) is True
        assert hasher.verify(prefix + "b", digest) is False

    def test_empty_password_is_rejected(self, hasher):
        with pytest.raises(InvalidFieldError):
            hasher.hash("")

    def test_from_settings_uses_configured_rounds(self, settings):
        assert BcryptPasswordHasher.from_settings(settings).rounds == settings.BCRYPT_ROUNDS
