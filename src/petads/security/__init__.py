from .passwords import BcryptPasswordHasher, PasswordHasher

__all__ = ["BcryptPasswordHasher", "PasswordHasher"]
