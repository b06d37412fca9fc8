"""Settings builder shared by conftest.py and the settings tests."""

from petads.config.settings import Settings


def make_test_settings(**overrides) -> Settings:
    """
    Settings for tests, isolated from the developer's environment/.env file.
    The database URL is overridden per test by the `engine` fixture.
    """
    values = {
        "ENV": "testing",
        "TESTING": True,
        "POSTGRES_DRIVER": "psycopg",
        "POSTGRES_USERNAME": "petads",
        "POSTGRES_PASSWORD": "petads",
        "POSTGRES_HOST": "localhost",
        "POSTGRES_PORT": 5432,
        "POSTGRES_DB": "petads",
        "DATABASE_URL_OVERRIDE": "sqlite+aiosqlite:///:memory:",
        "LOG_LEVEL": "INFO",
        "LOG_FORMAT": "text",
        "LOG_TO_STDOUT": True,
        "BCRYPT_ROUNDS": 4,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
