from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, require_async_driver

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    POSTGRES_DRIVER: str
    POSTGRES_USERNAME: str
    POSTGRES_PASSWORD: str
    POSTGRES_HOST: str
    POSTGRES_PORT: int
    POSTGRES_DB: str

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # Full URL override (e.g. "sqlite+aiosqlite:///./petads.db" for local runs)
    DATABASE_URL_OVERRIDE: str | None = None

    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: float = 30.0       # seconds to wait for a pooled connection
    DB_STATEMENT_TIMEOUT_MS: int | None = None

    # Retry policy for recoverable database failures
    DB_MAX_RETRIES: int = 3
    DB_RETRY_BASE_DELAY_MS: int = 1000
    DB_RETRY_MAX_DELAY_MS: int = 30_000

    # Password hashing cost factor
    BCRYPT_ROUNDS: int = 12

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/petads")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    LOG_USE_QUEUE: bool = False
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the current environment.

        - `DATABASE_URL_OVERRIDE` wins when set.
        - When `TESTING=True` and `TEST_POSTGRES_DB` is provided, the test database
          name replaces `POSTGRES_DB` so tests never touch the regular database.
        - Otherwise the regular Postgres URL is built from its parts.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs,
        so `LOG_LEVEL=debug` in the environment is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return to_lowercase(v)

    @field_validator("DATABASE_URL_OVERRIDE")
    def check_override_driver(cls, v: str | None) -> str | None:
        # The executor runs on AsyncEngine, so the URL must name an async DBAPI.
        return require_async_driver(v)

    @field_validator("DB_MAX_RETRIES", "DB_POOL_SIZE", "BCRYPT_ROUNDS")
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    # --- ConfigDict settings ---
    model_config = ConfigDict(
        # Load environment variables from the .env file located next to the package root.
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8"
    )

# get_settings() takes no arguments and always returns the same settings from the environment,
# so caching it with @lru_cache() avoids re-reading the environment on every call.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
