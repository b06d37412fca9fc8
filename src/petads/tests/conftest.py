"""
Core pytest configuration for the test suite.

Shared here: settings, logging installation, a per-test SQLite database with
the full schema, and the executor/hasher/service stack built on it.

Domain fixtures (users, ads, categories) live in:
- tests/test_fixtures/service_fixtures.py
"""

from __future__ import annotations

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before importing modules that initialize them.
import logging

NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import random
import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
from pytest import FixtureRequest
from sqlalchemy.ext.asyncio import AsyncEngine

# Ensure 'src' is on sys.path so `import petads...` works without an install
SRC = Path(__file__).resolve().parents[2]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from petads.config.settings import Settings
from petads.core.logging.builder import setup_logging, stop_queue_logging
from petads.db.engine import build_engine
from petads.db.schema import create_schema
from petads.repositories.query_executor import QueryExecutor
from petads.security.passwords import BcryptPasswordHasher
from petads.services.marketplace_service import MarketplaceService

from .test_fixtures.settings_fixtures import make_test_settings


@pytest.fixture(scope="session")
def settings() -> Settings:
    return make_test_settings()


# -------------------------------
# Logging
# -------------------------------

@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest, settings: Settings):
    """
    Install the application's dictConfig logging for the session.

    dictConfig replaces root handlers, so pytest's capture handler is re-attached
    for tests that assert on caplog.records.
    """
    setup_logging(settings)

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield

    stop_queue_logging()


# -------------------------------
# Database
# -------------------------------

@pytest.fixture()
async def engine(tmp_path: Path, settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """
    A fresh file-backed SQLite database per test with the full schema.

    A file (not :memory:) so every pooled connection sees the same data and the
    executor's real acquire/commit/rollback/release path is exercised.
    """
    db_settings = settings.model_copy(
        update={"DATABASE_URL_OVERRIDE": f"sqlite+aiosqlite:///{tmp_path / 'petads_test.db'}"}
    )
    engine = build_engine(db_settings)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture()
def sleeps() -> list[float]:
    """Backoff delays requested by the executor, in seconds."""
    return []


@pytest.fixture()
def recording_sleep(sleeps: list[float]):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture()
def executor(engine: AsyncEngine, recording_sleep) -> QueryExecutor:
    return QueryExecutor(engine, sleep=recording_sleep, rng=random.Random(1234))


@pytest.fixture(scope="session")
def password_hasher() -> BcryptPasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture()
def service(executor: QueryExecutor, password_hasher: BcryptPasswordHasher) -> MarketplaceService:
    return MarketplaceService(executor, password_hasher)


# Service test fixtures
from .test_fixtures.service_fixtures import (  # noqa: E402,F401
    categories,
    user_data,
    create_user,
    registered_user,
    create_ad,
)
