"""
Schema bootstrap: table creation and reference-data seeding.
"""
import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncEngine

from petads.db.base import Base
from petads.repositories import statements as sql
from petads.repositories.query_executor import QueryExecutor

logger = logging.getLogger(__name__)


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table declared on `Base.metadata` that does not exist yet."""
    # Registers the model tables on Base.metadata
    import petads.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("db.schema.created", extra={"tables": sorted(Base.metadata.tables)})


async def seed_categories(executor: QueryExecutor, names: Iterable[str]) -> int:
    """
    Insert the given category names, each in its own transaction.

    Names that already exist are skipped. Returns the number inserted.
    """
    inserted = 0
    for name in names:
        existing = await executor.query(sql.SQL_GET_CATEGORY_ID, {"category": name})
        if existing:
            continue
        inserted += await executor.update(sql.SQL_CREATE_CATEGORY, {"category": name})

    logger.info("db.categories.seeded", extra={"inserted": inserted})
    return inserted
