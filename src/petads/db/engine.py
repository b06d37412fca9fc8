import logging

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from petads.config.settings import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the AsyncEngine whose pool is the single shared connection source.

    The pool is safe for concurrent acquisition/release from any number of
    tasks. Its size and acquisition timeout come from settings:
      - DB_POOL_SIZE / DB_MAX_OVERFLOW: bounded number of connections
      - DB_POOL_TIMEOUT: seconds a caller waits for a free connection
        before sqlalchemy.exc.TimeoutError (classified as recoverable)

    SQLite (used for local runs and tests) manages its own pool class, so
    pool sizing arguments are only passed for server databases.
    """
    url = make_url(settings.DATABASE_URL)

    kwargs: dict = {
        "echo": settings.SQLALCHEMY_ECHO,
        "pool_pre_ping": True,       # Enables connection health checks on checkout
    }

    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
        if settings.DB_STATEMENT_TIMEOUT_MS and url.get_backend_name() == "postgresql":
            # Per-statement timeout is a server-side setting applied to every pooled connection.
            timeout = str(settings.DB_STATEMENT_TIMEOUT_MS)
            if url.get_driver_name() == "asyncpg":
                kwargs["connect_args"] = {"server_settings": {"statement_timeout": timeout}}
            else:
                kwargs["connect_args"] = {"options": f"-c statement_timeout={timeout}"}

    engine = create_async_engine(url, **kwargs)

    logger.info(
        "db.engine.created",
        extra={
            "backend": url.get_backend_name(),
            "driver": url.get_driver_name(),
            "host": url.host,
            "database": url.database,
        },
    )
    return engine
