ASYNC_DRIVERS = ("asyncpg", "psycopg", "psycopg_async", "aiosqlite", "aiomysql", "asyncmy")


def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()

def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()

def require_async_driver(url: str | None) -> str | None:
    """
    Reject database URLs that do not name an async DBAPI driver
    (e.g. "postgresql://..." instead of "postgresql+psycopg://...").
    """
    if url is None:
        return None
    scheme = url.split("://", 1)[0]
    _, _, driver = scheme.partition("+")
    if driver not in ASYNC_DRIVERS:
        raise ValueError(
            f"database URL must use an async driver ({', '.join(ASYNC_DRIVERS)}), got '{scheme}'"
        )
    return url
