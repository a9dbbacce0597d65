"""PostgreSQL async connection pool."""

from psycopg_pool import AsyncConnectionPool


def create_pool(
    conninfo: str,
    min_size: int = 2,
    max_size: int = 10,
    timeout: float = 5.0,
) -> AsyncConnectionPool:
    """Create async connection pool.

    Pool is created with open=False. Caller must call await pool.open()
    before use (e.g. via PoolLifespanMiddleware in ASGI lifespan).
    Waiting longer than timeout for a connection raises PoolTimeout,
    which the access store reports as StoreUnavailable.
    """
    return AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout,
        open=False,
    )


async def ping(pool: AsyncConnectionPool) -> None:
    """Round-trip a trivial query; raises on failure."""
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")
