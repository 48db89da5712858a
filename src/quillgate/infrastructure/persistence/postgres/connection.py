"""PostgreSQL async connection pool."""

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool


async def _configure(conn: AsyncConnection) -> None:
    # Validity windows and audit timestamps are compared as UTC instants.
    await conn.execute("SET TIME ZONE 'UTC'")
    await conn.commit()


def create_pool(conninfo: str, min_size: int = 2, max_size: int = 10) -> AsyncConnectionPool:
    """Create async connection pool.

    Pool is created with open=False. Caller must call await pool.open()
    before use (e.g. via PoolLifespanMiddleware in ASGI lifespan).
    Every connection is pinned to the UTC session time zone.
    """
    return AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        configure=_configure,
        open=False,
    )
