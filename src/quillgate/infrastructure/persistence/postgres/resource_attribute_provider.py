"""PostgreSQL resource attribute provider - loads blog records for data rules."""

import logging
from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


class PostgresResourceAttributeProvider:
    """Reads a record as a column/value dict from the table mapped to its resource type."""

    def __init__(self, pool: AsyncConnectionPool, tables: dict[str, str]) -> None:
        self._pool = pool
        self._tables = tables

    async def get_attributes(self, resource_type: str, resource_id: str) -> dict[str, Any] | None:
        table = self._tables.get(resource_type)
        if table is None:
            logger.warning("No table mapped for resource type %s", resource_type)
            return None
        q = sql.SQL("SELECT * FROM {} WHERE id::text = %s").format(sql.Identifier(table))
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(q, (resource_id,))
                return await cur.fetchone()
