"""PostgreSQL permission repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import Permission
from quillgate.domain.value_objects import PermissionAction

_COLUMNS = "id, name, category, scope, is_system"


def _row_to_permission(r: tuple) -> Permission:
    return Permission(
        id=r[0],
        name=r[1],
        category=r[2],
        scope=PermissionAction(r[3]),
        is_system=r[4],
    )


class PostgresPermissionRepository:
    """Permission catalog implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        """Get permission by id."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = %s",
            (permission_id,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def get_by_name(self, name: str) -> Permission | None:
        """Get permission by name, e.g. posts.write."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE name = %s",
            (name,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def list_by_ids(self, permission_ids: list[UUID]) -> list[Permission]:
        if not permission_ids:
            return []
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = ANY(%s)",
            (list(permission_ids),),
        )
        rows = await cur.fetchall()
        return [_row_to_permission(r) for r in rows]
