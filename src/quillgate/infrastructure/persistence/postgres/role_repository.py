"""PostgreSQL role repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import Role

_COLUMNS = "id, name, normalized_name, is_system, is_active, deleted_at"


def _row_to_role(r: tuple) -> Role:
    return Role(
        id=r[0],
        name=r[1],
        normalized_name=r[2],
        is_system=r[3],
        is_active=r[4],
        deleted_at=r[5],
    )


class PostgresRoleRepository:
    """Role repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, role_id: UUID, include_deleted: bool = False) -> Role | None:
        """Get role by id."""
        q = f"SELECT {_COLUMNS} FROM role WHERE id = %s"
        if not include_deleted:
            q += " AND deleted_at IS NULL"
        cur = await self._conn.execute(q, (role_id,))
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def get_by_name(self, name: str, include_deleted: bool = False) -> Role | None:
        """Get role by name (case-insensitive)."""
        q = f"SELECT {_COLUMNS} FROM role WHERE normalized_name = %s"
        if not include_deleted:
            q += " AND deleted_at IS NULL"
        cur = await self._conn.execute(q, (Role.normalize(name),))
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def list_by_ids(self, role_ids: list[UUID], include_deleted: bool = False) -> list[Role]:
        """List roles by id."""
        if not role_ids:
            return []
        q = f"SELECT {_COLUMNS} FROM role WHERE id = ANY(%s)"
        if not include_deleted:
            q += " AND deleted_at IS NULL"
        cur = await self._conn.execute(q, (list(role_ids),))
        rows = await cur.fetchall()
        return [_row_to_role(r) for r in rows]

    async def soft_delete(self, role_id: UUID) -> None:
        """Soft delete role."""
        await self._conn.execute(
            "UPDATE role SET deleted_at = NOW(), is_active = false WHERE id = %s",
            (role_id,),
        )
