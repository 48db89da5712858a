"""PostgreSQL role permission repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import Permission, RolePermission
from quillgate.domain.exceptions import ConcurrentModification
from quillgate.domain.value_objects import PermissionAction

_COLUMNS = "role_id, permission_id, granted_at, granted_by, expires_at, is_active, row_version"


def _row_to_role_permission(r: tuple) -> RolePermission:
    return RolePermission(
        role_id=r[0],
        permission_id=r[1],
        granted_at=r[2],
        granted_by=r[3],
        expires_at=r[4],
        is_active=r[5],
        row_version=r[6],
    )


class PostgresRolePermissionRepository:
    """Role permission repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, role_id: UUID, permission_id: UUID) -> RolePermission | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role_permission WHERE role_id = %s AND permission_id = %s",
            (role_id, permission_id),
        )
        r = await cur.fetchone()
        return _row_to_role_permission(r) if r else None

    async def list_by_role(
        self, role_id: UUID, include_inactive: bool = False
    ) -> list[RolePermission]:
        """List permission rows of role."""
        q = f"SELECT {_COLUMNS} FROM role_permission WHERE role_id = %s"
        if not include_inactive:
            q += " AND is_active"
        cur = await self._conn.execute(q + " ORDER BY granted_at", (role_id,))
        rows = await cur.fetchall()
        return [_row_to_role_permission(r) for r in rows]

    async def list_effective_permissions(
        self, role_ids: list[UUID], as_of: datetime
    ) -> list[Permission]:
        """Distinct permissions granted by active, unexpired rows of the given roles."""
        if not role_ids:
            return []
        cur = await self._conn.execute(
            "SELECT DISTINCT p.id, p.name, p.category, p.scope, p.is_system "
            "FROM role_permission rp JOIN permission p ON p.id = rp.permission_id "
            "WHERE rp.role_id = ANY(%s) AND rp.is_active "
            "AND (rp.expires_at IS NULL OR rp.expires_at >= %s)",
            (list(role_ids), as_of),
        )
        rows = await cur.fetchall()
        return [
            Permission(id=r[0], name=r[1], category=r[2], scope=PermissionAction(r[3]), is_system=r[4])
            for r in rows
        ]

    async def create(self, role_permission: RolePermission) -> RolePermission:
        await self._conn.execute(
            f"INSERT INTO role_permission ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                role_permission.role_id,
                role_permission.permission_id,
                role_permission.granted_at,
                role_permission.granted_by,
                role_permission.expires_at,
                role_permission.is_active,
                role_permission.row_version,
            ),
        )
        return role_permission

    async def update(self, role_permission: RolePermission) -> None:
        """Update row; raises ConcurrentModification on a stale row_version."""
        cur = await self._conn.execute(
            "UPDATE role_permission SET granted_at=%s, granted_by=%s, expires_at=%s, "
            "is_active=%s, row_version = row_version + 1 "
            "WHERE role_id=%s AND permission_id=%s AND row_version=%s",
            (
                role_permission.granted_at,
                role_permission.granted_by,
                role_permission.expires_at,
                role_permission.is_active,
                role_permission.role_id,
                role_permission.permission_id,
                role_permission.row_version,
            ),
        )
        if cur.rowcount == 0:
            raise ConcurrentModification(
                f"RolePermission {role_permission.role_id}/{role_permission.permission_id} "
                "was modified concurrently"
            )
        role_permission.row_version += 1
