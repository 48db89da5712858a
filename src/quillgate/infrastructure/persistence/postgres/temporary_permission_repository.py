"""PostgreSQL temporary permission repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import TemporaryPermission
from quillgate.domain.exceptions import ConcurrentModification
from quillgate.domain.value_objects import PermissionAction

_COLUMNS = (
    "id, user_id, resource_type, resource_id, operation, granted_by, reason, "
    "effective_from, expires_at, delegated_from, allow_delegation, is_revoked, "
    "revoked_by, revoke_reason, revoked_at, created_at, row_version"
)


def _row_to_grant(r: tuple) -> TemporaryPermission:
    return TemporaryPermission(
        id=r[0],
        user_id=r[1],
        resource_type=r[2],
        resource_id=r[3],
        operation=PermissionAction(r[4]),
        granted_by=r[5],
        reason=r[6],
        effective_from=r[7],
        expires_at=r[8],
        delegated_from=r[9],
        allow_delegation=r[10],
        is_revoked=r[11],
        revoked_by=r[12],
        revoke_reason=r[13],
        revoked_at=r[14],
        created_at=r[15],
        row_version=r[16],
    )


class PostgresTemporaryPermissionRepository:
    """Temporary permission repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, grant_id: UUID) -> TemporaryPermission | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM temporary_permission WHERE id = %s",
            (grant_id,),
        )
        r = await cur.fetchone()
        return _row_to_grant(r) if r else None

    async def list_by_user(self, user_id: str) -> list[TemporaryPermission]:
        """List grants of user, newest first."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM temporary_permission WHERE user_id = %s "
            "ORDER BY created_at DESC",
            (user_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_grant(r) for r in rows]

    async def list_for_resource_type(
        self, user_id: str, resource_type: str
    ) -> list[TemporaryPermission]:
        """All grants of user on resource type, whatever their state."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM temporary_permission "
            "WHERE user_id = %s AND resource_type = %s",
            (user_id, resource_type),
        )
        rows = await cur.fetchall()
        return [_row_to_grant(r) for r in rows]

    async def list_delegated_from(self, grant_id: UUID) -> list[TemporaryPermission]:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM temporary_permission WHERE delegated_from = %s",
            (grant_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_grant(r) for r in rows]

    async def create(self, grant: TemporaryPermission) -> TemporaryPermission:
        await self._conn.execute(
            f"INSERT INTO temporary_permission ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                grant.id,
                grant.user_id,
                grant.resource_type,
                grant.resource_id,
                grant.operation.value,
                grant.granted_by,
                grant.reason,
                grant.effective_from,
                grant.expires_at,
                grant.delegated_from,
                grant.allow_delegation,
                grant.is_revoked,
                grant.revoked_by,
                grant.revoke_reason,
                grant.revoked_at,
                grant.created_at,
                grant.row_version,
            ),
        )
        return grant

    async def update(self, grant: TemporaryPermission) -> None:
        """Persist revocation fields; raises ConcurrentModification on a stale row_version."""
        cur = await self._conn.execute(
            "UPDATE temporary_permission SET is_revoked=%s, revoked_by=%s, revoke_reason=%s, "
            "revoked_at=%s, row_version = row_version + 1 WHERE id=%s AND row_version=%s",
            (
                grant.is_revoked,
                grant.revoked_by,
                grant.revoke_reason,
                grant.revoked_at,
                grant.id,
                grant.row_version,
            ),
        )
        if cur.rowcount == 0:
            raise ConcurrentModification(f"TemporaryPermission {grant.id} was modified concurrently")
        grant.row_version += 1
