"""PostgreSQL data permission rule repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import DataPermissionRule
from quillgate.domain.exceptions import ConcurrentModification
from quillgate.domain.value_objects import PermissionAction

_COLUMNS = (
    "id, resource_type, operation, conditions, granted_by, effective_from, "
    "created_at, updated_at, user_id, role_id, effective_to, is_active, remarks, row_version"
)


def _row_to_rule(r: tuple) -> DataPermissionRule:
    return DataPermissionRule(
        id=r[0],
        resource_type=r[1],
        operation=PermissionAction(r[2]),
        conditions=r[3],
        granted_by=r[4],
        effective_from=r[5],
        created_at=r[6],
        updated_at=r[7],
        user_id=r[8],
        role_id=r[9],
        effective_to=r[10],
        is_active=r[11],
        remarks=r[12],
        row_version=r[13],
    )


class PostgresDataRuleRepository:
    """Data permission rule repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, rule_id: UUID) -> DataPermissionRule | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM data_permission_rule WHERE id = %s",
            (rule_id,),
        )
        r = await cur.fetchone()
        return _row_to_rule(r) if r else None

    async def list_active(
        self, resource_type: str, operation: PermissionAction
    ) -> list[DataPermissionRule]:
        """Active rules of a bucket. Window and owner filtering is left to the caller."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM data_permission_rule "
            "WHERE resource_type = %s AND operation = %s AND is_active",
            (resource_type, operation.value),
        )
        rows = await cur.fetchall()
        return [_row_to_rule(r) for r in rows]

    async def list(
        self, *, resource_type: str | None = None, include_inactive: bool = False
    ) -> list[DataPermissionRule]:
        conditions = []
        params: list[object] = []
        if resource_type:
            conditions.append("resource_type = %s")
            params.append(resource_type)
        if not include_inactive:
            conditions.append("is_active")
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM data_permission_rule{where} ORDER BY created_at",
            tuple(params),
        )
        rows = await cur.fetchall()
        return [_row_to_rule(r) for r in rows]

    async def create(self, rule: DataPermissionRule) -> DataPermissionRule:
        await self._conn.execute(
            f"INSERT INTO data_permission_rule ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                rule.id,
                rule.resource_type,
                rule.operation.value,
                rule.conditions,
                rule.granted_by,
                rule.effective_from,
                rule.created_at,
                rule.updated_at,
                rule.user_id,
                rule.role_id,
                rule.effective_to,
                rule.is_active,
                rule.remarks,
                rule.row_version,
            ),
        )
        return rule

    async def update(self, rule: DataPermissionRule) -> None:
        """Update rule; raises ConcurrentModification on a stale row_version."""
        cur = await self._conn.execute(
            "UPDATE data_permission_rule SET resource_type=%s, operation=%s, conditions=%s, "
            "effective_from=%s, effective_to=%s, user_id=%s, role_id=%s, is_active=%s, "
            "remarks=%s, updated_at=%s, row_version = row_version + 1 "
            "WHERE id=%s AND row_version=%s",
            (
                rule.resource_type,
                rule.operation.value,
                rule.conditions,
                rule.effective_from,
                rule.effective_to,
                rule.user_id,
                rule.role_id,
                rule.is_active,
                rule.remarks,
                rule.updated_at,
                rule.id,
                rule.row_version,
            ),
        )
        if cur.rowcount == 0:
            raise ConcurrentModification(f"DataPermissionRule {rule.id} was modified concurrently")
        rule.row_version += 1
