"""PostgreSQL configuration version repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import ConfigurationVersion
from quillgate.domain.exceptions import ConcurrentModification
from quillgate.domain.value_objects import ApprovalStatus, ChangeType

_COLUMNS = (
    "id, configuration_id, version, value, change_type, approval_status, created_by, "
    "created_at, checksum, change_reason, approved_by, approved_at, approval_notes, "
    "is_current, can_rollback, row_version"
)


def _row_to_version(r: tuple) -> ConfigurationVersion:
    return ConfigurationVersion(
        id=r[0],
        configuration_id=r[1],
        version=r[2],
        value=r[3],
        change_type=ChangeType(r[4]),
        approval_status=ApprovalStatus(r[5]),
        created_by=r[6],
        created_at=r[7],
        checksum=r[8],
        change_reason=r[9],
        approved_by=r[10],
        approved_at=r[11],
        approval_notes=r[12],
        is_current=r[13],
        can_rollback=r[14],
        row_version=r[15],
    )


class PostgresConfigurationVersionRepository:
    """Configuration version history implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, version_id: UUID) -> ConfigurationVersion | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM configuration_version WHERE id = %s",
            (version_id,),
        )
        r = await cur.fetchone()
        return _row_to_version(r) if r else None

    async def get_by_number(
        self, configuration_id: UUID, version: int
    ) -> ConfigurationVersion | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM configuration_version "
            "WHERE configuration_id = %s AND version = %s",
            (configuration_id, version),
        )
        r = await cur.fetchone()
        return _row_to_version(r) if r else None

    async def list_by_configuration(self, configuration_id: UUID) -> list[ConfigurationVersion]:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM configuration_version "
            "WHERE configuration_id = %s ORDER BY version",
            (configuration_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_version(r) for r in rows]

    async def list_pending(
        self, configuration_id: UUID | None = None
    ) -> list[ConfigurationVersion]:
        """Versions awaiting review, oldest first."""
        where = "approval_status = %s"
        params: list[object] = [ApprovalStatus.PENDING.value]
        if configuration_id:
            where += " AND configuration_id = %s"
            params.append(configuration_id)
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM configuration_version WHERE {where} "
            "ORDER BY created_at, version",
            tuple(params),
        )
        rows = await cur.fetchall()
        return [_row_to_version(r) for r in rows]

    async def next_version_number(self, configuration_id: UUID) -> int:
        """Next version number; locks the configuration row until commit."""
        await self._conn.execute(
            "SELECT id FROM system_configuration WHERE id = %s FOR UPDATE",
            (configuration_id,),
        )
        cur = await self._conn.execute(
            "SELECT COALESCE(MAX(version), 0) + 1 FROM configuration_version "
            "WHERE configuration_id = %s",
            (configuration_id,),
        )
        r = await cur.fetchone()
        return r[0]

    async def create(self, version: ConfigurationVersion) -> ConfigurationVersion:
        await self._conn.execute(
            f"INSERT INTO configuration_version ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                version.id,
                version.configuration_id,
                version.version,
                version.value,
                version.change_type.value,
                version.approval_status.value,
                version.created_by,
                version.created_at,
                version.checksum,
                version.change_reason,
                version.approved_by,
                version.approved_at,
                version.approval_notes,
                version.is_current,
                version.can_rollback,
                version.row_version,
            ),
        )
        return version

    async def update(self, version: ConfigurationVersion) -> None:
        """Persist approval bookkeeping; raises ConcurrentModification on a stale row_version."""
        cur = await self._conn.execute(
            "UPDATE configuration_version SET approval_status=%s, approved_by=%s, "
            "approved_at=%s, approval_notes=%s, is_current=%s, can_rollback=%s, "
            "row_version = row_version + 1 WHERE id=%s AND row_version=%s",
            (
                version.approval_status.value,
                version.approved_by,
                version.approved_at,
                version.approval_notes,
                version.is_current,
                version.can_rollback,
                version.id,
                version.row_version,
            ),
        )
        if cur.rowcount == 0:
            raise ConcurrentModification(
                f"ConfigurationVersion {version.id} was modified concurrently"
            )
        version.row_version += 1

    async def clear_current(self, configuration_id: UUID) -> None:
        """Unset is_current on every version. Leaves row_version alone."""
        await self._conn.execute(
            "UPDATE configuration_version SET is_current = false "
            "WHERE configuration_id = %s AND is_current",
            (configuration_id,),
        )
