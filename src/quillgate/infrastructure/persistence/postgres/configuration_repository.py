"""PostgreSQL system configuration repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import SystemConfiguration
from quillgate.domain.exceptions import ConcurrentModification
from quillgate.domain.value_objects import Criticality

_COLUMNS = (
    "id, section, key, value, created_at, updated_at, data_type, description, "
    "criticality, requires_approval, is_read_only, current_version, row_version"
)


def _row_to_configuration(r: tuple) -> SystemConfiguration:
    return SystemConfiguration(
        id=r[0],
        section=r[1],
        key=r[2],
        value=r[3],
        created_at=r[4],
        updated_at=r[5],
        data_type=r[6],
        description=r[7],
        criticality=Criticality(r[8]),
        requires_approval=r[9],
        is_read_only=r[10],
        current_version=r[11],
        row_version=r[12],
    )


class PostgresConfigurationRepository:
    """System configuration repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, configuration_id: UUID) -> SystemConfiguration | None:
        """Get configuration by id."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM system_configuration WHERE id = %s",
            (configuration_id,),
        )
        r = await cur.fetchone()
        return _row_to_configuration(r) if r else None

    async def get_by_key(self, section: str, key: str) -> SystemConfiguration | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM system_configuration WHERE section = %s AND key = %s",
            (section, key),
        )
        r = await cur.fetchone()
        return _row_to_configuration(r) if r else None

    async def create(self, configuration: SystemConfiguration) -> SystemConfiguration:
        """Create configuration."""
        await self._conn.execute(
            f"INSERT INTO system_configuration ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                configuration.id,
                configuration.section,
                configuration.key,
                configuration.value,
                configuration.created_at,
                configuration.updated_at,
                configuration.data_type,
                configuration.description,
                configuration.criticality.value,
                configuration.requires_approval,
                configuration.is_read_only,
                configuration.current_version,
                configuration.row_version,
            ),
        )
        return configuration

    async def update(self, configuration: SystemConfiguration) -> None:
        """Update value pointer; raises ConcurrentModification on a stale row_version."""
        cur = await self._conn.execute(
            "UPDATE system_configuration SET value=%s, current_version=%s, updated_at=%s, "
            "row_version = row_version + 1 WHERE id=%s AND row_version=%s",
            (
                configuration.value,
                configuration.current_version,
                configuration.updated_at,
                configuration.id,
                configuration.row_version,
            ),
        )
        if cur.rowcount == 0:
            raise ConcurrentModification(
                f"SystemConfiguration {configuration.id} was modified concurrently"
            )
        configuration.row_version += 1
