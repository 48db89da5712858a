"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from quillgate.infrastructure.persistence.postgres.audit_log_repository import (
    PostgresAuditLogRepository,
)
from quillgate.infrastructure.persistence.postgres.configuration_repository import (
    PostgresConfigurationRepository,
)
from quillgate.infrastructure.persistence.postgres.configuration_version_repository import (
    PostgresConfigurationVersionRepository,
)
from quillgate.infrastructure.persistence.postgres.data_rule_repository import (
    PostgresDataRuleRepository,
)
from quillgate.infrastructure.persistence.postgres.permission_repository import (
    PostgresPermissionRepository,
)
from quillgate.infrastructure.persistence.postgres.role_permission_repository import (
    PostgresRolePermissionRepository,
)
from quillgate.infrastructure.persistence.postgres.role_repository import (
    PostgresRoleRepository,
)
from quillgate.infrastructure.persistence.postgres.temporary_permission_repository import (
    PostgresTemporaryPermissionRepository,
)
from quillgate.infrastructure.persistence.postgres.user_repository import (
    PostgresUserRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._users = PostgresUserRepository(self._conn)
        self._roles = PostgresRoleRepository(self._conn)
        self._permissions = PostgresPermissionRepository(self._conn)
        self._role_permissions = PostgresRolePermissionRepository(self._conn)
        self._temporary_permissions = PostgresTemporaryPermissionRepository(self._conn)
        self._data_rules = PostgresDataRuleRepository(self._conn)
        self._audit_logs = PostgresAuditLogRepository(self._conn)
        self._configurations = PostgresConfigurationRepository(self._conn)
        self._configuration_versions = PostgresConfigurationVersionRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def users(self) -> PostgresUserRepository:
        return self._users

    @property
    def roles(self) -> PostgresRoleRepository:
        return self._roles

    @property
    def permissions(self) -> PostgresPermissionRepository:
        return self._permissions

    @property
    def role_permissions(self) -> PostgresRolePermissionRepository:
        return self._role_permissions

    @property
    def temporary_permissions(self) -> PostgresTemporaryPermissionRepository:
        return self._temporary_permissions

    @property
    def data_rules(self) -> PostgresDataRuleRepository:
        return self._data_rules

    @property
    def audit_logs(self) -> PostgresAuditLogRepository:
        return self._audit_logs

    @property
    def configurations(self) -> PostgresConfigurationRepository:
        return self._configurations

    @property
    def configuration_versions(self) -> PostgresConfigurationVersionRepository:
        return self._configuration_versions

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> object:
    """Create UnitOfWork factory (async context manager)."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        uow = PostgresUnitOfWork(pool)
        async with uow:
            try:
                yield uow
                await uow.commit()
            except BaseException:
                await uow.rollback()
                raise

    return factory
