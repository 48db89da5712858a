"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from quillgate.application.ports.repositories.audit_log_repository import AuditLogRepository
from quillgate.application.ports.repositories.configuration_repository import (
    ConfigurationRepository,
    ConfigurationVersionRepository,
)
from quillgate.application.ports.repositories.data_permission_rule_repository import (
    DataPermissionRuleRepository,
)
from quillgate.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from quillgate.application.ports.repositories.role_permission_repository import (
    RolePermissionRepository,
)
from quillgate.application.ports.repositories.role_repository import RoleRepository
from quillgate.application.ports.repositories.temporary_permission_repository import (
    TemporaryPermissionRepository,
)
from quillgate.application.ports.repositories.user_repository import UserRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def users(self) -> UserRepository: ...

    @property
    def roles(self) -> RoleRepository: ...

    @property
    def permissions(self) -> PermissionRepository: ...

    @property
    def role_permissions(self) -> RolePermissionRepository: ...

    @property
    def temporary_permissions(self) -> TemporaryPermissionRepository: ...

    @property
    def data_rules(self) -> DataPermissionRuleRepository: ...

    @property
    def audit_logs(self) -> AuditLogRepository: ...

    @property
    def configurations(self) -> ConfigurationRepository: ...

    @property
    def configuration_versions(self) -> ConfigurationVersionRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
