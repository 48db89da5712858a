"""Repository ports."""

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

__all__ = [
    "AuditLogRepository",
    "ConfigurationRepository",
    "ConfigurationVersionRepository",
    "DataPermissionRuleRepository",
    "PermissionRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "TemporaryPermissionRepository",
    "UserRepository",
]
