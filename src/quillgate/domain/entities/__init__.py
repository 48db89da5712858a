"""Domain entities."""

from quillgate.domain.entities.audit_log import AuditLog
from quillgate.domain.entities.configuration import ConfigurationVersion, SystemConfiguration
from quillgate.domain.entities.data_permission_rule import DataPermissionRule
from quillgate.domain.entities.permission import Permission
from quillgate.domain.entities.role import Role
from quillgate.domain.entities.role_permission import RolePermission
from quillgate.domain.entities.temporary_permission import TemporaryPermission
from quillgate.domain.entities.user import User

__all__ = [
    "AuditLog",
    "ConfigurationVersion",
    "DataPermissionRule",
    "Permission",
    "Role",
    "RolePermission",
    "SystemConfiguration",
    "TemporaryPermission",
    "User",
]
