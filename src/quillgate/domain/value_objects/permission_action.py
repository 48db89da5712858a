"""Permission actions (operations) for RBAC and data rules."""

from enum import StrEnum

from quillgate.domain.value_objects.risk_level import RiskLevel


class PermissionAction(StrEnum):
    """Operations that can be performed on a resource type."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ADMIN = "admin"

    @property
    def risk_level(self) -> RiskLevel:
        """Audit risk derived from operation severity."""
        if self is PermissionAction.READ:
            return RiskLevel.LOW
        if self is PermissionAction.WRITE:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH
