"""Permission entity - atomic capability on a resource type."""

from dataclasses import dataclass
from uuid import UUID

from quillgate.domain.value_objects import PermissionAction


@dataclass
class Permission:
    """Permission - named "<category>.<scope>", e.g. posts.write."""

    id: UUID
    name: str
    category: str
    scope: PermissionAction
    is_system: bool = False

    def satisfies(self, resource_type: str, operation: PermissionAction) -> bool:
        """Admin scope on a resource type implies every operation on it."""
        if self.category != resource_type:
            return False
        return self.scope == operation or self.scope == PermissionAction.ADMIN
