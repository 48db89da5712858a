"""Temporary permission DTOs."""

from dataclasses import dataclass
from datetime import datetime

from quillgate.domain.value_objects import PermissionAction


@dataclass
class GrantTemporaryPermissionInput:
    """Input for granting a temporary permission."""

    grantee_id: str
    resource_type: str
    operation: PermissionAction
    valid_from: datetime
    valid_to: datetime
    reason: str
    resource_id: str | None = None
    allow_delegation: bool = True
