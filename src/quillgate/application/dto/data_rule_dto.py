"""Data permission rule DTOs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from quillgate.domain.value_objects import PermissionAction


@dataclass
class SaveDataRuleInput:
    """Input for creating (rule_id None) or updating a data permission rule."""

    resource_type: str
    operation: PermissionAction
    conditions: str
    effective_from: datetime | None = None
    effective_to: datetime | None = None
    user_id: str | None = None
    role_id: UUID | None = None
    remarks: str | None = None
    rule_id: UUID | None = None
    expected_row_version: int | None = None
