"""Data permission rule repository port."""

from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import DataPermissionRule
from quillgate.domain.value_objects import PermissionAction


class DataPermissionRuleRepository(Protocol):
    """Port for data permission rules."""

    async def get_by_id(self, rule_id: UUID) -> DataPermissionRule | None: ...

    async def list_active(
        self, resource_type: str, operation: PermissionAction
    ) -> list[DataPermissionRule]: ...

    async def list(
        self, *, resource_type: str | None = None, include_inactive: bool = False
    ) -> list[DataPermissionRule]: ...

    async def create(self, rule: DataPermissionRule) -> DataPermissionRule: ...

    async def update(self, rule: DataPermissionRule) -> None: ...
