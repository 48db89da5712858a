"""Temporary permission repository port."""

from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import TemporaryPermission


class TemporaryPermissionRepository(Protocol):
    """Port for temporary grants."""

    async def get_by_id(self, grant_id: UUID) -> TemporaryPermission | None: ...

    async def list_by_user(self, user_id: str) -> list[TemporaryPermission]: ...

    async def list_for_resource_type(
        self, user_id: str, resource_type: str
    ) -> list[TemporaryPermission]: ...

    async def list_delegated_from(self, grant_id: UUID) -> list[TemporaryPermission]: ...

    async def create(self, grant: TemporaryPermission) -> TemporaryPermission: ...

    async def update(self, grant: TemporaryPermission) -> None: ...
