"""Permission catalog repository port."""

from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import Permission


class PermissionRepository(Protocol):
    """Port for the permission catalog."""

    async def get_by_id(self, permission_id: UUID) -> Permission | None: ...

    async def get_by_name(self, name: str) -> Permission | None: ...

    async def list_by_ids(self, permission_ids: list[UUID]) -> list[Permission]: ...
