"""Role repository port."""

from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import Role


class RoleRepository(Protocol):
    """Port for role persistence."""

    async def get_by_id(self, role_id: UUID, include_deleted: bool = False) -> Role | None: ...

    async def get_by_name(self, name: str, include_deleted: bool = False) -> Role | None: ...

    async def list_by_ids(self, role_ids: list[UUID], include_deleted: bool = False) -> list[Role]: ...

    async def soft_delete(self, role_id: UUID) -> None: ...
