"""User lookup port - read-only view of the identity subsystem."""

from typing import Protocol

from quillgate.domain.entities import User


class UserRepository(Protocol):
    """Port for user and role-membership lookup."""

    async def get_by_id(self, user_id: str) -> User | None: ...
