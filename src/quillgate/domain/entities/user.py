"""User entity - read-only view of the identity subsystem."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass
class User:
    """Subject of permission checks."""

    id: str
    user_name: str | None = None
    email: str | None = None
    is_active: bool = True
    is_locked: bool = False
    role_ids: list[UUID] = field(default_factory=list)

    @property
    def can_act(self) -> bool:
        return self.is_active and not self.is_locked
