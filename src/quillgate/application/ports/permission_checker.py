"""Permission checker port - authorization decisions."""

from typing import Protocol
from uuid import UUID

from quillgate.application.dto.decision import DecisionOutput, DecisionRequest
from quillgate.domain.value_objects import PermissionAction


class PermissionChecker(Protocol):
    """Port for deciding whether a user may perform an operation on a resource."""

    async def decide(self, request: DecisionRequest) -> DecisionOutput: ...

    async def check(
        self,
        user_id: str,
        resource_type: str,
        operation: PermissionAction,
        resource_id: str | None = None,
    ) -> bool: ...

    async def decide_batch(
        self,
        user_id: str,
        resource_type: str,
        operation: PermissionAction,
        resource_ids: list[str],
        correlation_id: UUID | None = None,
        session_id: str | None = None,
    ) -> dict[str, DecisionOutput]: ...
