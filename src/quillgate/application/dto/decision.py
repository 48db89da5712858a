"""Authorization decision DTOs."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from quillgate.domain.value_objects import PermissionAction


@dataclass
class DecisionRequest:
    """Input for a permission decision.

    record lets in-process callers that already hold the resource pass its
    attributes; otherwise they are loaded by resource_id. It is never taken
    from an API request.
    """

    user_id: str
    resource_type: str
    operation: PermissionAction
    resource_id: str | None = None
    correlation_id: UUID | None = None
    session_id: str | None = None
    record: dict[str, Any] | None = None


@dataclass
class DecisionOutput:
    """Allow/deny result together with the audit entry that documents it."""

    allowed: bool
    reason: str
    correlation_id: UUID
    audit_log_id: UUID
