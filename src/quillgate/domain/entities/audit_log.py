"""AuditLog entity - append-only record of a decision or governance change."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from quillgate.domain.value_objects import AuditResult, RiskLevel


@dataclass
class AuditLog:
    """Audit entry. Actor name/email are copied at write time."""

    action: str
    resource_type: str
    category: str
    result: AuditResult = AuditResult.SUCCESS
    risk_level: RiskLevel = RiskLevel.LOW
    id: UUID | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    resource_id: str | None = None
    resource_name: str | None = None
    old_values: str | None = None
    new_values: str | None = None
    description: str | None = None
    error_message: str | None = None
    correlation_id: UUID | None = None
    session_id: str | None = None
    created_at: datetime | None = None
    is_archived: bool = False
    archived_at: datetime | None = None
