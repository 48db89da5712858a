"""Audit log repository port - append-only."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from quillgate.domain.entities import AuditLog
from quillgate.domain.value_objects import AuditResult, RiskLevel


class AuditLogRepository(Protocol):
    """Port for audit persistence. Entries are never updated except for archival."""

    async def append(self, entry: AuditLog) -> AuditLog: ...

    async def get_by_id(self, audit_log_id: UUID) -> AuditLog | None: ...

    async def list(
        self,
        *,
        user_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        correlation_id: UUID | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditLog], str | None]: ...

    async def archive_before(self, before: datetime, archived_at: datetime) -> int: ...

    async def summarize(
        self, start: datetime, end: datetime
    ) -> list[tuple[str, AuditResult, RiskLevel, int]]: ...
