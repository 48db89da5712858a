"""PostgreSQL audit log repository implementation - append-only."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from quillgate.domain.entities import AuditLog
from quillgate.domain.value_objects import AuditResult, RiskLevel

_COLUMNS = (
    "id, user_id, user_name, user_email, action, resource_type, resource_id, "
    "resource_name, result, risk_level, category, old_values, new_values, description, "
    "error_message, correlation_id, session_id, created_at, is_archived, archived_at"
)


def _row_to_audit_log(r: tuple) -> AuditLog:
    return AuditLog(
        id=r[0],
        user_id=r[1],
        user_name=r[2],
        user_email=r[3],
        action=r[4],
        resource_type=r[5],
        resource_id=r[6],
        resource_name=r[7],
        result=AuditResult(r[8]),
        risk_level=RiskLevel(r[9]),
        category=r[10],
        old_values=r[11],
        new_values=r[12],
        description=r[13],
        error_message=r[14],
        correlation_id=r[15],
        session_id=r[16],
        created_at=r[17],
        is_archived=r[18],
        archived_at=r[19],
    )


def _encode_cursor(entry: AuditLog) -> str:
    return f"{entry.created_at.isoformat()},{entry.id}"


def _decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    created_at, _, entry_id = cursor.partition(",")
    return datetime.fromisoformat(created_at), UUID(entry_id)


class PostgresAuditLogRepository:
    """Audit log repository. There is no update or delete besides archival."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def append(self, entry: AuditLog) -> AuditLog:
        """Insert audit entry."""
        await self._conn.execute(
            f"INSERT INTO audit_log ({_COLUMNS}) VALUES "
            "(%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                entry.id,
                entry.user_id,
                entry.user_name,
                entry.user_email,
                entry.action,
                entry.resource_type,
                entry.resource_id,
                entry.resource_name,
                entry.result.value,
                entry.risk_level.value,
                entry.category,
                entry.old_values,
                entry.new_values,
                entry.description,
                entry.error_message,
                entry.correlation_id,
                entry.session_id,
                entry.created_at,
                entry.is_archived,
                entry.archived_at,
            ),
        )
        return entry

    async def get_by_id(self, audit_log_id: UUID) -> AuditLog | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM audit_log WHERE id = %s",
            (audit_log_id,),
        )
        r = await cur.fetchone()
        return _row_to_audit_log(r) if r else None

    async def list(
        self,
        *,
        user_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        correlation_id: UUID | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditLog], str | None]:
        """List entries newest first with cursor pagination."""
        conditions = []
        _params: list[object] = []
        if user_id:
            conditions.append("user_id = %s")
            _params.append(user_id)
        if resource_type:
            conditions.append("resource_type = %s")
            _params.append(resource_type)
        if resource_id:
            conditions.append("resource_id = %s")
            _params.append(resource_id)
        if correlation_id:
            conditions.append("correlation_id = %s")
            _params.append(correlation_id)
        if cursor:
            conditions.append("(created_at, id) < (%s, %s)")
            _params.extend(_decode_cursor(cursor))
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        params = tuple(_params) + (limit + 1,)
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM audit_log{where} ORDER BY created_at DESC, id DESC LIMIT %s",
            params,
        )
        rows = await cur.fetchall()
        items = [_row_to_audit_log(r) for r in rows[:limit]]
        next_cursor = _encode_cursor(items[-1]) if len(rows) > limit else None
        return items, next_cursor

    async def archive_before(self, before: datetime, archived_at: datetime) -> int:
        """Flag entries created before cutoff as archived. Returns number flagged."""
        cur = await self._conn.execute(
            "UPDATE audit_log SET is_archived = true, archived_at = %s "
            "WHERE created_at < %s AND NOT is_archived",
            (archived_at, before),
        )
        return cur.rowcount

    async def summarize(
        self, start: datetime, end: datetime
    ) -> list[tuple[str, AuditResult, RiskLevel, int]]:
        """Entry counts of [start, end) grouped by category, result and risk level."""
        cur = await self._conn.execute(
            "SELECT category, result, risk_level, COUNT(*) FROM audit_log "
            "WHERE created_at >= %s AND created_at < %s "
            "GROUP BY category, result, risk_level ORDER BY category",
            (start, end),
        )
        rows = await cur.fetchall()
        return [(r[0], AuditResult(r[1]), RiskLevel(r[2]), r[3]) for r in rows]
