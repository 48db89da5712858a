"""Audit log API resources."""

import falcon.asgi

from quillgate.application.use_cases.audit.archive_audit_logs import ArchiveAuditLogsUseCase
from quillgate.application.use_cases.audit.audit_report import AuditReportUseCase
from quillgate.application.use_cases.audit.list_audit_logs import ListAuditLogsUseCase
from quillgate.domain.entities import AuditLog
from quillgate.interfaces.api.resources.params import isoformat, parse_datetime, parse_uuid


def audit_log_to_dict(entry: AuditLog) -> dict:
    return {
        "id": str(entry.id),
        "user_id": entry.user_id,
        "user_name": entry.user_name,
        "user_email": entry.user_email,
        "action": entry.action,
        "category": entry.category,
        "resource_type": entry.resource_type,
        "resource_id": entry.resource_id,
        "resource_name": entry.resource_name,
        "result": entry.result.value,
        "risk_level": entry.risk_level.value,
        "old_values": entry.old_values,
        "new_values": entry.new_values,
        "description": entry.description,
        "error_message": entry.error_message,
        "correlation_id": str(entry.correlation_id) if entry.correlation_id else None,
        "session_id": entry.session_id,
        "created_at": isoformat(entry.created_at),
        "is_archived": entry.is_archived,
    }


class AuditLogsResource:
    """GET /v1/audit-logs - list audit entries."""

    def __init__(self, list_audit_logs: ListAuditLogsUseCase) -> None:
        self._list = list_audit_logs

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List entries filtered by user_id, resource_type, resource_id or correlation_id."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        correlation = req.get_param("correlation_id")
        items, next_cursor = await self._list.execute(
            user.user_id,
            user_id=req.get_param("user_id"),
            resource_type=req.get_param("resource_type"),
            resource_id=req.get_param("resource_id"),
            correlation_id=parse_uuid(correlation, "correlation_id") if correlation else None,
            cursor=req.get_param("cursor"),
            limit=req.get_param_as_int("limit") or 50,
        )
        resp.media = {
            "items": [audit_log_to_dict(e) for e in items],
            "next_cursor": next_cursor,
        }
        resp.status = falcon.HTTP_200


class AuditLogArchiveResource:
    """POST /v1/audit-logs/archive - archive entries created before a cutoff."""

    def __init__(self, archive_audit_logs: ArchiveAuditLogsUseCase) -> None:
        self._archive = archive_audit_logs

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            before = parse_datetime(body["before"], "before")
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return

        archived = await self._archive.execute(user.user_id, before)
        resp.media = {"archived": archived}
        resp.status = falcon.HTTP_200


class AuditReportResource:
    """GET /v1/audit-logs/report?start=&end= - entry counts over a time range."""

    def __init__(self, audit_report: AuditReportUseCase) -> None:
        self._report = audit_report

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        report = await self._report.execute(
            user.user_id,
            parse_datetime(req.get_param("start"), "start"),
            parse_datetime(req.get_param("end"), "end"),
        )
        resp.media = {
            "start": isoformat(report.start),
            "end": isoformat(report.end),
            "total": report.total,
            "by_category": report.by_category,
            "by_result": report.by_result,
            "by_risk_level": report.by_risk_level,
            "high_risk_failures": report.high_risk_failures,
        }
        resp.status = falcon.HTTP_200
