"""Permission check API resources."""

import falcon.asgi

from quillgate.application.dto.decision import DecisionRequest
from quillgate.application.ports import PermissionChecker
from quillgate.domain.exceptions import PermissionDenied, ValidationError
from quillgate.domain.value_objects import PermissionAction
from quillgate.interfaces.api.resources.params import parse_operation, parse_uuid

MAX_BATCH_SIZE = 100


async def _subject(permission_checker: PermissionChecker, user, body: dict) -> str:
    """User the decision is for; checking someone else needs permissions admin."""
    subject = body.get("user_id") or user.user_id
    if subject != user.user_id:
        may_check_others = await permission_checker.check(
            user.user_id, "permissions", PermissionAction.ADMIN
        )
        if not may_check_others:
            raise PermissionDenied("User may only check their own permissions")
    return subject


def _correlation(req: falcon.asgi.Request, body: dict):
    correlation = body.get("correlation_id") or getattr(req.context, "correlation_id", None)
    return parse_uuid(correlation, "correlation_id") if correlation else None


class PermissionCheckResource:
    """POST /v1/permissions/check - decide one access request.

    Record attributes are always loaded from the stored resource, never from the body.
    """

    def __init__(self, permission_checker: PermissionChecker) -> None:
        self._permission_checker = permission_checker

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Decide for the caller, or for body.user_id when the caller administers permissions."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            resource_type = body["resource_type"]
            operation = parse_operation(body["operation"])
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return

        subject = await _subject(self._permission_checker, user, body)
        resource_id = body.get("resource_id")
        decision = await self._permission_checker.decide(
            DecisionRequest(
                user_id=subject,
                resource_type=resource_type,
                operation=operation,
                resource_id=str(resource_id) if resource_id is not None else None,
                correlation_id=_correlation(req, body),
                session_id=getattr(user, "session_id", None),
            )
        )
        resp.media = {
            "allowed": decision.allowed,
            "reason": decision.reason,
            "correlation_id": str(decision.correlation_id),
            "audit_log_id": str(decision.audit_log_id),
        }
        resp.status = falcon.HTTP_200


class PermissionBatchCheckResource:
    """POST /v1/permissions/check-batch - decide one operation for many records."""

    def __init__(self, permission_checker: PermissionChecker) -> None:
        self._permission_checker = permission_checker

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            resource_type = body["resource_type"]
            operation = parse_operation(body["operation"])
            resource_ids = body["resource_ids"]
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return
        if not isinstance(resource_ids, list) or not 1 <= len(resource_ids) <= MAX_BATCH_SIZE:
            raise ValidationError(f"resource_ids must be a list of 1 to {MAX_BATCH_SIZE} ids")

        subject = await _subject(self._permission_checker, user, body)
        decisions = await self._permission_checker.decide_batch(
            subject,
            resource_type,
            operation,
            [str(r) for r in resource_ids],
            correlation_id=_correlation(req, body),
            session_id=getattr(user, "session_id", None),
        )
        correlation_id = next(iter(decisions.values())).correlation_id
        resp.media = {
            "correlation_id": str(correlation_id),
            "results": [
                {
                    "resource_id": resource_id,
                    "allowed": d.allowed,
                    "reason": d.reason,
                    "audit_log_id": str(d.audit_log_id),
                }
                for resource_id, d in decisions.items()
            ],
            "accessible": [r for r, d in decisions.items() if d.allowed],
        }
        resp.status = falcon.HTTP_200
