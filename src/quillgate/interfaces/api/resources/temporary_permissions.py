"""Temporary permission API resources."""

import falcon.asgi

from quillgate.application.dto.temporary_permission_dto import GrantTemporaryPermissionInput
from quillgate.application.use_cases.temporary_permission.delegate_temporary_permission import (
    DelegateTemporaryPermissionUseCase,
)
from quillgate.application.use_cases.temporary_permission.grant_temporary_permission import (
    GrantTemporaryPermissionUseCase,
)
from quillgate.application.use_cases.temporary_permission.list_temporary_permissions import (
    ListTemporaryPermissionsUseCase,
)
from quillgate.application.use_cases.temporary_permission.revoke_temporary_permission import (
    RevokeTemporaryPermissionUseCase,
)
from quillgate.domain.entities import TemporaryPermission
from quillgate.domain.exceptions import ValidationError
from quillgate.interfaces.api.resources.params import (
    isoformat,
    parse_datetime,
    parse_operation,
    parse_uuid,
)


def grant_to_dict(grant: TemporaryPermission) -> dict:
    return {
        "id": str(grant.id),
        "user_id": grant.user_id,
        "resource_type": grant.resource_type,
        "resource_id": grant.resource_id,
        "operation": grant.operation.value,
        "granted_by": grant.granted_by,
        "reason": grant.reason,
        "valid_from": isoformat(grant.effective_from),
        "valid_to": isoformat(grant.expires_at),
        "delegated_from": str(grant.delegated_from) if grant.delegated_from else None,
        "allow_delegation": grant.allow_delegation,
        "is_revoked": grant.is_revoked,
        "revoked_by": grant.revoked_by,
        "revoke_reason": grant.revoke_reason,
        "revoked_at": isoformat(grant.revoked_at),
        "created_at": isoformat(grant.created_at),
    }


def _reason(body: dict) -> str:
    reason = (body.get("reason") or "").strip()
    if not reason:
        raise ValidationError("reason is required")
    return reason


class TemporaryPermissionsResource:
    """GET/POST /v1/permissions/temporary - list and grant temporary permissions."""

    def __init__(
        self,
        grant_temporary_permission: GrantTemporaryPermissionUseCase,
        list_temporary_permissions: ListTemporaryPermissionsUseCase,
    ) -> None:
        self._grant = grant_temporary_permission
        self._list = list_temporary_permissions

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List grants of ?user_id= (defaults to the caller)."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        user_id = req.get_param("user_id") or user.user_id
        include_inactive = req.get_param_as_bool("include_inactive") or False
        grants = await self._list.execute(user.user_id, user_id, include_inactive=include_inactive)
        resp.media = {"items": [grant_to_dict(g) for g in grants]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Grant a temporary permission held by the caller."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            input_data = GrantTemporaryPermissionInput(
                grantee_id=body["user_id"],
                resource_type=body["resource_type"],
                operation=parse_operation(body["operation"]),
                valid_from=parse_datetime(body["valid_from"], "valid_from"),
                valid_to=parse_datetime(body["valid_to"], "valid_to"),
                reason=_reason(body),
                resource_id=body.get("resource_id"),
                allow_delegation=bool(body.get("allow_delegation", True)),
            )
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return

        grant = await self._grant.execute(user.user_id, input_data)
        resp.media = grant_to_dict(grant)
        resp.status = falcon.HTTP_201


class TemporaryPermissionRevokeResource:
    """POST /v1/permissions/temporary/{grant_id}/revoke - revoke with cascade."""

    def __init__(self, revoke_temporary_permission: RevokeTemporaryPermissionUseCase) -> None:
        self._revoke = revoke_temporary_permission

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        grant_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        body = await req.get_media(default_when_empty={}) or {}
        revoked = await self._revoke.execute(
            user.user_id, parse_uuid(grant_id, "grant ID"), _reason(body)
        )
        resp.media = {"revoked": [str(g) for g in revoked]}
        resp.status = falcon.HTTP_200


class TemporaryPermissionDelegateResource:
    """POST /v1/permissions/temporary/{grant_id}/delegate - re-grant to another user."""

    def __init__(self, delegate_temporary_permission: DelegateTemporaryPermissionUseCase) -> None:
        self._delegate = delegate_temporary_permission

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        grant_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            new_grantee = body["user_id"]
            valid_to = parse_datetime(body["valid_to"], "valid_to")
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return

        grant = await self._delegate.execute(
            user.user_id,
            parse_uuid(grant_id, "grant ID"),
            new_grantee,
            valid_to,
            _reason(body),
        )
        resp.media = grant_to_dict(grant)
        resp.status = falcon.HTTP_201
