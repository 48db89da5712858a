"""Role permission API resources."""

import falcon.asgi

from quillgate.application.use_cases.role_permission.assign_role_permission import (
    AssignRolePermissionUseCase,
)
from quillgate.application.use_cases.role_permission.delete_role import DeleteRoleUseCase
from quillgate.application.use_cases.role_permission.list_role_permissions import (
    ListRolePermissionsUseCase,
)
from quillgate.application.use_cases.role_permission.revoke_role_permission import (
    RevokeRolePermissionUseCase,
)
from quillgate.domain.entities import RolePermission
from quillgate.interfaces.api.resources.params import isoformat, parse_datetime, parse_uuid


def role_permission_to_dict(rp: RolePermission) -> dict:
    return {
        "role_id": str(rp.role_id),
        "permission_id": str(rp.permission_id),
        "granted_at": isoformat(rp.granted_at),
        "granted_by": rp.granted_by,
        "expires_at": isoformat(rp.expires_at),
        "is_temporary": rp.is_temporary,
        "is_active": rp.is_active,
    }


class RolePermissionsResource:
    """GET/POST /v1/roles/{role_id}/permissions - list and assign role permissions."""

    def __init__(
        self,
        assign_role_permission: AssignRolePermissionUseCase,
        list_role_permissions: ListRolePermissionsUseCase,
    ) -> None:
        self._assign = assign_role_permission
        self._list = list_role_permissions

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        items = await self._list.execute(
            user.user_id,
            parse_uuid(role_id, "role ID"),
            include_inactive=req.get_param_as_bool("include_inactive") or False,
        )
        resp.media = {"items": [role_permission_to_dict(rp) for rp in items]}
        resp.status = falcon.HTTP_200

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
    ) -> None:
        """Assign permission (by name) to role."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            permission = body["permission"]
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return

        rp = await self._assign.execute(
            user.user_id,
            parse_uuid(role_id, "role ID"),
            permission,
            expires_at=parse_datetime(body.get("expires_at"), "expires_at", required=False),
        )
        resp.media = role_permission_to_dict(rp)
        resp.status = falcon.HTTP_201


class RolePermissionResource:
    """DELETE /v1/roles/{role_id}/permissions/{permission_id} - revoke role permission."""

    def __init__(self, revoke_role_permission: RevokeRolePermissionUseCase) -> None:
        self._revoke = revoke_role_permission

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
        permission_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        await self._revoke.execute(
            user.user_id,
            parse_uuid(role_id, "role ID"),
            parse_uuid(permission_id, "permission ID"),
        )
        resp.status = falcon.HTTP_204


class RoleResource:
    """DELETE /v1/roles/{role_id} - soft delete role."""

    def __init__(self, delete_role: DeleteRoleUseCase) -> None:
        self._delete = delete_role

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        await self._delete.execute(user.user_id, parse_uuid(role_id, "role ID"))
        resp.status = falcon.HTTP_204
