"""Data permission rule API resources."""

import json

import falcon.asgi

from quillgate.application.dto.data_rule_dto import SaveDataRuleInput
from quillgate.application.use_cases.data_rule.deactivate_data_rule import (
    DeactivateDataRuleUseCase,
)
from quillgate.application.use_cases.data_rule.list_data_rules import ListDataRulesUseCase
from quillgate.application.use_cases.data_rule.list_user_data_rules import ListUserDataRulesUseCase
from quillgate.application.use_cases.data_rule.save_data_rule import SaveDataRuleUseCase
from quillgate.domain.entities import DataPermissionRule
from quillgate.domain.exceptions import ValidationError
from quillgate.interfaces.api.resources.params import (
    isoformat,
    parse_datetime,
    parse_operation,
    parse_uuid,
)


def rule_to_dict(rule: DataPermissionRule) -> dict:
    return {
        "id": str(rule.id),
        "resource_type": rule.resource_type,
        "operation": rule.operation.value,
        "conditions": rule.conditions,
        "user_id": rule.user_id,
        "role_id": str(rule.role_id) if rule.role_id else None,
        "granted_by": rule.granted_by,
        "effective_from": isoformat(rule.effective_from),
        "effective_to": isoformat(rule.effective_to),
        "is_active": rule.is_active,
        "remarks": rule.remarks,
        "row_version": rule.row_version,
        "created_at": isoformat(rule.created_at),
        "updated_at": isoformat(rule.updated_at),
    }


class DataRulesResource:
    """GET/POST /v1/permissions/data-rules - list and save rules."""

    def __init__(
        self,
        save_data_rule: SaveDataRuleUseCase,
        list_data_rules: ListDataRulesUseCase,
    ) -> None:
        self._save = save_data_rule
        self._list = list_data_rules

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List rules of ?resource_type=."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        rules = await self._list.execute(
            user.user_id,
            req.get_param("resource_type") or "",
            include_inactive=req.get_param_as_bool("include_inactive") or False,
        )
        resp.media = {"items": [rule_to_dict(r) for r in rules]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Create a rule, or update it when body.id is given."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            conditions = body["conditions"]
            input_data = SaveDataRuleInput(
                resource_type=body["resource_type"],
                operation=parse_operation(body["operation"]),
                conditions=conditions if isinstance(conditions, str) else json.dumps(conditions),
                effective_from=parse_datetime(
                    body.get("effective_from"), "effective_from", required=False
                ),
                effective_to=parse_datetime(body.get("effective_to"), "effective_to", required=False),
                user_id=body.get("user_id"),
                role_id=parse_uuid(body["role_id"], "role_id") if body.get("role_id") else None,
                remarks=body.get("remarks"),
                rule_id=parse_uuid(body["id"], "rule ID") if body.get("id") else None,
                expected_row_version=body.get("row_version"),
            )
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return
        if input_data.expected_row_version is not None and not isinstance(
            input_data.expected_row_version, int
        ):
            raise ValidationError("row_version must be an integer")

        rule = await self._save.execute(user.user_id, input_data)
        resp.media = rule_to_dict(rule)
        resp.status = falcon.HTTP_200 if input_data.rule_id else falcon.HTTP_201


class DataRuleDeactivateResource:
    """POST /v1/permissions/data-rules/{rule_id}/deactivate."""

    def __init__(self, deactivate_data_rule: DeactivateDataRuleUseCase) -> None:
        self._deactivate = deactivate_data_rule

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        rule_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        rule = await self._deactivate.execute(user.user_id, parse_uuid(rule_id, "rule ID"))
        resp.media = rule_to_dict(rule)
        resp.status = falcon.HTTP_200


class UserDataRulesResource:
    """GET /v1/users/{user_id}/data-rules - rules in effect for a user."""

    def __init__(self, list_user_data_rules: ListUserDataRulesUseCase) -> None:
        self._list = list_user_data_rules

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        rules = await self._list.execute(
            user.user_id, user_id, resource_type=req.get_param("resource_type")
        )
        resp.media = {"items": [rule_to_dict(r) for r in rules]}
        resp.status = falcon.HTTP_200
