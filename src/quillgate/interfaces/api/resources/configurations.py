"""Configuration governance API resources."""

import falcon.asgi

from quillgate.application.dto.configuration_dto import CreateConfigurationInput
from quillgate.application.use_cases.configuration.create_configuration import (
    CreateConfigurationUseCase,
)
from quillgate.application.use_cases.configuration.get_configuration import (
    GetConfigurationUseCase,
)
from quillgate.application.use_cases.configuration.list_configuration_versions import (
    ListConfigurationVersionsUseCase,
)
from quillgate.application.use_cases.configuration.list_pending_approvals import (
    ListPendingApprovalsUseCase,
)
from quillgate.application.use_cases.configuration.propose_configuration_change import (
    ProposeConfigurationChangeUseCase,
)
from quillgate.application.use_cases.configuration.review_configuration_change import (
    ReviewConfigurationChangeUseCase,
)
from quillgate.application.use_cases.configuration.rollback_configuration import (
    RollbackConfigurationUseCase,
)
from quillgate.domain.entities import ConfigurationVersion, SystemConfiguration
from quillgate.domain.exceptions import ValidationError
from quillgate.domain.value_objects import Criticality
from quillgate.interfaces.api.resources.params import isoformat, parse_uuid


def configuration_to_dict(c: SystemConfiguration) -> dict:
    return {
        "id": str(c.id),
        "section": c.section,
        "key": c.key,
        "value": c.value,
        "data_type": c.data_type,
        "description": c.description,
        "criticality": c.criticality.value,
        "requires_approval": c.needs_approval,
        "is_read_only": c.is_read_only,
        "current_version": c.current_version,
        "created_at": isoformat(c.created_at),
        "updated_at": isoformat(c.updated_at),
    }


def version_to_dict(v: ConfigurationVersion) -> dict:
    return {
        "id": str(v.id),
        "configuration_id": str(v.configuration_id),
        "version": v.version,
        "value": v.value,
        "change_type": v.change_type.value,
        "change_reason": v.change_reason,
        "approval_status": v.approval_status.value,
        "approved_by": v.approved_by,
        "approved_at": isoformat(v.approved_at),
        "approval_notes": v.approval_notes,
        "created_by": v.created_by,
        "created_at": isoformat(v.created_at),
        "checksum": v.checksum,
        "is_intact": v.is_intact,
        "is_current": v.is_current,
        "can_rollback": v.can_rollback,
    }


def _criticality(value: str | None) -> Criticality:
    if value is None:
        return Criticality.LOW
    try:
        return Criticality(str(value).capitalize())
    except ValueError as e:
        raise ValidationError(f"Invalid criticality: {value}") from e


class ConfigurationsResource:
    """GET/POST /v1/config - look up by section and key, create configuration key."""

    def __init__(
        self,
        create_configuration: CreateConfigurationUseCase,
        get_configuration: GetConfigurationUseCase,
    ) -> None:
        self._create = create_configuration
        self._get = get_configuration

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Configuration of ?section=&key=."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        section = req.get_param("section")
        key = req.get_param("key")
        if not section or not key:
            raise ValidationError("section and key query parameters are required")

        configuration = await self._get.by_key(user.user_id, section, key)
        resp.media = configuration_to_dict(configuration)
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            input_data = CreateConfigurationInput(
                section=body["section"],
                key=body["key"],
                value=body.get("value"),
                data_type=body.get("data_type") or "string",
                description=body.get("description"),
                criticality=_criticality(body.get("criticality")),
                requires_approval=bool(body.get("requires_approval", False)),
                is_read_only=bool(body.get("is_read_only", False)),
            )
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return

        configuration = await self._create.execute(user.user_id, input_data)
        resp.media = configuration_to_dict(configuration)
        resp.status = falcon.HTTP_201


class ConfigurationProposeResource:
    """POST /v1/config/{config_id}/propose - propose a new value."""

    def __init__(self, propose_change: ProposeConfigurationChangeUseCase) -> None:
        self._propose = propose_change

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        config_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            new_value = body["value"]
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return
        if new_value is not None and not isinstance(new_value, str):
            raise ValidationError("value must be a string")

        version = await self._propose.execute(
            user.user_id,
            parse_uuid(config_id, "configuration ID"),
            new_value,
            reason=body.get("reason"),
        )
        resp.media = version_to_dict(version)
        resp.status = falcon.HTTP_201


class ConfigurationVersionReviewResource:
    """POST /v1/config/versions/{version_id}/approve|reject - review pending version."""

    def __init__(self, review_change: ReviewConfigurationChangeUseCase) -> None:
        self._review = review_change

    async def on_post_approve(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        version_id: str,
    ) -> None:
        await self._decide(req, resp, version_id, approve=True)

    async def on_post_reject(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        version_id: str,
    ) -> None:
        await self._decide(req, resp, version_id, approve=False)

    async def _decide(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        version_id: str,
        *,
        approve: bool,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        body = await req.get_media(default_when_empty={}) or {}
        vid = parse_uuid(version_id, "version ID")
        notes = body.get("notes")
        if approve:
            version = await self._review.approve(user.user_id, vid, notes)
        else:
            version = await self._review.reject(user.user_id, vid, notes)
        resp.media = version_to_dict(version)
        resp.status = falcon.HTTP_200


class ConfigurationRollbackResource:
    """POST /v1/config/{config_id}/rollback - restore an earlier version."""

    def __init__(self, rollback_configuration: RollbackConfigurationUseCase) -> None:
        self._rollback = rollback_configuration

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        config_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        try:
            body = await req.get_media()
            target = body["target_version"]
        except KeyError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Missing required field: {e}"}
            return
        if not isinstance(target, int) or isinstance(target, bool):
            raise ValidationError("target_version must be an integer")

        version = await self._rollback.execute(
            user.user_id,
            parse_uuid(config_id, "configuration ID"),
            target,
            reason=body.get("reason"),
        )
        resp.media = version_to_dict(version)
        resp.status = falcon.HTTP_201


class ConfigurationVersionsResource:
    """GET /v1/config/{config_id}/versions - version history."""

    def __init__(self, list_versions: ListConfigurationVersionsUseCase) -> None:
        self._list = list_versions

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        config_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        versions = await self._list.execute(user.user_id, parse_uuid(config_id, "configuration ID"))
        resp.media = {"items": [version_to_dict(v) for v in versions]}
        resp.status = falcon.HTTP_200


class ConfigurationResource:
    """GET /v1/config/{config_id} - current state of one configuration."""

    def __init__(self, get_configuration: GetConfigurationUseCase) -> None:
        self._get = get_configuration

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        config_id: str,
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        configuration = await self._get.execute(
            user.user_id, parse_uuid(config_id, "configuration ID")
        )
        resp.media = configuration_to_dict(configuration)
        resp.status = falcon.HTTP_200


class PendingApprovalsResource:
    """GET /v1/config/pending-approvals - versions awaiting review."""

    def __init__(self, list_pending: ListPendingApprovalsUseCase) -> None:
        self._list = list_pending

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Oldest first; ?config_id= narrows to one configuration."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return

        config_id = req.get_param("config_id")
        versions = await self._list.execute(
            user.user_id,
            parse_uuid(config_id, "configuration ID") if config_id else None,
        )
        resp.media = {"items": [version_to_dict(v) for v in versions]}
        resp.status = falcon.HTTP_200
