"""Grant temporary permission use case."""

import logging
from uuid import uuid4

from quillgate.application.dto.temporary_permission_dto import GrantTemporaryPermissionInput
from quillgate.application.ports import Clock, utc_now
from quillgate.application.services import AuditRecorder, GrantResolver, to_snapshot
from quillgate.domain.entities import AuditLog, TemporaryPermission
from quillgate.domain.exceptions import InsufficientGrantorScope, InvalidWindow, NotFound
from quillgate.domain.value_objects import AuditResult, RiskLevel, ValidityWindow

logger = logging.getLogger(__name__)


class GrantTemporaryPermissionUseCase:
    """Grant a user a time-bounded permission the grantor holds itself."""

    def __init__(
        self,
        unit_of_work_factory: type,
        grant_resolver: GrantResolver,
        audit_recorder: AuditRecorder,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._grants = grant_resolver
        self._audit = audit_recorder
        self._clock = clock

    async def execute(
        self, grantor_id: str, input_data: GrantTemporaryPermissionInput
    ) -> TemporaryPermission:
        """Create the grant, or raise InsufficientGrantorScope (audited)."""
        try:
            ValidityWindow(input_data.valid_from, input_data.valid_to)
        except InvalidWindow as e:
            logger.info("Rejected temporary grant by %s: %s", grantor_id, e)
            raise

        now = self._clock()
        scope = f"{input_data.resource_type}.{input_data.operation.value}"

        async with self._uow_factory() as uow:
            grantor = await uow.users.get_by_id(grantor_id)
            holds = False
            if grantor and grantor.can_act:
                resolution = await self._grants.resolve(
                    uow,
                    grantor,
                    input_data.resource_type,
                    input_data.resource_id,
                    input_data.operation,
                    now,
                )
                holds = resolution.granted

            if holds:
                grantee = await uow.users.get_by_id(input_data.grantee_id)
                if not grantee:
                    raise NotFound("User", input_data.grantee_id)

                grant = TemporaryPermission(
                    id=uuid4(),
                    user_id=input_data.grantee_id,
                    resource_type=input_data.resource_type,
                    resource_id=input_data.resource_id,
                    operation=input_data.operation,
                    granted_by=grantor_id,
                    reason=input_data.reason,
                    effective_from=input_data.valid_from,
                    expires_at=input_data.valid_to,
                    allow_delegation=input_data.allow_delegation,
                    created_at=now,
                )
                await uow.temporary_permissions.create(grant)
                await self._audit.record(
                    uow,
                    AuditLog(
                        action="TemporaryPermissionGranted",
                        category="PermissionManagement",
                        resource_type="temporary_permission",
                        resource_id=str(grant.id),
                        resource_name=scope,
                        user_id=grantor_id,
                        risk_level=RiskLevel.MEDIUM,
                        new_values=to_snapshot(_grant_snapshot(grant)),
                        description=f"Granted {scope} to {grant.user_id}: {grant.reason}",
                    ),
                )
                return grant

        await self._audit.record_detached(
            self._uow_factory,
            AuditLog(
                action="TemporaryPermissionGrantRejected",
                category="PermissionManagement",
                resource_type="temporary_permission",
                resource_name=scope,
                user_id=grantor_id,
                result=AuditResult.FAILURE,
                risk_level=RiskLevel.MEDIUM,
                description=f"Grantor does not hold {scope}; grant to {input_data.grantee_id} refused",
            ),
        )
        raise InsufficientGrantorScope(f"Grantor {grantor_id} does not hold {scope}")


def _grant_snapshot(grant: TemporaryPermission) -> dict[str, object]:
    return {
        "user_id": grant.user_id,
        "resource_type": grant.resource_type,
        "resource_id": grant.resource_id,
        "operation": grant.operation.value,
        "effective_from": grant.effective_from,
        "expires_at": grant.expires_at,
        "delegated_from": grant.delegated_from,
        "allow_delegation": grant.allow_delegation,
    }
