"""Delegate temporary permission use case."""

import logging
from datetime import datetime
from uuid import UUID, uuid4

from quillgate.application.ports import Clock, utc_now
from quillgate.application.services import AuditRecorder, to_snapshot
from quillgate.application.use_cases.temporary_permission.grant_temporary_permission import (
    _grant_snapshot,
)
from quillgate.domain.entities import AuditLog, TemporaryPermission
from quillgate.domain.exceptions import DelegationNotPermitted, NotFound
from quillgate.domain.value_objects import AuditResult, GrantState, RiskLevel, ValidityWindow

logger = logging.getLogger(__name__)


class DelegateTemporaryPermissionUseCase:
    """Re-grant a temporary permission to another user, never wider than its source."""

    def __init__(
        self,
        unit_of_work_factory: type,
        audit_recorder: AuditRecorder,
        max_delegation_depth: int = 5,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._audit = audit_recorder
        self._max_depth = max_delegation_depth
        self._clock = clock

    async def execute(
        self,
        actor_id: str,
        grant_id: UUID,
        new_grantee_id: str,
        valid_to: datetime,
        reason: str,
    ) -> TemporaryPermission:
        """Create a delegated grant, or raise DelegationNotPermitted (audited)."""
        now = self._clock()

        async with self._uow_factory() as uow:
            source = await uow.temporary_permissions.get_by_id(grant_id)
            if not source:
                raise NotFound("TemporaryPermission", str(grant_id))

            problem = await self._delegation_problem(
                uow, actor_id, source, new_grantee_id, valid_to, now
            )
            if problem is None:
                grantee = await uow.users.get_by_id(new_grantee_id)
                if not grantee:
                    raise NotFound("User", new_grantee_id)

                effective_from = max(now, source.effective_from)
                ValidityWindow(effective_from, valid_to)
                # Bumps the source row_version; a concurrent revoke of the source
                # makes one of the two transactions fail with ConcurrentModification.
                await uow.temporary_permissions.update(source)
                grant = TemporaryPermission(
                    id=uuid4(),
                    user_id=new_grantee_id,
                    resource_type=source.resource_type,
                    resource_id=source.resource_id,
                    operation=source.operation,
                    granted_by=actor_id,
                    reason=reason,
                    effective_from=effective_from,
                    expires_at=valid_to,
                    delegated_from=source.id,
                    allow_delegation=source.allow_delegation,
                    created_at=now,
                )
                await uow.temporary_permissions.create(grant)
                await self._audit.record(
                    uow,
                    AuditLog(
                        action="TemporaryPermissionDelegated",
                        category="PermissionManagement",
                        resource_type="temporary_permission",
                        resource_id=str(grant.id),
                        resource_name=f"{grant.resource_type}.{grant.operation.value}",
                        user_id=actor_id,
                        risk_level=RiskLevel.MEDIUM,
                        new_values=to_snapshot(_grant_snapshot(grant)),
                        description=f"Delegated grant {source.id} to {new_grantee_id}: {reason}",
                    ),
                )
                return grant

        logger.info("Delegation of %s by %s refused: %s", grant_id, actor_id, problem)
        await self._audit.record_detached(
            self._uow_factory,
            AuditLog(
                action="TemporaryPermissionDelegationRejected",
                category="PermissionManagement",
                resource_type="temporary_permission",
                resource_id=str(grant_id),
                user_id=actor_id,
                result=AuditResult.FAILURE,
                risk_level=RiskLevel.MEDIUM,
                description=f"Delegation to {new_grantee_id} refused: {problem}",
            ),
        )
        raise DelegationNotPermitted(problem)

    async def _delegation_problem(
        self,
        uow,
        actor_id: str,
        source: TemporaryPermission,
        new_grantee_id: str,
        valid_to: datetime,
        now: datetime,
    ) -> str | None:
        """Reason the delegation is refused, or None when it is allowed."""
        if source.user_id != actor_id:
            return "Only the grantee of a temporary permission can delegate it"
        if not source.allow_delegation:
            return "Source grant does not allow further delegation"
        state = source.state(now)
        if state is GrantState.REVOKED:
            return "Source grant is revoked"
        if state is GrantState.EXPIRED:
            return "Source grant has expired"
        if valid_to > source.expires_at:
            return "Delegation cannot outlive its source grant"

        chain = await self._chain(uow, source)
        if len(chain) >= self._max_depth:
            return f"Delegation chain exceeds max depth {self._max_depth}"
        if new_grantee_id in {g.user_id for g in chain}:
            return "Delegation would form a cycle"
        return None

    async def _chain(self, uow, grant: TemporaryPermission) -> list[TemporaryPermission]:
        """Grant followed by its ancestors up to the root."""
        chain = [grant]
        seen = {grant.id}
        current = grant
        while current.delegated_from is not None and current.delegated_from not in seen:
            parent = await uow.temporary_permissions.get_by_id(current.delegated_from)
            if parent is None:
                break
            chain.append(parent)
            seen.add(parent.id)
            current = parent
        return chain
