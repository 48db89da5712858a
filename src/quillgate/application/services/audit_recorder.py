"""Audit recorder - appends immutable audit entries."""

import json
import logging
from typing import Any
from uuid import UUID, uuid4

from quillgate.application.ports.clock import Clock, utc_now
from quillgate.domain.entities import AuditLog

logger = logging.getLogger(__name__)


def to_snapshot(values: dict[str, Any] | None) -> str | None:
    """Serialize before/after values for an audit entry."""
    if values is None:
        return None
    return json.dumps(values, default=str, sort_keys=True)


class AuditRecorder:
    """Writes audit entries through the caller's unit of work.

    The entry is appended in the same transaction as the decision or change
    it documents, so both commit (or roll back) together. Actor name and
    email are copied from the identity subsystem at write time.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    async def record(self, uow, entry: AuditLog) -> UUID:
        """Append entry and return its id."""
        if entry.id is not None:
            raise ValueError("Audit entries are append-only; entry already has an id")

        entry.id = uuid4()
        entry.created_at = self._clock()
        if entry.correlation_id is None:
            entry.correlation_id = uuid4()

        if entry.user_id and entry.user_name is None and entry.user_email is None:
            user = await uow.users.get_by_id(entry.user_id)
            if user:
                entry.user_name = user.user_name
                entry.user_email = user.email

        await uow.audit_logs.append(entry)
        logger.debug(
            "audit %s %s/%s result=%s risk=%s correlation=%s",
            entry.action,
            entry.resource_type,
            entry.resource_id,
            entry.result,
            entry.risk_level,
            entry.correlation_id,
        )
        return entry.id

    async def record_detached(self, unit_of_work_factory, entry: AuditLog) -> UUID:
        """Append entry in its own transaction.

        Used for rejected requests, whose own transaction is rolled back when
        the error propagates.
        """
        async with unit_of_work_factory() as uow:
            return await self.record(uow, entry)
