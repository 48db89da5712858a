"""Application services shared by use cases and the permission checker."""

from quillgate.application.services.audit_recorder import AuditRecorder, to_snapshot
from quillgate.application.services.grant_resolver import GrantResolution, GrantResolver

__all__ = [
    "AuditRecorder",
    "GrantResolution",
    "GrantResolver",
    "to_snapshot",
]
