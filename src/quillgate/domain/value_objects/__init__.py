"""Domain value objects."""

from quillgate.domain.value_objects.approval_status import ApprovalStatus
from quillgate.domain.value_objects.audit_result import AuditResult
from quillgate.domain.value_objects.change_type import ChangeType
from quillgate.domain.value_objects.criticality import Criticality
from quillgate.domain.value_objects.grant_state import GrantState
from quillgate.domain.value_objects.permission_action import PermissionAction
from quillgate.domain.value_objects.risk_level import RiskLevel
from quillgate.domain.value_objects.validity_window import ValidityWindow
from quillgate.domain.value_objects.value_checksum import ValueChecksum

__all__ = [
    "ApprovalStatus",
    "AuditResult",
    "ChangeType",
    "Criticality",
    "GrantState",
    "PermissionAction",
    "RiskLevel",
    "ValidityWindow",
    "ValueChecksum",
]
