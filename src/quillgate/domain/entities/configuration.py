"""System configuration and its version history."""

import json
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse
from uuid import UUID

from quillgate.domain.value_objects import (
    ApprovalStatus,
    ChangeType,
    Criticality,
    ValueChecksum,
)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _type_error(data_type: str, value: str) -> str | None:
    """Error message when value does not parse as data_type, else None."""
    match data_type.lower():
        case "bool" | "boolean":
            ok = value.lower() in ("true", "false")
        case "int" | "integer":
            ok = re.fullmatch(r"[+-]?\d+", value.strip()) is not None
        case "decimal" | "double":
            try:
                Decimal(value)
                ok = True
            except InvalidOperation:
                ok = False
        case "datetime":
            try:
                datetime.fromisoformat(value)
                ok = True
            except ValueError:
                ok = False
        case "email":
            ok = _EMAIL.match(value) is not None
        case "url":
            parsed = urlparse(value)
            ok = bool(parsed.scheme and parsed.netloc)
        case "json":
            try:
                json.loads(value)
                ok = True
            except json.JSONDecodeError:
                ok = False
        case _:
            ok = True
    return None if ok else f"Invalid {data_type} value"


@dataclass
class SystemConfiguration:
    """Configuration key under a section with its current value."""

    id: UUID
    section: str
    key: str
    value: str | None
    created_at: datetime
    updated_at: datetime
    data_type: str = "string"
    description: str | None = None
    criticality: Criticality = Criticality.LOW
    requires_approval: bool = False
    is_read_only: bool = False
    current_version: int = 1
    row_version: int = 1

    @property
    def needs_approval(self) -> bool:
        return self.requires_approval or self.criticality.requires_approval

    def validate_value(self, value: str | None) -> str | None:
        """Error message when value does not fit data_type, else None. Empty values pass."""
        if not value:
            return None
        return _type_error(self.data_type, value)


@dataclass
class ConfigurationVersion:
    """Immutable history entry; only approval bookkeeping and is_current change."""

    id: UUID
    configuration_id: UUID
    version: int
    value: str | None
    change_type: ChangeType
    approval_status: ApprovalStatus
    created_by: str
    created_at: datetime
    checksum: str
    change_reason: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    approval_notes: str | None = None
    is_current: bool = False
    can_rollback: bool = True
    row_version: int = 1

    @property
    def is_intact(self) -> bool:
        """Stored checksum still matches the stored value."""
        return ValueChecksum.of(self.value).value == self.checksum
