"""Request value parsing shared by the API resources."""

from datetime import datetime
from uuid import UUID

from quillgate.domain.exceptions import ValidationError
from quillgate.domain.value_objects import PermissionAction


def parse_uuid(value: str | None, name: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ValidationError(f"Invalid {name}") from e


def parse_datetime(value: str | None, name: str, required: bool = True) -> datetime | None:
    """ISO 8601 timestamp; naive values are rejected."""
    if value is None:
        if required:
            raise ValidationError(f"{name} is required")
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {name}: expected ISO 8601 timestamp") from e
    if parsed.tzinfo is None:
        raise ValidationError(f"Invalid {name}: timezone offset required")
    return parsed


def parse_operation(value: str | None) -> PermissionAction:
    try:
        return PermissionAction(str(value).lower())
    except ValueError as e:
        allowed = ", ".join(a.value for a in PermissionAction)
        raise ValidationError(f"Invalid operation: expected one of {allowed}") from e


def isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
