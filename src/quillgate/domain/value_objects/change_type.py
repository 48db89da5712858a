"""Configuration version change types."""

from enum import StrEnum


class ChangeType(StrEnum):
    """How a configuration version came to exist."""

    CREATE = "create"
    UPDATE = "update"
    ROLLBACK = "rollback"
