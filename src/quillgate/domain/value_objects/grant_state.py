"""Temporary permission lifecycle states."""

from enum import StrEnum


class GrantState(StrEnum):
    """State of a temporary grant at a point in time. Only REVOKED is stored."""

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"
