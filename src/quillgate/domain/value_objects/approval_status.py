"""Configuration version approval status."""

from enum import StrEnum


class ApprovalStatus(StrEnum):
    """Approval state of a configuration version."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
