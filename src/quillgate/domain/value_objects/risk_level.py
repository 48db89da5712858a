"""Audit risk levels."""

from enum import StrEnum


class RiskLevel(StrEnum):
    """Risk classification stored on audit entries."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"
