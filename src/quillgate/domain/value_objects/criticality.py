"""Configuration criticality."""

from enum import StrEnum

_RANK = {"Low": 0, "Medium": 1, "High": 2, "Critical": 3}


class Criticality(StrEnum):
    """How risky a configuration change is. Medium and above need approval."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _RANK[self.value]

    @property
    def requires_approval(self) -> bool:
        return self.rank >= _RANK["Medium"]
