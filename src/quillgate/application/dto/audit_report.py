"""Audit report DTO."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class AuditReport:
    start: datetime
    end: datetime
    total: int
    by_category: dict[str, int] = field(default_factory=dict)
    by_result: dict[str, int] = field(default_factory=dict)
    by_risk_level: dict[str, int] = field(default_factory=dict)
    high_risk_failures: int = 0
