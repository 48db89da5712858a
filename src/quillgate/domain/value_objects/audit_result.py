"""Audit entry outcome."""

from enum import StrEnum


class AuditResult(StrEnum):
    """Outcome recorded on an audit entry."""

    SUCCESS = "Success"
    FAILURE = "Failure"
