"""Application ports - interfaces for external adapters."""

from quillgate.application.ports.clock import Clock, utc_now
from quillgate.application.ports.permission_checker import PermissionChecker
from quillgate.application.ports.resource_attribute_provider import ResourceAttributeProvider
from quillgate.application.ports.rule_engine import RuleEngine
from quillgate.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "Clock",
    "PermissionChecker",
    "ResourceAttributeProvider",
    "RuleEngine",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "utc_now",
]
