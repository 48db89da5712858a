"""Shared steps of the configuration version workflow."""

from datetime import datetime

from quillgate.application.ports import PermissionChecker
from quillgate.domain.entities import ConfigurationVersion, SystemConfiguration
from quillgate.domain.exceptions import PermissionDenied
from quillgate.domain.value_objects import PermissionAction, RiskLevel

CONFIG_RESOURCE = "system_configuration"


async def require_config_admin(permission_checker: PermissionChecker, actor_id: str) -> None:
    has_admin = await permission_checker.check(actor_id, CONFIG_RESOURCE, PermissionAction.ADMIN)
    if not has_admin:
        raise PermissionDenied("User does not have admin access to system configuration")


async def make_current(
    uow,
    configuration: SystemConfiguration,
    version: ConfigurationVersion,
    now: datetime,
) -> None:
    """Apply version to configuration. The caller persists the version row."""
    await uow.configuration_versions.clear_current(configuration.id)
    version.is_current = True
    configuration.value = version.value
    configuration.current_version = version.version
    configuration.updated_at = now
    await uow.configurations.update(configuration)


def risk_of(configuration: SystemConfiguration) -> RiskLevel:
    return RiskLevel(configuration.criticality.value)
