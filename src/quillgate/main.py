"""Application entry point and composition root."""

import logging

from quillgate import __version__
from quillgate.application.services import AuditRecorder, GrantResolver
from quillgate.application.use_cases.audit.archive_audit_logs import ArchiveAuditLogsUseCase
from quillgate.application.use_cases.audit.audit_report import AuditReportUseCase
from quillgate.application.use_cases.audit.list_audit_logs import ListAuditLogsUseCase
from quillgate.application.use_cases.configuration.create_configuration import (
    CreateConfigurationUseCase,
)
from quillgate.application.use_cases.configuration.get_configuration import (
    GetConfigurationUseCase,
)
from quillgate.application.use_cases.configuration.list_configuration_versions import (
    ListConfigurationVersionsUseCase,
)
from quillgate.application.use_cases.configuration.list_pending_approvals import (
    ListPendingApprovalsUseCase,
)
from quillgate.application.use_cases.configuration.propose_configuration_change import (
    ProposeConfigurationChangeUseCase,
)
from quillgate.application.use_cases.configuration.review_configuration_change import (
    ReviewConfigurationChangeUseCase,
)
from quillgate.application.use_cases.configuration.rollback_configuration import (
    RollbackConfigurationUseCase,
)
from quillgate.application.use_cases.data_rule.deactivate_data_rule import (
    DeactivateDataRuleUseCase,
)
from quillgate.application.use_cases.data_rule.list_data_rules import ListDataRulesUseCase
from quillgate.application.use_cases.data_rule.list_user_data_rules import ListUserDataRulesUseCase
from quillgate.application.use_cases.data_rule.save_data_rule import SaveDataRuleUseCase
from quillgate.application.use_cases.role_permission.assign_role_permission import (
    AssignRolePermissionUseCase,
)
from quillgate.application.use_cases.role_permission.delete_role import DeleteRoleUseCase
from quillgate.application.use_cases.role_permission.list_role_permissions import (
    ListRolePermissionsUseCase,
)
from quillgate.application.use_cases.role_permission.revoke_role_permission import (
    RevokeRolePermissionUseCase,
)
from quillgate.application.use_cases.temporary_permission.delegate_temporary_permission import (
    DelegateTemporaryPermissionUseCase,
)
from quillgate.application.use_cases.temporary_permission.grant_temporary_permission import (
    GrantTemporaryPermissionUseCase,
)
from quillgate.application.use_cases.temporary_permission.list_temporary_permissions import (
    ListTemporaryPermissionsUseCase,
)
from quillgate.application.use_cases.temporary_permission.revoke_temporary_permission import (
    RevokeTemporaryPermissionUseCase,
)
from quillgate.config import Settings, get_settings
from quillgate.infrastructure.auth.keycloak_provider import KeycloakProvider
from quillgate.infrastructure.permission.permission_checker import GovernedPermissionChecker
from quillgate.infrastructure.persistence.postgres.connection import create_pool
from quillgate.infrastructure.persistence.postgres.resource_attribute_provider import (
    PostgresResourceAttributeProvider,
)
from quillgate.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from quillgate.infrastructure.rules import ConditionRuleEngine, RuleCache
from quillgate.interfaces.api.app import Resources, create_app
from quillgate.interfaces.api.middleware.auth import AuthMiddleware
from quillgate.interfaces.api.middleware.cors import CORSMiddleware
from quillgate.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from quillgate.interfaces.api.resources.audit_logs import (
    AuditLogArchiveResource,
    AuditLogsResource,
    AuditReportResource,
)
from quillgate.interfaces.api.resources.configurations import (
    ConfigurationProposeResource,
    ConfigurationResource,
    ConfigurationRollbackResource,
    ConfigurationsResource,
    ConfigurationVersionReviewResource,
    ConfigurationVersionsResource,
    PendingApprovalsResource,
)
from quillgate.interfaces.api.resources.data_rules import (
    DataRuleDeactivateResource,
    DataRulesResource,
    UserDataRulesResource,
)
from quillgate.interfaces.api.resources.health import HealthResource
from quillgate.interfaces.api.resources.permissions import (
    PermissionBatchCheckResource,
    PermissionCheckResource,
)
from quillgate.interfaces.api.resources.roles import (
    RolePermissionResource,
    RolePermissionsResource,
    RoleResource,
)
from quillgate.interfaces.api.resources.temporary_permissions import (
    TemporaryPermissionDelegateResource,
    TemporaryPermissionRevokeResource,
    TemporaryPermissionsResource,
)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_quillgate_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("QuillGate v%s starting (%s)", __version__, settings.environment)

    pool = create_pool(
        settings.database_url,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size,
    )
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("KEYCLOAK_CLIENT_SECRET not set; every API request is unauthenticated")

    audit_recorder = AuditRecorder()
    grant_resolver = GrantResolver(settings.super_admin_permission)
    rule_engine = ConditionRuleEngine(
        max_depth=settings.rule_max_depth,
        schemas=settings.resource_schemas,
    )
    rule_cache = RuleCache(ttl_seconds=settings.rule_cache_ttl_seconds)
    permission_checker = GovernedPermissionChecker(
        unit_of_work_factory=uow_factory,
        rule_engine=rule_engine,
        rule_cache=rule_cache,
        audit_recorder=audit_recorder,
        grant_resolver=grant_resolver,
        resource_provider=PostgresResourceAttributeProvider(pool, settings.resource_tables),
    )

    grant_temporary = GrantTemporaryPermissionUseCase(
        unit_of_work_factory=uow_factory,
        grant_resolver=grant_resolver,
        audit_recorder=audit_recorder,
    )
    delegate_temporary = DelegateTemporaryPermissionUseCase(
        unit_of_work_factory=uow_factory,
        audit_recorder=audit_recorder,
        max_delegation_depth=settings.max_delegation_depth,
    )
    revoke_temporary = RevokeTemporaryPermissionUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    list_temporary = ListTemporaryPermissionsUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    save_data_rule = SaveDataRuleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        rule_engine=rule_engine,
        rule_cache=rule_cache,
        audit_recorder=audit_recorder,
    )
    deactivate_data_rule = DeactivateDataRuleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        rule_cache=rule_cache,
        audit_recorder=audit_recorder,
    )
    list_data_rules = ListDataRulesUseCase(uow_factory, permission_checker)
    list_user_data_rules = ListUserDataRulesUseCase(uow_factory, permission_checker, grant_resolver)
    assign_role_permission = AssignRolePermissionUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    revoke_role_permission = RevokeRolePermissionUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    delete_role = DeleteRoleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    list_role_permissions = ListRolePermissionsUseCase(uow_factory, permission_checker)
    create_configuration = CreateConfigurationUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    propose_change = ProposeConfigurationChangeUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    review_change = ReviewConfigurationChangeUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    rollback_configuration = RollbackConfigurationUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )
    get_configuration = GetConfigurationUseCase(uow_factory, permission_checker)
    list_pending = ListPendingApprovalsUseCase(uow_factory, permission_checker)
    list_versions = ListConfigurationVersionsUseCase(uow_factory, permission_checker)
    list_audit_logs = ListAuditLogsUseCase(uow_factory, permission_checker)
    audit_report = AuditReportUseCase(uow_factory, permission_checker)
    archive_audit_logs = ArchiveAuditLogsUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
        audit_recorder=audit_recorder,
    )

    resources = Resources(
        health=HealthResource(pool),
        permission_check=PermissionCheckResource(permission_checker),
        permission_batch_check=PermissionBatchCheckResource(permission_checker),
        temporary_permissions=TemporaryPermissionsResource(grant_temporary, list_temporary),
        temporary_permission_revoke=TemporaryPermissionRevokeResource(revoke_temporary),
        temporary_permission_delegate=TemporaryPermissionDelegateResource(delegate_temporary),
        data_rules=DataRulesResource(save_data_rule, list_data_rules),
        data_rule_deactivate=DataRuleDeactivateResource(deactivate_data_rule),
        user_data_rules=UserDataRulesResource(list_user_data_rules),
        role_permissions=RolePermissionsResource(assign_role_permission, list_role_permissions),
        role_permission=RolePermissionResource(revoke_role_permission),
        role=RoleResource(delete_role),
        configurations=ConfigurationsResource(create_configuration, get_configuration),
        configuration=ConfigurationResource(get_configuration),
        pending_approvals=PendingApprovalsResource(list_pending),
        configuration_propose=ConfigurationProposeResource(propose_change),
        configuration_review=ConfigurationVersionReviewResource(review_change),
        configuration_rollback=ConfigurationRollbackResource(rollback_configuration),
        configuration_versions=ConfigurationVersionsResource(list_versions),
        audit_logs=AuditLogsResource(list_audit_logs),
        audit_log_archive=AuditLogArchiveResource(archive_audit_logs),
        audit_report=AuditReportResource(audit_report),
    )

    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return create_app(
        resources,
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool),
            AuthMiddleware(keycloak),
        ],
    )


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    uvicorn.run(create_quillgate_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run_server()
