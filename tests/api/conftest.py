"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

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
from quillgate.interfaces.api.app import Resources, create_app
from quillgate.interfaces.api.middleware.auth import RequestUser
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

from tests.conftest import TEST_USER_ID


class AuthBypassMiddleware:
    """Middleware that sets context.user for testing; X-Test-Anonymous drops it."""

    async def process_request(self, req, resp):
        req.context.correlation_id = None
        if req.get_header("X-Test-Anonymous"):
            req.context.user = None
        else:
            req.context.user = RequestUser(user_id=TEST_USER_ID, session_id="session-1")


@pytest.fixture
def app(
    fake_uow,
    uow_factory,
    mock_permission_checker,
    permission_checker,
    audit_recorder,
    grant_resolver,
    rule_engine,
    rule_cache,
    clock,
):
    """Falcon ASGI app with every resource; governance checks go through the mock."""
    fake_uow.add_user(TEST_USER_ID)
    checker = mock_permission_checker
    recorder = audit_recorder
    config_args = (uow_factory, checker, recorder, clock)
    get_configuration = GetConfigurationUseCase(uow_factory, checker)

    resources = Resources(
        health=HealthResource(),
        permission_check=PermissionCheckResource(permission_checker),
        permission_batch_check=PermissionBatchCheckResource(permission_checker),
        temporary_permissions=TemporaryPermissionsResource(
            GrantTemporaryPermissionUseCase(uow_factory, grant_resolver, recorder, clock),
            ListTemporaryPermissionsUseCase(uow_factory, checker, clock),
        ),
        temporary_permission_revoke=TemporaryPermissionRevokeResource(
            RevokeTemporaryPermissionUseCase(uow_factory, checker, recorder, clock)
        ),
        temporary_permission_delegate=TemporaryPermissionDelegateResource(
            DelegateTemporaryPermissionUseCase(uow_factory, recorder, 5, clock)
        ),
        data_rules=DataRulesResource(
            SaveDataRuleUseCase(uow_factory, checker, rule_engine, rule_cache, recorder, clock),
            ListDataRulesUseCase(uow_factory, checker),
        ),
        data_rule_deactivate=DataRuleDeactivateResource(
            DeactivateDataRuleUseCase(uow_factory, checker, rule_cache, recorder, clock)
        ),
        user_data_rules=UserDataRulesResource(
            ListUserDataRulesUseCase(uow_factory, checker, grant_resolver, clock)
        ),
        role_permissions=RolePermissionsResource(
            AssignRolePermissionUseCase(uow_factory, checker, recorder, clock),
            ListRolePermissionsUseCase(uow_factory, checker),
        ),
        role_permission=RolePermissionResource(
            RevokeRolePermissionUseCase(uow_factory, checker, recorder)
        ),
        role=RoleResource(DeleteRoleUseCase(uow_factory, checker, recorder)),
        configurations=ConfigurationsResource(
            CreateConfigurationUseCase(*config_args), get_configuration
        ),
        configuration=ConfigurationResource(get_configuration),
        pending_approvals=PendingApprovalsResource(
            ListPendingApprovalsUseCase(uow_factory, checker)
        ),
        configuration_propose=ConfigurationProposeResource(
            ProposeConfigurationChangeUseCase(*config_args)
        ),
        configuration_review=ConfigurationVersionReviewResource(
            ReviewConfigurationChangeUseCase(*config_args)
        ),
        configuration_rollback=ConfigurationRollbackResource(
            RollbackConfigurationUseCase(*config_args)
        ),
        configuration_versions=ConfigurationVersionsResource(
            ListConfigurationVersionsUseCase(uow_factory, checker)
        ),
        audit_logs=AuditLogsResource(ListAuditLogsUseCase(uow_factory, checker)),
        audit_log_archive=AuditLogArchiveResource(
            ArchiveAuditLogsUseCase(uow_factory, checker, recorder, clock)
        ),
        audit_report=AuditReportResource(AuditReportUseCase(uow_factory, checker)),
    )
    return create_app(resources, middleware=[AuthBypassMiddleware()])


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)
