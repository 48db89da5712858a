"""Falcon ASGI application."""

from dataclasses import dataclass

import falcon.asgi
from falcon.asgi import App

from quillgate.interfaces.api.errors import register_error_handlers
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


@dataclass
class Resources:
    """Every API resource, wired by the composition root."""

    health: HealthResource
    permission_check: PermissionCheckResource
    permission_batch_check: PermissionBatchCheckResource
    temporary_permissions: TemporaryPermissionsResource
    temporary_permission_revoke: TemporaryPermissionRevokeResource
    temporary_permission_delegate: TemporaryPermissionDelegateResource
    data_rules: DataRulesResource
    data_rule_deactivate: DataRuleDeactivateResource
    user_data_rules: UserDataRulesResource
    role_permissions: RolePermissionsResource
    role_permission: RolePermissionResource
    role: RoleResource
    configurations: ConfigurationsResource
    configuration: ConfigurationResource
    pending_approvals: PendingApprovalsResource
    configuration_propose: ConfigurationProposeResource
    configuration_review: ConfigurationVersionReviewResource
    configuration_rollback: ConfigurationRollbackResource
    configuration_versions: ConfigurationVersionsResource
    audit_logs: AuditLogsResource
    audit_log_archive: AuditLogArchiveResource
    audit_report: AuditReportResource


def create_app(resources: Resources, middleware: list | None = None) -> App:
    """Create Falcon ASGI app with routes and error handlers."""
    app = falcon.asgi.App(middleware=middleware or [])
    register_error_handlers(app)

    app.add_route("/v1/health", resources.health)
    app.add_route("/v1/health/ready", resources.health, suffix="ready")

    app.add_route("/v1/permissions/check", resources.permission_check)
    app.add_route("/v1/permissions/check-batch", resources.permission_batch_check)
    app.add_route("/v1/permissions/temporary", resources.temporary_permissions)
    app.add_route(
        "/v1/permissions/temporary/{grant_id}/revoke", resources.temporary_permission_revoke
    )
    app.add_route(
        "/v1/permissions/temporary/{grant_id}/delegate", resources.temporary_permission_delegate
    )
    app.add_route("/v1/permissions/data-rules", resources.data_rules)
    app.add_route("/v1/permissions/data-rules/{rule_id}/deactivate", resources.data_rule_deactivate)
    app.add_route("/v1/users/{user_id}/data-rules", resources.user_data_rules)

    app.add_route("/v1/roles/{role_id}", resources.role)
    app.add_route("/v1/roles/{role_id}/permissions", resources.role_permissions)
    app.add_route("/v1/roles/{role_id}/permissions/{permission_id}", resources.role_permission)

    app.add_route("/v1/config", resources.configurations)
    app.add_route("/v1/config/pending-approvals", resources.pending_approvals)
    app.add_route("/v1/config/{config_id}", resources.configuration)
    app.add_route("/v1/config/{config_id}/propose", resources.configuration_propose)
    app.add_route("/v1/config/{config_id}/rollback", resources.configuration_rollback)
    app.add_route("/v1/config/{config_id}/versions", resources.configuration_versions)
    app.add_route(
        "/v1/config/versions/{version_id}/approve", resources.configuration_review, suffix="approve"
    )
    app.add_route(
        "/v1/config/versions/{version_id}/reject", resources.configuration_review, suffix="reject"
    )

    app.add_route("/v1/audit-logs", resources.audit_logs)
    app.add_route("/v1/audit-logs/archive", resources.audit_log_archive)
    app.add_route("/v1/audit-logs/report", resources.audit_report)
    return app
