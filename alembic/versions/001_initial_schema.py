"""Initial schema - identity views, roles, grants, data rules, audit log, configuration.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

RESOURCE_TYPES = [
    "posts",
    "comments",
    "categories",
    "tags",
    "roles",
    "permissions",
    "temporary_permission",
    "system_configuration",
    "audit_log",
]
SCOPES = ["read", "write", "delete", "admin"]


def upgrade() -> None:
    # Identity tables are owned by the blog; created here for standalone deployments.
    op.create_table(
        "app_user",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "role",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("normalized_name", sa.String(100), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_role_normalized_name", "role", ["normalized_name"], unique=True)

    op.create_table(
        "user_role",
        sa.Column("user_id", sa.String(255), sa.ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id"), primary_key=True),
    )

    op.create_table(
        "permission",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("scope", sa.String(20), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_permission_name", "permission", ["name"], unique=True)

    op.create_table(
        "role_permission",
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id"), primary_key=True),
        sa.Column("permission_id", sa.UUID(), sa.ForeignKey("permission.id"), primary_key=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("granted_by", sa.String(255), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
    )

    op.create_table(
        "temporary_permission",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("resource_type", sa.String(100), nullable=False),
        sa.Column("resource_id", sa.String(255), nullable=True),
        sa.Column("operation", sa.String(20), nullable=False),
        sa.Column("granted_by", sa.String(255), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("delegated_from", sa.UUID(), sa.ForeignKey("temporary_permission.id"), nullable=True),
        sa.Column("allow_delegation", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("revoked_by", sa.String(255), nullable=True),
        sa.Column("revoke_reason", sa.Text(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("effective_from <= expires_at", name="ck_temporary_permission_window"),
    )
    op.create_index(
        "ix_temporary_permission_user_resource",
        "temporary_permission",
        ["user_id", "resource_type", "resource_id"],
    )
    op.create_index("ix_temporary_permission_delegated_from", "temporary_permission", ["delegated_from"])

    op.create_table(
        "data_permission_rule",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id"), nullable=True),
        sa.Column("resource_type", sa.String(100), nullable=False),
        sa.Column("operation", sa.String(20), nullable=False),
        sa.Column("conditions", sa.Text(), nullable=False, server_default=""),
        sa.Column("granted_by", sa.String(255), nullable=False),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("effective_to", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint(
            "effective_to IS NULL OR effective_from <= effective_to",
            name="ck_data_permission_rule_window",
        ),
    )
    op.create_index(
        "ix_data_permission_rule_resource_operation",
        "data_permission_rule",
        ["resource_type", "operation"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(100), nullable=False),
        sa.Column("resource_id", sa.String(255), nullable=True),
        sa.Column("resource_name", sa.String(255), nullable=True),
        sa.Column("result", sa.String(20), nullable=False),
        sa.Column("risk_level", sa.String(20), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("old_values", sa.Text(), nullable=True),
        sa.Column("new_values", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("correlation_id", sa.UUID(), nullable=False),
        sa.Column("session_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_audit_log_user_created", "audit_log", ["user_id", "created_at"])
    op.create_index("ix_audit_log_resource", "audit_log", ["resource_type", "resource_id"])
    op.create_index("ix_audit_log_correlation", "audit_log", ["correlation_id"])

    # Append-only: no DELETE, and UPDATE may only touch archival bookkeeping.
    op.execute("""
        CREATE FUNCTION audit_log_append_only() RETURNS trigger AS $$
        BEGIN
            IF TG_OP = 'DELETE' THEN
                RAISE EXCEPTION 'audit_log is append-only';
            END IF;
            IF (to_jsonb(NEW) - 'is_archived' - 'archived_at')
               IS DISTINCT FROM (to_jsonb(OLD) - 'is_archived' - 'archived_at') THEN
                RAISE EXCEPTION 'audit_log entries are immutable';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)
    op.execute("""
        CREATE TRIGGER audit_log_append_only
        BEFORE UPDATE OR DELETE ON audit_log
        FOR EACH ROW EXECUTE FUNCTION audit_log_append_only()
    """)

    op.create_table(
        "system_configuration",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("section", sa.String(100), nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("data_type", sa.String(20), nullable=False, server_default="string"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("criticality", sa.String(20), nullable=False, server_default="Low"),
        sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_read_only", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("current_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index(
        "ix_system_configuration_section_key", "system_configuration", ["section", "key"], unique=True
    )

    op.create_table(
        "configuration_version",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "configuration_id",
            sa.UUID(),
            sa.ForeignKey("system_configuration.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("change_type", sa.String(20), nullable=False),
        sa.Column("change_reason", sa.Text(), nullable=True),
        sa.Column("approval_status", sa.String(20), nullable=False),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approval_notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("checksum", sa.String(64), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_rollback", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index(
        "ix_configuration_version_number",
        "configuration_version",
        ["configuration_id", "version"],
        unique=True,
    )
    op.create_index(
        "ix_configuration_version_current",
        "configuration_version",
        ["configuration_id"],
        unique=True,
        postgresql_where=sa.text("is_current"),
    )

    resource_types = ", ".join(f"'{t}'" for t in RESOURCE_TYPES)
    scopes = ", ".join(f"'{s}'" for s in SCOPES)
    op.execute(f"""
        INSERT INTO permission (id, name, category, scope, is_system)
        SELECT gen_random_uuid(), t || '.' || s, t, s, true
        FROM unnest(ARRAY[{resource_types}]) AS t, unnest(ARRAY[{scopes}]) AS s
    """)
    op.execute("""
        INSERT INTO permission (id, name, category, scope, is_system)
        VALUES (gen_random_uuid(), 'system.super_admin', 'system', 'admin', true)
    """)
    op.execute("""
        INSERT INTO role (id, name, normalized_name, is_system) VALUES
        (gen_random_uuid(), 'SuperAdmin', 'SUPERADMIN', true),
        (gen_random_uuid(), 'Admin', 'ADMIN', true),
        (gen_random_uuid(), 'Author', 'AUTHOR', true),
        (gen_random_uuid(), 'User', 'USER', true)
    """)
    op.execute("""
        INSERT INTO role_permission (role_id, permission_id, granted_at, granted_by)
        SELECT r.id, p.id, NOW(), 'system' FROM role r, permission p
        WHERE (r.name = 'SuperAdmin' AND p.name = 'system.super_admin')
           OR (r.name = 'Admin' AND p.scope = 'admin' AND p.category <> 'system')
           OR (r.name = 'Author' AND p.name IN
               ('posts.read', 'posts.write', 'comments.read', 'categories.read', 'tags.read'))
           OR (r.name = 'User' AND p.name IN ('posts.read', 'comments.read', 'comments.write'))
    """)


def downgrade() -> None:
    op.drop_table("configuration_version")
    op.drop_table("system_configuration")
    op.execute("DROP TRIGGER IF EXISTS audit_log_append_only ON audit_log")
    op.execute("DROP FUNCTION IF EXISTS audit_log_append_only()")
    op.drop_table("audit_log")
    op.drop_table("data_permission_rule")
    op.drop_table("temporary_permission")
    op.drop_table("role_permission")
    op.drop_table("permission")
    op.drop_table("user_role")
    op.drop_table("role")
    op.drop_table("app_user")
