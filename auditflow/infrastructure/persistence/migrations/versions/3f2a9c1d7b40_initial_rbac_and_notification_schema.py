"""initial_rbac_and_notification_schema

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-19 09:12:44.108213

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Capabilities the workflow routes and notification rules refer to.
CAPABILITY_CATALOG: list[tuple[str, str, str]] = [
    ("user", "read", "View users of the tenant and check their capabilities"),
    ("role", "update", "Change which capabilities a role grants"),
    ("userPermission", "manage", "Grant, revoke and remove per-user permission overrides"),
    ("department", "read", "View departments"),
    ("department", "update", "Update departments and their HOD pointer"),
    ("auditProgram", "create", "Create audit programs"),
    ("auditProgram", "read", "View audit programs"),
    ("auditProgram", "commit", "Submit an audit program for approval"),
    ("auditProgram", "approve", "Approve or reject audit programs"),
    ("auditFinding", "read", "View and review department findings"),
    ("auditFinding", "commit", "Commit findings for department review"),
    ("auditFinding", "review", "Accept or refuse findings"),
    ("auditFinding", "categorize", "Categorize findings"),
    ("document", "read", "View published documents"),
    ("document", "approve", "Approve documents submitted for approval"),
    ("document", "publish", "Publish approved documents"),
    ("documentChangeRequest", "approve", "Approve document change requests"),
]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema - tenant, users, departments, RBAC, overrides, notifications, audits."""

    # Create tenant table
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )
    op.create_index("ix_tenant_code", "tenant", ["code"])

    # Create app_user table
    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "email", name="uq_tenant_email"),
    )
    op.create_index("ix_app_user_tenant_id", "app_user", ["tenant_id"])

    # Create department table
    op.create_table(
        "department",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=True),
        sa.Column("hod_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["hod_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("tenant_id", "name", name="uq_department_tenant_name"),
    )
    op.create_index("ix_department_tenant_id", "department", ["tenant_id"])

    # Create role table
    op.create_table(
        "role",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_removable", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "name", name="uq_role_tenant_name"),
    )
    op.create_index("ix_role_tenant_id", "role", ["tenant_id"])

    # Create permission table (global capability catalog)
    permission_table = op.create_table(
        "permission",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("module", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("module", "action", name="uq_permission_module_action"),
    )

    # Create role_permission table
    op.create_table(
        "role_permission",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("permission_id", sa.String(), nullable=False),
        sa.Column("allowed", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permission.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )
    op.create_index(
        "ix_role_permission_permission", "role_permission", ["permission_id", "allowed"]
    )

    # Create user_role table (tenant-wide assignments)
    op.create_table(
        "user_role",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "role_id", name="uq_user_role"),
    )
    op.create_index("ix_user_role_role", "user_role", ["role_id"])

    # Create user_department_role table (department-scoped assignments)
    op.create_table(
        "user_department_role",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("department_id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("is_primary_role", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "is_primary_department", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "user_id", "department_id", "role_id", name="uq_user_department_role"
        ),
    )
    op.create_index(
        "ix_user_department_role_department",
        "user_department_role",
        ["department_id", "role_id"],
    )

    # Create user_permission table (per-user overrides, lazy expiry)
    op.create_table(
        "user_permission",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("permission_id", sa.String(), nullable=False),
        sa.Column("allowed", sa.Boolean(), nullable=False),
        sa.Column("granted_by", sa.String(), nullable=True),
        sa.Column(
            "granted_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permission.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["granted_by"], ["app_user.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("user_id", "permission_id", name="uq_user_permission"),
    )

    # Create notification table
    op.create_table(
        "notification",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("target_user_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.String(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["target_user_id"], ["app_user.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_notification_tenant_id", "notification", ["tenant_id"])
    op.create_index(
        "ix_notification_target_read", "notification", ["target_user_id", "is_read"]
    )
    op.create_index(
        "ix_notification_target_created", "notification", ["target_user_id", "created_at"]
    )

    # Create audit_program, audit and audit_finding tables
    op.create_table(
        "audit_program",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("created_by_id", sa.String(), nullable=True),
        sa.Column("committed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by_id", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approval_comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["app_user.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_audit_program_tenant_id", "audit_program", ["tenant_id"])
    op.create_index("ix_audit_program_status", "audit_program", ["status"])

    op.create_table(
        "audit",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("audit_program_id", sa.String(), nullable=False),
        sa.Column("audit_no", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["audit_program_id"], ["audit_program.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("ix_audit_audit_program_id", "audit", ["audit_program_id"])

    op.create_table(
        "audit_finding",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("audit_id", sa.String(), nullable=False),
        sa.Column("department", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("created_by_id", sa.String(), nullable=True),
        sa.Column("reviewed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hod_feedback", sa.Text(), nullable=True),
        sa.Column(
            "categorization_finished", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("categorization_finished_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["audit_id"], ["audit.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["app_user.id"], ondelete="SET NULL"),
    )
    op.create_index(
        "ix_audit_finding_audit_department",
        "audit_finding",
        ["audit_id", "department", "status"],
    )

    # Seed the capability catalog
    op.bulk_insert(
        permission_table,
        [
            {
                "id": f"perm_{module}_{action}",
                "module": module,
                "action": action,
                "description": description,
            }
            for module, action, description in CAPABILITY_CATALOG
        ],
    )


def downgrade() -> None:
    """Downgrade schema - drop everything created in upgrade."""
    op.drop_index("ix_audit_finding_audit_department", "audit_finding")
    op.drop_table("audit_finding")
    op.drop_index("ix_audit_audit_program_id", "audit")
    op.drop_table("audit")
    op.drop_index("ix_audit_program_status", "audit_program")
    op.drop_index("ix_audit_program_tenant_id", "audit_program")
    op.drop_table("audit_program")

    op.drop_index("ix_notification_target_created", "notification")
    op.drop_index("ix_notification_target_read", "notification")
    op.drop_index("ix_notification_tenant_id", "notification")
    op.drop_table("notification")

    op.drop_table("user_permission")
    op.drop_index("ix_user_department_role_department", "user_department_role")
    op.drop_table("user_department_role")
    op.drop_index("ix_user_role_role", "user_role")
    op.drop_table("user_role")
    op.drop_index("ix_role_permission_permission", "role_permission")
    op.drop_table("role_permission")
    op.drop_table("permission")
    op.drop_index("ix_role_tenant_id", "role")
    op.drop_table("role")

    op.drop_index("ix_department_tenant_id", "department")
    op.drop_table("department")
    op.drop_index("ix_app_user_tenant_id", "app_user")
    op.drop_table("app_user")
    op.drop_index("ix_tenant_code", "tenant")
    op.drop_table("tenant")
