"""Initial schema — clients, caseworkers, assignments and their history.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Caseworkers
    op.create_table(
        "caseworkers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer, nullable=False),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "is_available_for_new_clients", sa.Boolean, nullable=False, server_default=sa.true()
        ),
        sa.Column("max_client_capacity", sa.Integer, nullable=True),
        sa.Column("current_workload", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "specialization", ARRAY(sa.String(50)), nullable=False, server_default="{}"
        ),
        sa.Column("completed_cases", sa.Integer, nullable=False, server_default="0"),
        sa.Column("successful_cases", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rejected_cases", sa.Integer, nullable=False, server_default="0"),
        sa.Column("case_success_rate", sa.Integer, nullable=True),
    )
    op.create_index(
        "idx_caseworkers_tenant_available",
        "caseworkers",
        ["tenant_id", "is_active", "is_available_for_new_clients"],
    )
    op.create_index("idx_caseworkers_workload", "caseworkers", ["current_workload"])

    # Clients
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.Integer, nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="client"),
        sa.Column(
            "assigned_to", sa.Integer,
            sa.ForeignKey("caseworkers.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "onboarded_by", sa.Integer,
            sa.ForeignKey("caseworkers.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("onboarding_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("case_type", sa.String(50), nullable=True),
        sa.Column("case_status", sa.String(50), nullable=True),
    )
    op.create_index("idx_clients_tenant", "clients", ["tenant_id"])

    # Assignments
    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "client_id", sa.Integer,
            sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("tenant_id", sa.Integer, nullable=False),
        sa.Column(
            "current_caseworker_id", sa.Integer, sa.ForeignKey("caseworkers.id"), nullable=False
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("acceptance_deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "onboarded_by", sa.Integer, sa.ForeignKey("caseworkers.id"), nullable=False
        ),
        sa.Column("onboarding_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("case_type", sa.String(50), nullable=True),
        sa.Column("case_status", sa.String(50), nullable=True),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column(
            "auto_reassignment_enabled", sa.Boolean, nullable=False, server_default=sa.true()
        ),
        sa.Column("auto_reassignment_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "max_auto_reassignment_attempts", sa.Integer, nullable=False, server_default="3"
        ),
        sa.Column("is_auto_reassigned", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("requires_attention", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index(
        "uq_assignments_open_per_client",
        "assignments",
        ["client_id", "tenant_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'accepted', 'active')"),
    )
    op.create_index(
        "idx_assignments_caseworker_status", "assignments", ["current_caseworker_id", "status"]
    )
    op.create_index(
        "idx_assignments_deadline_status", "assignments", ["acceptance_deadline", "status"]
    )
    op.create_index(
        "idx_assignments_tenant_attention", "assignments", ["tenant_id", "requires_attention"]
    )

    # Assignment history
    op.create_table(
        "assignment_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "assignment_id", sa.Integer,
            sa.ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column(
            "caseworker_id", sa.Integer, sa.ForeignKey("caseworkers.id"), nullable=False
        ),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reassigned_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reassign_reason", sa.Text, nullable=True),
        sa.Column("assigned_by", sa.Integer, nullable=True),
    )
    op.create_index(
        "uq_assignment_history_sequence",
        "assignment_history",
        ["assignment_id", "sequence"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_table("assignment_history")
    op.drop_table("assignments")
    op.drop_table("clients")
    op.drop_table("caseworkers")
