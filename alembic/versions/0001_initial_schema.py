"""initial schema: closers, appointments, tasks, closer audit log

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "closers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("calendly_link", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("commission_rate", sa.Numeric(5, 4), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=True),
    )
    op.create_index("ix_closers_email", "closers", ["email"], unique=True)

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("type", sa.String(), nullable=False, server_default="appointment"),
        sa.Column("quiz_session_id", sa.String(), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("customer_email", sa.String(), nullable=False),
        sa.Column("customer_phone", sa.String(), nullable=True),
        sa.Column("scheduled_at", sa.TIMESTAMP(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("outcome", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("sale_value", sa.Numeric(10, 2), nullable=True),
        sa.Column("commission_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("affiliate_code", sa.String(), nullable=True),
        sa.Column("utm_source", sa.String(), nullable=True),
        sa.Column("utm_medium", sa.String(), nullable=True),
        sa.Column("utm_campaign", sa.String(), nullable=True),
        sa.Column("closer_id", sa.String(36), sa.ForeignKey("closers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("recording_link_converted", sa.Text(), nullable=True),
        sa.Column("recording_link_not_interested", sa.Text(), nullable=True),
        sa.Column("recording_link_needs_follow_up", sa.Text(), nullable=True),
        sa.Column("recording_link_wrong_number", sa.Text(), nullable=True),
        sa.Column("recording_link_no_answer", sa.Text(), nullable=True),
        sa.Column("recording_link_callback_requested", sa.Text(), nullable=True),
        sa.Column("recording_link_rescheduled", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=True),
    )
    op.create_index("ix_appointments_customer_email", "appointments", ["customer_email"])
    op.create_index("ix_appointments_closer_id", "appointments", ["closer_id"])
    op.create_index("ix_appointments_affiliate_code", "appointments", ["affiliate_code"])
    op.create_index("ix_appointments_quiz_session_id", "appointments", ["quiz_session_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("closer_id", sa.String(36), sa.ForeignKey("closers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("appointment_id", sa.String(36), sa.ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("lead_email", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("due_date", sa.TIMESTAMP(), nullable=True),
        sa.Column("completed_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=True),
    )
    op.create_index("ix_tasks_closer_id", "tasks", ["closer_id"])
    op.create_index("ix_tasks_lead_email", "tasks", ["lead_email"])

    op.create_table(
        "closer_audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("closer_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=True),
    )
    op.create_index("ix_closer_audit_logs_closer_id", "closer_audit_logs", ["closer_id"])


def downgrade() -> None:
    op.drop_table("closer_audit_logs")
    op.drop_table("tasks")
    op.drop_table("appointments")
    op.drop_table("closers")
