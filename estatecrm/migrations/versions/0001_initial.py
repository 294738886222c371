"""projects, units, bookings, payments, reminders and audit log

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

import sqlalchemy as sa
from alembic import op


def _has_table(inspector, name: str) -> bool:
    return inspector.has_table(name)


def _ensure_index(inspector, table: str, name: str, columns: list[str], unique: bool = False) -> None:
    existing = {index["name"] for index in inspector.get_indexes(table)}
    if name not in existing:
        op.create_index(name, table, columns, unique=unique)


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not _has_table(inspector, "projects"):
        op.create_table(
            "projects",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("tenant_id", sa.String(), nullable=True),
            sa.Column("location", sa.String(), nullable=True),
            sa.Column("status", sa.String(), nullable=False, server_default="Active"),
            sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("closed_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if not _has_table(inspector, "units"):
        op.create_table(
            "units",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
            sa.Column("unit_no", sa.String(), nullable=False),
            sa.Column("price", sa.Numeric(14, 2), nullable=False),
            sa.Column("status", sa.String(), nullable=False, server_default="AVAILABLE"),
            sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if not _has_table(inspector, "bookings"):
        op.create_table(
            "bookings",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id"), nullable=False),
            sa.Column("tenant_id", sa.String(), nullable=True),
            sa.Column("customer_id", sa.String(), nullable=False),
            sa.Column("customer_name", sa.String(), nullable=False),
            sa.Column("customer_email", sa.String(), nullable=True),
            sa.Column("customer_phone", sa.String(), nullable=True),
            sa.Column("project_id", sa.Integer(), nullable=True),
            sa.Column("project_name", sa.String(), nullable=True),
            sa.Column("unit_no", sa.String(), nullable=True),
            sa.Column("token_amount", sa.Numeric(14, 2), nullable=False),
            sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
            sa.Column("status", sa.String(), nullable=False, server_default="HOLD"),
            sa.Column("hold_expires_at", sa.DateTime(), nullable=True),
            sa.Column("agent_id", sa.String(), nullable=True),
            sa.Column("agent_name", sa.String(), nullable=True),
            sa.Column("manager_id", sa.String(), nullable=True),
            sa.Column("manager_name", sa.String(), nullable=True),
            sa.Column("manager_approved_at", sa.DateTime(), nullable=True),
            sa.Column("manager_notes", sa.Text(), nullable=True),
            sa.Column("payment_id", sa.Integer(), nullable=True),
            sa.Column("payment_mode", sa.String(), nullable=True),
            sa.Column("payment_remarks", sa.Text(), nullable=True),
            sa.Column("payment_recorded_at", sa.DateTime(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("booked_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if not _has_table(inspector, "payments"):
        op.create_table(
            "payments",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("tenant_id", sa.String(), nullable=True),
            sa.Column("customer_id", sa.String(), nullable=False),
            sa.Column("customer_name", sa.String(), nullable=True),
            sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id"), nullable=True),
            sa.Column("unit_no", sa.String(), nullable=True),
            sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=True),
            sa.Column("amount", sa.Numeric(14, 2), nullable=False),
            sa.Column("payment_type", sa.String(), nullable=False, server_default="Booking"),
            sa.Column("method", sa.String(), nullable=False, server_default="Bank Transfer"),
            sa.Column("date", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("due_date", sa.Date(), nullable=True),
            sa.Column("status", sa.String(), nullable=False, server_default="Pending"),
            sa.Column("receipt_no", sa.String(), nullable=True, unique=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("next_reminder_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if not _has_table(inspector, "payment_reminders"):
        op.create_table(
            "payment_reminders",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("payment_id", sa.Integer(), sa.ForeignKey("payments.id", ondelete="CASCADE"), nullable=False),
            sa.Column("channel", sa.String(), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("scheduled_at", sa.DateTime(), nullable=False),
            sa.Column("status", sa.String(), nullable=False, server_default="SCHEDULED"),
            sa.Column("sent_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if not _has_table(inspector, "audit_logs"):
        op.create_table(
            "audit_logs",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("actor_id", sa.String(), nullable=False, server_default="system"),
            sa.Column("actor_name", sa.String(), nullable=True),
            sa.Column("tenant_id", sa.String(), nullable=True),
            sa.Column("action", sa.String(), nullable=False),
            sa.Column("entity_type", sa.String(), nullable=False),
            sa.Column("entity_id", sa.String(), nullable=True),
            sa.Column("details", sa.Text(), nullable=True),
        )

    inspector = sa.inspect(bind)
    _ensure_index(inspector, "projects", "ix_projects_id", ["id"])
    _ensure_index(inspector, "projects", "ix_projects_tenant_id", ["tenant_id"])
    _ensure_index(inspector, "units", "ix_units_id", ["id"])
    _ensure_index(inspector, "units", "ix_units_project_id", ["project_id"])
    _ensure_index(inspector, "units", "ix_units_status", ["status"])
    _ensure_index(inspector, "bookings", "ix_bookings_id", ["id"])
    _ensure_index(inspector, "bookings", "ix_bookings_tenant_id", ["tenant_id"])
    _ensure_index(inspector, "bookings", "ix_bookings_customer_id", ["customer_id"])
    _ensure_index(inspector, "bookings", "ix_bookings_status", ["status"])
    _ensure_index(inspector, "bookings", "ix_bookings_unit_status", ["unit_id", "status"])
    _ensure_index(inspector, "payments", "ix_payments_id", ["id"])
    _ensure_index(inspector, "payments", "ix_payments_tenant_id", ["tenant_id"])
    _ensure_index(inspector, "payments", "ix_payments_customer_id", ["customer_id"])
    _ensure_index(inspector, "payments", "ix_payments_booking_id", ["booking_id"])
    _ensure_index(inspector, "payments", "ix_payments_status", ["status"])
    _ensure_index(inspector, "payment_reminders", "ix_payment_reminders_id", ["id"])
    _ensure_index(inspector, "payment_reminders", "ix_payment_reminders_payment_id", ["payment_id"])
    _ensure_index(inspector, "payment_reminders", "ix_payment_reminders_status", ["status"])
    _ensure_index(inspector, "audit_logs", "ix_audit_logs_id", ["id"])
    _ensure_index(inspector, "audit_logs", "ix_audit_logs_timestamp", ["timestamp"])


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in ("audit_logs", "payment_reminders", "payments", "bookings", "units", "projects"):
        if _has_table(inspector, table):
            op.drop_table(table)
