"""Initial schema for the salon PIX payment service.

Revision ID: 4b8e2a6d1c90
Revises:
Create Date: 2026-10-18 09:12:31.204118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4b8e2a6d1c90"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("owner", "staff", name="userrole")
charge_mode = sa.Enum("none", "full", "partial_percent", "partial_fixed", name="chargemode")
pix_key_type = sa.Enum("cpf", "cnpj", "email", "phone", "random", name="pixkeytype")
appointment_status = sa.Enum(
    "pending", "pending_payment", "confirmed", "cancelled", "completed", "no_show", name="appointmentstatus"
)
payment_status = sa.Enum("pending", "paid", "cancelled", name="paymentstatus")


def upgrade() -> None:
    op.create_table(
        "workspaces",
        sa.Column("workspace_id", sa.String(length=26), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("slug", sa.String(length=80), nullable=False),
        sa.Column("require_payment", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("charge_mode", charge_mode, nullable=False, server_default="none"),
        sa.Column("partial_percent", sa.Integer()),
        sa.Column("partial_fixed_amount", sa.Numeric(10, 2)),
        sa.Column("payment_expiry_minutes", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("pix_key_type", pix_key_type),
        sa.Column("pix_key", sa.String(length=77)),
        sa.Column("pix_holder_name", sa.String(length=100)),
        sa.Column("pix_city", sa.String(length=50)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "partial_percent IS NULL OR (partial_percent BETWEEN 10 AND 100)",
            name="ck_workspaces_partial_percent",
        ),
        sa.CheckConstraint("payment_expiry_minutes BETWEEN 10 AND 1440", name="ck_workspaces_payment_expiry"),
    )
    op.create_index("ix_workspaces_slug", "workspaces", ["slug"], unique=True)

    op.create_table(
        "users",
        sa.Column("user_id", sa.String(length=26), primary_key=True),
        sa.Column(
            "workspace_id",
            sa.String(length=26),
            sa.ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(length=255)),
        sa.Column("role", user_role, nullable=False, server_default="staff"),
        sa.Column("display_name", sa.String(length=100)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_workspace_id", "users", ["workspace_id"])

    op.create_table(
        "appointments",
        sa.Column("appointment_id", sa.String(length=26), primary_key=True),
        sa.Column(
            "workspace_id",
            sa.String(length=26),
            sa.ForeignKey("workspaces.workspace_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("client_name", sa.String(length=120), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_price_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", appointment_status, nullable=False, server_default="pending"),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_by", sa.String(length=26)),
        sa.Column("cancel_reason", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        sa.CheckConstraint("total_price_cents >= 0", name="ck_appointments_total_non_negative"),
    )
    op.create_index("ix_appointments_workspace_start", "appointments", ["workspace_id", "start_time"])

    op.create_table(
        "payments",
        sa.Column("payment_id", sa.String(length=26), primary_key=True),
        sa.Column(
            "appointment_id",
            sa.String(length=26),
            sa.ForeignKey("appointments.appointment_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("service_total_cents", sa.Integer(), nullable=False),
        sa.Column("status", payment_status, nullable=False, server_default="pending"),
        sa.Column("pix_code", sa.Text()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("confirmed_by", sa.String(length=26)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("appointment_id", name="uq_payments_appointment_id"),
        sa.CheckConstraint("amount_cents > 0", name="ck_payments_amount_positive"),
        sa.CheckConstraint("service_total_cents >= amount_cents", name="ck_payments_amount_within_total"),
    )
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_expires_at", "payments", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_payments_expires_at", table_name="payments")
    op.drop_index("ix_payments_status", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_appointments_workspace_start", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_users_workspace_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_workspaces_slug", table_name="workspaces")
    op.drop_table("workspaces")
    payment_status.drop(op.get_bind(), checkfirst=False)
    appointment_status.drop(op.get_bind(), checkfirst=False)
    pix_key_type.drop(op.get_bind(), checkfirst=False)
    charge_mode.drop(op.get_bind(), checkfirst=False)
    user_role.drop(op.get_bind(), checkfirst=False)
