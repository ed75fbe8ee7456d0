from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "salon",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("birthday_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("anniversary_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("whatsapp_notifications", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sms_notifications", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_salon_is_active", "salon", ["is_active"])

    op.create_table(
        "customer",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("salon_id", sa.Integer(), sa.ForeignKey("salon.id"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("anniversary", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_customer_salon_id", "customer", ["salon_id"])

    op.create_table(
        "remindertemplate",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("salon_id", sa.Integer(), sa.ForeignKey("salon.id"), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_remindertemplate_salon_type", "remindertemplate", ["salon_id", "type"])

    op.create_table(
        "reminderlog",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("salon_id", sa.Integer(), sa.ForeignKey("salon.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.id"), nullable=False),
        sa.Column("template_id", sa.Integer(), sa.ForeignKey("remindertemplate.id"), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("occasion_date", sa.Date(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("channel", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("provider_message_id", sa.String(length=64), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_reminderlog_salon_id", "reminderlog", ["salon_id"])
    op.create_index("ix_reminderlog_customer_id", "reminderlog", ["customer_id"])
    op.create_index("ix_reminderlog_template_id", "reminderlog", ["template_id"])
    op.create_index(
        "ix_reminderlog_occurrence", "reminderlog", ["salon_id", "customer_id", "type", "occasion_date"]
    )


def downgrade() -> None:
    op.drop_table("reminderlog")
    op.drop_table("remindertemplate")
    op.drop_table("customer")
    op.drop_table("salon")
