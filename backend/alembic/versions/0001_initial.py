"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates reports, messages, attachments, admin users and system settings.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

REPORT_STATUS = sa.Enum("NEW", "IN_PROGRESS", "CLOSED", name="reportstatus")
SENDER_TYPE = sa.Enum("WHISTLEBLOWER", "ADMIN", name="sendertype")
REPORT_CATEGORY = sa.Enum(
    "Korruption",
    "Diebstahl",
    "Belästigung",
    "Datenschutz",
    "Sonstiges",
    name="reportcategory",
)


def upgrade() -> None:
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("is_super", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_admin_users_id", "admin_users", ["id"])
    op.create_index("ix_admin_users_username", "admin_users", ["username"], unique=True)

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("case_code", sa.String(16), nullable=False),
        sa.Column("secret_hash", sa.String(), nullable=False),
        sa.Column("category", REPORT_CATEGORY, nullable=False),
        sa.Column("status", REPORT_STATUS, nullable=False),
        sa.Column("confirmation_sent", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_reports_id", "reports", ["id"])
    op.create_index("ix_reports_case_code", "reports", ["case_code"], unique=True)
    op.create_index("ix_reports_status", "reports", ["status"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "report_id", sa.Integer(), sa.ForeignKey("reports.id"), nullable=False
        ),
        sa.Column("sender_type", SENDER_TYPE, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_messages_id", "messages", ["id"])
    op.create_index(
        "ix_messages_report_created", "messages", ["report_id", "created_at"]
    )

    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "message_id", sa.Integer(), sa.ForeignKey("messages.id"), nullable=False
        ),
        sa.Column("storage_name", sa.String(64), nullable=False, unique=True),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(128), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_attachments_id", "attachments", ["id"])
    op.create_index("ix_attachments_message_id", "attachments", ["message_id"])

    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables. This destroys every report; development use only."""
    op.drop_table("system_settings")
    op.drop_table("attachments")
    op.drop_table("messages")
    op.drop_table("reports")
    op.drop_table("admin_users")
    bind = op.get_bind()
    for enum_type in (REPORT_CATEGORY, SENDER_TYPE, REPORT_STATUS):
        enum_type.drop(bind, checkfirst=True)
