"""Create audit_logs table.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="success"),
        sa.Column("error", sa.Text()),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(64)),
        sa.Column("performed_by", sa.String(64)),
        sa.Column("user_details", sa.JSON()),
        sa.Column("ip_address", sa.String(64)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("previous_state", sa.JSON()),
        sa.Column("new_state", sa.JSON()),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("execution_time", sa.Float()),
        sa.Column("tx_hash", sa.String(128)),
        sa.Column("block_number", sa.Integer()),
        sa.Column(
            "timestamp", sa.DateTime(timezone=True),
            nullable=False, server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_audit_logs_type_timestamp", "audit_logs", ["type", "timestamp"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_id", "entity_type"])
    op.create_index(
        "ix_audit_logs_performed_by_timestamp", "audit_logs", ["performed_by", "timestamp"]
    )
    op.create_index("ix_audit_logs_status", "audit_logs", ["status"])


def downgrade() -> None:
    op.drop_table("audit_logs")
