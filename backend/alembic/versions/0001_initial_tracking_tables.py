"""Create shipments, shipment_status_logs and quotes.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "shipments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tracking_number", sa.String(32), nullable=False),
        sa.Column("sender_name", sa.String(255), nullable=False),
        sa.Column("sender_phone", sa.String(50), nullable=False),
        sa.Column("sender_address", sa.Text(), nullable=False),
        sa.Column("receiver_name", sa.String(255), nullable=False),
        sa.Column("receiver_phone", sa.String(50), nullable=False),
        sa.Column("receiver_address", sa.Text(), nullable=False),
        sa.Column("origin", sa.String(255), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("length", sa.Float(), server_default="0"),
        sa.Column("width", sa.Float(), server_default="0"),
        sa.Column("height", sa.Float(), server_default="0"),
        sa.Column("current_status", sa.String(30), nullable=False, server_default="registered"),
        sa.Column("status_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_delivery", sa.Date()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "weight >= 0 AND length >= 0 AND width >= 0 AND height >= 0",
            name="ck_shipments_dimensions_non_negative",
        ),
    )
    op.create_index("ix_shipments_tracking_number", "shipments", ["tracking_number"], unique=True)
    op.create_index("ix_shipments_current_status", "shipments", ["current_status"])

    op.create_table(
        "shipment_status_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("shipment_id", sa.String(36), sa.ForeignKey("shipments.id"), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("shipment_id", "sequence", name="uq_status_log_shipment_sequence"),
    )
    op.create_index("ix_shipment_status_logs_shipment_id", "shipment_status_logs", ["shipment_id"])
    op.create_index("ix_shipment_status_logs_created_at", "shipment_status_logs", ["created_at"])

    op.create_table(
        "quotes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("service_type", sa.String(20), nullable=False),
        sa.Column("origin", sa.String(255), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("message", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_quotes_email", "quotes", ["email"])
    op.create_index("ix_quotes_status", "quotes", ["status"])
    op.create_index("ix_quotes_created_at", "quotes", ["created_at"])


def downgrade() -> None:
    op.drop_table("quotes")
    op.drop_table("shipment_status_logs")
    op.drop_table("shipments")
