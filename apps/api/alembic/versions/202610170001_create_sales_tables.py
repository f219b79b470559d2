"""create sales user and opportunity tables

Revision ID: 202610170001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202610170001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "sales_user",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('IC', 'Front Line Manager', 'Executive')", name="ck_sales_user_role"),
    )
    op.create_index("ix_sales_user_role", "sales_user", ["role"])

    op.create_table(
        "sales_opportunity",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("stage", sa.String(length=32), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("close_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_to_id", sa.String(length=64), nullable=False),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("last_activity_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deal_probability", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["assigned_to_id"], ["sales_user.id"], ondelete="NO ACTION"),
        sa.CheckConstraint("amount > 0", name="ck_sales_opportunity_amount_positive"),
        sa.CheckConstraint(
            "deal_probability >= 0 AND deal_probability <= 100",
            name="ck_sales_opportunity_probability_range",
        ),
        sa.CheckConstraint(
            "stage IN ('Prospecting', 'Qualification', 'Proposal', 'Negotiation', 'Closed Won', 'Closed Lost')",
            name="ck_sales_opportunity_stage",
        ),
    )
    op.create_index("ix_sales_opportunity_assigned_to", "sales_opportunity", ["assigned_to_id"])
    op.create_index("ix_sales_opportunity_stage", "sales_opportunity", ["stage"])
    op.create_index("ix_sales_opportunity_close_date", "sales_opportunity", ["close_date"])


def downgrade() -> None:
    op.drop_index("ix_sales_opportunity_close_date", table_name="sales_opportunity")
    op.drop_index("ix_sales_opportunity_stage", table_name="sales_opportunity")
    op.drop_index("ix_sales_opportunity_assigned_to", table_name="sales_opportunity")
    op.drop_table("sales_opportunity")
    op.drop_index("ix_sales_user_role", table_name="sales_user")
    op.drop_table("sales_user")
