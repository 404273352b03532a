"""create payment_dialogs table

Revision ID: a3f1c9e2d7b4
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a3f1c9e2d7b4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "payment_dialogs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("invoices", sa.JSON(), nullable=False),
        sa.Column("selected_invoice_ids", sa.JSON(), nullable=False),
        sa.Column("allocations", sa.JSON(), nullable=False),
        sa.Column("payment_amount", sa.String(length=50), nullable=False),
        sa.Column("payment_method", sa.String(length=20), nullable=False),
        sa.Column("payment_reference", sa.String(length=255), nullable=False),
        sa.Column("attachment", sa.String(length=500), nullable=True),
        sa.Column("search_term", sa.String(length=255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payment_dialogs_owner", "payment_dialogs", ["owner"])
    op.create_index("ix_payment_dialogs_updated_at", "payment_dialogs", ["updated_at"])


def downgrade() -> None:
    op.drop_index("ix_payment_dialogs_updated_at", table_name="payment_dialogs")
    op.drop_index("ix_payment_dialogs_owner", table_name="payment_dialogs")
    op.drop_table("payment_dialogs")
