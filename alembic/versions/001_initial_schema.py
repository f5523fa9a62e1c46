"""Initial schema: claims, payments

Revision ID: 001
Revises:
Create Date: 2025-11-07

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Owned by the claims system; this service only reads id, status and claimed_amount.
    op.create_table(
        "claims",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("claimed_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("claim_id", sa.BigInteger, sa.ForeignKey("claims.id"), nullable=False),
        sa.Column("amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("transaction_reference", sa.String(32), nullable=False),
        sa.Column("payment_date", sa.Date, nullable=False),
        sa.Column("processed_by", sa.String(100), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )
    op.create_index("ix_payments_transaction_reference", "payments", ["transaction_reference"], unique=True)
    op.create_index("ix_payments_claim_id", "payments", ["claim_id"])
    op.create_index("ix_payments_payment_status", "payments", ["payment_status"])


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("claims")
