"""add checkout_idempotency_keys and order_number_counters tables

Revision ID: 20251102_0002
Revises: 20251101_0001
Create Date: 2025-11-02 00:02:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20251102_0002"
down_revision: Union[str, None] = "20251101_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "checkout_idempotency_keys",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("client_id", sa.String(length=128), nullable=False),
        sa.Column("scope", sa.String(length=255), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("payload_hash", sa.String(length=64), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column(
            "confirmation",
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "client_id", "scope", "idempotency_key", name="uq_checkout_idempotency_key"
        ),
    )
    op.create_index(
        "ix_checkout_idempotency_keys_expires_at",
        "checkout_idempotency_keys",
        ["expires_at"],
        unique=False,
    )

    op.create_table(
        "order_number_counters",
        sa.Column("scope", sa.String(length=64), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("scope"),
    )


def downgrade() -> None:
    op.drop_table("order_number_counters")
    op.drop_index(
        "ix_checkout_idempotency_keys_expires_at", table_name="checkout_idempotency_keys"
    )
    op.drop_table("checkout_idempotency_keys")
