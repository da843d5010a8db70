"""create orders, order detail tables and notifications

Revision ID: 20251101_0001
Revises:
Create Date: 2025-11-01 00:01:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20251101_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

order_type_enum = sa.Enum("purchase", "rental", name="order_type_enum")
order_status_enum = sa.Enum(
    "new", "processing", "completed", "cancelled", name="order_status_enum"
)
address_type_enum = sa.Enum("shipping", "billing", name="address_type_enum")
payment_type_enum = sa.Enum(
    "pay_on_delivery", "bank_transfer", "online_payment", "test_order", name="payment_type_enum"
)
payment_status_enum = sa.Enum("unpaid", "paid", "refunded", name="payment_status_enum")
notification_type_enum = sa.Enum(
    "order", "enquiry", "product", "system", name="notification_type_enum"
)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )


def _order_fk() -> sa.Column:
    return sa.Column(
        "order_id", sa.Uuid(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_number", sa.String(length=64), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("order_type", order_type_enum, nullable=False),
        sa.Column("status", order_status_enum, nullable=False),
        sa.Column("order_status", sa.String(length=64), nullable=True),
        sa.Column(
            "products",
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"),
            nullable=False,
        ),
        sa.Column("order_notes", sa.Text(), nullable=True),
        sa.Column("internal_notes", sa.Text(), nullable=True),
        sa.Column("rental_duration", sa.String(length=64), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orders_order_number", "orders", ["order_number"], unique=False)

    op.create_table(
        "order_customer_details",
        sa.Column("id", sa.Uuid(), nullable=False),
        _order_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("gst_number", sa.String(length=32), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_order_customer_details_order_id", "order_customer_details", ["order_id"]
    )

    op.create_table(
        "order_addresses",
        sa.Column("id", sa.Uuid(), nullable=False),
        _order_fk(),
        sa.Column("address_type", address_type_enum, nullable=False),
        sa.Column("address_line_1", sa.String(length=255), nullable=False),
        sa.Column("address_line_2", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=False),
        sa.Column("state", sa.String(length=128), nullable=False),
        sa.Column("postal_code", sa.String(length=32), nullable=False),
        sa.Column("country", sa.String(length=128), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_addresses_order_id", "order_addresses", ["order_id"])

    op.create_table(
        "order_payment_details",
        sa.Column("id", sa.Uuid(), nullable=False),
        _order_fk(),
        sa.Column("payment_type", payment_type_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_payment_details_order_id", "order_payment_details", ["order_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("type", notification_type_enum, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("reference_id", sa.String(length=64), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_order_payment_details_order_id", table_name="order_payment_details")
    op.drop_table("order_payment_details")
    op.drop_index("ix_order_addresses_order_id", table_name="order_addresses")
    op.drop_table("order_addresses")
    op.drop_index("ix_order_customer_details_order_id", table_name="order_customer_details")
    op.drop_table("order_customer_details")
    op.drop_index("ix_orders_order_number", table_name="orders")
    op.drop_table("orders")

    bind = op.get_bind()
    for enum_type in (
        notification_type_enum,
        payment_status_enum,
        payment_type_enum,
        address_type_enum,
        order_status_enum,
        order_type_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
