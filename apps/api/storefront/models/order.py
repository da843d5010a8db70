import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, DateTime, Enum, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.db.base import Base, now_utc

if TYPE_CHECKING:
    from storefront.models.order_details import (
        OrderAddress,
        OrderCustomerDetails,
        OrderPaymentDetails,
    )


class OrderType(str, enum.Enum):
    PURCHASE = "purchase"
    RENTAL = "rental"


class OrderStatus(str, enum.Enum):
    NEW = "new"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Not unique: concurrent "latest" allocations may legitimately collide.
    order_number: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    order_type: Mapped[OrderType] = mapped_column(
        Enum(OrderType, name="order_type_enum", values_callable=enum_values),
        nullable=False,
        default=OrderType.PURCHASE,
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status_enum", values_callable=enum_values),
        nullable=False,
        default=OrderStatus.NEW,
    )
    order_status: Mapped[str | None] = mapped_column(String(64), nullable=True)

    products: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list
    )
    order_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rental_duration: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        server_default=func.now(),
        onupdate=now_utc,
    )

    customer_details: Mapped[Optional["OrderCustomerDetails"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )
    addresses: Mapped[list["OrderAddress"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )
    payment_details: Mapped[Optional["OrderPaymentDetails"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )
