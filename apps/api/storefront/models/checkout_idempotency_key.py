import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, UniqueConstraint, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import Base, now_utc


class CheckoutIdempotencyKey(Base):
    """Confirmation returned for a checkout submitted with an ``Idempotency-Key``."""

    __tablename__ = "checkout_idempotency_keys"
    __table_args__ = (
        UniqueConstraint(
            "client_id", "scope", "idempotency_key", name="uq_checkout_idempotency_key"
        ),
        Index("ix_checkout_idempotency_keys_expires_at", "expires_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[str] = mapped_column(String(128), nullable=False)
    scope: Mapped[str] = mapped_column(String(255), nullable=False)
    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False)
    payload_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    # No foreign key: the key outlives a deleted order.
    order_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    confirmation: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc, server_default=func.now()
    )
