"""Order submission: one primary write followed by best-effort enrichment writes.

The order row is the source of truth. Customer details, both addresses and the
payment row are each committed on their own; a failure is logged and counted
but neither rolls back the order nor stops the remaining writes. The admin
notification is written last on the same terms.
"""

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.db.base import Base, now_utc
from storefront.errors import OrderInsertFailedError, OrderNotReturnedError
from storefront.models.cart import CartItemBase
from storefront.models.notification import NotificationType
from storefront.models.order import Order, OrderStatus
from storefront.models.order_details import (
    AddressType,
    OrderAddress,
    OrderCustomerDetails,
    OrderPaymentDetails,
    PaymentStatus,
)
from storefront.observability import log_event, metrics_store, observe_timing
from storefront.schemas.checkout import CheckoutForm
from storefront.services.notifications_service import create_notification
from storefront.services.order_numbers import OrderNumberAllocator, get_order_number_allocator

INITIAL_ORDER_STATUS = "pending"
NOTIFICATION_TITLE = "New Order Received"


@dataclass
class CheckoutResult:
    order: Order
    order_number: str
    failed_writes: list[str] = field(default_factory=list)
    notification_created: bool = False

    @property
    def order_id(self) -> uuid.UUID:
        return self.order.id


def _optional(value: str | None) -> str | None:
    return value or None


def shipping_address_fields(form: CheckoutForm) -> dict[str, Any]:
    return {
        "address_line_1": form.shipping_address_1,
        "address_line_2": _optional(form.shipping_address_2),
        "city": form.shipping_city,
        "state": form.shipping_state,
        "postal_code": form.shipping_postal_code,
        "country": form.shipping_country,
        "phone": form.phone,
    }


def billing_address_fields(form: CheckoutForm) -> dict[str, Any]:
    if form.billing_same_as_shipping:
        return shipping_address_fields(form)
    return {
        "address_line_1": form.billing_address_1,
        "address_line_2": _optional(form.billing_address_2),
        "city": form.billing_city,
        "state": form.billing_state,
        "postal_code": form.billing_postal_code,
        "country": form.billing_country,
        "phone": form.phone,
    }


def _enrichment_rows(order_id: uuid.UUID, form: CheckoutForm) -> list[tuple[str, Base]]:
    return [
        (
            "customer_details",
            OrderCustomerDetails(
                order_id=order_id,
                name=form.name,
                email=form.email,
                phone=form.phone,
                company=_optional(form.company),
                gst_number=_optional(form.gst_number),
            ),
        ),
        (
            "shipping_address",
            OrderAddress(
                order_id=order_id,
                address_type=AddressType.SHIPPING,
                **shipping_address_fields(form),
            ),
        ),
        (
            "billing_address",
            OrderAddress(
                order_id=order_id,
                address_type=AddressType.BILLING,
                **billing_address_fields(form),
            ),
        ),
        (
            "payment_details",
            OrderPaymentDetails(
                order_id=order_id,
                payment_type=form.payment_type,
                payment_status=PaymentStatus.UNPAID,
            ),
        ),
    ]


def _insert_order(
    db: Session,
    cart: Sequence[CartItemBase],
    form: CheckoutForm,
    order_number: str,
    placed_at: datetime,
) -> Order:
    order = Order(
        order_number=order_number,
        customer_name=form.name,
        email=form.email,
        phone=form.phone,
        order_type=form.order_type,
        status=OrderStatus.NEW,
        order_status=INITIAL_ORDER_STATUS,
        products=[item.snapshot() for item in cart],
        order_notes=_optional(form.order_notes),
        created_at=placed_at,
        updated_at=placed_at,
    )
    try:
        db.add(order)
        db.commit()
        db.refresh(order)
    except SQLAlchemyError as exc:
        db.rollback()
        metrics_store.increment("checkout_order_insert_failure_total")
        log_event(
            "order_insert_failed",
            order_number=order_number,
            level=logging.ERROR,
            exc_info=exc,
        )
        raise OrderInsertFailedError(str(exc)) from exc

    if order.id is None:
        raise OrderNotReturnedError()
    return order


def _best_effort_insert(
    db: Session, label: str, row: Base, *, order_id: str, order_number: str
) -> bool:
    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        metrics_store.increment("checkout_enrichment_failure_total")
        metrics_store.increment(f"checkout_{label}_failure_total")
        log_event(
            f"order_{label}_insert_failed",
            order_id=order_id,
            order_number=order_number,
            level=logging.ERROR,
            exc_info=exc,
        )
        return False
    return True


def _notify_new_order(db: Session, order_id: str, order_number: str, customer_name: str) -> bool:
    try:
        create_notification(
            db,
            NotificationType.ORDER,
            NOTIFICATION_TITLE,
            f"Order #{order_number} from {customer_name}",
            reference_id=order_id,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        metrics_store.increment("checkout_notification_failure_total")
        log_event(
            "order_notification_failed",
            order_id=order_id,
            order_number=order_number,
            level=logging.WARNING,
            exc_info=exc,
        )
        return False
    return True


def submit_order(
    db: Session,
    cart: Sequence[CartItemBase],
    form: CheckoutForm,
    *,
    allocator: OrderNumberAllocator | None = None,
    on_success: Callable[[], None] | None = None,
    now: datetime | None = None,
) -> CheckoutResult:
    """Place an order for ``cart``.

    Raises ``OrderPlacementError`` when no order number can be allocated or the
    order row cannot be written; nothing else is written in that case and
    ``on_success`` is not called. Every later failure is absorbed and reported
    through ``CheckoutResult.failed_writes``.
    """
    allocator = allocator or get_order_number_allocator()
    placed_at = now or now_utc()
    metrics_store.increment("checkout_attempt_total")

    with observe_timing("checkout_seconds"):
        order_number = allocator.allocate(db, year=placed_at.year)
        order = _insert_order(db, cart, form, order_number, placed_at)
        order_id = str(order.id)

        failed_writes = [
            label
            for label, row in _enrichment_rows(order.id, form)
            if not _best_effort_insert(
                db, label, row, order_id=order_id, order_number=order_number
            )
        ]
        notification_created = _notify_new_order(db, order_id, order_number, form.name)
        if not notification_created:
            failed_writes.append("notification")

    metrics_store.increment("checkout_success_total")
    log_event("order_placed", order_id=order_id, order_number=order_number)

    if on_success is not None:
        on_success()

    return CheckoutResult(
        order=order,
        order_number=order_number,
        failed_writes=failed_writes,
        notification_created=notification_created,
    )
