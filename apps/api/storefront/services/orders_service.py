import csv
import io
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from storefront.models.order import Order, OrderStatus, OrderType
from storefront.models.order_details import (
    AddressType,
    OrderAddress,
    OrderCustomerDetails,
    OrderPaymentDetails,
)
from storefront.observability import log_event, metrics_store
from storefront.services.state_machine import ensure_valid_transition

ALL = "all"
CSV_HEADERS = [
    "Order ID",
    "Customer Name",
    "Email",
    "Phone",
    "Order Type",
    "Status",
    "Total Amount",
    "Created At",
]


@dataclass
class OrderDetails:
    order: Order
    customer: OrderCustomerDetails | None
    shipping_address: OrderAddress | None
    billing_address: OrderAddress | None
    payment: OrderPaymentDetails | None


def order_total(products: Any) -> float:
    if not isinstance(products, list):
        return 0
    total = 0.0
    for item in products:
        if not isinstance(item, dict):
            continue
        price = item.get("price") or 0
        quantity = item.get("quantity") or 1
        total += float(price) * float(quantity)
    return total


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def get_order(db: Session, order_id: uuid.UUID) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


def list_orders(
    db: Session,
    *,
    status_filter: OrderStatus | str | None = None,
    type_filter: OrderType | str | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Order], int]:
    filters: list[Any] = []
    if status_filter and status_filter != ALL:
        filters.append(Order.status == OrderStatus(status_filter))
    if type_filter and type_filter != ALL:
        filters.append(Order.order_type == OrderType(type_filter))

    term = (search or "").strip().lower()
    if term:
        filters.append(
            or_(
                func.lower(Order.customer_name).contains(term, autoescape=True),
                func.lower(func.coalesce(Order.email, "")).contains(term, autoescape=True),
                func.lower(func.coalesce(Order.order_number, "")).contains(term, autoescape=True),
            )
        )

    total = db.scalar(select(func.count()).select_from(Order).where(*filters)) or 0
    query = (
        select(Order)
        .where(*filters)
        .order_by(Order.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(db.scalars(query)), int(total)


def _address(db: Session, order_id: uuid.UUID, address_type: AddressType) -> OrderAddress | None:
    return db.scalar(
        select(OrderAddress)
        .where(OrderAddress.order_id == order_id, OrderAddress.address_type == address_type)
        .order_by(OrderAddress.created_at.asc())
        .limit(1)
    )


def get_order_details(db: Session, order_id: uuid.UUID) -> OrderDetails:
    order = get_order(db, order_id)
    customer = db.scalar(
        select(OrderCustomerDetails).where(OrderCustomerDetails.order_id == order_id).limit(1)
    )
    payment = db.scalar(
        select(OrderPaymentDetails).where(OrderPaymentDetails.order_id == order_id).limit(1)
    )
    return OrderDetails(
        order=order,
        customer=customer,
        shipping_address=_address(db, order_id, AddressType.SHIPPING),
        billing_address=_address(db, order_id, AddressType.BILLING),
        payment=payment,
    )


def update_order_status(db: Session, order_id: uuid.UUID, next_status: OrderStatus) -> Order:
    order = get_order(db, order_id)
    previous_status = order.status
    ensure_valid_transition(previous_status, next_status)

    if previous_status == next_status:
        return order

    order.status = next_status
    db.commit()
    db.refresh(order)
    metrics_store.increment("order_status_updated_total")
    log_event(
        f"order_status_{previous_status.value}_to_{next_status.value}",
        order_id=str(order.id),
        order_number=order.order_number,
    )
    return order


def delete_order(db: Session, order_id: uuid.UUID) -> None:
    order = get_order(db, order_id)
    order_number = order.order_number
    _delete_order_rows(db, [order_id])
    db.commit()
    log_event("order_deleted", order_id=str(order_id), order_number=order_number)


def reset_orders(db: Session) -> int:
    """Remove every order together with its detail rows."""
    order_ids = list(db.scalars(select(Order.id)))
    _delete_order_rows(db, order_ids)
    db.commit()
    metrics_store.increment("order_reset_total")
    log_event(f"orders_reset count={len(order_ids)}")
    return len(order_ids)


def _delete_order_rows(db: Session, order_ids: list[uuid.UUID]) -> None:
    if not order_ids:
        return
    for model in (OrderCustomerDetails, OrderAddress, OrderPaymentDetails):
        db.execute(delete(model).where(model.order_id.in_(order_ids)))
    db.execute(delete(Order).where(Order.id.in_(order_ids)))
    db.expire_all()


def export_orders_csv(db: Session) -> str:
    orders = list(db.scalars(select(Order).order_by(Order.created_at.desc())))
    if not orders:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No orders to export")

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for order in orders:
        writer.writerow(
            [
                order.order_number or str(order.id),
                order.customer_name,
                order.email or "",
                order.phone or "",
                order.order_type.value,
                order.status.value,
                _format_amount(order_total(order.products)),
                order.created_at.isoformat(),
            ]
        )
    return buffer.getvalue()
