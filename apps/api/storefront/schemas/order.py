import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, computed_field

from storefront.models.order import OrderStatus, OrderType
from storefront.models.order_details import AddressType, PaymentStatus, PaymentType
from storefront.schemas.common import Page, ResponseModel
from storefront.services.orders_service import OrderDetails, order_total


class OrderSummary(ResponseModel):
    id: uuid.UUID
    order_number: str | None
    customer_name: str
    email: str | None
    phone: str | None
    order_type: OrderType
    status: OrderStatus
    order_status: str | None
    products: list[dict[str, Any]]
    order_notes: str | None
    internal_notes: str | None
    rental_duration: str | None
    created_at: datetime
    updated_at: datetime

    @computed_field(return_type=float)
    @property
    def total_amount(self) -> float:
        return order_total(self.products)


class OrdersListResponse(Page[OrderSummary]):
    pass


class CustomerDetailsResponse(ResponseModel):
    name: str
    email: str | None
    phone: str | None
    company: str | None
    gst_number: str | None


class AddressResponse(ResponseModel):
    address_type: AddressType
    address_line_1: str
    address_line_2: str | None
    city: str
    state: str
    postal_code: str
    country: str
    phone: str | None


class PaymentDetailsResponse(ResponseModel):
    payment_type: PaymentType
    payment_status: PaymentStatus


class OrderDetailResponse(OrderSummary):
    customer: CustomerDetailsResponse | None = None
    shipping_address: AddressResponse | None = None
    billing_address: AddressResponse | None = None
    payment: PaymentDetailsResponse | None = None

    @classmethod
    def from_details(cls, details: OrderDetails) -> "OrderDetailResponse":
        summary = OrderSummary.model_validate(details.order)
        return cls(
            **summary.model_dump(exclude={"total_amount"}),
            customer=_validate_optional(CustomerDetailsResponse, details.customer),
            shipping_address=_validate_optional(AddressResponse, details.shipping_address),
            billing_address=_validate_optional(AddressResponse, details.billing_address),
            payment=_validate_optional(PaymentDetailsResponse, details.payment),
        )


def _validate_optional(model: type[ResponseModel], row: Any) -> Any:
    return None if row is None else model.model_validate(row)


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus


class OrderResetResponse(BaseModel):
    deleted: int
