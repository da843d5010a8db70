import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.models.cart import CartLine
from storefront.models.order import OrderType
from storefront.models.order_details import PaymentType

DEFAULT_COUNTRY = "India"

_BILLING_REQUIRED = (
    "billing_address_1",
    "billing_city",
    "billing_state",
    "billing_postal_code",
)


class CheckoutForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    company: str | None = Field(default=None, max_length=255)
    gst_number: str | None = Field(default=None, alias="gstNumber", max_length=32)

    shipping_address_1: str = Field(alias="shippingAddress1", min_length=1, max_length=255)
    shipping_address_2: str | None = Field(
        default=None, alias="shippingAddress2", max_length=255
    )
    shipping_city: str = Field(alias="shippingCity", min_length=1, max_length=128)
    shipping_state: str = Field(alias="shippingState", min_length=1, max_length=128)
    shipping_postal_code: str = Field(alias="shippingPostalCode", min_length=1, max_length=32)
    shipping_country: str = Field(
        default=DEFAULT_COUNTRY, alias="shippingCountry", min_length=1, max_length=128
    )

    billing_same_as_shipping: bool = Field(default=True, alias="billingSameAsShipping")
    billing_address_1: str | None = Field(default=None, alias="billingAddress1", max_length=255)
    billing_address_2: str | None = Field(default=None, alias="billingAddress2", max_length=255)
    billing_city: str | None = Field(default=None, alias="billingCity", max_length=128)
    billing_state: str | None = Field(default=None, alias="billingState", max_length=128)
    billing_postal_code: str | None = Field(
        default=None, alias="billingPostalCode", max_length=32
    )
    billing_country: str = Field(default=DEFAULT_COUNTRY, alias="billingCountry", max_length=128)

    payment_type: PaymentType = Field(default=PaymentType.PAY_ON_DELIVERY, alias="paymentType")
    order_type: OrderType = Field(default=OrderType.PURCHASE, alias="orderType")
    order_notes: str | None = Field(default=None, alias="orderNotes")

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def require_billing_address(self) -> "CheckoutForm":
        if self.billing_same_as_shipping:
            return self
        missing = [name for name in _BILLING_REQUIRED if not getattr(self, name)]
        if missing:
            raise ValueError(
                "billing address is required when billingSameAsShipping is false: "
                + ", ".join(missing)
            )
        return self


class CheckoutRequest(BaseModel):
    cart: list[CartLine] = Field(min_length=1)
    form: CheckoutForm


class CheckoutResponse(BaseModel):
    status: str = "success"
    title: str = "Order Placed Successfully!"
    message: str
    order_id: uuid.UUID
    order_number: str
    cart_cleared: bool


class CheckoutFailureResponse(BaseModel):
    status: str = "error"
    title: str
    message: str
    code: str
    retryable: bool
