# Import SQLAlchemy models so they register on Base.metadata
from storefront.models.checkout_idempotency_key import CheckoutIdempotencyKey  # noqa: F401
from storefront.models.notification import Notification, NotificationType  # noqa: F401
from storefront.models.order import Order, OrderStatus, OrderType  # noqa: F401
from storefront.models.order_details import (  # noqa: F401
    AddressType,
    OrderAddress,
    OrderCustomerDetails,
    OrderPaymentDetails,
    PaymentStatus,
    PaymentType,
)
from storefront.models.order_number_counter import OrderNumberCounter  # noqa: F401
