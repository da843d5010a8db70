from storefront.schemas.cart import CartQuantityUpdate, CartResponse
from storefront.schemas.checkout import (
    CheckoutFailureResponse,
    CheckoutForm,
    CheckoutRequest,
    CheckoutResponse,
)
from storefront.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from storefront.schemas.order import (
    OrderDetailResponse,
    OrderResetResponse,
    OrdersListResponse,
    OrderStatusUpdateRequest,
    OrderSummary,
)

__all__ = [
    "CartQuantityUpdate",
    "CartResponse",
    "CheckoutFailureResponse",
    "CheckoutForm",
    "CheckoutRequest",
    "CheckoutResponse",
    "MarkAllReadResponse",
    "NotificationListResponse",
    "NotificationResponse",
    "OrderDetailResponse",
    "OrderResetResponse",
    "OrdersListResponse",
    "OrderStatusUpdateRequest",
    "OrderSummary",
]
