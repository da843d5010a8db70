from collections.abc import Callable, Sequence
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from storefront.auth.dependencies import AuthContext, client_identity, get_optional_auth_context
from storefront.db.session import get_db
from storefront.errors import ORDER_FAILED_MESSAGE, ORDER_FAILED_TITLE, OrderPlacementError
from storefront.models.cart import CartItemBase
from storefront.schemas.checkout import (
    CheckoutFailureResponse,
    CheckoutForm,
    CheckoutRequest,
    CheckoutResponse,
)
from storefront.services.cart_service import cart_items, clear_cart
from storefront.services.checkout_service import submit_order
from storefront.services.idempotency_service import (
    cart_changed_conflict,
    checkout_scope,
    find_replay,
    normalize_idempotency_key,
    remember_confirmation,
)
from storefront.services.order_numbers import OrderNumberAllocator, get_order_number_allocator

router = APIRouter(prefix="/api/v1", tags=["checkout"])

_FAILURE_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": CheckoutFailureResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": CheckoutFailureResponse},
}


def _translate_placement_error(err: OrderPlacementError) -> HTTPException:
    body = CheckoutFailureResponse(
        title=ORDER_FAILED_TITLE,
        message=ORDER_FAILED_MESSAGE,
        code=err.code,
        retryable=err.retryable,
    ).model_dump()
    if err.retryable:
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=body)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=body)


def _place_order(
    *,
    db: Session,
    scope: str,
    client_id: str,
    idempotency_key: str | None,
    request_payload: dict[str, Any],
    load_cart: Callable[[], Sequence[CartItemBase]],
    form: CheckoutForm,
    allocator: OrderNumberAllocator,
    on_success: Callable[[], None] | None,
) -> CheckoutResponse:
    key = normalize_idempotency_key(idempotency_key)
    if key:
        replay = find_replay(
            db,
            client_id=client_id,
            scope=scope,
            idempotency_key=key,
            request_payload=request_payload,
        )
        if replay is not None:
            # The replayed order emptied a server cart; items added since need a new key.
            if on_success is not None and load_cart():
                raise cart_changed_conflict()
            return CheckoutResponse.model_validate(replay.confirmation)

    cart = load_cart()
    if not cart:
        raise HTTPException(status_code=422, detail="Cart is empty")

    try:
        result = submit_order(db, cart, form, allocator=allocator, on_success=on_success)
    except OrderPlacementError as err:
        raise _translate_placement_error(err) from err

    response_payload = CheckoutResponse(
        message=f"Order #{result.order_number} has been created.",
        order_id=result.order_id,
        order_number=result.order_number,
        cart_cleared=on_success is not None,
    ).model_dump(mode="json")

    if key:
        remember_confirmation(
            db,
            client_id=client_id,
            scope=scope,
            idempotency_key=key,
            request_payload=request_payload,
            order_id=result.order_id,
            confirmation=response_payload,
        )

    return CheckoutResponse.model_validate(response_payload)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order for a client-held cart",
    responses=_FAILURE_RESPONSES,
)
def checkout_endpoint(
    request: Request,
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    allocator: OrderNumberAllocator = Depends(get_order_number_allocator),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    auth: AuthContext | None = Depends(get_optional_auth_context),
) -> CheckoutResponse:
    """The caller owns the cart and empties it once this returns 201."""
    client_id = client_identity(request, auth)
    return _place_order(
        db=db,
        scope=checkout_scope("POST:/api/v1/checkout"),
        client_id=client_id,
        idempotency_key=idempotency_key,
        request_payload=payload.model_dump(mode="json", by_alias=True),
        load_cart=lambda: payload.cart,
        form=payload.form,
        allocator=allocator,
        on_success=None,
    )


@router.post(
    "/carts/{cart_id}/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order for a server-held cart",
    responses=_FAILURE_RESPONSES,
)
def cart_checkout_endpoint(
    cart_id: str,
    request: Request,
    form: CheckoutForm = Body(...),
    db: Session = Depends(get_db),
    allocator: OrderNumberAllocator = Depends(get_order_number_allocator),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    auth: AuthContext | None = Depends(get_optional_auth_context),
) -> CheckoutResponse:
    """The cart is emptied on success and left untouched when the order cannot be placed."""
    client_id = client_identity(request, auth)
    return _place_order(
        db=db,
        scope=checkout_scope("POST:/api/v1/carts/{cart_id}/checkout", cart_id=cart_id),
        client_id=client_id,
        idempotency_key=idempotency_key,
        request_payload=form.model_dump(mode="json", by_alias=True),
        load_cart=lambda: cart_items(cart_id),
        form=form,
        allocator=allocator,
        on_success=lambda: clear_cart(cart_id),
    )
