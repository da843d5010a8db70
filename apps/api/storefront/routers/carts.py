from fastapi import APIRouter, status

from storefront.models.cart import CartItemBase
from storefront.schemas.cart import CartQuantityUpdate, CartResponse
from storefront.services.cart_service import (
    add_to_cart,
    clear_cart,
    create_cart,
    get_cart,
    remove_from_cart,
    update_quantity,
)

router = APIRouter(prefix="/api/v1/carts", tags=["carts"])


@router.post(
    "",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an empty cart",
)
def create_cart_endpoint() -> CartResponse:
    return CartResponse.from_cart(create_cart())


@router.get("/{cart_id}", response_model=CartResponse, summary="Get cart with count and total")
def get_cart_endpoint(cart_id: str) -> CartResponse:
    return CartResponse.from_cart(get_cart(cart_id))


@router.post("/{cart_id}/items", response_model=CartResponse, summary="Add item to cart")
def add_item_endpoint(cart_id: str, item: CartItemBase) -> CartResponse:
    return CartResponse.from_cart(add_to_cart(cart_id, item))


@router.patch(
    "/{cart_id}/items/{line_id}",
    response_model=CartResponse,
    summary="Set line quantity; below 1 removes the line",
)
def update_item_endpoint(cart_id: str, line_id: str, payload: CartQuantityUpdate) -> CartResponse:
    return CartResponse.from_cart(update_quantity(cart_id, line_id, payload.quantity))


@router.delete("/{cart_id}/items/{line_id}", response_model=CartResponse, summary="Remove line")
def remove_item_endpoint(cart_id: str, line_id: str) -> CartResponse:
    return CartResponse.from_cart(remove_from_cart(cart_id, line_id))


@router.delete("/{cart_id}/items", response_model=CartResponse, summary="Clear cart")
def clear_cart_endpoint(cart_id: str) -> CartResponse:
    return CartResponse.from_cart(clear_cart(cart_id))
