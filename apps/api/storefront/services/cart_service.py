import time

from fastapi import HTTPException, status

from storefront.db.base import now_utc
from storefront.models.cart import Cart, CartItem, CartItemBase, new_id
from storefront.observability import log_event, metrics_store
from storefront.services.store import store


def _get_cart_or_404(cart_id: str) -> Cart:
    cart = store.carts.get(cart_id)
    if cart is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found")
    return cart


def _line_index_or_404(cart: Cart, line_id: str) -> int:
    for index, item in enumerate(cart.items):
        if item.id == line_id:
            return index
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart item not found")


def _line_id(item: CartItemBase) -> str:
    millis = int(time.time() * 1000)
    return f"{item.product_id}-{item.variant_id or 'default'}-{millis}"


def create_cart() -> Cart:
    created = now_utc()
    cart = Cart(id=new_id("cart-"), created_at=created, updated_at=created)
    with store.lock:
        store.carts[cart.id] = cart
    metrics_store.increment("cart_created_total")
    return cart


def get_cart(cart_id: str) -> Cart:
    with store.lock:
        return _get_cart_or_404(cart_id).model_copy(deep=True)


def cart_items(cart_id: str) -> list[CartItem]:
    return get_cart(cart_id).items


def add_to_cart(cart_id: str, item: CartItemBase) -> Cart:
    with store.lock:
        cart = _get_cart_or_404(cart_id)
        for existing in cart.items:
            if existing.product_id == item.product_id and existing.variant_id == item.variant_id:
                existing.quantity += item.quantity
                log_event("cart_item_quantity_merged", cart_id=cart_id)
                break
        else:
            cart.items.append(CartItem(id=_line_id(item), **item.model_dump()))
            log_event("cart_item_added", cart_id=cart_id)
        cart.updated_at = now_utc()
        return cart.model_copy(deep=True)


def update_quantity(cart_id: str, line_id: str, quantity: int) -> Cart:
    if quantity < 1:
        return remove_from_cart(cart_id, line_id)

    with store.lock:
        cart = _get_cart_or_404(cart_id)
        cart.items[_line_index_or_404(cart, line_id)].quantity = quantity
        cart.updated_at = now_utc()
        return cart.model_copy(deep=True)


def remove_from_cart(cart_id: str, line_id: str) -> Cart:
    with store.lock:
        cart = _get_cart_or_404(cart_id)
        del cart.items[_line_index_or_404(cart, line_id)]
        cart.updated_at = now_utc()
        log_event("cart_item_removed", cart_id=cart_id)
        return cart.model_copy(deep=True)


def clear_cart(cart_id: str) -> Cart:
    with store.lock:
        cart = _get_cart_or_404(cart_id)
        cart.items.clear()
        cart.updated_at = now_utc()
        log_event("cart_cleared", cart_id=cart_id)
        return cart.model_copy(deep=True)
