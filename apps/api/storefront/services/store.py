from threading import RLock

from storefront.db.base import now_utc
from storefront.models.cart import Cart, CartItem

DEMO_CART_ID = "cart-demo"


class InMemoryStore:
    def __init__(self) -> None:
        self.carts: dict[str, Cart] = {}
        self.lock = RLock()


store = InMemoryStore()


def reset_store() -> None:
    with store.lock:
        store.carts.clear()


def seed_data() -> None:
    with store.lock:
        if DEMO_CART_ID in store.carts:
            return

        created = now_utc()
        store.carts[DEMO_CART_ID] = Cart(
            id=DEMO_CART_ID,
            items=[
                CartItem(
                    id="demo-steel-chair-default-0",
                    productId="demo-steel-chair",
                    name="Steel Chair",
                    slug="steel-chair",
                    price=1500,
                    quantity=2,
                )
            ],
            created_at=created,
            updated_at=created,
        )


reset_store()
