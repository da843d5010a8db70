import pytest
from fastapi import HTTPException

from storefront.models.cart import CartItemBase
from storefront.services.cart_service import (
    add_to_cart,
    cart_items,
    clear_cart,
    create_cart,
    get_cart,
    remove_from_cart,
    update_quantity,
)
from storefront.services.store import DEMO_CART_ID, reset_store, seed_data, store


def _item(product_id: str = "p-chair", quantity: int = 1, variant_id: str | None = None):
    return CartItemBase(
        productId=product_id,
        name="Steel Chair",
        price=1500,
        quantity=quantity,
        variantId=variant_id,
    )


def test_new_cart_is_empty():
    cart = create_cart()
    assert cart.id.startswith("cart-")
    assert cart.items == []
    assert cart.count == 0
    assert cart.total == 0


def test_add_to_cart_assigns_line_id_from_product_and_variant():
    cart = create_cart()

    updated = add_to_cart(cart.id, _item(variant_id="blue"))
    plain = add_to_cart(cart.id, _item(product_id="p-table"))

    assert updated.items[0].id.startswith("p-chair-blue-")
    assert plain.items[1].id.startswith("p-table-default-")


def test_add_same_product_and_variant_merges_quantity():
    cart = create_cart()
    add_to_cart(cart.id, _item(quantity=1))
    updated = add_to_cart(cart.id, _item(quantity=2))

    assert len(updated.items) == 1
    assert updated.items[0].quantity == 3
    assert updated.count == 3
    assert updated.total == 4500


def test_different_variants_are_separate_lines():
    cart = create_cart()
    add_to_cart(cart.id, _item(variant_id="blue"))
    updated = add_to_cart(cart.id, _item(variant_id="red"))

    assert len(updated.items) == 2


def test_update_quantity_sets_line_quantity():
    cart = create_cart()
    line_id = add_to_cart(cart.id, _item()).items[0].id

    updated = update_quantity(cart.id, line_id, 5)

    assert updated.items[0].quantity == 5
    assert updated.total == 7500


@pytest.mark.parametrize("quantity", [0, -1])
def test_update_quantity_below_one_removes_line(quantity):
    cart = create_cart()
    line_id = add_to_cart(cart.id, _item()).items[0].id

    updated = update_quantity(cart.id, line_id, quantity)

    assert updated.items == []


def test_remove_from_cart_and_clear_cart():
    cart = create_cart()
    first = add_to_cart(cart.id, _item()).items[0].id
    add_to_cart(cart.id, _item(product_id="p-table"))

    after_remove = remove_from_cart(cart.id, first)
    assert [item.product_id for item in after_remove.items] == ["p-table"]

    cleared = clear_cart(cart.id)
    assert cleared.items == []
    assert cart_items(cart.id) == []


def test_get_cart_returns_a_copy():
    cart = create_cart()
    add_to_cart(cart.id, _item())

    snapshot = get_cart(cart.id)
    snapshot.items.clear()

    assert len(get_cart(cart.id).items) == 1


def test_unknown_cart_and_line_return_404():
    with pytest.raises(HTTPException) as missing_cart:
        get_cart("cart-missing")
    assert missing_cart.value.status_code == 404
    assert missing_cart.value.detail == "Cart not found"

    cart = create_cart()
    with pytest.raises(HTTPException) as missing_line:
        remove_from_cart(cart.id, "no-such-line")
    assert missing_line.value.status_code == 404
    assert missing_line.value.detail == "Cart item not found"


def test_seed_data_is_idempotent_and_reset_clears_carts():
    seed_data()
    seed_data()
    demo = get_cart(DEMO_CART_ID)
    assert demo.count == 2
    assert demo.total == 3000

    reset_store()
    assert store.carts == {}
