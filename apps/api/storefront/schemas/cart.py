from datetime import datetime

from pydantic import BaseModel, Field

from storefront.models.cart import Cart, CartItem


class CartQuantityUpdate(BaseModel):
    quantity: int


class CartResponse(BaseModel):
    id: str
    items: list[CartItem]
    count: int = Field(description="Sum of line quantities")
    total: float = Field(description="Sum of price x quantity")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartResponse":
        return cls(
            id=cart.id,
            items=cart.items,
            count=cart.count,
            total=cart.total,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )
