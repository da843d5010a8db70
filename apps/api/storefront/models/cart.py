from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class CartItemBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId", min_length=1)
    name: str = Field(min_length=1)
    slug: str = ""
    price: float = Field(ge=0)
    original_price: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    quantity: int = Field(default=1, ge=1)
    variant_id: str | None = Field(default=None, alias="variantId")
    size: str | None = None

    def snapshot(self) -> dict[str, Any]:
        """Denormalized line as stored on the order; keys match the storefront wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CartItem(CartItemBase):
    id: str


class CartLine(CartItemBase):
    """A line of a cart held by the client rather than by this service."""

    id: str | None = None


class Cart(BaseModel):
    id: str
    items: list[CartItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> float:
        return sum(item.price * item.quantity for item in self.items)


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid4()}"
