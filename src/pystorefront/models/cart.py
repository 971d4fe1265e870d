"""Client-side cart models.

The cart never lives on the backend; it is mirrored to local storage by
:class:`pystorefront.state.cart.CartStore`.
"""

from __future__ import annotations

from pydantic import Field

from pystorefront.models._base import StorefrontModel


def cart_item_key(product_id: str, variants: dict[str, str] | None = None) -> str:
    """Identity of a cart line: same product with the same variant choices."""
    selection = ",".join(f"{key}={value}" for key, value in sorted((variants or {}).items()))
    return f"{product_id}|{selection}"


class CartItem(StorefrontModel):
    """A cart line. ``unit_price`` is in cents."""

    product_id: str
    product_name: str = ""
    sku: str = ""
    variants: dict[str, str] = Field(default_factory=dict)
    quantity: int = Field(default=1, ge=1)
    unit_price: int = Field(default=0, ge=0)
    image: str | None = None

    @property
    def key(self) -> str:
        return cart_item_key(self.product_id, self.variants)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class Cart(StorefrontModel):
    items: tuple[CartItem, ...] = ()
    discount_code: str | None = None
    discount_amount: int = 0
