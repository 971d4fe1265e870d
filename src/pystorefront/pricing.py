"""Money math for carts and orders.

All amounts are integer cents. Functions that depend on store settings take
a :class:`~pystorefront.config.StorefrontConfig`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pystorefront.config import StorefrontConfig
from pystorefront.models.cart import CartItem
from pystorefront.models.discount import Discount, DiscountType


@dataclass(frozen=True, slots=True)
class CartTotals:
    subtotal: int
    item_count: int
    shipping: int
    discount: int
    total: int


def calculate_cart_subtotal(items: Iterable[CartItem]) -> int:
    return sum(item.unit_price * item.quantity for item in items)


def calculate_cart_item_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def calculate_discount_amount(subtotal: int, discount_type: DiscountType | str, value: float) -> int:
    """Discount in cents.

    Percentage codes take ``value`` percent of the subtotal (rounded to the
    nearest cent); fixed codes never exceed the subtotal.
    """
    if subtotal <= 0 or value <= 0:
        return 0
    if DiscountType(discount_type) == DiscountType.PERCENTAGE:
        return min(subtotal, round(subtotal * value / 100))
    return min(int(value), subtotal)


def discount_amount_for(discount: Discount, subtotal: int) -> int:
    return calculate_discount_amount(subtotal, discount.type, discount.value)


def calculate_shipping(subtotal: int, config: StorefrontConfig) -> int:
    """Flat rate, or free once the subtotal reaches the configured threshold."""
    if config.free_shipping_threshold > 0 and subtotal >= config.free_shipping_threshold:
        return 0
    return config.shipping_flat_rate


def calculate_total(subtotal: int, shipping_cost: int, discount_amount: int = 0) -> int:
    return max(0, subtotal + shipping_cost - discount_amount)


def calculate_cart_totals(
    items: Iterable[CartItem],
    discount_amount: int = 0,
    config: StorefrontConfig | None = None,
) -> CartTotals:
    items = list(items)
    subtotal = calculate_cart_subtotal(items)
    shipping = calculate_shipping(subtotal, config or StorefrontConfig())
    return CartTotals(
        subtotal=subtotal,
        item_count=calculate_cart_item_count(items),
        shipping=shipping,
        discount=discount_amount,
        total=calculate_total(subtotal, shipping, discount_amount),
    )


def format_price(cents: int, config: StorefrontConfig | None = None) -> str:
    """``1999`` -> ``"$19.99"`` using the configured currency symbol."""
    symbol = (config or StorefrontConfig()).currency_symbol
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{abs(cents) / 100:.2f}"
