"""Turning a cart into an order payload."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pystorefront._constants import MIN_STORED_SHIPPING_COST
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import StorefrontValidationError
from pystorefront.models.cart import Cart
from pystorefront.models.order import OrderItem, OrderStatus, ShippingAddress
from pystorefront.models.user import User
from pystorefront.pricing import calculate_cart_subtotal, calculate_shipping, calculate_total
from pystorefront.utils import generate_order_number, iso_timestamp

ORDER_PLACED_NOTE = "Order placed"


@dataclass(frozen=True)
class OrderDraft:
    """Everything needed to create an order, before it has a number."""

    user_id: str
    customer_email: str
    customer_name: str
    items: tuple[OrderItem, ...]
    shipping_address: ShippingAddress
    subtotal: int
    shipping_cost: int
    discount_code: str = ""
    discount_amount: int = 0
    total: int = 0

    def to_payload(self, order_number: str, now: datetime) -> dict[str, Any]:
        """Record body for ``orders``; new orders start in ``pending_review``."""
        return {
            "orderNumber": order_number,
            "userId": self.user_id,
            "customerEmail": self.customer_email,
            "customerName": self.customer_name,
            "items": [item.to_payload() for item in self.items],
            "shippingAddress": self.shipping_address.to_payload(),
            "subtotal": self.subtotal,
            # Zero is rejected by the backend.
            "shippingCost": self.shipping_cost or MIN_STORED_SHIPPING_COST,
            "discountCode": self.discount_code,
            "discountAmount": self.discount_amount,
            "total": self.total,
            "status": OrderStatus.PENDING_REVIEW.value,
            "statusHistory": [
                {
                    "status": OrderStatus.PENDING_REVIEW.value,
                    "timestamp": iso_timestamp(now),
                    "note": ORDER_PLACED_NOTE,
                }
            ],
        }


def build_order_draft(
    cart: Cart,
    user: User,
    shipping_address: ShippingAddress,
    config: StorefrontConfig,
    *,
    discount_amount: int | None = None,
) -> OrderDraft:
    """Price *cart* for *user*.

    *discount_amount* overrides the amount stored on the cart (used after
    re-validating the code). The discount never exceeds the subtotal.

    Raises
    ------
    StorefrontValidationError
        If the cart is empty.
    """
    if not cart.items:
        raise StorefrontValidationError("Cart is empty")

    items = tuple(
        OrderItem(
            product_id=item.product_id,
            product_name=item.product_name,
            sku=item.sku,
            variants=dict(item.variants),
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.unit_price * item.quantity,
        )
        for item in cart.items
    )
    subtotal = calculate_cart_subtotal(cart.items)
    shipping = calculate_shipping(subtotal, config)
    discount_code = cart.discount_code or ""
    discount = cart.discount_amount if discount_amount is None else discount_amount
    discount = min(max(discount, 0), subtotal) if discount_code else 0

    return OrderDraft(
        user_id=user.id,
        customer_email=user.email,
        customer_name=user.name or shipping_address.name,
        items=items,
        shipping_address=shipping_address,
        subtotal=subtotal,
        shipping_cost=shipping,
        discount_code=discount_code,
        discount_amount=discount,
        total=calculate_total(subtotal, shipping, discount),
    )


def new_order_payload(
    draft: OrderDraft,
    config: StorefrontConfig,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = now or datetime.now(UTC)
    return draft.to_payload(generate_order_number(config.order_prefix, now), now)
