"""Internal checkout and order operations for :class:`pystorefront.client.StorefrontClient`.

These functions keep `client.py` small without changing the public API.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pystorefront._api import discounts as _discounts_api
from pystorefront._api import orders as _orders_api
from pystorefront.admin import build_cancellation
from pystorefront.checkout import build_order_draft, new_order_payload
from pystorefront.exceptions import StorefrontDiscountError, StorefrontError, StorefrontNotFoundError
from pystorefront.models.cart import Cart
from pystorefront.models.discount import Discount
from pystorefront.models.order import Order, ShippingAddress
from pystorefront.pricing import calculate_cart_subtotal, discount_amount_for
from pystorefront.session import AuthSession
from pystorefront.state.cart import CartStore

if TYPE_CHECKING:
    from pystorefront.client import StorefrontClient

_logger = logging.getLogger(__name__)


async def place_order(
    client: StorefrontClient,
    cart: Cart | CartStore,
    shipping_address: ShippingAddress,
    *,
    now: datetime | None = None,
) -> Order:
    """Create an order from *cart* for the signed-in user.

    A discount code on the cart is validated again against the backend; a
    code that no longer applies is dropped from the cart store and reported
    with :class:`StorefrontDiscountError` before anything is created.
    """
    user = client._require_user()
    store = cart if isinstance(cart, CartStore) else None
    snapshot = cart.state if isinstance(cart, CartStore) else cart
    now = now or datetime.now(UTC)

    discount: Discount | None = None
    discount_amount: int | None = None
    if snapshot.discount_code:
        subtotal = calculate_cart_subtotal(snapshot.items)
        try:
            discount = await client.validate_discount_code(snapshot.discount_code, subtotal, now=now)
        except StorefrontDiscountError:
            if store is not None:
                store.remove_discount()
            raise
        discount_amount = discount_amount_for(discount, subtotal)

    draft = build_order_draft(
        snapshot,
        user,
        shipping_address,
        client.config,
        discount_amount=discount_amount,
    )
    payload = new_order_payload(draft, client.config, now)

    async def _create(auth: AuthSession | None) -> Order:
        return await _orders_api.create_order(client._require_transport(), auth, payload)

    order = await client._call_with_refresh(_create)
    _logger.info("Placed order %s (%d items)", order.order_number, order.item_count)

    if discount is not None:
        discount_id = discount.id

        async def _increment(auth: AuthSession | None) -> Discount:
            return await _discounts_api.increment_discount_usage(client._require_transport(), auth, discount_id)

        try:
            await client._call_with_refresh(_increment)
        except StorefrontError:
            _logger.warning("Failed to record usage of discount %s", discount.code, exc_info=True)

    if store is not None:
        store.clear()
    return order


async def cancel_order(
    client: StorefrontClient,
    order_id: str,
    reason: str,
    *,
    now: datetime | None = None,
) -> Order:
    """Cancel an order that has not shipped yet.

    Raises
    ------
    StorefrontNotFoundError
        If the order does not exist or belongs to someone else.
    StorefrontOrderStateError
        If the order has already shipped, been delivered, or been cancelled.
    """
    order = await client.get_order(order_id)
    if order is None:
        raise StorefrontNotFoundError(f"Order {order_id} not found", status_code=404)
    update = build_cancellation(order, reason, now=now)

    async def _update(auth: AuthSession | None) -> Order:
        return await _orders_api.update_order(client._require_transport(), auth, order_id, update)

    return await client._call_with_refresh(_update)
