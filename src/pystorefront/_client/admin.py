"""Internal admin console operations for :class:`pystorefront.client.StorefrontClient`.

These functions keep `client.py` small without changing the public API.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pystorefront._api import messages as _messages_api
from pystorefront._api import orders as _orders_api
from pystorefront._api import products as _products_api
from pystorefront._api import users as _users_api
from pystorefront.admin import DashboardStats, build_status_update, compute_dashboard_stats
from pystorefront.exceptions import StorefrontError, StorefrontForbiddenError, StorefrontNotFoundError
from pystorefront.models.order import Order, OrderStatus, TrackingInfo
from pystorefront.session import AuthSession

if TYPE_CHECKING:
    from pystorefront.client import StorefrontClient

_logger = logging.getLogger(__name__)


def require_staff(client: StorefrontClient) -> None:
    """Raise unless the signed-in user may use the admin console."""
    client._require_user()
    if not (client.is_admin() or client.is_staff()):
        raise StorefrontForbiddenError("Admin access required", status_code=403)


async def update_order_status(
    client: StorefrontClient,
    order_id: str,
    new_status: OrderStatus | str,
    *,
    note: str | None = None,
    tracking: TrackingInfo | None = None,
    now: datetime | None = None,
) -> Order:
    require_staff(client)
    order = await client.get_order(order_id)
    if order is None:
        raise StorefrontNotFoundError(f"Order {order_id} not found", status_code=404)
    update = build_status_update(order, new_status, note=note, tracking=tracking, now=now)

    async def _update(auth: AuthSession | None) -> Order:
        return await _orders_api.update_order(client._require_transport(), auth, order_id, update)

    updated = await client._call_with_refresh(_update)
    _logger.info("Order %s moved from %s to %s", order.order_number, order.status, updated.status)
    return updated


async def save_order_notes(client: StorefrontClient, order_id: str, notes: str) -> Order:
    require_staff(client)

    async def _update(auth: AuthSession | None) -> Order:
        return await _orders_api.update_order(client._require_transport(), auth, order_id, {"adminNotes": notes})

    return await client._call_with_refresh(_update)


async def _settled(label: str, coro: Any, default: Any) -> Any:
    try:
        return await coro
    except StorefrontError:
        _logger.warning("Dashboard: failed to fetch %s", label, exc_info=True)
        return default


async def get_dashboard_stats(client: StorefrontClient, *, now: datetime | None = None) -> DashboardStats:
    """Fetch orders, products, customers and unread messages in parallel.

    A source that fails is logged and counted as empty so the rest of the
    dashboard still renders.
    """
    require_staff(client)
    transport = client._require_transport()
    auth = client.auth
    orders, products, customers, unread = await asyncio.gather(
        _settled("orders", _orders_api.fetch_all_orders(transport, auth), []),
        _settled("products", _products_api.fetch_all_products(transport, auth), []),
        _settled("customers", _users_api.fetch_all_users(transport, auth, client.config.auth_collection), []),
        _settled("messages", _messages_api.count_unread_messages(transport, auth), 0),
    )
    return compute_dashboard_stats(
        orders,
        product_count=len(products),
        customer_count=len(customers),
        unread_messages=unread,
        now=now,
    )
