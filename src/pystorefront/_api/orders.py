"""Order endpoints (``orders`` collection)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_ORDERS, DEFAULT_SORT
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.list_result import ListResult
from pystorefront.models.order import Order
from pystorefront.query import Filters, QueryBuilder
from pystorefront.session import AuthSession


async def fetch_user_orders(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
    *,
    page: int = 1,
    per_page: int = 10,
) -> ListResult[Order]:
    data = await _records.get_list(
        transport,
        COLLECTION_ORDERS,
        page=page,
        per_page=per_page,
        filter_=Filters.user_orders(user_id).build(),
        sort=DEFAULT_SORT,
        token=_records.bearer(session),
    )
    return _records.parse_list(data, Order)


async def fetch_orders(
    transport: Transport,
    session: AuthSession | None,
    *,
    page: int = 1,
    per_page: int = 20,
    status: str | None = None,
) -> ListResult[Order]:
    """Admin listing, optionally narrowed to one status."""
    data = await _records.get_list(
        transport,
        COLLECTION_ORDERS,
        page=page,
        per_page=per_page,
        filter_=Filters.orders_by_status(status).build() if status else None,
        sort=DEFAULT_SORT,
        token=_records.bearer(session),
    )
    return _records.parse_list(data, Order)


async def fetch_all_orders(transport: Transport, session: AuthSession | None) -> list[Order]:
    items = await _records.get_full_list(
        transport, COLLECTION_ORDERS, sort=DEFAULT_SORT, token=_records.bearer(session)
    )
    return [Order.model_validate(item) for item in items]


async def fetch_order(transport: Transport, session: AuthSession | None, order_id: str) -> Order | None:
    try:
        data = await _records.get_one(transport, COLLECTION_ORDERS, order_id, token=_records.bearer(session))
    except StorefrontNotFoundError:
        return None
    return Order.model_validate(data)


async def fetch_order_by_number(
    transport: Transport,
    session: AuthSession | None,
    order_number: str,
) -> Order | None:
    try:
        data = await _records.get_first_list_item(
            transport,
            COLLECTION_ORDERS,
            QueryBuilder().where("orderNumber", "=", order_number).build(),
            token=_records.bearer(session),
        )
    except StorefrontNotFoundError:
        return None
    return Order.model_validate(data)


async def create_order(
    transport: Transport,
    session: AuthSession | None,
    data: Mapping[str, Any],
) -> Order:
    created = await _records.create(transport, COLLECTION_ORDERS, data, token=_records.bearer(session))
    return Order.model_validate(created)


async def update_order(
    transport: Transport,
    session: AuthSession | None,
    order_id: str,
    data: Mapping[str, Any],
) -> Order:
    updated = await _records.update(transport, COLLECTION_ORDERS, order_id, data, token=_records.bearer(session))
    return Order.model_validate(updated)
