"""Wishlist endpoints (``wishlists`` collection).

Membership is one record per (user, product); the remote add and remove
are idempotent so the optimistic store can retry freely.
"""

from __future__ import annotations

import logging

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_WISHLISTS, DEFAULT_SORT
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.product import Product
from pystorefront.models.wishlist import WishlistEntry
from pystorefront.query import QueryBuilder
from pystorefront.session import AuthSession

_logger = logging.getLogger(__name__)


def _membership_filter(user_id: str, product_id: str) -> str:
    return QueryBuilder().where("userId", "=", user_id).and_("productId", "=", product_id).build()


async def fetch_wishlist_entries(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
) -> list[WishlistEntry]:
    items = await _records.get_full_list(
        transport,
        COLLECTION_WISHLISTS,
        filter_=QueryBuilder().where("userId", "=", user_id).build(),
        expand="productId",
        sort=DEFAULT_SORT,
        token=_records.bearer(session),
    )
    return [WishlistEntry.model_validate(item) for item in items]


async def fetch_wishlist_products(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
) -> list[Product]:
    """Products on the user's wishlist, newest first.

    Entries whose product is gone (deleted or hidden) are skipped.
    """
    products: list[Product] = []
    for entry in await fetch_wishlist_entries(transport, session, user_id):
        product = entry.product
        if product is None:
            _logger.debug("Skipping wishlist entry %s without product", entry.id)
            continue
        products.append(product)
    return products


async def find_wishlist_entry(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
    product_id: str,
) -> WishlistEntry | None:
    try:
        data = await _records.get_first_list_item(
            transport,
            COLLECTION_WISHLISTS,
            _membership_filter(user_id, product_id),
            token=_records.bearer(session),
        )
    except StorefrontNotFoundError:
        return None
    return WishlistEntry.model_validate(data)


async def add_to_wishlist(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
    product_id: str,
) -> WishlistEntry:
    """Create the membership record, reusing an existing one."""
    existing = await find_wishlist_entry(transport, session, user_id, product_id)
    if existing is not None:
        return existing
    created = await _records.create(
        transport,
        COLLECTION_WISHLISTS,
        {"userId": user_id, "productId": product_id},
        token=_records.bearer(session),
    )
    return WishlistEntry.model_validate(created)


async def remove_from_wishlist(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
    product_id: str,
) -> None:
    """Delete the membership record; absent records are not an error."""
    existing = await find_wishlist_entry(transport, session, user_id, product_id)
    if existing is None:
        return
    try:
        await _records.delete(transport, COLLECTION_WISHLISTS, existing.id, token=_records.bearer(session))
    except StorefrontNotFoundError:
        _logger.debug("Wishlist entry %s already deleted", existing.id)
