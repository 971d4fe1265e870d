"""Discount codes (``discounts`` collection)."""

from __future__ import annotations

import logging
from datetime import datetime

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_DISCOUNTS
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontDiscountError, StorefrontNotFoundError
from pystorefront.models.discount import Discount
from pystorefront.query import Filters
from pystorefront.session import AuthSession

_logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


async def fetch_discount_by_code(
    transport: Transport,
    session: AuthSession | None,
    code: str,
) -> Discount | None:
    """Active discount with *code* (case-insensitive), or ``None``."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    try:
        data = await _records.get_first_list_item(
            transport,
            COLLECTION_DISCOUNTS,
            Filters.active_discounts().and_("code", "=", normalized).build(),
            token=_records.bearer(session),
        )
    except StorefrontNotFoundError:
        return None
    return Discount.model_validate(data)


def check_discount(discount: Discount | None, subtotal: int, now: datetime) -> Discount:
    """Raise :class:`StorefrontDiscountError` unless *discount* applies to *subtotal*."""
    if discount is None or not discount.is_active:
        raise StorefrontDiscountError("Invalid discount code")
    if discount.is_expired(now):
        raise StorefrontDiscountError("This discount code has expired")
    if discount.is_exhausted:
        raise StorefrontDiscountError("This discount code has reached its usage limit")
    if discount.min_order_value > 0 and subtotal < discount.min_order_value:
        raise StorefrontDiscountError("Order does not meet the minimum value for this discount")
    return discount


async def validate_discount_code(
    transport: Transport,
    session: AuthSession | None,
    code: str,
    subtotal: int,
    now: datetime,
) -> Discount:
    discount = await fetch_discount_by_code(transport, session, code)
    return check_discount(discount, subtotal, now)


async def increment_discount_usage(
    transport: Transport,
    session: AuthSession | None,
    discount_id: str,
) -> Discount:
    """Bump ``usedCount`` from its currently stored value."""
    token = _records.bearer(session)
    current = Discount.model_validate(
        await _records.get_one(transport, COLLECTION_DISCOUNTS, discount_id, token=token)
    )
    updated = await _records.update(
        transport,
        COLLECTION_DISCOUNTS,
        discount_id,
        {"usedCount": current.used_count + 1},
        token=token,
    )
    _logger.debug("Discount %s used %s times", current.code, updated.get("usedCount"))
    return Discount.model_validate(updated)
