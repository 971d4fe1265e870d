"""Saved shipping addresses (``addresses`` collection)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_ADDRESSES
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.user import Address
from pystorefront.query import QueryBuilder
from pystorefront.session import AuthSession

# Default address first, then newest.
_SORT = "-isDefault,-@rowid"


async def fetch_addresses(transport: Transport, session: AuthSession | None, user_id: str) -> list[Address]:
    items = await _records.get_full_list(
        transport,
        COLLECTION_ADDRESSES,
        filter_=QueryBuilder().where("userId", "=", user_id).build(),
        sort=_SORT,
        token=_records.bearer(session),
    )
    return [Address.model_validate(item) for item in items]


async def fetch_address(transport: Transport, session: AuthSession | None, address_id: str) -> Address | None:
    try:
        data = await _records.get_one(transport, COLLECTION_ADDRESSES, address_id, token=_records.bearer(session))
    except StorefrontNotFoundError:
        return None
    return Address.model_validate(data)


async def create_address(
    transport: Transport,
    session: AuthSession | None,
    data: Mapping[str, Any],
) -> Address:
    created = await _records.create(transport, COLLECTION_ADDRESSES, data, token=_records.bearer(session))
    return Address.model_validate(created)


async def update_address(
    transport: Transport,
    session: AuthSession | None,
    address_id: str,
    data: Mapping[str, Any],
) -> Address:
    updated = await _records.update(
        transport, COLLECTION_ADDRESSES, address_id, data, token=_records.bearer(session)
    )
    return Address.model_validate(updated)


async def delete_address(transport: Transport, session: AuthSession | None, address_id: str) -> None:
    await _records.delete(transport, COLLECTION_ADDRESSES, address_id, token=_records.bearer(session))


async def set_default_address(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
    address_id: str,
) -> Address:
    """Mark *address_id* as the default, clearing the flag on the user's other addresses."""
    for address in await fetch_addresses(transport, session, user_id):
        if address.is_default and address.id != address_id:
            await update_address(transport, session, address.id, {"isDefault": False})
    return await update_address(transport, session, address_id, {"isDefault": True})
