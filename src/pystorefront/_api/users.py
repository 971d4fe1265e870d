"""Customer accounts as seen from the admin console."""

from __future__ import annotations

from pystorefront._api import _records
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.list_result import ListResult
from pystorefront.models.user import User
from pystorefront.query import build_search_filter
from pystorefront.session import AuthSession

_SEARCH_FIELDS = ("email", "name")


async def fetch_users(
    transport: Transport,
    session: AuthSession | None,
    collection: str,
    *,
    page: int = 1,
    per_page: int = 50,
    search: str = "",
) -> ListResult[User]:
    data = await _records.get_list(
        transport,
        collection,
        page=page,
        per_page=per_page,
        filter_=build_search_filter(search, _SEARCH_FIELDS) or None,
        sort="-created",
        token=_records.bearer(session),
    )
    return _records.parse_list(data, User)


async def fetch_all_users(transport: Transport, session: AuthSession | None, collection: str) -> list[User]:
    items = await _records.get_full_list(transport, collection, sort="-created", token=_records.bearer(session))
    return [User.model_validate(item) for item in items]


async def fetch_user(
    transport: Transport,
    session: AuthSession | None,
    collection: str,
    user_id: str,
) -> User | None:
    try:
        data = await _records.get_one(transport, collection, user_id, token=_records.bearer(session))
    except StorefrontNotFoundError:
        return None
    return User.model_validate(data)


async def set_blocked(
    transport: Transport,
    session: AuthSession | None,
    collection: str,
    user_id: str,
    blocked: bool,
) -> User:
    updated = await _records.update(
        transport, collection, user_id, {"isBlocked": blocked}, token=_records.bearer(session)
    )
    return User.model_validate(updated)


async def save_notes(
    transport: Transport,
    session: AuthSession | None,
    collection: str,
    user_id: str,
    notes: str,
) -> User:
    updated = await _records.update(
        transport, collection, user_id, {"adminNotes": notes}, token=_records.bearer(session)
    )
    return User.model_validate(updated)
