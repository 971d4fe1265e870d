"""Contact form messages (``messages`` collection)."""

from __future__ import annotations

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_MESSAGES, DEFAULT_SORT
from pystorefront._transport import Transport
from pystorefront.models.list_result import ListResult
from pystorefront.models.message import ContactMessage
from pystorefront.query import Filters, QueryBuilder
from pystorefront.session import AuthSession


async def create_message(
    transport: Transport,
    session: AuthSession | None,
    *,
    name: str,
    email: str,
    subject: str,
    message: str,
    phone: str = "",
) -> ContactMessage:
    body = {
        "name": name,
        "email": email,
        "phone": phone,
        "subject": subject,
        "message": message,
        "isRead": False,
        "isArchived": False,
    }
    created = await _records.create(transport, COLLECTION_MESSAGES, body, token=_records.bearer(session))
    return ContactMessage.model_validate(created)


async def fetch_messages(
    transport: Transport,
    session: AuthSession | None,
    *,
    page: int = 1,
    per_page: int = 20,
    filter_: str | None = None,
) -> ListResult[ContactMessage]:
    """Messages newest first; archived ones are hidden unless *filter_* says otherwise."""
    data = await _records.get_list(
        transport,
        COLLECTION_MESSAGES,
        page=page,
        per_page=per_page,
        filter_=filter_ or QueryBuilder().where("isArchived", "=", False).build(),
        sort=DEFAULT_SORT,
        token=_records.bearer(session),
    )
    return _records.parse_list(data, ContactMessage)


async def count_unread_messages(transport: Transport, session: AuthSession | None) -> int:
    data = await _records.get_list(
        transport,
        COLLECTION_MESSAGES,
        page=1,
        per_page=1,
        filter_=Filters.unread_messages().build(),
        token=_records.bearer(session),
    )
    return int(data.get("totalItems") or 0)


async def _flag(transport: Transport, session: AuthSession | None, message_id: str, field: str) -> ContactMessage:
    updated = await _records.update(
        transport, COLLECTION_MESSAGES, message_id, {field: True}, token=_records.bearer(session)
    )
    return ContactMessage.model_validate(updated)


async def mark_message_read(transport: Transport, session: AuthSession | None, message_id: str) -> ContactMessage:
    return await _flag(transport, session, message_id, "isRead")


async def archive_message(transport: Transport, session: AuthSession | None, message_id: str) -> ContactMessage:
    return await _flag(transport, session, message_id, "isArchived")
