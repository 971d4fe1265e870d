"""Store key/value settings (``settings`` collection)."""

from __future__ import annotations

from collections.abc import Iterable

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_SETTINGS
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.setting import Setting
from pystorefront.query import QueryBuilder, build_in_filter
from pystorefront.session import AuthSession


async def fetch_setting(transport: Transport, session: AuthSession | None, key: str) -> Setting | None:
    try:
        data = await _records.get_first_list_item(
            transport,
            COLLECTION_SETTINGS,
            QueryBuilder().where("key", "=", key).build(),
            token=_records.bearer(session),
        )
    except StorefrontNotFoundError:
        return None
    return Setting.model_validate(data)


async def fetch_settings(
    transport: Transport,
    session: AuthSession | None,
    keys: Iterable[str] | None = None,
) -> dict[str, str]:
    """Map of setting key to value, restricted to *keys* when given."""
    items = await _records.get_full_list(
        transport,
        COLLECTION_SETTINGS,
        filter_=build_in_filter("key", keys) if keys is not None else None,
        token=_records.bearer(session),
    )
    settings = [Setting.model_validate(item) for item in items]
    return {setting.key: setting.value for setting in settings}


async def upsert_setting(
    transport: Transport,
    session: AuthSession | None,
    key: str,
    value: str,
    description: str | None = None,
) -> Setting:
    """Update the setting named *key*, creating it when missing."""
    token = _records.bearer(session)
    existing = await fetch_setting(transport, session, key)
    if existing is not None:
        body: dict[str, str] = {"value": value}
        if description:
            body["description"] = description
        updated = await _records.update(transport, COLLECTION_SETTINGS, existing.id, body, token=token)
        return Setting.model_validate(updated)
    created = await _records.create(
        transport,
        COLLECTION_SETTINGS,
        {"key": key, "value": value, "description": description or ""},
        token=token,
    )
    return Setting.model_validate(created)
