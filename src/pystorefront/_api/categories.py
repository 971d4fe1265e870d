"""Category endpoints (``categories`` collection)."""

from __future__ import annotations

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_CATEGORIES
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.product import Category
from pystorefront.query import QueryBuilder
from pystorefront.session import AuthSession

_EXPAND = "parentId"
_SORT = "order"


async def fetch_categories(transport: Transport, session: AuthSession | None) -> list[Category]:
    items = await _records.get_full_list(
        transport,
        COLLECTION_CATEGORIES,
        sort=_SORT,
        expand=_EXPAND,
        token=_records.bearer(session),
    )
    return [Category.model_validate(item) for item in items]


async def fetch_category(transport: Transport, session: AuthSession | None, category_id: str) -> Category | None:
    try:
        data = await _records.get_one(
            transport, COLLECTION_CATEGORIES, category_id, expand=_EXPAND, token=_records.bearer(session)
        )
    except StorefrontNotFoundError:
        return None
    return Category.model_validate(data)


async def fetch_category_by_slug(transport: Transport, session: AuthSession | None, slug: str) -> Category | None:
    try:
        data = await _records.get_first_list_item(
            transport,
            COLLECTION_CATEGORIES,
            QueryBuilder().where("slug", "=", slug).build(),
            expand=_EXPAND,
            token=_records.bearer(session),
        )
    except StorefrontNotFoundError:
        return None
    return Category.model_validate(data)


async def fetch_subcategories(
    transport: Transport,
    session: AuthSession | None,
    parent_id: str = "",
) -> list[Category]:
    """Children of *parent_id*; the empty string selects root categories."""
    items = await _records.get_full_list(
        transport,
        COLLECTION_CATEGORIES,
        filter_=QueryBuilder().where("parentId", "=", parent_id).build(),
        sort=_SORT,
        token=_records.bearer(session),
    )
    return [Category.model_validate(item) for item in items]
