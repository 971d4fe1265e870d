"""Product catalog endpoints (``products`` collection)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_PRODUCTS, DEFAULT_SORT
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError
from pystorefront.models.list_result import ListResult
from pystorefront.models.product import Product
from pystorefront.query import Filters, QueryBuilder, build_search_filter
from pystorefront.session import AuthSession

_EXPAND = "categoryId"
_SEARCH_FIELDS = ("name", "description", "sku")


async def fetch_products(
    transport: Transport,
    session: AuthSession | None,
    *,
    page: int = 1,
    per_page: int = 20,
    filter_: str | None = None,
    sort: str | None = None,
    expand: str | None = None,
) -> ListResult[Product]:
    """List products; only active ones unless *filter_* says otherwise."""
    data = await _records.get_list(
        transport,
        COLLECTION_PRODUCTS,
        page=page,
        per_page=per_page,
        filter_=filter_ or Filters.active_products().build(),
        sort=sort or DEFAULT_SORT,
        expand=expand,
        token=_records.bearer(session),
    )
    return _records.parse_list(data, Product)


async def fetch_product(
    transport: Transport,
    session: AuthSession | None,
    product_id: str,
) -> Product | None:
    try:
        data = await _records.get_one(
            transport, COLLECTION_PRODUCTS, product_id, expand=_EXPAND, token=_records.bearer(session)
        )
    except StorefrontNotFoundError:
        return None
    return Product.model_validate(data)


async def fetch_product_by_slug(
    transport: Transport,
    session: AuthSession | None,
    slug: str,
) -> Product | None:
    try:
        data = await _records.get_first_list_item(
            transport,
            COLLECTION_PRODUCTS,
            QueryBuilder().where("slug", "=", slug).build(),
            expand=_EXPAND,
            token=_records.bearer(session),
        )
    except StorefrontNotFoundError:
        return None
    return Product.model_validate(data)


async def fetch_featured_products(
    transport: Transport,
    session: AuthSession | None,
    *,
    limit: int = 8,
) -> list[Product]:
    result = await fetch_products(
        transport,
        session,
        page=1,
        per_page=limit,
        filter_=Filters.featured_products().build(),
        expand=_EXPAND,
    )
    return list(result.items)


async def fetch_products_by_category(
    transport: Transport,
    session: AuthSession | None,
    category_id: str,
    *,
    page: int = 1,
    per_page: int = 20,
    sort: str | None = None,
) -> ListResult[Product]:
    return await fetch_products(
        transport,
        session,
        page=page,
        per_page=per_page,
        filter_=Filters.active_products().and_("categoryId", "=", category_id).build(),
        sort=sort,
        expand=_EXPAND,
    )


async def search_products(
    transport: Transport,
    session: AuthSession | None,
    term: str,
    *,
    page: int = 1,
    per_page: int = 20,
) -> ListResult[Product]:
    """Active products whose name, description, or SKU contains *term*."""
    query = Filters.active_products().raw(build_search_filter(term, _SEARCH_FIELDS))
    return await fetch_products(
        transport,
        session,
        page=page,
        per_page=per_page,
        filter_=query.build(),
        expand=_EXPAND,
    )


async def fetch_all_products(transport: Transport, session: AuthSession | None) -> list[Product]:
    """Every product regardless of status (admin listing)."""
    items = await _records.get_full_list(
        transport, COLLECTION_PRODUCTS, sort=DEFAULT_SORT, token=_records.bearer(session)
    )
    return [Product.model_validate(item) for item in items]


async def create_product(
    transport: Transport,
    session: AuthSession | None,
    data: Mapping[str, Any],
) -> Product:
    created = await _records.create(transport, COLLECTION_PRODUCTS, data, token=_records.bearer(session))
    return Product.model_validate(created)


async def update_product(
    transport: Transport,
    session: AuthSession | None,
    product_id: str,
    data: Mapping[str, Any],
) -> Product:
    updated = await _records.update(
        transport, COLLECTION_PRODUCTS, product_id, data, token=_records.bearer(session)
    )
    return Product.model_validate(updated)


async def delete_product(transport: Transport, session: AuthSession | None, product_id: str) -> None:
    await _records.delete(transport, COLLECTION_PRODUCTS, product_id, token=_records.bearer(session))
