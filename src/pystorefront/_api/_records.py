"""Generic record operations shared by the collection modules.

This module centralizes the REST shapes of the backend:
- ``GET    /api/collections/{collection}/records``       (paged list)
- ``GET    /api/collections/{collection}/records/{id}``  (one record)
- ``POST   /api/collections/{collection}/records``       (create)
- ``PATCH  /api/collections/{collection}/records/{id}``  (update)
- ``DELETE /api/collections/{collection}/records/{id}``  (delete)

It is internal to pystorefront and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from pystorefront._constants import FULL_LIST_BATCH_SIZE
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotFoundError, StorefrontTransportError
from pystorefront.models.list_result import ListResult
from pystorefront.session import AuthSession

M = TypeVar("M", bound=BaseModel)


def bearer(session: AuthSession | None) -> str | None:
    """Token to send for *session*, or ``None`` for anonymous calls."""
    if session is None or not session.token:
        return None
    return session.token


def records_path(collection: str, record_id: str | None = None) -> str:
    path = f"/api/collections/{quote(collection, safe='')}/records"
    if record_id is not None:
        path = f"{path}/{quote(record_id, safe='')}"
    return path


def _expect_dict(path: str, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise StorefrontTransportError(f"Expected a JSON object from {path}", endpoint=path)
    return data


def parse_list(data: Mapping[str, Any], model: type[M]) -> ListResult[M]:
    """Validate a raw list response into a typed :class:`ListResult`."""
    items = data.get("items")
    return ListResult[model](  # type: ignore[valid-type]
        page=int(data.get("page") or 1),
        per_page=int(data.get("perPage") or 0),
        total_items=int(data.get("totalItems") or 0),
        total_pages=int(data.get("totalPages") or 0),
        items=[model.model_validate(item) for item in items] if isinstance(items, list) else [],
    )


async def get_list(
    transport: Transport,
    collection: str,
    *,
    page: int = 1,
    per_page: int = 30,
    filter_: str | None = None,
    sort: str | None = None,
    expand: str | None = None,
    fields: str | None = None,
    skip_total: bool = False,
    token: str | None = None,
) -> dict[str, Any]:
    """Fetch one page of records."""
    path = records_path(collection)
    params: dict[str, Any] = {
        "page": page,
        "perPage": per_page,
        "filter": filter_,
        "sort": sort,
        "expand": expand,
        "fields": fields,
    }
    if skip_total:
        params["skipTotal"] = 1
    data = await transport.request("GET", path, params=params, token=token)
    return _expect_dict(path, data)


async def get_full_list(
    transport: Transport,
    collection: str,
    *,
    filter_: str | None = None,
    sort: str | None = None,
    expand: str | None = None,
    fields: str | None = None,
    token: str | None = None,
    batch: int = FULL_LIST_BATCH_SIZE,
) -> list[dict[str, Any]]:
    """Fetch every record matching *filter_* by walking pages of *batch*."""
    items: list[dict[str, Any]] = []
    page = 1
    while True:
        data = await get_list(
            transport,
            collection,
            page=page,
            per_page=batch,
            filter_=filter_,
            sort=sort,
            expand=expand,
            fields=fields,
            skip_total=True,
            token=token,
        )
        page_items = data.get("items")
        if not isinstance(page_items, list):
            break
        items.extend(item for item in page_items if isinstance(item, dict))
        if len(page_items) < batch:
            break
        page += 1
    return items


async def get_first_list_item(
    transport: Transport,
    collection: str,
    filter_: str,
    *,
    expand: str | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    """Return the first record matching *filter_*.

    Raises
    ------
    StorefrontNotFoundError
        When nothing matches.
    """
    data = await get_list(
        transport,
        collection,
        page=1,
        per_page=1,
        filter_=filter_,
        expand=expand,
        skip_total=True,
        token=token,
    )
    items = data.get("items")
    if not isinstance(items, list) or not items:
        path = records_path(collection)
        raise StorefrontNotFoundError(
            "The requested resource wasn't found.",
            status_code=404,
            endpoint=path,
        )
    return _expect_dict(records_path(collection), items[0])


async def get_one(
    transport: Transport,
    collection: str,
    record_id: str,
    *,
    expand: str | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    path = records_path(collection, record_id)
    data = await transport.request("GET", path, params={"expand": expand}, token=token)
    return _expect_dict(path, data)


async def create(
    transport: Transport,
    collection: str,
    body: Mapping[str, Any],
    *,
    expand: str | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    path = records_path(collection)
    data = await transport.request("POST", path, params={"expand": expand}, body=body, token=token)
    return _expect_dict(path, data)


async def update(
    transport: Transport,
    collection: str,
    record_id: str,
    body: Mapping[str, Any],
    *,
    expand: str | None = None,
    token: str | None = None,
) -> dict[str, Any]:
    path = records_path(collection, record_id)
    data = await transport.request("PATCH", path, params={"expand": expand}, body=body, token=token)
    return _expect_dict(path, data)


async def delete(
    transport: Transport,
    collection: str,
    record_id: str,
    *,
    token: str | None = None,
) -> None:
    await transport.request("DELETE", records_path(collection, record_id), token=token)
